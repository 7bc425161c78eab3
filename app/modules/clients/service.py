from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_, desc
from uuid import UUID
from typing import Optional
import logging

from app.common.exceptions import ConflictError, NotFoundError
from app.database.database import get_tenant_query
from app.modules.clients.models import Client, DocumentType
from app.modules.clients.schemas import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)

DUPLICATE_DOCUMENT_MESSAGE = "Ya existe un cliente con este tipo y número de documento"


class ClientService:
    def __init__(self, db: Session):
        self.db = db

    def _ensure_document_available(self, tenant_id: UUID, document_type: Optional[DocumentType],
                                   identification: Optional[str], exclude_id: Optional[UUID] = None):
        if not document_type or not identification:
            return
        query = get_tenant_query(self.db, Client, tenant_id).filter(
            Client.document_type == document_type,
            Client.identification == identification
        )
        if exclude_id:
            query = query.filter(Client.id != exclude_id)
        if query.first():
            raise ConflictError(DUPLICATE_DOCUMENT_MESSAGE)

    def get_clients(self, tenant_id: UUID, search: Optional[str] = None,
                    limit: int = 100, offset: int = 0) -> dict:
        query = get_tenant_query(self.db, Client, tenant_id)

        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                Client.business_name.ilike(pattern),
                Client.identification.ilike(pattern),
                Client.email.ilike(pattern)
            ))

        total = query.count()
        clients = query.order_by(desc(Client.created_at)).offset(offset).limit(limit).all()
        return {"clients": clients, "total": total, "limit": limit, "offset": offset}

    def get_client(self, client_id: UUID, tenant_id: UUID) -> Client:
        client = get_tenant_query(self.db, Client, tenant_id).filter(Client.id == client_id).first()
        if not client:
            raise NotFoundError("Cliente no encontrado")
        return client

    def create_client(self, client_data: ClientCreate, tenant_id: UUID) -> Client:
        self._ensure_document_available(tenant_id, client_data.document_type, client_data.identification)

        client = Client(tenant_id=tenant_id, **client_data.model_dump())
        self.db.add(client)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(DUPLICATE_DOCUMENT_MESSAGE)

        self.db.refresh(client)
        logger.info(f"Cliente creado: {client.business_name} ({client.id})")
        return client

    def update_client(self, client_id: UUID, client_data: ClientUpdate, tenant_id: UUID) -> Client:
        client = self.get_client(client_id, tenant_id)
        changes = client_data.model_dump(exclude_unset=True)

        if "document_type" in changes or "identification" in changes:
            self._ensure_document_available(
                tenant_id,
                changes.get("document_type", client.document_type),
                changes.get("identification", client.identification),
                exclude_id=client.id
            )

        for field, value in changes.items():
            setattr(client, field, value)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(DUPLICATE_DOCUMENT_MESSAGE)

        self.db.refresh(client)
        return client

    def delete_client(self, client_id: UUID, tenant_id: UUID) -> dict:
        """Las facturas del cliente quedan sin cliente asociado"""
        client = self.get_client(client_id, tenant_id)
        self.db.delete(client)
        self.db.commit()
        logger.info(f"Cliente eliminado: {client_id}")
        return {"id": client_id}
