from fastapi import APIRouter, status, Query
from uuid import UUID
from typing import Optional

from app.dependencies.dbDependecies import db_dependency
from app.dependencies.userDependencies import auth_dependency, admin_dependency
from app.modules.clients.service import ClientService
from app.modules.clients.schemas import ClientCreate, ClientUpdate, ClientOut, ClientList

client_router = APIRouter(prefix="/clients", tags=["Clients"])


@client_router.post("/", response_model=ClientOut, status_code=status.HTTP_201_CREATED)
def create_client(data: ClientCreate, db: db_dependency, auth_context: admin_dependency):
    """
    Crear un cliente.

    Si se envían `nit` y `dv`, el dígito de verificación debe ser válido.
    """
    return ClientService(db).create_client(data, auth_context.tenant_id)


@client_router.get("/", response_model=ClientList)
def list_clients(
    db: db_dependency,
    auth_context: auth_dependency,
    search: Optional[str] = Query(None, description="Razón social, documento o email"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0)
):
    return ClientService(db).get_clients(auth_context.tenant_id, search, limit, offset)


@client_router.get("/{client_id}", response_model=ClientOut)
def get_client(client_id: UUID, db: db_dependency, auth_context: auth_dependency):
    return ClientService(db).get_client(client_id, auth_context.tenant_id)


@client_router.put("/{client_id}", response_model=ClientOut)
def update_client(client_id: UUID, data: ClientUpdate, db: db_dependency, auth_context: admin_dependency):
    return ClientService(db).update_client(client_id, data, auth_context.tenant_id)


@client_router.delete("/{client_id}")
def delete_client(client_id: UUID, db: db_dependency, auth_context: admin_dependency):
    return ClientService(db).delete_client(client_id, auth_context.tenant_id)
