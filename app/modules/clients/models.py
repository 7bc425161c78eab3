"""
Modelo de clientes.

Clientes de facturación del tenant. El documento (tipo + número) es único por
tenant; para NIT se guarda además el dígito de verificación.
"""
from app.database.database import Base
from sqlalchemy import Column, String, Boolean, Numeric, Enum, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from app.common.mixins import TenantMixin, TimestampMixin, SyncMixin
import enum


class DocumentType(enum.Enum):
    """Tipos de documento de identidad"""
    CC = "CC"              # Cédula de Ciudadanía
    NIT = "NIT"            # Número de Identificación Tributaria
    PASSPORT = "PASSPORT"  # Pasaporte


class Client(Base, TenantMixin, TimestampMixin, SyncMixin):
    __tablename__ = "clients"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    business_name = Column(String(200), nullable=False, index=True)

    # Identificación fiscal
    document_type = Column(Enum(DocumentType, name="document_type"), nullable=True)
    identification = Column(String(50), nullable=True, index=True)
    nit = Column(String(20), nullable=True)
    dv = Column(String(1), nullable=True)

    email = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(255), nullable=True)

    # Crédito
    has_credit = Column(Boolean, default=False, nullable=False)
    credit_limit = Column(Numeric(18, 2), default=0, nullable=False)
    current_debt = Column(Numeric(18, 2), default=0, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)

    invoices = relationship("Invoice", back_populates="client")

    __table_args__ = (
        UniqueConstraint("tenant_id", "document_type", "identification", name="uq_client_tenant_document"),
    )
