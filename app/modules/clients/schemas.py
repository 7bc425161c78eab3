from pydantic import Field, EmailStr, field_validator, model_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from app.common.schemas import CamelModel, Money
from app.common.validators import clean_document, validate_colombia_cedula, validate_nit_dv, calculate_nit_dv
from app.modules.clients.models import DocumentType


def check_cedula(document_type, identification):
    if document_type == DocumentType.CC and identification and not validate_colombia_cedula(identification):
        raise ValueError('La cédula debe tener entre 6 y 10 dígitos y no puede empezar con 0')


class ClientBase(CamelModel):
    business_name: str = Field(..., min_length=1, max_length=200)
    document_type: Optional[DocumentType] = None
    identification: Optional[str] = Field(None, max_length=50)
    nit: Optional[str] = Field(None, max_length=20)
    dv: Optional[str] = Field(None, max_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    has_credit: bool = False
    credit_limit: Decimal = Field(Decimal("0"), ge=0)

    @field_validator('business_name')
    @classmethod
    def validate_business_name(cls, v):
        if not v.strip():
            raise ValueError('La razón social es requerida')
        return v.strip()

    @field_validator('identification', 'nit')
    @classmethod
    def normalize_document(cls, v):
        if v is None:
            return v
        return clean_document(v) or None

    @model_validator(mode='after')
    def validate_nit(self):
        if self.nit and self.dv:
            if not validate_nit_dv(self.nit, self.dv):
                raise ValueError(
                    f'Dígito de verificación inválido para el NIT {self.nit}. '
                    f'DV esperado: {calculate_nit_dv(self.nit)}'
                )
        check_cedula(self.document_type, self.identification)
        return self


class ClientCreate(ClientBase):
    pass


class ClientUpdate(CamelModel):
    business_name: Optional[str] = Field(None, min_length=1, max_length=200)
    document_type: Optional[DocumentType] = None
    identification: Optional[str] = Field(None, max_length=50)
    nit: Optional[str] = Field(None, max_length=20)
    dv: Optional[str] = Field(None, max_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    has_credit: Optional[bool] = None
    credit_limit: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None

    @field_validator('identification', 'nit')
    @classmethod
    def normalize_document(cls, v):
        if v is None:
            return v
        return clean_document(v) or None

    @model_validator(mode='after')
    def validate_nit(self):
        if self.nit and self.dv and not validate_nit_dv(self.nit, self.dv):
            raise ValueError(f'Dígito de verificación inválido para el NIT {self.nit}')
        check_cedula(self.document_type, self.identification)
        return self


class ClientSummary(CamelModel):
    id: UUID
    business_name: str
    document_type: Optional[DocumentType]
    identification: Optional[str]


class ClientOut(CamelModel):
    id: UUID
    tenant_id: UUID
    business_name: str
    document_type: Optional[DocumentType]
    identification: Optional[str]
    nit: Optional[str]
    dv: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    has_credit: bool
    credit_limit: Money
    current_debt: Money
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ClientList(CamelModel):
    clients: List[ClientOut]
    total: int
    limit: int
    offset: int
