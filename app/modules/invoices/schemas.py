from pydantic import Field, field_validator, model_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from app.common.schemas import CamelModel, Money
from app.core.config import settings
from app.modules.clients.schemas import ClientSummary
from app.modules.invoices.models import InvoiceStatus, PaymentMethod
from app.modules.products.schemas import ProductSummary


# Invoice Item Schemas
class InvoiceItemCreate(CamelModel):
    product_id: UUID
    quantity: int = Field(..., gt=0, description="Cantidad debe ser mayor a 0")
    description: Optional[str] = Field(None, max_length=255)
    unit_price: Optional[Decimal] = Field(None, ge=0, description="Precio unitario sin impuestos; vacío usa el precio del producto")
    tax_rate: Optional[Decimal] = Field(None, ge=0, description="Ignorado: se aplica IVA plano según applyIva")


class InvoiceItemOut(CamelModel):
    id: UUID
    product_id: Optional[UUID]
    description: str
    quantity: int
    unit_price: Money
    tax_rate_applied: Money
    tax_amount: Money
    total_amount: Money
    product: Optional[ProductSummary] = None


# Invoice Schemas
class InvoiceCreate(CamelModel):
    number: str = Field(..., max_length=50)
    client_id: Optional[UUID] = None
    items: List[InvoiceItemCreate] = Field(..., min_length=1, description="Debe incluir al menos un item")
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    payment_method: PaymentMethod = PaymentMethod.CASH
    currency: str = Field(settings.DEFAULT_CURRENCY, min_length=3, max_length=3)
    is_credit_sale: bool = False
    notes: Optional[str] = None
    apply_iva: bool = False

    @field_validator('number')
    @classmethod
    def validate_number(cls, v):
        if not v.strip():
            raise ValueError('El número de factura es requerido')
        return v.strip()

    @model_validator(mode='after')
    def validate_due_date(self):
        if self.due_date and self.issue_date and self.due_date < self.issue_date:
            raise ValueError('La fecha de vencimiento no puede ser anterior a la fecha de emisión')
        return self


class InvoiceUpdate(CamelModel):
    """Solo campos de cabecera; las líneas y totales no se editan"""
    client_id: Optional[UUID] = None
    status: Optional[InvoiceStatus] = None
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    payment_method: Optional[PaymentMethod] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    total_paid: Optional[Decimal] = Field(None, ge=0)
    is_credit_sale: Optional[bool] = None
    notes: Optional[str] = None


class InvoiceOut(CamelModel):
    id: UUID
    tenant_id: UUID
    client_id: Optional[UUID]
    number: str
    status: InvoiceStatus
    issue_date: datetime
    due_date: Optional[datetime]
    payment_method: PaymentMethod
    currency: str
    subtotal: Money
    tax_total: Money
    total: Money
    total_paid: Money
    is_credit_sale: bool
    notes: Optional[str]
    created_by_id: Optional[UUID]
    created_at: datetime
    updated_at: datetime
    client: Optional[ClientSummary] = None
    items: List[InvoiceItemOut] = []


class CreateInvoiceResult(CamelModel):
    invoice: InvoiceOut
    warnings: List[str] = []
