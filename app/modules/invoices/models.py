from app.database.database import Base
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint, Numeric, Enum, Text, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from app.common.mixins import TenantMixin, TimestampMixin, SyncMixin
from app.common.time_utils import utcnow
from app.core.config import settings
import enum


class InvoiceStatus(enum.Enum):
    DRAFT = "DRAFT"          # Borrador
    ISSUED = "ISSUED"        # Emitida, cuenta como venta
    PAID = "PAID"            # Pagada, cuenta como venta
    CANCELLED = "CANCELLED"  # Anulada


class PaymentMethod(enum.Enum):
    CASH = "CASH"           # Efectivo
    CREDIT = "CREDIT"       # Crédito
    TRANSFER = "TRANSFER"   # Transferencia


# Estados que cuentan como ingreso en reportes y cierres de caja
REVENUE_STATUSES = (InvoiceStatus.ISSUED, InvoiceStatus.PAID)


class Invoice(Base, TenantMixin, TimestampMixin, SyncMixin):
    __tablename__ = "invoices"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    # References
    client_id = Column(Uuid(as_uuid=True), ForeignKey("clients.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Invoice data
    number = Column(String(50), nullable=False)
    status = Column(Enum(InvoiceStatus, name="invoice_status"), nullable=False, default=InvoiceStatus.DRAFT, index=True)
    payment_method = Column(Enum(PaymentMethod, name="payment_method"), nullable=False, default=PaymentMethod.CASH)

    # Dates (UTC)
    issue_date = Column(DateTime, nullable=False, default=utcnow, index=True)
    due_date = Column(DateTime, nullable=True)

    # Content
    notes = Column(Text, nullable=True)
    currency = Column(String(3), nullable=False, default=settings.DEFAULT_CURRENCY)
    is_credit_sale = Column(Boolean, nullable=False, default=False)

    # Totals (calculated)
    subtotal = Column(Numeric(18, 2), nullable=False, default=0)
    tax_total = Column(Numeric(18, 2), nullable=False, default=0)
    total = Column(Numeric(18, 2), nullable=False, default=0)
    total_paid = Column(Numeric(18, 2), nullable=False, default=0)

    # Relationships
    client = relationship("Client", back_populates="invoices")
    created_by = relationship("User")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="InvoiceItem.created_at"
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "number", name="uq_invoice_tenant_number"),
    )


class InvoiceItem(Base, TimestampMixin, SyncMixin):
    __tablename__ = "invoice_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    invoice_id = Column(Uuid(as_uuid=True), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)

    # Snapshot del producto al momento de la venta
    description = Column(String(255), nullable=False)

    # Line calculations
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(18, 2), nullable=False)  # Precio sin impuestos
    tax_rate_applied = Column(Numeric(5, 2), nullable=False, default=0)  # 19 o 0
    tax_amount = Column(Numeric(18, 2), nullable=False, default=0)
    total_amount = Column(Numeric(18, 2), nullable=False)  # quantity * unit_price + tax_amount

    # Relationships
    invoice = relationship("Invoice", back_populates="items")
    product = relationship("Product")
