from app.database.database import Base
from sqlalchemy import Column, Integer, String, Boolean, Numeric, CheckConstraint, Uuid
from uuid import uuid4
from app.common.mixins import TenantMixin, TimestampMixin, SyncMixin


class Product(Base, TenantMixin, TimestampMixin, SyncMixin):
    __tablename__ = "products"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(200), nullable=False)
    sku = Column(String(50), nullable=True, unique=True)
    description = Column(String(255), nullable=True)
    price = Column(Numeric(18, 2), nullable=False, default=0)  # Precio de venta
    cost = Column(Numeric(18, 2), nullable=False, default=0)  # Costo
    stock = Column(Integer, nullable=False, default=0)  # Solo lo descuenta la facturación
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
    )
