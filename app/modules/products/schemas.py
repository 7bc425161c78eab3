from pydantic import Field, field_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from app.common.schemas import CamelModel, Money


class ProductBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    sku: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=255)
    price: Decimal = Field(..., ge=0, description="Precio de venta")
    cost: Decimal = Field(..., ge=0, description="Costo")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('El nombre del producto es requerido')
        return v.strip()

    @field_validator('sku')
    @classmethod
    def normalize_sku(cls, v):
        if v is None:
            return v
        v = v.strip()
        return v or None


class ProductCreate(ProductBase):
    stock: int = Field(0, ge=0)
    is_active: bool = True


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    sku: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=255)
    price: Optional[Decimal] = Field(None, ge=0)
    cost: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError('El nombre del producto no puede estar vacío')
        return v.strip() if v else v


class ProductOut(CamelModel):
    id: UUID
    tenant_id: UUID
    name: str
    sku: Optional[str]
    description: Optional[str]
    price: Money
    cost: Money
    stock: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ProductSummary(CamelModel):
    """Producto embebido en líneas de factura"""
    id: UUID
    name: str
    sku: Optional[str]
    price: Money
    stock: int


class ProductList(CamelModel):
    products: List[ProductOut]
    total: int
    limit: int
    offset: int
