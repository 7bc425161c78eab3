from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_, desc
from uuid import UUID
from typing import List, Optional
import logging

from app.common.exceptions import ConflictError, NotFoundError
from app.core.config import settings
from app.database.database import get_tenant_query
from app.modules.products.models import Product
from app.modules.products.schemas import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.db = db

    def _ensure_sku_available(self, sku: Optional[str], exclude_id: Optional[UUID] = None):
        if not sku:
            return
        query = self.db.query(Product.id).filter(Product.sku == sku)
        if exclude_id:
            query = query.filter(Product.id != exclude_id)
        if query.first():
            raise ConflictError("Ya está en uso un producto con este SKU")

    def get_products(self, tenant_id: UUID, search: Optional[str] = None,
                     active_only: bool = False, limit: int = 100, offset: int = 0) -> dict:
        query = get_tenant_query(self.db, Product, tenant_id)

        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Product.name.ilike(pattern), Product.sku.ilike(pattern)))

        if active_only:
            query = query.filter(Product.is_active.is_(True))

        total = query.count()
        products = query.order_by(desc(Product.created_at)).offset(offset).limit(limit).all()
        return {"products": products, "total": total, "limit": limit, "offset": offset}

    def get_product(self, product_id: UUID, tenant_id: UUID) -> Product:
        product = get_tenant_query(self.db, Product, tenant_id).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Producto no encontrado")
        return product

    def get_low_stock_products(self, tenant_id: UUID) -> List[Product]:
        """Productos activos con stock <= umbral de stock bajo"""
        return get_tenant_query(self.db, Product, tenant_id).filter(
            Product.is_active.is_(True),
            Product.stock <= settings.LOW_STOCK_THRESHOLD
        ).order_by(Product.stock).all()

    def create_product(self, product_data: ProductCreate, tenant_id: UUID) -> Product:
        self._ensure_sku_available(product_data.sku)

        product = Product(tenant_id=tenant_id, **product_data.model_dump())
        self.db.add(product)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Ya está en uso un producto con este SKU")

        self.db.refresh(product)
        logger.info(f"Producto creado: {product.name} ({product.id})")
        return product

    def update_product(self, product_id: UUID, product_data: ProductUpdate, tenant_id: UUID) -> Product:
        product = self.get_product(product_id, tenant_id)
        changes = product_data.model_dump(exclude_unset=True)

        if "sku" in changes:
            changes["sku"] = (changes["sku"] or "").strip() or None
            self._ensure_sku_available(changes["sku"], exclude_id=product.id)

        for field, value in changes.items():
            setattr(product, field, value)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Ya está en uso este SKU en otro producto")

        self.db.refresh(product)
        return product

    def delete_product(self, product_id: UUID, tenant_id: UUID) -> dict:
        """Eliminación física; las líneas de factura conservan su descripción"""
        product = self.get_product(product_id, tenant_id)
        self.db.delete(product)
        self.db.commit()
        logger.info(f"Producto eliminado: {product_id}")
        return {"id": product_id}
