from fastapi import APIRouter, status, Query
from uuid import UUID
from typing import List, Optional

from app.dependencies.dbDependecies import db_dependency
from app.dependencies.userDependencies import auth_dependency, admin_dependency
from app.modules.products.service import ProductService
from app.modules.products.schemas import ProductCreate, ProductUpdate, ProductOut, ProductList

product_router = APIRouter(prefix="/products", tags=["Products"])


@product_router.post("/", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(data: ProductCreate, db: db_dependency, auth_context: admin_dependency):
    """Crear un producto (solo administradores)."""
    return ProductService(db).create_product(data, auth_context.tenant_id)


@product_router.get("/", response_model=ProductList)
def list_products(
    db: db_dependency,
    auth_context: auth_dependency,
    search: Optional[str] = Query(None, description="Buscar por nombre o SKU"),
    active_only: bool = Query(False, alias="activeOnly"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0)
):
    return ProductService(db).get_products(auth_context.tenant_id, search, active_only, limit, offset)


@product_router.get("/low-stock", response_model=List[ProductOut])
def list_low_stock_products(db: db_dependency, auth_context: auth_dependency):
    """Productos activos que están por agotarse."""
    return ProductService(db).get_low_stock_products(auth_context.tenant_id)


@product_router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: UUID, db: db_dependency, auth_context: auth_dependency):
    return ProductService(db).get_product(product_id, auth_context.tenant_id)


@product_router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: UUID, data: ProductUpdate, db: db_dependency, auth_context: admin_dependency):
    """Actualizar datos del producto. El stock no se edita por esta vía."""
    return ProductService(db).update_product(product_id, data, auth_context.tenant_id)


@product_router.delete("/{product_id}")
def delete_product(product_id: UUID, db: db_dependency, auth_context: admin_dependency):
    return ProductService(db).delete_product(product_id, auth_context.tenant_id)
