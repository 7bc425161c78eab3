from fastapi import APIRouter, status
from uuid import UUID
from typing import List

from app.dependencies.dbDependecies import db_dependency
from app.dependencies.userDependencies import auth_dependency, admin_dependency
from app.modules.invoices.service import InvoiceService
from app.modules.invoices.schemas import InvoiceCreate, InvoiceUpdate, InvoiceOut, CreateInvoiceResult

invoice_router = APIRouter(prefix="/invoices", tags=["Invoices"])


@invoice_router.post("/", response_model=CreateInvoiceResult, status_code=status.HTTP_201_CREATED)
def create_invoice(data: InvoiceCreate, db: db_dependency, auth_context: auth_dependency):
    """
    Crear factura y descontar inventario.

    - Falla completa si algún producto no tiene stock suficiente
    - `applyIva` aplica IVA del 19% a todas las líneas
    - `warnings` lista los productos que quedaron con stock bajo
    """
    return InvoiceService(db).create_invoice(data, auth_context.tenant_id, auth_context.user_id)


@invoice_router.get("/", response_model=List[InvoiceOut])
def list_invoices(db: db_dependency, auth_context: auth_dependency):
    return InvoiceService(db).get_invoices(auth_context.tenant_id)


@invoice_router.get("/{invoice_id}", response_model=InvoiceOut)
def get_invoice(invoice_id: UUID, db: db_dependency, auth_context: auth_dependency):
    return InvoiceService(db).get_invoice(invoice_id, auth_context.tenant_id)


@invoice_router.put("/{invoice_id}", response_model=InvoiceOut)
def update_invoice(invoice_id: UUID, data: InvoiceUpdate, db: db_dependency, auth_context: admin_dependency):
    """Actualizar cabecera de la factura (solo administradores)."""
    return InvoiceService(db).update_invoice(invoice_id, data, auth_context.tenant_id)


@invoice_router.delete("/{invoice_id}")
def delete_invoice(invoice_id: UUID, db: db_dependency, auth_context: admin_dependency):
    return InvoiceService(db).delete_invoice(invoice_id, auth_context.tenant_id)
