from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import update, desc
from uuid import UUID
from typing import List, Optional
import logging

from app.common.exceptions import (
    AppError, ConflictError, InsufficientStockError, InternalError, NotFoundError, ValidationError
)
from app.common.time_utils import to_utc_naive, utcnow
from app.core.config import settings
from app.database.database import get_tenant_query
from app.modules.clients.models import Client
from app.modules.invoices.models import Invoice, InvoiceItem
from app.modules.invoices.schemas import InvoiceCreate, InvoiceUpdate
from app.modules.products.models import Product
from app.modules.taxes.calculator import calculate_line, calculate_invoice_totals, resolve_unit_price

logger = logging.getLogger(__name__)

DUPLICATE_NUMBER_MESSAGE = "Ya está en uso un número de factura con este valor"


def low_stock_warning(product_name: str, remaining: int) -> str:
    return f'¡Atención! El producto "{product_name}" se está agotando. Stock restante: {remaining}'


class InvoiceService:
    def __init__(self, db: Session):
        self.db = db

    def _invoice_query(self, tenant_id: UUID):
        return get_tenant_query(self.db, Invoice, tenant_id).options(
            selectinload(Invoice.client),
            selectinload(Invoice.items).selectinload(InvoiceItem.product)
        )

    def _ensure_client(self, client_id: Optional[UUID], tenant_id: UUID):
        if client_id is None:
            return
        exists = get_tenant_query(self.db, Client, tenant_id).filter(Client.id == client_id).first()
        if not exists:
            raise NotFoundError("Cliente no encontrado")

    def _number_in_use(self, number: str, tenant_id: UUID) -> bool:
        return self.db.query(Invoice.id).filter(
            Invoice.tenant_id == tenant_id,
            Invoice.number == number
        ).first() is not None

    def _consume_stock(self, product_id: UUID, quantity: int, tenant_id: UUID) -> Product:
        """
        Bloquea el producto y descuenta stock.

        El UPDATE lleva la guarda `stock >= quantity`; si otra transacción
        consumió el stock primero no se actualiza ninguna fila.
        """
        product = self.db.query(Product).filter(
            Product.id == product_id
        ).with_for_update().populate_existing().first()

        if not product or product.tenant_id != tenant_id:
            raise NotFoundError(f"Producto con ID {product_id} no encontrado")

        if product.stock < quantity:
            raise InsufficientStockError(product.name, product.stock, quantity)

        result = self.db.execute(
            update(Product)
            .where(Product.id == product.id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InsufficientStockError(product.name, product.stock, quantity)

        self.db.expire(product, ["stock"])
        return product

    def create_invoice(self, invoice_data: InvoiceCreate, tenant_id: UUID,
                       created_by: Optional[UUID] = None) -> dict:
        """
        Crear factura descontando inventario.

        Todo ocurre en una sola transacción: si un item falla (producto
        inexistente, stock insuficiente) no se guarda nada.
        Retorna {"invoice", "warnings"} con avisos de stock bajo.
        """
        number = (invoice_data.number or "").strip()
        if not number:
            raise ValidationError("El número de factura es requerido")
        if not invoice_data.items:
            raise ValidationError("La factura debe tener al menos un item")

        if self._number_in_use(number, tenant_id):
            raise ConflictError(DUPLICATE_NUMBER_MESSAGE)

        warnings: List[str] = []

        try:
            self._ensure_client(invoice_data.client_id, tenant_id)

            lines = []
            items = []
            for item_data in invoice_data.items:
                product = self._consume_stock(item_data.product_id, item_data.quantity, tenant_id)
                remaining = product.stock

                if remaining <= settings.LOW_STOCK_THRESHOLD:
                    warnings.append(low_stock_warning(product.name, remaining))

                line = calculate_line(
                    resolve_unit_price(item_data.unit_price, product.price),
                    item_data.quantity,
                    invoice_data.apply_iva
                )
                lines.append(line)
                items.append(InvoiceItem(
                    product_id=product.id,
                    description=item_data.description or product.name,
                    quantity=item_data.quantity,
                    unit_price=line.unit_price,
                    tax_rate_applied=line.tax_rate_applied,
                    tax_amount=line.tax_amount,
                    total_amount=line.total_amount
                ))

            totals = calculate_invoice_totals(lines)

            invoice = Invoice(
                tenant_id=tenant_id,
                client_id=invoice_data.client_id,
                created_by_id=created_by,
                number=number,
                status=invoice_data.status,
                issue_date=to_utc_naive(invoice_data.issue_date) or utcnow(),
                due_date=to_utc_naive(invoice_data.due_date),
                payment_method=invoice_data.payment_method,
                currency=invoice_data.currency,
                subtotal=totals["subtotal"],
                tax_total=totals["tax_total"],
                total=totals["total"],
                total_paid=0,
                is_credit_sale=invoice_data.is_credit_sale,
                notes=invoice_data.notes,
                items=items
            )
            self.db.add(invoice)
            self.db.commit()

        except AppError:
            self.db.rollback()
            raise
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(DUPLICATE_NUMBER_MESSAGE)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error creando factura {number}: {e}", exc_info=True)
            raise InternalError("Error al crear la factura")

        logger.info(f"Factura creada: {invoice.number} ({invoice.id})")
        return {"invoice": self.get_invoice(invoice.id, tenant_id), "warnings": warnings}

    def get_invoices(self, tenant_id: UUID) -> List[Invoice]:
        return self._invoice_query(tenant_id).order_by(desc(Invoice.created_at)).all()

    def get_invoice(self, invoice_id: UUID, tenant_id: UUID) -> Invoice:
        invoice = self._invoice_query(tenant_id).filter(Invoice.id == invoice_id).first()
        if not invoice:
            raise NotFoundError("Factura no encontrada")
        return invoice

    def update_invoice(self, invoice_id: UUID, invoice_data: InvoiceUpdate, tenant_id: UUID) -> Invoice:
        """Actualiza campos de cabecera. No recalcula totales ni toca inventario."""
        invoice = self.get_invoice(invoice_id, tenant_id)
        changes = invoice_data.model_dump(exclude_unset=True)

        if changes.get("client_id"):
            self._ensure_client(changes["client_id"], tenant_id)
        for date_field in ("issue_date", "due_date"):
            if date_field in changes:
                changes[date_field] = to_utc_naive(changes[date_field])
        if changes.get("issue_date") is None:
            changes.pop("issue_date", None)

        for field, value in changes.items():
            setattr(invoice, field, value)

        self.db.commit()
        return self.get_invoice(invoice.id, tenant_id)

    def delete_invoice(self, invoice_id: UUID, tenant_id: UUID) -> dict:
        """Borrado físico con sus líneas. El stock descontado no se devuelve."""
        invoice = self.get_invoice(invoice_id, tenant_id)
        self.db.delete(invoice)
        self.db.commit()
        logger.info(f"Factura eliminada: {invoice.number} ({invoice_id})")
        return {"id": invoice_id}
