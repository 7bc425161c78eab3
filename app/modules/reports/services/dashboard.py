"""
Dashboard Report Service

Métricas generales del tenant y productos más vendidos. Ante cualquier
error de base de datos retornan valores en cero o listas vacías.
"""

from decimal import Decimal
from typing import List

from sqlalchemy import desc, func
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.modules.invoices.models import Invoice, InvoiceItem, REVENUE_STATUSES
from app.modules.products.models import Product
from .base import BaseReportService

TOP_PRODUCTS_LIMIT = 10


class DashboardReportService(BaseReportService):

    @staticmethod
    def _empty_summary() -> dict:
        return {
            "total_clients": 0,
            "total_products": 0,
            "inventory_value": Decimal("0"),
            "low_stock_products": 0,
            "total_invoices": 0
        }

    def get_dashboard_summary(self) -> dict:
        summary = self._empty_summary()
        try:
            active_products = self._get_base_product_query().filter(Product.is_active.is_(True))

            summary["total_clients"] = self._get_base_client_query().count()
            summary["total_products"] = active_products.count()
            summary["inventory_value"] = Decimal(str(
                active_products.with_entities(
                    func.coalesce(func.sum(Product.stock * Product.cost), 0)
                ).scalar() or 0
            ))
            summary["low_stock_products"] = active_products.filter(
                Product.stock <= settings.LOW_STOCK_THRESHOLD
            ).count()
            summary["total_invoices"] = self._get_base_invoice_query().count()
        except SQLAlchemyError as e:
            self._handle_query_error("dashboard", e)
            return self._empty_summary()

        return summary

    def get_top_selling_products(self) -> List[dict]:
        """Top 10 por cantidad vendida; empates se resuelven por ingresos"""
        total_quantity = func.sum(InvoiceItem.quantity).label("total_quantity")
        total_revenue = func.sum(InvoiceItem.total_amount).label("total_revenue")

        try:
            rows = self.db.query(
                Product.id,
                Product.name,
                total_quantity,
                total_revenue
            ).join(
                InvoiceItem, InvoiceItem.product_id == Product.id
            ).join(
                Invoice, Invoice.id == InvoiceItem.invoice_id
            ).filter(
                Invoice.tenant_id == self.tenant_id,
                Product.tenant_id == self.tenant_id,
                Invoice.status.in_(REVENUE_STATUSES)
            ).group_by(
                Product.id, Product.name
            ).order_by(
                desc(total_quantity), desc(total_revenue)
            ).limit(TOP_PRODUCTS_LIMIT).all()
        except SQLAlchemyError as e:
            self._handle_query_error("top-selling-products", e)
            return []

        return [
            {
                "product_id": product_id,
                "product_name": name or "Producto sin nombre",
                "total_quantity": int(quantity or 0),
                "total_revenue": Decimal(str(revenue or 0))
            }
            for product_id, name, quantity, revenue in rows
        ]
