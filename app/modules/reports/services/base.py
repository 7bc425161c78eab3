"""
Base service class for Reports module

Provides tenant-scoped base queries shared by all report services.
"""

from uuid import UUID
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.common.exceptions import is_missing_table_error
from app.modules.clients.models import Client
from app.modules.invoices.models import Invoice, REVENUE_STATUSES
from app.modules.products.models import Product

logger = logging.getLogger(__name__)


class BaseReportService:
    """Base service class for all report services"""

    def __init__(self, db: Session, tenant_id: UUID):
        self.db = db
        self.tenant_id = tenant_id

    def _get_base_invoice_query(self):
        return self.db.query(Invoice).filter(Invoice.tenant_id == self.tenant_id)

    def _get_revenue_rows(self, since=None):
        """(issue_date, total) de facturas que cuentan como venta"""
        query = self.db.query(Invoice.issue_date, Invoice.total).filter(
            Invoice.tenant_id == self.tenant_id,
            Invoice.status.in_(REVENUE_STATUSES)
        )
        if since is not None:
            query = query.filter(Invoice.issue_date >= since)
        return query.all()

    def _get_base_product_query(self):
        return self.db.query(Product).filter(Product.tenant_id == self.tenant_id)

    def _get_base_client_query(self):
        return self.db.query(Client).filter(Client.tenant_id == self.tenant_id)

    def _handle_query_error(self, report_name: str, error: SQLAlchemyError):
        """Registra el error y deja la sesión usable; el llamador retorna su valor por defecto"""
        self.db.rollback()
        if is_missing_table_error(error):
            logger.warning(f"Reporte {report_name}: tablas no disponibles ({error})")
        else:
            logger.error(f"Error al generar reporte {report_name}: {error}", exc_info=True)
