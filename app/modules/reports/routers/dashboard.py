"""
Reports Router

Dashboard metrics (ADMIN only) and shift closeout for any authenticated user.
Dashboard endpoints never fail because of a missing table or a failed
aggregation: they answer with empty or zero values instead.
"""

from typing import List, Optional

from fastapi import APIRouter

from app.dependencies.dbDependecies import db_dependency
from app.dependencies.userDependencies import auth_dependency, admin_dependency
from app.modules.cash_registers.schemas import CloseShiftRequest, CloseShiftResult, LastShiftCloseout
from app.modules.cash_registers.service import CashRegisterService
from ..services import DashboardReportService, RevenueReportService
from ..schemas import DashboardSummary, MonthlyRevenue, DailyWeeklyRevenue, TopSellingProduct


router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/dashboard", response_model=DashboardSummary)
def get_dashboard_summary(db: db_dependency, auth_context: admin_dependency):
    """Clientes, productos activos, valor de inventario, stock bajo y facturas."""
    return DashboardReportService(db, auth_context.tenant_id).get_dashboard_summary()


@router.get("/revenue-by-month", response_model=List[MonthlyRevenue])
def get_revenue_by_month(db: db_dependency, auth_context: admin_dependency):
    return RevenueReportService(db, auth_context.tenant_id).get_revenue_by_month()


@router.get("/daily-weekly-revenue", response_model=DailyWeeklyRevenue)
def get_daily_and_weekly_revenue(db: db_dependency, auth_context: admin_dependency):
    return RevenueReportService(db, auth_context.tenant_id).get_daily_and_weekly_revenue()


@router.get("/top-selling-products", response_model=List[TopSellingProduct])
def get_top_selling_products(db: db_dependency, auth_context: admin_dependency):
    return DashboardReportService(db, auth_context.tenant_id).get_top_selling_products()


@router.get("/last-shift-closeout", response_model=Optional[LastShiftCloseout])
def get_last_shift_closeout(db: db_dependency, auth_context: admin_dependency):
    """Último cierre de caja del tenant, o null."""
    return CashRegisterService(db).get_last_shift_closeout(auth_context.tenant_id)


@router.post("/close-shift", response_model=CloseShiftResult)
def close_day_shift(data: CloseShiftRequest, db: db_dependency, auth_context: auth_dependency):
    """
    Cerrar el turno de una caja.

    - La caja se crea automáticamente la primera vez
    - `startingBalance` por defecto es el saldo final del cierre anterior
    - `salesTotal` suma las facturas ISSUED/PAID desde el cierre anterior
    """
    return CashRegisterService(db).close_day_shift(
        tenant_id=auth_context.tenant_id,
        cash_register_id=data.cash_register_id,
        user_id=auth_context.user_id,
        final_balance=data.final_balance,
        starting_balance=data.starting_balance
    )
