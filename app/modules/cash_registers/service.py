"""
Cierre de turno de caja.

Cada cierre encadena su saldo inicial con el saldo final del cierre anterior
de la misma caja y suma las ventas (facturas ISSUED/PAID) emitidas entre ese
cierre y la hora del cierre actual. Una factura con fecha posterior al cierre
queda para el turno siguiente, nunca en ambos.
"""
from decimal import Decimal
from typing import Optional
from uuid import UUID
import logging

from sqlalchemy import desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.common.exceptions import AppError, InternalError, NotFoundError, SchemaNotReadyError, is_missing_table_error
from app.common.time_utils import utcnow
from app.modules.cash_registers.models import CashRegister, ShiftCloseout
from app.modules.invoices.models import Invoice, REVENUE_STATUSES
from app.modules.taxes.calculator import quantize_money, to_decimal

logger = logging.getLogger(__name__)


class CashRegisterService:
    def __init__(self, db: Session):
        self.db = db

    def _get_or_create_register(self, tenant_id: UUID, cash_register_id: int) -> CashRegister:
        register = self.db.get(CashRegister, cash_register_id)

        if register is None:
            register = CashRegister(
                id=cash_register_id,
                tenant_id=tenant_id,
                name=f"Caja {cash_register_id}",
                current_balance=0,
                is_active=True
            )
            self.db.add(register)
            self.db.flush()
            logger.info(f"Caja registradora creada: {register.name} (tenant {tenant_id})")
        elif register.tenant_id != tenant_id:
            raise NotFoundError("Caja registradora no encontrada")
        elif not register.is_active:
            register.is_active = True

        return register

    def _sales_between(self, tenant_id: UUID, since, until) -> Decimal:
        """Ventas con since <= issue_date < until"""
        query = self.db.query(func.coalesce(func.sum(Invoice.total), 0)).filter(
            Invoice.tenant_id == tenant_id,
            Invoice.status.in_(REVENUE_STATUSES),
            Invoice.issue_date < until
        )
        if since is not None:
            query = query.filter(Invoice.issue_date >= since)
        return quantize_money(to_decimal(query.scalar() or 0))

    def close_day_shift(self, tenant_id: UUID, cash_register_id: int, user_id: UUID,
                        final_balance: Decimal, starting_balance: Optional[Decimal] = None) -> dict:
        try:
            register = self._get_or_create_register(tenant_id, cash_register_id)

            last_closeout = self.db.query(ShiftCloseout).filter(
                ShiftCloseout.tenant_id == tenant_id,
                ShiftCloseout.cash_register_id == cash_register_id
            ).order_by(desc(ShiftCloseout.closing_time), desc(ShiftCloseout.id)).first()

            if starting_balance is not None:
                opening = to_decimal(starting_balance)
            elif last_closeout is not None:
                opening = to_decimal(last_closeout.final_balance)
            else:
                opening = to_decimal(register.current_balance or 0)

            closing_time = utcnow()
            sales_total = self._sales_between(
                tenant_id,
                last_closeout.closing_time if last_closeout else None,
                closing_time
            )

            closeout = ShiftCloseout(
                tenant_id=tenant_id,
                cash_register_id=cash_register_id,
                closing_time=closing_time,
                starting_balance=quantize_money(opening),
                final_balance=quantize_money(final_balance),
                sales_total=sales_total,
                closed_by_user_id=user_id
            )
            self.db.add(closeout)
            register.current_balance = 0
            self.db.commit()

        except AppError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            if is_missing_table_error(e):
                logger.error(f"Tablas de cierre de caja no disponibles: {e}")
                raise SchemaNotReadyError()
            logger.error(f"Error al cerrar turno de caja {cash_register_id}: {e}", exc_info=True)
            raise InternalError("Error al cerrar el turno de caja")

        logger.info(
            f"Turno cerrado: caja {cash_register_id}, ventas {closeout.sales_total}, "
            f"saldo inicial {closeout.starting_balance}, saldo final {closeout.final_balance}"
        )
        return {
            "id": closeout.id,
            "closing_time": closeout.closing_time,
            "sales_total": closeout.sales_total,
            "starting_balance": closeout.starting_balance,
            "final_balance": closeout.final_balance
        }

    def get_last_shift_closeout(self, tenant_id: UUID) -> Optional[dict]:
        """Último cierre del tenant, o None si no hay o si la consulta falla"""
        try:
            closeout = self.db.query(ShiftCloseout).options(
                joinedload(ShiftCloseout.cash_register),
                joinedload(ShiftCloseout.closed_by)
            ).filter(
                ShiftCloseout.tenant_id == tenant_id
            ).order_by(desc(ShiftCloseout.closing_time), desc(ShiftCloseout.id)).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            if is_missing_table_error(e):
                logger.warning("Tablas de cierre de caja aún no existen. Ejecuta las migraciones.")
            else:
                logger.error(f"Error al obtener último cierre de caja: {e}")
            return None

        if closeout is None:
            return None

        return {
            "id": closeout.id,
            "closing_time": closeout.closing_time,
            "cash_register_name": closeout.cash_register.name,
            "starting_balance": closeout.starting_balance,
            "final_balance": closeout.final_balance,
            "sales_total": closeout.sales_total,
            "closed_by": closeout.closed_by.full_name if closeout.closed_by else None
        }
