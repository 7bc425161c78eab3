from app.database.database import Base
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Numeric, Uuid
from sqlalchemy.orm import relationship
from app.common.mixins import TenantMixin, TimestampMixin, SyncMixin
from app.common.time_utils import utcnow


class CashRegister(Base, TenantMixin, TimestampMixin, SyncMixin):
    """Caja registradora; se crea al primer cierre con el id que envía el cliente"""
    __tablename__ = "cash_registers"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(100), nullable=False)
    current_balance = Column(Numeric(18, 2), nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)

    closeouts = relationship("ShiftCloseout", back_populates="cash_register")


class ShiftCloseout(Base, TenantMixin, TimestampMixin, SyncMixin):
    """Cierre de turno. Solo se insertan, nunca se modifican."""
    __tablename__ = "shift_closeouts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    cash_register_id = Column(Integer, ForeignKey("cash_registers.id", ondelete="CASCADE"), nullable=False, index=True)
    closing_time = Column(DateTime, nullable=False, default=utcnow, index=True)
    starting_balance = Column(Numeric(18, 2), nullable=False, default=0)
    final_balance = Column(Numeric(18, 2), nullable=False)
    sales_total = Column(Numeric(18, 2), nullable=False, default=0)
    closed_by_user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)

    cash_register = relationship("CashRegister", back_populates="closeouts")
    closed_by = relationship("User")
