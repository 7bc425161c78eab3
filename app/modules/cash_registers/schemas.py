from pydantic import Field
from decimal import Decimal
from typing import Optional
from datetime import datetime

from app.common.schemas import CamelModel, Money


class CloseShiftRequest(CamelModel):
    cash_register_id: int = Field(..., gt=0)
    final_balance: Decimal
    # Si no se envía, se toma el saldo final del cierre anterior
    starting_balance: Optional[Decimal] = None


class CloseShiftResult(CamelModel):
    id: int
    closing_time: datetime
    sales_total: Money
    starting_balance: Money
    final_balance: Money


class LastShiftCloseout(CamelModel):
    id: int
    closing_time: datetime
    cash_register_name: str
    starting_balance: Money
    final_balance: Money
    sales_total: Money
    closed_by: Optional[str]
