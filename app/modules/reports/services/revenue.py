"""
Revenue Report Service

Ingresos por mes, día y semana. Las facturas se agrupan según la fecha
local del negocio (America/Bogota por defecto), no la fecha UTC.
"""

from collections import OrderedDict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.common.time_utils import (
    business_day_start_utc, business_today, to_business_date, week_start
)
from .base import BaseReportService

MONTH_NAMES = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre"
]

# date.weekday(): lunes = 0
DAY_NAMES = ["lun", "mar", "mié", "jue", "vie", "sáb", "dom"]

DAILY_WINDOW = 7
WEEKLY_WINDOW = 4


def month_label(year: int, month: int) -> str:
    return f"{MONTH_NAMES[month - 1]} de {year}"


def week_label(monday: date) -> str:
    return f"Sem {monday.day}/{monday.month}"


def one_year_before(day: date) -> date:
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        # 29 de febrero
        return day.replace(year=day.year - 1, day=28)


class RevenueReportService(BaseReportService):

    def get_revenue_by_month(self, now: Optional[datetime] = None) -> List[dict]:
        """Ingresos de los últimos 12 meses, solo meses con ventas, en orden cronológico"""
        today = business_today(now)
        since = business_day_start_utc(one_year_before(today))

        try:
            rows = self._get_revenue_rows(since)
        except SQLAlchemyError as e:
            self._handle_query_error("revenue-by-month", e)
            return []

        buckets: Dict[tuple, Decimal] = {}
        for issue_date, total in rows:
            local_day = to_business_date(issue_date)
            key = (local_day.year, local_day.month)
            buckets[key] = buckets.get(key, Decimal("0")) + Decimal(str(total or 0))

        return [
            {"month": month_label(year, month), "revenue": revenue}
            for (year, month), revenue in sorted(buckets.items())
        ]

    def get_daily_and_weekly_revenue(self, now: Optional[datetime] = None) -> dict:
        """
        - daily: hoy y los 6 días anteriores, con ceros donde no hubo ventas
        - weekly: las últimas 4 semanas (lunes a domingo), incluida la actual
        """
        today = business_today(now)
        first_day = today - timedelta(days=DAILY_WINDOW - 1)
        current_week = week_start(today)
        first_week = current_week - timedelta(weeks=WEEKLY_WINDOW - 1)

        daily: "OrderedDict[date, Decimal]" = OrderedDict(
            (first_day + timedelta(days=offset), Decimal("0")) for offset in range(DAILY_WINDOW)
        )
        weekly: "OrderedDict[date, Decimal]" = OrderedDict(
            (first_week + timedelta(weeks=offset), Decimal("0")) for offset in range(WEEKLY_WINDOW)
        )

        try:
            rows = self._get_revenue_rows(business_day_start_utc(min(first_day, first_week)))
        except SQLAlchemyError as e:
            self._handle_query_error("daily-weekly-revenue", e)
            return {"daily": [], "weekly": []}

        for issue_date, total in rows:
            local_day = to_business_date(issue_date)
            amount = Decimal(str(total or 0))
            if local_day in daily:
                daily[local_day] += amount
            monday = week_start(local_day)
            if monday in weekly:
                weekly[monday] += amount

        return {
            "daily": [
                {"date": day.isoformat(), "day": DAY_NAMES[day.weekday()], "revenue": revenue}
                for day, revenue in daily.items()
            ],
            "weekly": [
                {"week": week_label(monday), "revenue": revenue}
                for monday, revenue in weekly.items()
            ]
        }
