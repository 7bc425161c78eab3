"""
Utilidades de fecha/hora.

Las fechas se guardan en la base de datos como UTC sin tzinfo (naive) para
que SQLite y PostgreSQL se comporten igual. Los reportes agrupan por día,
semana y mes en la zona horaria del negocio.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from app.core.config import settings

UTC = timezone.utc


def business_tz() -> ZoneInfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


def utcnow() -> datetime:
    """'Ahora' del servidor en UTC (naive, canónico)."""
    return datetime.now(UTC).replace(tzinfo=None)


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normaliza un datetime a UTC naive.
    Un datetime naive se interpreta como UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def to_business_date(value: datetime) -> date:
    """Fecha local del negocio para un datetime UTC naive."""
    return value.replace(tzinfo=UTC).astimezone(business_tz()).date()


def business_today(now: Optional[datetime] = None) -> date:
    return to_business_date(now or utcnow())


def business_day_start_utc(day: date) -> datetime:
    """00:00 local del día dado, expresado en UTC naive."""
    local_start = datetime(day.year, day.month, day.day, tzinfo=business_tz())
    return local_start.astimezone(UTC).replace(tzinfo=None)


def week_start(day: date) -> date:
    """Lunes de la semana de `day`."""
    return day - timedelta(days=day.weekday())
