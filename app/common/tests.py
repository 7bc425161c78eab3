"""
Tests para utilidades compartidas: validadores colombianos, fechas y errores
"""

import pytest
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from app.common.exceptions import (
    ConflictError, InsufficientStockError, NotFoundError, SchemaNotReadyError, is_missing_table_error
)
from app.common.time_utils import business_day_start_utc, to_business_date, to_utc_naive, week_start
from app.common.validators import calculate_nit_dv, clean_document, validate_colombia_cedula, validate_nit_dv


class TestNitValidation:

    @pytest.mark.parametrize("nit, dv", [
        ("800197268", 4),
        ("900123456", 8),
        ("900.123.456", 8),
    ])
    def test_calculate_dv(self, nit, dv):
        assert calculate_nit_dv(nit) == dv

    def test_invalid_nit(self):
        assert calculate_nit_dv("12345") is None
        assert calculate_nit_dv("ABC123456") is None

    def test_validate_dv(self):
        assert validate_nit_dv("800197268", "4")
        assert not validate_nit_dv("800197268", "5")
        assert not validate_nit_dv("800197268", "")

    def test_clean_document(self):
        assert clean_document(" 1.020-304 050 ") == "1020304050"


class TestCedulaValidation:

    @pytest.mark.parametrize("value, valid", [
        ("1020304050", True),
        ("123456", True),
        ("12345", False),
        ("12345678901", False),
        ("0123456789", False),
        ("12A456", False),
    ])
    def test_cedula(self, value, valid):
        assert validate_colombia_cedula(value) is valid


class TestTimeUtils:

    def test_naive_is_treated_as_utc(self):
        value = datetime(2025, 1, 1, 12, 0)
        assert to_utc_naive(value) == value
        assert to_utc_naive(None) is None

    def test_aware_is_converted(self):
        bogota = timezone(timedelta(hours=-5))
        assert to_utc_naive(datetime(2025, 1, 1, 20, 0, tzinfo=bogota)) == datetime(2025, 1, 2, 1, 0)

    def test_business_date(self):
        assert to_business_date(datetime(2025, 1, 2, 4, 59)) == date(2025, 1, 1)
        assert to_business_date(datetime(2025, 1, 2, 5, 0)) == date(2025, 1, 2)

    def test_business_day_start(self):
        assert business_day_start_utc(date(2025, 1, 2)) == datetime(2025, 1, 2, 5, 0)

    def test_week_start(self):
        assert week_start(date(2025, 3, 16)) == date(2025, 3, 10)
        assert week_start(date(2025, 3, 10)) == date(2025, 3, 10)


class TestErrors:

    def test_status_codes(self):
        assert NotFoundError().status_code == 404
        assert ConflictError("dup").status_code == 400
        assert SchemaNotReadyError().status_code == 503

    def test_insufficient_stock_message(self):
        error = InsufficientStockError("Arroz", 1, 5)
        assert error.status_code == 400
        assert error.detail == 'Stock insuficiente para el producto "Arroz". Stock disponible: 1, solicitado: 5'

    def test_missing_table_detection(self, db):
        with pytest.raises(OperationalError) as exc:
            db.execute(text("SELECT * FROM tabla_inexistente"))
        db.rollback()

        assert is_missing_table_error(exc.value)
        assert not is_missing_table_error(SQLAlchemyError("timeout"))
