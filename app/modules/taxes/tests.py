"""
Tests del cálculo de líneas y totales con IVA plano
"""

from decimal import Decimal

from app.modules.taxes.calculator import (
    calculate_invoice_totals, calculate_line, quantize_money, resolve_unit_price, tax_rate_percent
)


def test_quantize_rounds_half_up():
    assert quantize_money("2.345") == Decimal("2.35")
    assert quantize_money(Decimal("2.344")) == Decimal("2.34")
    assert quantize_money(0.1 + 0.2) == Decimal("0.30")


def test_resolve_unit_price():
    assert resolve_unit_price(None, Decimal("100")) == Decimal("100")
    assert resolve_unit_price(0, "100") == Decimal("100")
    assert resolve_unit_price("80.50", "100") == Decimal("80.50")


def test_resolve_unit_price_rounds_to_cents():
    assert resolve_unit_price("0.005", "100") == Decimal("0.01")
    assert resolve_unit_price("19.994", "100") == Decimal("19.99")
    assert resolve_unit_price(None, "12.345") == Decimal("12.35")

    line = calculate_line(resolve_unit_price("0.005", "100"), 3, apply_iva=False)
    assert line.subtotal == Decimal("0.03")
    assert line.subtotal == line.unit_price * 3


def test_line_without_iva():
    line = calculate_line(Decimal("100"), 2, apply_iva=False)

    assert line.subtotal == Decimal("200")
    assert line.tax_amount == Decimal("0.00")
    assert line.total_amount == Decimal("200")
    assert line.tax_rate_applied == Decimal("0.00")


def test_line_with_iva():
    line = calculate_line("10.05", 3, apply_iva=True)

    assert line.subtotal == Decimal("30.15")
    assert line.tax_amount == Decimal("5.73")
    assert line.total_amount == Decimal("35.88")
    assert line.tax_rate_applied == Decimal("19.00")


def test_invoice_totals_match_line_sums():
    lines = [
        calculate_line("10.05", 3, apply_iva=True),
        calculate_line("2500", 2, apply_iva=True),
        calculate_line("0.99", 7, apply_iva=True),
    ]

    totals = calculate_invoice_totals(lines)

    assert totals["subtotal"] == sum(line.subtotal for line in lines)
    assert totals["tax_total"] == sum(line.tax_amount for line in lines)
    assert totals["total"] == sum(line.total_amount for line in lines)
    assert totals["total"] == totals["subtotal"] + totals["tax_total"]


def test_percent():
    assert tax_rate_percent(True) == Decimal("19.00")
    assert tax_rate_percent(False) == Decimal("0.00")
