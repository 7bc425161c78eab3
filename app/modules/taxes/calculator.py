"""
Helper para cálculo de precios e IVA.

Política de IVA plano: a cada línea se le aplica la tarifa general (19%) o
ninguna, según el flag `applyIva` de la factura.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Union

from app.core.config import settings

CENTS = Decimal('0.01')

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Convierte a Decimal sin arrastrar errores de punto flotante"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value: Number) -> Decimal:
    """Redondeo comercial (ROUND_HALF_UP) a centavos"""
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def tax_rate(apply_iva: bool) -> Decimal:
    return to_decimal(settings.TAX_RATE) if apply_iva else Decimal('0')


def tax_rate_percent(apply_iva: bool) -> Decimal:
    """Tarifa como porcentaje entero, tal como se guarda en la línea (19 o 0)"""
    return (tax_rate(apply_iva) * 100).quantize(CENTS)


def resolve_unit_price(override: Optional[Number], list_price: Number) -> Decimal:
    """
    Precio unitario de la línea, redondeado a centavos.

    El precio se guarda con dos decimales, así que la línea se calcula con
    ese mismo valor para que subtotal == unit_price * quantity en la base.
    """
    # Un precio de 0 o vacío toma el precio de lista del producto
    if override:
        return quantize_money(override)
    return quantize_money(list_price)


@dataclass
class LineAmounts:
    unit_price: Decimal
    quantity: Decimal
    subtotal: Decimal
    tax_rate_applied: Decimal
    tax_amount: Decimal
    total_amount: Decimal


def calculate_line(unit_price: Number, quantity: Number, apply_iva: bool) -> LineAmounts:
    """
    Calcula una línea de factura.

    total_amount = quantity * unit_price + tax_amount
    """
    price = to_decimal(unit_price)
    qty = to_decimal(quantity)
    subtotal = price * qty
    tax_amount = quantize_money(subtotal * tax_rate(apply_iva))

    return LineAmounts(
        unit_price=price,
        quantity=qty,
        subtotal=subtotal,
        tax_rate_applied=tax_rate_percent(apply_iva),
        tax_amount=tax_amount,
        total_amount=subtotal + tax_amount
    )


def calculate_invoice_totals(lines: Iterable[LineAmounts]) -> dict:
    """Totales de la factura como suma de sus líneas"""
    subtotal = Decimal('0')
    tax_total = Decimal('0')
    for line in lines:
        subtotal += line.subtotal
        tax_total += line.tax_amount

    return {
        "subtotal": subtotal,
        "tax_total": tax_total,
        "total": subtotal + tax_total
    }
