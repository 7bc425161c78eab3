"""
Validadores específicos para Colombia
"""
import re
from typing import Optional


NIT_WEIGHTS = [3, 7, 13, 17, 19, 23, 29, 37, 41, 43, 47, 53, 59, 67, 71]


def clean_document(value: str) -> str:
    """Quita puntos, espacios y guiones de un documento"""
    return re.sub(r'[\.\s\-]', '', value or '')


def calculate_nit_dv(nit: str) -> Optional[int]:
    """
    Calcula el dígito de verificación (DV) de un NIT colombiano.
    Retorna None si el NIT no es numérico o es muy corto.
    """
    cleaned = clean_document(nit)
    if not cleaned.isdigit() or len(cleaned) < 6:
        return None

    total = sum(
        int(digit) * NIT_WEIGHTS[i]
        for i, digit in enumerate(reversed(cleaned))
        if i < len(NIT_WEIGHTS)
    )
    remainder = total % 11
    return remainder if remainder < 2 else 11 - remainder


def validate_nit_dv(nit: str, dv: str) -> bool:
    """Valida que el DV corresponda al NIT"""
    expected = calculate_nit_dv(nit)
    if expected is None:
        return False
    dv = (dv or '').strip()
    return dv.isdigit() and int(dv) == expected


def validate_colombia_cedula(cedula: str) -> bool:
    """
    Valida cédula colombiana.
    - Entre 6 y 10 dígitos
    - No puede empezar con 0
    """
    cleaned = clean_document(cedula)
    if not cleaned.isdigit():
        return False
    return 6 <= len(cleaned) <= 10 and not cleaned.startswith('0')
