"""
Errores de dominio.

Subclases de HTTPException: los servicios los lanzan directamente y FastAPI
los traduce al código HTTP correspondiente.
"""
from decimal import Decimal
from typing import Optional, Union

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError


class AppError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Error interno del servidor"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)


class ValidationError(AppError):
    """Datos faltantes o mal formados, corregibles por el usuario."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Datos inválidos"


class NotFoundError(AppError):
    """Entidad inexistente o de otro tenant."""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Recurso no encontrado"


class ConflictError(AppError):
    """Violación de unicidad (número de factura, SKU, documento)."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "El recurso ya existe"


class InsufficientStockError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, product_name: str, available: int, requested: Union[int, Decimal]):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f'Stock insuficiente para el producto "{product_name}". '
            f"Stock disponible: {available}, solicitado: {requested}"
        )


class SchemaNotReadyError(AppError):
    """Las tablas requeridas no existen (migración pendiente)."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = (
        "Las tablas de cierre de caja no están disponibles. "
        "Ejecuta las migraciones: python migrate.py upgrade"
    )


class InternalError(AppError):
    """Error inesperado; el detalle real solo va al log."""


_MISSING_TABLE_MARKERS = ("no such table", "does not exist", "undefinedtable")


def is_missing_table_error(error: SQLAlchemyError) -> bool:
    """Detecta errores de tabla inexistente en SQLite y PostgreSQL (42P01)."""
    orig = getattr(error, "orig", None)
    if getattr(orig, "pgcode", None) == "42P01":
        return True
    message = str(error).lower()
    return any(marker in message for marker in _MISSING_TABLE_MARKERS)
