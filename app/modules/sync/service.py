"""
Sincronización entre la base local (SQLite, modo offline) y la remota (PostgreSQL).

Por cada tabla, en orden de dependencias:
1. Sube las filas locales con is_synced = False y las marca sincronizadas.
2. Descarga las filas remotas con updated_at posterior a la marca local, que
   es el updated_at más reciente entre las filas locales ya sincronizadas.
   Las ediciones locales pendientes no cuentan para la marca.

Los conflictos se resuelven por updated_at: gana la escritura más reciente.
Se trabaja sobre las tablas (Core) para copiar updated_at e is_synced tal cual,
sin que se disparen los onupdate de las columnas.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set
import logging

from sqlalchemy import Table, and_, func, insert, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.modules.auth.models import Tenant, User
from app.modules.cash_registers.models import CashRegister, ShiftCloseout
from app.modules.clients.models import Client
from app.modules.invoices.models import Invoice, InvoiceItem
from app.modules.products.models import Product

logger = logging.getLogger(__name__)

# Padres antes que hijos por las claves foráneas
SYNC_MODELS = [Tenant, User, Client, Product, Invoice, InvoiceItem, CashRegister, ShiftCloseout]


@dataclass
class SyncResult:
    success: bool = False
    uploaded: int = 0
    downloaded: int = 0
    errors: List[str] = field(default_factory=list)
    tables: Dict[str, Dict[str, int]] = field(default_factory=dict)


def _pk_clause(table: Table, row):
    return and_(*[column == row[column.name] for column in table.primary_key.columns])


def _pk_value(table: Table, row) -> tuple:
    return tuple(row[column.name] for column in table.primary_key.columns)


class SyncService:
    def __init__(self, local_factory: sessionmaker, remote_factory: sessionmaker,
                 models: Optional[Iterable] = None):
        self.local_factory = local_factory
        self.remote_factory = remote_factory
        self.models = list(models) if models is not None else SYNC_MODELS

    @staticmethod
    def _is_available(session: Session) -> bool:
        try:
            session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Base de datos remota no disponible: {e}")
            return False

    @staticmethod
    def _upsert(session: Session, table: Table, row: dict) -> None:
        values = dict(row, is_synced=True)
        exists = session.execute(select(*table.primary_key.columns).where(_pk_clause(table, row))).first()
        if exists:
            session.execute(update(table).where(_pk_clause(table, row)).values(**values))
        else:
            session.execute(insert(table).values(**values))

    def _upload(self, local: Session, remote: Session, table: Table) -> Set[tuple]:
        """Sube filas locales pendientes; retorna las claves subidas"""
        uploaded = set()
        dirty_rows = local.execute(select(table).where(table.c.is_synced.is_(False))).mappings().all()

        for row in dirty_rows:
            remote_updated_at = remote.execute(
                select(table.c.updated_at).where(_pk_clause(table, row))
            ).scalar()
            if remote_updated_at is not None and remote_updated_at > row["updated_at"]:
                # La versión remota es más reciente; se descargará después
                continue

            self._upsert(remote, table, dict(row))
            local.execute(
                update(table)
                .where(_pk_clause(table, row))
                .values(is_synced=True, updated_at=table.c.updated_at)
            )
            uploaded.add(_pk_value(table, row))

        return uploaded

    def _download(self, local: Session, remote: Session, table: Table, since,
                  skip: Set[tuple]) -> int:
        query = select(table)
        if since is not None:
            query = query.where(table.c.updated_at > since)

        downloaded = 0
        for row in remote.execute(query).mappings().all():
            if _pk_value(table, row) in skip:
                continue

            local_row = local.execute(
                select(table.c.updated_at, table.c.is_synced).where(_pk_clause(table, row))
            ).first()
            if local_row is not None and not local_row.is_synced and local_row.updated_at > row["updated_at"]:
                continue

            self._upsert(local, table, dict(row))
            downloaded += 1

        return downloaded

    def sync(self) -> SyncResult:
        result = SyncResult()

        with self.local_factory() as local, self.remote_factory() as remote:
            if not self._is_available(remote):
                result.errors.append("No hay conexión a la base de datos remota. Modo offline activo.")
                return result

            for model in self.models:
                table = model.__table__
                try:
                    high_water_mark = local.execute(
                        select(func.max(table.c.updated_at)).where(table.c.is_synced.is_(True))
                    ).scalar()
                    uploaded_keys = self._upload(local, remote, table)
                    remote.commit()
                    local.commit()

                    downloaded = self._download(local, remote, table, high_water_mark, uploaded_keys)
                    local.commit()
                except SQLAlchemyError as e:
                    remote.rollback()
                    local.rollback()
                    logger.error(f"Error sincronizando {table.name}: {e}", exc_info=True)
                    result.errors.append(f"{table.name}: {e.__class__.__name__}")
                    continue

                result.tables[table.name] = {"uploaded": len(uploaded_keys), "downloaded": downloaded}
                result.uploaded += len(uploaded_keys)
                result.downloaded += downloaded

        result.success = not result.errors
        logger.info(
            f"Sincronización terminada: {result.uploaded} subidos, {result.downloaded} descargados, "
            f"{len(result.errors)} errores"
        )
        return result
