from functools import lru_cache
from dataclasses import asdict
import logging

from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.database.database import SessionLocal, build_engine
from app.dependencies.userDependencies import admin_dependency
from app.modules.sync.schemas import SyncResponse
from app.modules.sync.service import SyncService

logger = logging.getLogger(__name__)

sync_router = APIRouter(prefix="/sync", tags=["Sync"])


@lru_cache(maxsize=1)
def get_remote_sessionmaker() -> sessionmaker:
    engine = build_engine(settings, url=settings.REMOTE_DATABASE_URL)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@sync_router.post("/", response_model=SyncResponse)
def sync_data(auth_context: admin_dependency):
    """
    Sincronizar la base local con la remota (solo administradores).

    Sin REMOTE_DATABASE_URL configurada no se hace nada.
    """
    if not settings.REMOTE_DATABASE_URL:
        return SyncResponse(
            success=False, uploaded=0, downloaded=0,
            errors=["No hay base de datos remota configurada (REMOTE_DATABASE_URL)"]
        )

    try:
        remote_factory = get_remote_sessionmaker()
    except SQLAlchemyError as e:
        logger.error(f"No se pudo crear el engine remoto: {e}")
        return SyncResponse(success=False, uploaded=0, downloaded=0, errors=["Base de datos remota inválida"])

    logger.info(f"Sincronización solicitada por {auth_context.user_id}")
    result = SyncService(SessionLocal, remote_factory).sync()
    return asdict(result)
