from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import Settings, settings
import logging

logger = logging.getLogger(__name__)


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite no aplica claves foráneas (ni ON DELETE) sin este PRAGMA"""
    @event.listens_for(engine, "connect")
    def _enable_sqlite_fks(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(config: Settings, url: str = None) -> Engine:
    """
    Construye el engine según DB_MODE.

    - online: PostgreSQL con pool y statement_timeout
    - offline: SQLite local con claves foráneas activas
    """
    if url is None:
        url = config.sqlite_url if config.is_offline else config.database_url

    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=config.DEBUG
        )

        enable_sqlite_foreign_keys(engine)

        logger.info(f"Base de datos en modo offline: {url}")
        return engine

    engine = create_engine(
        url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        echo=config.DEBUG,
        connect_args={"options": f"-c statement_timeout={config.STATEMENT_TIMEOUT_MS}"}
    )
    logger.info("Base de datos en modo online (PostgreSQL)")
    return engine


# Engine resuelto una sola vez al arrancar
engine = build_engine(settings)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

Base = declarative_base()


def get_db():
    """Genera una sesión de base de datos por request."""
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def get_tenant_query(session, model, tenant_id):
    """Query filtrada por tenant para modelos con tenant_id"""
    return session.query(model).filter(model.tenant_id == tenant_id)
