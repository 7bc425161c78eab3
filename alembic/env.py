# alembic/env.py
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine

from app.core.config import settings

# --- Models' metadata
from app.database.database import Base
import app.modules.auth.models  # noqa: F401  registran las tablas
import app.modules.clients.models  # noqa: F401
import app.modules.products.models  # noqa: F401
import app.modules.invoices.models  # noqa: F401
import app.modules.cash_registers.models  # noqa: F401

target_metadata = Base.metadata

# --- Logging
config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)


def get_url() -> str:
    # migrate.py la fija; si se corre `alembic` directo se toma de settings
    url = config.get_main_option("sqlalchemy.url")
    if url:
        return url
    return settings.sqlite_url if settings.is_offline else settings.database_url


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (emit SQL)."""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = get_url()
    engine = create_engine(url, pool_pre_ping=True)

    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=url.startswith("sqlite"),
        )
        with context.begin_transaction():
            context.run_migrations()

    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
