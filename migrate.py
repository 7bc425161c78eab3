#!/usr/bin/env python3
"""
Gestión de migraciones con Alembic.

La base destino depende de DB_MODE: PostgreSQL (online) o el archivo SQLite
local (offline). Para migrar la base remota de sincronización usa --remote.

    python migrate.py upgrade
    python migrate.py downgrade --steps 2
    python migrate.py create "agregar campo x"
    python migrate.py --remote upgrade
"""
import argparse
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

from app.core.config import settings

ROOT_DIR = Path(__file__).parent


def resolve_url(remote: bool = False) -> str:
    if remote:
        if not settings.REMOTE_DATABASE_URL:
            raise SystemExit("REMOTE_DATABASE_URL no está configurada")
        return settings.REMOTE_DATABASE_URL
    return settings.sqlite_url if settings.is_offline else settings.database_url


def get_alembic_config(remote: bool = False) -> Config:
    alembic_cfg = Config(str(ROOT_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("sqlalchemy.url", resolve_url(remote))
    return alembic_cfg


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Migraciones de base de datos")
    parser.add_argument("--remote", action="store_true", help="Usar REMOTE_DATABASE_URL")
    subparsers = parser.add_subparsers(dest="action", required=True)

    create = subparsers.add_parser("create", help="Crear migración autogenerada")
    create.add_argument("message")
    upgrade = subparsers.add_parser("upgrade", help="Aplicar migraciones pendientes")
    upgrade.add_argument("revision", nargs="?", default="head")
    downgrade = subparsers.add_parser("downgrade", help="Revertir migraciones")
    downgrade.add_argument("--steps", type=int, default=1)
    stamp = subparsers.add_parser("stamp", help="Marcar la base en una revisión sin ejecutar nada")
    stamp.add_argument("revision", nargs="?", default="head")
    subparsers.add_parser("history", help="Ver historial")
    subparsers.add_parser("current", help="Ver revisión actual")

    args = parser.parse_args(argv)
    alembic_cfg = get_alembic_config(args.remote)

    if args.action == "create":
        command.revision(alembic_cfg, autogenerate=True, message=args.message)
        print(f"Migración creada: {args.message}")
    elif args.action == "upgrade":
        command.upgrade(alembic_cfg, args.revision)
        print(f"Migraciones aplicadas hasta {args.revision} (modo {settings.DB_MODE})")
    elif args.action == "downgrade":
        command.downgrade(alembic_cfg, f"-{args.steps}")
        print(f"Rollback de {args.steps} migración(es) ejecutado")
    elif args.action == "stamp":
        command.stamp(alembic_cfg, args.revision)
    elif args.action == "history":
        command.history(alembic_cfg)
    else:
        command.current(alembic_cfg)
    return 0


if __name__ == "__main__":
    sys.exit(main())
