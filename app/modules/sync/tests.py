"""
Tests para la sincronización local <-> remota

Dos bases SQLite en memoria hacen de base local y remota.

- Subida de cambios locales pendientes
- Descarga de filas remotas nuevas o más recientes
- Conflictos resueltos por updated_at
- Remota inaccesible
"""

import pytest
from datetime import timedelta
from decimal import Decimal

from sqlalchemy import create_engine, select, update
from sqlalchemy.orm import sessionmaker

from app.modules.auth.models import Tenant, User
from app.modules.products.models import Product
from app.modules.sync.service import SyncService
from conftest import create_product, create_user, make_sqlite_engine


# ===== FIXTURES =====

@pytest.fixture
def remote_engine():
    engine = make_sqlite_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def remote_factory(remote_engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=remote_engine)


@pytest.fixture
def sync_service(session_factory, remote_factory):
    return SyncService(session_factory, remote_factory)


# ===== HELPERS =====

def fetch_row(factory, model, row_id):
    table = model.__table__
    with factory() as session:
        return session.execute(select(table).where(table.c.id == row_id)).mappings().first()


def set_columns(factory, model, row_id, **values):
    table = model.__table__
    with factory() as session:
        session.execute(update(table).where(table.c.id == row_id).values(**values))
        session.commit()


# ===== SUBIDA =====

class TestUpload:

    def test_pending_rows_are_uploaded(self, db, tenant, admin, session_factory, remote_factory, sync_service):
        product = create_product(db, tenant, name="Panela", stock=7, price="3200")
        before = fetch_row(session_factory, Product, product.id)

        result = sync_service.sync()

        assert result.success is True
        assert result.errors == []
        assert result.uploaded == 3
        assert result.tables["tenants"] == {"uploaded": 1, "downloaded": 0}
        assert result.tables["products"] == {"uploaded": 1, "downloaded": 0}

        remote_product = fetch_row(remote_factory, Product, product.id)
        assert remote_product["name"] == "Panela"
        assert remote_product["stock"] == 7
        assert remote_product["price"] == Decimal("3200")
        assert remote_product["is_synced"] is True
        assert fetch_row(remote_factory, User, admin.id)["email"] == admin.email

        after = fetch_row(session_factory, Product, product.id)
        assert after["is_synced"] is True
        assert after["updated_at"] == before["updated_at"]

    def test_second_sync_has_nothing_to_do(self, db, tenant, sync_service):
        create_product(db, tenant)
        sync_service.sync()

        result = sync_service.sync()

        assert result.success is True
        assert result.uploaded == 0
        assert result.downloaded == 0

    def test_local_edit_is_marked_pending(self, db, tenant, session_factory, sync_service):
        product = create_product(db, tenant, price="100")
        sync_service.sync()

        db.refresh(product)
        product.price = Decimal("150")
        db.commit()

        assert fetch_row(session_factory, Product, product.id)["is_synced"] is False


# ===== DESCARGA =====

class TestDownload:

    def test_new_remote_rows_are_downloaded(self, db, tenant, session_factory, remote_factory, sync_service):
        sync_service.sync()

        with remote_factory() as remote:
            remote_product = create_product(remote, tenant, name="Producto Remoto", stock=4)

        result = sync_service.sync()

        assert result.success is True
        assert result.tables["products"]["downloaded"] == 1
        local = fetch_row(session_factory, Product, remote_product.id)
        assert local["name"] == "Producto Remoto"
        assert local["stock"] == 4
        assert local["is_synced"] is True

    def test_pending_local_edit_does_not_hide_remote_change(self, db, tenant, session_factory,
                                                            remote_factory, sync_service):
        changed_remotely = create_product(db, tenant, name="Arepa", price="100")
        edited_locally = create_product(db, tenant, name="Queso", price="200")
        sync_service.sync()
        synced_at = fetch_row(session_factory, Product, changed_remotely.id)["updated_at"]

        set_columns(remote_factory, Product, changed_remotely.id,
                    price=Decimal("150"), updated_at=synced_at + timedelta(minutes=1))
        set_columns(session_factory, Product, edited_locally.id,
                    price=Decimal("250"), is_synced=False, updated_at=synced_at + timedelta(minutes=10))

        result = sync_service.sync()

        assert result.tables["products"] == {"uploaded": 1, "downloaded": 1}
        assert fetch_row(session_factory, Product, changed_remotely.id)["price"] == Decimal("150")
        assert fetch_row(remote_factory, Product, edited_locally.id)["price"] == Decimal("250")

    def test_remote_user_appears_locally(self, db, tenant, session_factory, remote_factory, sync_service):
        sync_service.sync()

        with remote_factory() as remote:
            remote_tenant = remote.get(Tenant, tenant.id)
            cashier = create_user(remote, remote_tenant, "nuevo@tienda.com")

        sync_service.sync()

        assert fetch_row(session_factory, User, cashier.id)["email"] == "nuevo@tienda.com"


# ===== CONFLICTOS =====

class TestConflicts:

    def test_newer_remote_wins(self, db, tenant, session_factory, remote_factory, sync_service):
        product = create_product(db, tenant, price="100")
        sync_service.sync()
        synced_at = fetch_row(session_factory, Product, product.id)["updated_at"]

        set_columns(session_factory, Product, product.id,
                    price=Decimal("110"), is_synced=False, updated_at=synced_at + timedelta(minutes=1))
        set_columns(remote_factory, Product, product.id,
                    price=Decimal("120"), updated_at=synced_at + timedelta(minutes=2))

        result = sync_service.sync()

        assert result.success is True
        assert fetch_row(remote_factory, Product, product.id)["price"] == Decimal("120")
        local = fetch_row(session_factory, Product, product.id)
        assert local["price"] == Decimal("120")
        assert local["is_synced"] is True

    def test_newer_local_wins(self, db, tenant, session_factory, remote_factory, sync_service):
        product = create_product(db, tenant, price="100")
        sync_service.sync()
        synced_at = fetch_row(session_factory, Product, product.id)["updated_at"]

        set_columns(remote_factory, Product, product.id,
                    price=Decimal("120"), updated_at=synced_at + timedelta(minutes=1))
        set_columns(session_factory, Product, product.id,
                    price=Decimal("130"), is_synced=False, updated_at=synced_at + timedelta(minutes=2))

        result = sync_service.sync()

        assert result.tables["products"] == {"uploaded": 1, "downloaded": 0}
        assert fetch_row(remote_factory, Product, product.id)["price"] == Decimal("130")
        assert fetch_row(session_factory, Product, product.id)["price"] == Decimal("130")


# ===== REMOTA NO DISPONIBLE =====

class TestRemoteUnavailable:

    def test_unreachable_remote(self, db, tenant, session_factory, tmp_path):
        broken = create_engine(f"sqlite:///{tmp_path / 'no-existe' / 'remota.db'}")
        service = SyncService(session_factory, sessionmaker(bind=broken))

        result = service.sync()

        assert result.success is False
        assert result.uploaded == 0
        assert result.errors == ["No hay conexión a la base de datos remota. Modo offline activo."]
        assert fetch_row(session_factory, Tenant, tenant.id)["is_synced"] is False
        broken.dispose()


# ===== ENDPOINT =====

class TestSyncEndpoint:

    def test_without_remote_configured(self, client, admin_headers):
        response = client.post("/sync/", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["success"] is False
        assert "REMOTE_DATABASE_URL" in response.json()["errors"][0]

    def test_admin_only(self, client, cashier_headers):
        assert client.post("/sync/", headers=cashier_headers).status_code == 403
