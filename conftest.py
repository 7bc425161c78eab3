"""
Configuración global de pytest.

Las variables de entorno se fijan antes de importar la aplicación para que
el engine se construya en modo offline y no se creen tablas al importar.
Cada test usa su propia base SQLite en memoria (StaticPool) que reemplaza a
get_db en la aplicación.
"""
import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DB_MODE", "offline")
os.environ.setdefault("SQLITE_PATH", ":memory:")
os.environ.setdefault("APP_SECRET_STRING", "test-secret-key-with-enough-length-for-hs256")

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database.database import Base, enable_sqlite_foreign_keys, get_db
from app.modules.auth.models import Tenant, User, UserRole
from app.modules.auth.utils import create_access_token, hash_password
from app.modules.products.models import Product

TEST_PASSWORD = "secreto123"


def make_sqlite_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_engine():
    engine = make_sqlite_engine()
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ===== HELPERS =====

def create_tenant(db, name="Tienda Prueba", slug=None) -> Tenant:
    tenant = Tenant(name=name, slug=slug or name.lower().replace(" ", "-"))
    db.add(tenant)
    db.commit()
    return tenant


def create_user(db, tenant, email, role=UserRole.ADMIN, full_name="Usuario Prueba") -> User:
    user = User(
        tenant_id=tenant.id,
        email=email,
        full_name=full_name,
        password=hash_password(TEST_PASSWORD),
        role=role,
        is_active=True
    )
    db.add(user)
    db.commit()
    return user


def create_product(db, tenant, name="Producto", stock=10, price="100", cost="60", sku=None) -> Product:
    product = Product(
        tenant_id=tenant.id,
        name=name,
        sku=sku,
        price=Decimal(price),
        cost=Decimal(cost),
        stock=stock
    )
    db.add(product)
    db.commit()
    return product


def auth_headers(user) -> dict:
    token = create_access_token(user.id, user.tenant_id, user.role.value)
    return {"Authorization": f"Bearer {token}"}


# ===== FIXTURES =====

@pytest.fixture
def tenant(db):
    return create_tenant(db)


@pytest.fixture
def admin(db, tenant):
    return create_user(db, tenant, "admin@tienda.com", UserRole.ADMIN, "Admin Tienda")


@pytest.fixture
def cashier(db, tenant):
    return create_user(db, tenant, "cajero@tienda.com", UserRole.CASHIER, "Cajero Tienda")


@pytest.fixture
def other_tenant(db):
    return create_tenant(db, name="Otra Tienda")


@pytest.fixture
def other_admin(db, other_tenant):
    return create_user(db, other_tenant, "admin@otra.com", UserRole.ADMIN, "Admin Otra")


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def cashier_headers(cashier):
    return auth_headers(cashier)
