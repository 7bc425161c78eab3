"""
Tests para el módulo de facturas

- Descuento de inventario atómico al crear la factura
- Totales con y sin IVA
- Número de factura único por tenant
- Avisos de stock bajo
- Ventas concurrentes de la última unidad
- Aislamiento entre tenants y permisos de cabecera
"""

import pytest
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy import event, update
from sqlalchemy.orm import sessionmaker

from app.common.exceptions import ConflictError, InsufficientStockError, NotFoundError
from app.core.config import settings
from app.database.database import Base, build_engine, get_db
from app.main import app
from app.modules.auth.models import Tenant
from app.modules.invoices.models import Invoice, InvoiceItem, InvoiceStatus
from app.modules.invoices.schemas import InvoiceCreate
from app.modules.invoices.service import InvoiceService, DUPLICATE_NUMBER_MESSAGE, low_stock_warning
from app.modules.clients.models import Client
from app.modules.products.models import Product
from conftest import auth_headers, create_product, create_tenant, create_user


# ===== HELPERS =====

def invoice_payload(number, *lines, **extra):
    payload = {
        "number": number,
        "items": [{"productId": str(product.id), "quantity": quantity} for product, quantity in lines]
    }
    payload.update(extra)
    return payload


def stock_of(db, product):
    db.refresh(product)
    return product.stock


# ===== CREACIÓN Y STOCK =====

class TestCreateInvoice:

    def test_sale_decrements_stock_and_warns(self, client, db, tenant, admin_headers):
        product = create_product(db, tenant, name="Arroz", stock=3, price="100")

        response = client.post("/invoices/", json=invoice_payload("F-001", (product, 2)), headers=admin_headers)

        assert response.status_code == 201
        body = response.json()
        invoice = body["invoice"]
        assert invoice["subtotal"] == 200.0
        assert invoice["taxTotal"] == 0.0
        assert invoice["total"] == 200.0
        assert invoice["status"] == "DRAFT"
        assert len(invoice["items"]) == 1
        assert invoice["items"][0]["description"] == "Arroz"
        assert invoice["items"][0]["unitPrice"] == 100.0
        assert body["warnings"] == [low_stock_warning("Arroz", 1)]
        assert stock_of(db, product) == 1

        rejected = client.post("/invoices/", json=invoice_payload("F-002", (product, 5)), headers=admin_headers)

        assert rejected.status_code == 400
        assert "Stock insuficiente" in rejected.json()["detail"]
        assert "Arroz" in rejected.json()["detail"]
        assert stock_of(db, product) == 1
        assert db.query(Invoice).count() == 1

    def test_failed_item_rolls_back_whole_invoice(self, client, db, tenant, admin_headers):
        plenty = create_product(db, tenant, name="Azúcar", stock=10)
        scarce = create_product(db, tenant, name="Café", stock=1)

        response = client.post(
            "/invoices/",
            json=invoice_payload("F-010", (plenty, 3), (scarce, 2)),
            headers=admin_headers
        )

        assert response.status_code == 400
        assert stock_of(db, plenty) == 10
        assert stock_of(db, scarce) == 1
        assert db.query(Invoice).count() == 0
        assert db.query(InvoiceItem).count() == 0

        # El número no quedó reservado por el intento fallido
        retry = client.post("/invoices/", json=invoice_payload("F-010", (plenty, 3)), headers=admin_headers)
        assert retry.status_code == 201
        assert stock_of(db, plenty) == 7

    def test_unknown_product_rolls_back(self, client, db, tenant, admin_headers):
        product = create_product(db, tenant, stock=10)
        payload = invoice_payload("F-011", (product, 1))
        payload["items"].append({"productId": "00000000-0000-0000-0000-000000000000", "quantity": 1})

        response = client.post("/invoices/", json=payload, headers=admin_headers)

        assert response.status_code == 404
        assert "no encontrado" in response.json()["detail"]
        assert stock_of(db, product) == 10

    def test_iva_totals_are_consistent(self, client, db, tenant, admin_headers):
        first = create_product(db, tenant, name="Leche", stock=20, price="10.05")
        second = create_product(db, tenant, name="Pan", stock=20, price="2500")

        response = client.post(
            "/invoices/",
            json=invoice_payload("F-020", (first, 3), (second, 2), applyIva=True),
            headers=admin_headers
        )

        assert response.status_code == 201
        invoice = response.json()["invoice"]
        # 30.15 * 0.19 = 5.7285 -> 5.73 ; 5000 * 0.19 = 950
        assert invoice["subtotal"] == 5030.15
        assert invoice["taxTotal"] == 955.73
        assert invoice["total"] == 5985.88
        assert all(item["taxRateApplied"] == 19.0 for item in invoice["items"])
        assert sum(Decimal(str(item["totalAmount"])) for item in invoice["items"]) == Decimal("5985.88")

    def test_per_item_tax_rate_is_ignored(self, client, db, tenant, admin_headers):
        product = create_product(db, tenant, stock=5, price="1000")
        payload = invoice_payload("F-021", (product, 1))
        payload["items"][0]["taxRate"] = 5

        invoice = client.post("/invoices/", json=payload, headers=admin_headers).json()["invoice"]

        assert invoice["taxTotal"] == 0.0
        assert invoice["items"][0]["taxRateApplied"] == 0.0

    def test_unit_price_override(self, client, db, tenant, admin_headers):
        product = create_product(db, tenant, stock=10, price="100")
        payload = invoice_payload("F-030", (product, 2), (product, 1))
        payload["items"][0]["unitPrice"] = 80
        payload["items"][1]["unitPrice"] = 0

        response = client.post("/invoices/", json=payload, headers=admin_headers)

        assert response.status_code == 201
        assert response.json()["invoice"]["subtotal"] == 260.0
        assert stock_of(db, product) == 7

    def test_sub_cent_unit_price_is_rounded(self, client, db, tenant, admin_headers):
        product = create_product(db, tenant, stock=10, price="100")
        payload = invoice_payload("F-031", (product, 3))
        payload["items"][0]["unitPrice"] = "0.005"

        response = client.post("/invoices/", json=payload, headers=admin_headers)

        assert response.status_code == 201
        stored = db.query(Invoice).filter(Invoice.number == "F-031").one()
        assert stored.subtotal == Decimal("0.03")
        assert stored.items[0].unit_price == Decimal("0.01")
        assert stored.subtotal == sum(item.unit_price * item.quantity for item in stored.items)
        assert stored.total == stored.subtotal + stored.tax_total

    def test_default_currency(self, client, db, tenant, admin_headers):
        product = create_product(db, tenant, stock=10)

        invoice = client.post("/invoices/", json=invoice_payload("F-032", (product, 1)), headers=admin_headers).json()["invoice"]

        assert invoice["currency"] == settings.DEFAULT_CURRENCY

    def test_cashier_can_sell(self, client, db, tenant, cashier, cashier_headers):
        product = create_product(db, tenant, stock=10)

        response = client.post(
            "/invoices/",
            json=invoice_payload("F-040", (product, 1), status="PAID", paymentMethod="TRANSFER"),
            headers=cashier_headers
        )

        assert response.status_code == 201
        invoice = response.json()["invoice"]
        assert invoice["createdById"] == str(cashier.id)
        assert invoice["status"] == "PAID"
        assert invoice["paymentMethod"] == "TRANSFER"

    def test_invoice_with_client(self, client, db, tenant, admin_headers):
        customer = Client(tenant_id=tenant.id, business_name="Cliente Uno")
        db.add(customer)
        db.commit()
        product = create_product(db, tenant, stock=10)

        response = client.post(
            "/invoices/",
            json=invoice_payload("F-050", (product, 1), clientId=str(customer.id)),
            headers=admin_headers
        )

        assert response.status_code == 201
        assert response.json()["invoice"]["client"]["businessName"] == "Cliente Uno"

    def test_unknown_client(self, client, db, tenant, admin_headers):
        product = create_product(db, tenant, stock=10)

        response = client.post(
            "/invoices/",
            json=invoice_payload("F-051", (product, 1), clientId="00000000-0000-0000-0000-000000000000"),
            headers=admin_headers
        )

        assert response.status_code == 404
        assert stock_of(db, product) == 10

    @pytest.mark.parametrize("payload", [
        {"number": "F-060", "items": []},
        {"number": "   ", "items": [{"productId": "00000000-0000-0000-0000-000000000000", "quantity": 1}]},
        {"items": [{"productId": "00000000-0000-0000-0000-000000000000", "quantity": 1}]},
        {"number": "F-061", "items": [{"productId": "00000000-0000-0000-0000-000000000000", "quantity": 0}]},
    ])
    def test_invalid_payloads(self, client, admin_headers, payload):
        response = client.post("/invoices/", json=payload, headers=admin_headers)
        assert response.status_code == 400

    def test_requires_authentication(self, client, db, tenant):
        product = create_product(db, tenant, stock=10)
        response = client.post("/invoices/", json=invoice_payload("F-070", (product, 1)))
        assert response.status_code == 401
        assert stock_of(db, product) == 10


# ===== NÚMERO ÚNICO =====

class TestInvoiceNumber:

    def test_duplicate_number_does_not_overwrite(self, client, db, tenant, admin_headers):
        first = create_product(db, tenant, name="Primero", stock=10, price="100")
        second = create_product(db, tenant, name="Segundo", stock=10, price="999")

        created = client.post("/invoices/", json=invoice_payload("F-100", (first, 1)), headers=admin_headers)
        assert created.status_code == 201

        duplicate = client.post("/invoices/", json=invoice_payload("F-100", (second, 2)), headers=admin_headers)

        assert duplicate.status_code == 400
        assert duplicate.json()["detail"] == DUPLICATE_NUMBER_MESSAGE
        assert stock_of(db, second) == 10
        invoice = client.get(f"/invoices/{created.json()['invoice']['id']}", headers=admin_headers).json()
        assert invoice["total"] == 100.0

    def test_number_is_trimmed(self, client, db, tenant, admin_headers):
        product = create_product(db, tenant, stock=10)
        client.post("/invoices/", json=invoice_payload(" F-101 ", (product, 1)), headers=admin_headers)

        duplicate = client.post("/invoices/", json=invoice_payload("F-101", (product, 1)), headers=admin_headers)

        assert duplicate.status_code == 400
        assert stock_of(db, product) == 9

    def test_same_number_in_other_tenant(self, client, db, tenant, other_tenant, admin_headers, other_admin):
        mine = create_product(db, tenant, stock=10)
        theirs = create_product(db, other_tenant, stock=10)

        assert client.post("/invoices/", json=invoice_payload("F-1", (mine, 1)), headers=admin_headers).status_code == 201
        response = client.post("/invoices/", json=invoice_payload("F-1", (theirs, 1)), headers=auth_headers(other_admin))
        assert response.status_code == 201


# ===== STOCK BAJO =====

class TestLowStockWarnings:

    @pytest.mark.parametrize("initial, quantity, warns", [
        (6, 2, True),
        (7, 2, True),
        (10, 2, False),
        (8, 2, False),
        (1, 1, True),
    ])
    def test_threshold(self, db, tenant, initial, quantity, warns):
        product = create_product(db, tenant, name="Galletas", stock=initial)
        data = InvoiceCreate(number=f"W-{initial}-{quantity}", items=[{"product_id": product.id, "quantity": quantity}])

        result = InvoiceService(db).create_invoice(data, tenant.id)

        remaining = initial - quantity
        expected = [low_stock_warning("Galletas", remaining)] if warns else []
        assert result["warnings"] == expected
        assert stock_of(db, product) == remaining

    def test_one_warning_per_line(self, db, tenant):
        a = create_product(db, tenant, name="A", stock=3)
        b = create_product(db, tenant, name="B", stock=4)
        data = InvoiceCreate(number="W-2", items=[
            {"product_id": a.id, "quantity": 1},
            {"product_id": b.id, "quantity": 1},
        ])

        result = InvoiceService(db).create_invoice(data, tenant.id)

        assert result["warnings"] == [low_stock_warning("A", 2), low_stock_warning("B", 3)]


# ===== SERVICIO =====

class TestInvoiceService:

    def test_insufficient_stock_error_details(self, db, tenant):
        product = create_product(db, tenant, name="Huevos", stock=2)
        data = InvoiceCreate(number="S-1", items=[{"product_id": product.id, "quantity": 3}])

        with pytest.raises(InsufficientStockError) as exc:
            InvoiceService(db).create_invoice(data, tenant.id)

        assert exc.value.product_name == "Huevos"
        assert exc.value.available == 2
        assert exc.value.requested == 3
        assert stock_of(db, product) == 2

    def test_duplicate_number_raises_conflict(self, db, tenant):
        product = create_product(db, tenant, stock=5)
        service = InvoiceService(db)
        service.create_invoice(InvoiceCreate(number="S-2", items=[{"product_id": product.id, "quantity": 1}]), tenant.id)

        with pytest.raises(ConflictError):
            service.create_invoice(InvoiceCreate(number="S-2", items=[{"product_id": product.id, "quantity": 1}]), tenant.id)

        assert stock_of(db, product) == 4

    def test_foreign_product_is_not_found(self, db, tenant, other_tenant):
        foreign = create_product(db, other_tenant, stock=5)
        data = InvoiceCreate(number="S-3", items=[{"product_id": foreign.id, "quantity": 1}])

        with pytest.raises(NotFoundError):
            InvoiceService(db).create_invoice(data, tenant.id)

        assert stock_of(db, foreign) == 5

    def test_issue_date_defaults_to_now(self, db, tenant):
        product = create_product(db, tenant, stock=5)
        result = InvoiceService(db).create_invoice(
            InvoiceCreate(number="S-4", items=[{"product_id": product.id, "quantity": 1}]), tenant.id
        )
        assert result["invoice"].issue_date is not None
        assert result["invoice"].status == InvoiceStatus.DRAFT


# ===== VENTAS CONCURRENTES =====

@pytest.fixture
def file_engine(tmp_path):
    """Base SQLite en archivo: cada sesión usa su propia conexión"""
    engine = build_engine(settings, url=f"sqlite:///{tmp_path / 'pos.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def file_sessions(file_engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=file_engine)


@pytest.fixture
def last_unit(file_sessions):
    with file_sessions() as session:
        shop = create_tenant(session, name="Tienda Archivo")
        product = create_product(session, shop, name="Última", stock=1)
        return shop.id, product.id


def sell_last_unit(file_sessions, tenant_id, product_id, number):
    with file_sessions() as session:
        data = InvoiceCreate(number=number, items=[{"product_id": product_id, "quantity": 1}])
        return InvoiceService(session).create_invoice(data, tenant_id)


class TestConcurrentSales:

    def test_two_requests_compete_for_last_unit(self, file_sessions, last_unit):
        tenant_id, product_id = last_unit
        with file_sessions() as session:
            seller = create_user(session, session.get(Tenant, tenant_id), "vendedor@archivo.com")

        def override_get_db():
            session = file_sessions()
            try:
                yield session
            finally:
                session.close()

        app.dependency_overrides[get_db] = override_get_db
        payload = {"items": [{"productId": str(product_id), "quantity": 1}]}
        with TestClient(app) as api:
            first = api.post("/invoices/", json={**payload, "number": "C-1"}, headers=auth_headers(seller))
            second = api.post("/invoices/", json={**payload, "number": "C-2"}, headers=auth_headers(seller))
        app.dependency_overrides.clear()

        assert first.status_code == 201
        assert second.status_code == 400
        assert "Stock insuficiente" in second.json()["detail"]
        with file_sessions() as session:
            assert session.get(Product, product_id).stock == 0
            assert session.query(Invoice).count() == 1

    def test_stale_session_cannot_oversell(self, file_sessions, last_unit):
        tenant_id, product_id = last_unit
        stale = file_sessions()
        assert stale.get(Product, product_id).stock == 1

        sell_last_unit(file_sessions, tenant_id, product_id, "C-1")

        data = InvoiceCreate(number="C-2", items=[{"product_id": product_id, "quantity": 1}])
        with pytest.raises(InsufficientStockError) as exc:
            InvoiceService(stale).create_invoice(data, tenant_id)
        stale.close()

        assert exc.value.available == 0
        with file_sessions() as session:
            assert session.get(Product, product_id).stock == 0

    def test_guarded_update_matches_no_row(self, file_engine, file_sessions, last_unit):
        tenant_id, product_id = last_unit
        fired = []

        # Otra conexión vende la última unidad entre la lectura y el UPDATE
        @event.listens_for(file_engine, "before_cursor_execute")
        def sell_elsewhere(conn, cursor, statement, parameters, context, executemany):
            if fired or not statement.lstrip().upper().startswith("UPDATE PRODUCTS"):
                return
            fired.append(statement)
            with file_engine.begin() as other:
                other.execute(update(Product).where(Product.id == product_id).values(stock=0))

        with pytest.raises(InsufficientStockError) as exc:
            sell_last_unit(file_sessions, tenant_id, product_id, "C-1")
        event.remove(file_engine, "before_cursor_execute", sell_elsewhere)

        assert fired
        assert exc.value.available == 1
        with file_sessions() as session:
            assert session.get(Product, product_id).stock == 0
            assert session.query(Invoice).count() == 0


# ===== CONSULTA, EDICIÓN Y BORRADO =====

class TestInvoiceManagement:

    def _create(self, client, db, tenant, headers, number="F-200", stock=10):
        product = create_product(db, tenant, stock=stock)
        response = client.post("/invoices/", json=invoice_payload(number, (product, 2)), headers=headers)
        return product, response.json()["invoice"]

    def test_list_newest_first(self, client, db, tenant, admin_headers):
        self._create(client, db, tenant, admin_headers, "F-201")
        self._create(client, db, tenant, admin_headers, "F-202")

        response = client.get("/invoices/", headers=admin_headers)

        assert response.status_code == 200
        assert [inv["number"] for inv in response.json()] == ["F-202", "F-201"]

    def test_other_tenant_cannot_see_invoice(self, client, db, tenant, admin_headers, other_admin):
        _, invoice = self._create(client, db, tenant, admin_headers)
        foreign_headers = auth_headers(other_admin)

        assert client.get(f"/invoices/{invoice['id']}", headers=foreign_headers).status_code == 404
        assert client.get("/invoices/", headers=foreign_headers).json() == []
        assert client.delete(f"/invoices/{invoice['id']}", headers=foreign_headers).status_code == 404

    def test_update_header_requires_admin(self, client, db, tenant, admin_headers, cashier_headers):
        _, invoice = self._create(client, db, tenant, admin_headers)

        forbidden = client.put(f"/invoices/{invoice['id']}", json={"status": "PAID"}, headers=cashier_headers)
        assert forbidden.status_code == 403

        response = client.put(
            f"/invoices/{invoice['id']}",
            json={"status": "PAID", "totalPaid": 200, "notes": "Pagada en efectivo"},
            headers=admin_headers
        )
        assert response.status_code == 200
        updated = response.json()
        assert updated["status"] == "PAID"
        assert updated["totalPaid"] == 200.0
        assert updated["notes"] == "Pagada en efectivo"
        assert updated["total"] == invoice["total"]

    def test_delete_keeps_stock(self, client, db, tenant, admin_headers, cashier_headers):
        product, invoice = self._create(client, db, tenant, admin_headers)

        assert client.delete(f"/invoices/{invoice['id']}", headers=cashier_headers).status_code == 403

        response = client.delete(f"/invoices/{invoice['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert client.get(f"/invoices/{invoice['id']}", headers=admin_headers).status_code == 404
        assert db.query(InvoiceItem).count() == 0
        assert stock_of(db, product) == 8
