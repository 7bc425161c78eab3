"""
Tests para el cierre de turno de caja

- La caja se crea la primera vez que se cierra un turno
- El saldo inicial se encadena con el saldo final del cierre anterior
- Las ventas del turno son las facturas ISSUED/PAID entre el cierre anterior y el actual
- Sin tablas de cierre el endpoint responde 503 y la consulta retorna null
"""

import pytest
from datetime import timedelta
from decimal import Decimal

from app.common.exceptions import NotFoundError, SchemaNotReadyError
from app.common.time_utils import utcnow
from app.modules.cash_registers.models import CashRegister, ShiftCloseout
from app.modules.cash_registers.service import CashRegisterService
from app.modules.invoices.models import Invoice
from conftest import auth_headers, create_product


# ===== HELPERS =====

def sell(client, db, tenant, headers, number, price, status="ISSUED"):
    product = create_product(db, tenant, name=f"Producto {number}", stock=10, price=str(price))
    response = client.post("/invoices/", json={
        "number": number,
        "status": status,
        "items": [{"productId": str(product.id), "quantity": 1}]
    }, headers=headers)
    assert response.status_code == 201
    return response.json()["invoice"]


def close_shift(client, headers, cash_register_id=1, final_balance=0, **extra):
    payload = {"cashRegisterId": cash_register_id, "finalBalance": final_balance}
    payload.update(extra)
    return client.post("/reports/close-shift", json=payload, headers=headers)


# ===== CIERRE DE TURNO =====

class TestCloseShift:

    def test_first_closeout_creates_register(self, client, db, tenant, cashier, cashier_headers):
        response = close_shift(client, cashier_headers, cash_register_id=3, final_balance=150000)

        assert response.status_code == 200
        body = response.json()
        assert body["startingBalance"] == 0.0
        assert body["finalBalance"] == 150000.0
        assert body["salesTotal"] == 0.0
        assert body["closingTime"]

        register = db.get(CashRegister, 3)
        assert register.name == "Caja 3"
        assert register.tenant_id == tenant.id

        closeout = db.query(ShiftCloseout).one()
        assert closeout.closed_by_user_id == cashier.id

    def test_starting_balance_chains_from_previous(self, client, cashier_headers):
        first = close_shift(client, cashier_headers, final_balance=500).json()
        second = close_shift(client, cashier_headers, final_balance=800).json()

        assert first["startingBalance"] == 0.0
        assert second["startingBalance"] == 500.0
        assert second["finalBalance"] == 800.0

    def test_explicit_starting_balance(self, client, cashier_headers):
        close_shift(client, cashier_headers, final_balance=500)
        response = close_shift(client, cashier_headers, final_balance=900, startingBalance=100)
        assert response.json()["startingBalance"] == 100.0

    def test_chain_is_per_register(self, client, cashier_headers):
        close_shift(client, cashier_headers, cash_register_id=1, final_balance=500)
        other = close_shift(client, cashier_headers, cash_register_id=2, final_balance=50).json()
        assert other["startingBalance"] == 0.0

    def test_sales_since_previous_closeout(self, client, db, tenant, admin_headers, cashier_headers):
        sell(client, db, tenant, cashier_headers, "T-1", 200)
        sell(client, db, tenant, cashier_headers, "T-2", 50, status="DRAFT")
        sell(client, db, tenant, cashier_headers, "T-3", 70, status="CANCELLED")

        first = close_shift(client, cashier_headers, final_balance=500).json()
        assert first["salesTotal"] == 200.0

        sell(client, db, tenant, admin_headers, "T-4", 300, status="PAID")
        second = close_shift(client, cashier_headers, final_balance=800).json()

        assert second["salesTotal"] == 300.0
        assert second["startingBalance"] == 500.0

    def test_future_dated_sale_is_counted_once(self, client, db, tenant, cashier_headers):
        product = create_product(db, tenant, name="Encargo", stock=5, price="100")
        tomorrow = (utcnow() + timedelta(days=1)).isoformat()
        response = client.post("/invoices/", json={
            "number": "T-FUT",
            "status": "ISSUED",
            "issueDate": tomorrow,
            "items": [{"productId": str(product.id), "quantity": 1}]
        }, headers=cashier_headers)
        assert response.status_code == 201

        first = close_shift(client, cashier_headers, final_balance=0).json()
        second = close_shift(client, cashier_headers, final_balance=0).json()

        assert first["salesTotal"] == 0.0
        assert second["salesTotal"] == 0.0

        # Cuando la fecha de la factura queda dentro de un turno, se cuenta solo en ese turno
        last = db.query(ShiftCloseout).order_by(ShiftCloseout.id.desc()).first()
        invoice = db.query(Invoice).filter(Invoice.number == "T-FUT").one()
        invoice.issue_date = last.closing_time
        db.commit()

        third = close_shift(client, cashier_headers, final_balance=0).json()
        fourth = close_shift(client, cashier_headers, final_balance=0).json()

        assert third["salesTotal"] == 100.0
        assert fourth["salesTotal"] == 0.0
        totals = [row.sales_total for row in db.query(ShiftCloseout).all()]
        assert sum(totals) == Decimal("100")

    def test_sales_of_other_tenant_are_excluded(self, client, db, tenant, other_tenant, other_admin, cashier_headers):
        sell(client, db, other_tenant, auth_headers(other_admin), "X-1", 999)
        response = close_shift(client, cashier_headers, final_balance=0)
        assert response.json()["salesTotal"] == 0.0

    def test_register_of_other_tenant(self, client, cashier_headers, other_admin):
        close_shift(client, auth_headers(other_admin), cash_register_id=7, final_balance=10)
        response = close_shift(client, cashier_headers, cash_register_id=7, final_balance=10)
        assert response.status_code == 404

    @pytest.mark.parametrize("payload", [
        {"finalBalance": 100},
        {"cashRegisterId": 0, "finalBalance": 100},
        {"cashRegisterId": 1},
    ])
    def test_invalid_request(self, client, cashier_headers, payload):
        response = client.post("/reports/close-shift", json=payload, headers=cashier_headers)
        assert response.status_code == 400

    def test_requires_authentication(self, client):
        assert close_shift(client, {}, final_balance=0).status_code == 401

    def test_missing_tables(self, client, db_engine, cashier_headers):
        ShiftCloseout.__table__.drop(db_engine)

        response = close_shift(client, cashier_headers, final_balance=100)

        assert response.status_code == 503
        assert "migraciones" in response.json()["detail"]


# ===== ÚLTIMO CIERRE =====

class TestLastShiftCloseout:

    def test_none_without_closeouts(self, client, admin_headers):
        response = client.get("/reports/last-shift-closeout", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() is None

    def test_latest_closeout(self, client, cashier, cashier_headers, admin_headers):
        close_shift(client, cashier_headers, cash_register_id=1, final_balance=500)
        close_shift(client, cashier_headers, cash_register_id=2, final_balance=750)

        body = client.get("/reports/last-shift-closeout", headers=admin_headers).json()

        assert body["cashRegisterName"] == "Caja 2"
        assert body["finalBalance"] == 750.0
        assert body["startingBalance"] == 0.0
        assert body["closedBy"] == cashier.full_name

    def test_other_tenant_closeouts_are_hidden(self, client, other_admin, admin_headers):
        close_shift(client, auth_headers(other_admin), final_balance=500)
        assert client.get("/reports/last-shift-closeout", headers=admin_headers).json() is None

    def test_none_when_tables_are_missing(self, client, db_engine, admin_headers):
        ShiftCloseout.__table__.drop(db_engine)
        response = client.get("/reports/last-shift-closeout", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() is None


# ===== SERVICIO =====

class TestCashRegisterService:

    def test_inactive_register_is_reactivated(self, db, tenant, admin):
        register = CashRegister(id=5, tenant_id=tenant.id, name="Caja Principal", current_balance=0, is_active=False)
        db.add(register)
        db.commit()

        result = CashRegisterService(db).close_day_shift(tenant.id, 5, admin.id, Decimal("120.50"))

        db.refresh(register)
        assert register.is_active is True
        assert register.name == "Caja Principal"
        assert result["final_balance"] == Decimal("120.50")

    def test_foreign_register_raises_not_found(self, db, tenant, other_tenant, admin):
        db.add(CashRegister(id=9, tenant_id=other_tenant.id, name="Caja 9", current_balance=0))
        db.commit()

        with pytest.raises(NotFoundError):
            CashRegisterService(db).close_day_shift(tenant.id, 9, admin.id, Decimal("0"))

        assert db.query(ShiftCloseout).count() == 0

    def test_missing_table_raises_schema_not_ready(self, db, db_engine, tenant, admin):
        ShiftCloseout.__table__.drop(db_engine)

        with pytest.raises(SchemaNotReadyError):
            CashRegisterService(db).close_day_shift(tenant.id, 1, admin.id, Decimal("0"))

        assert CashRegisterService(db).get_last_shift_closeout(tenant.id) is None
