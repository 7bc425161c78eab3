"""
Tests para el módulo de clientes

- Crear, consultar, actualizar y eliminar clientes
- Documento único por tenant
- Validación del dígito de verificación del NIT y de la cédula
"""

import pytest

from app.modules.clients.models import Client, DocumentType
from app.modules.clients.service import DUPLICATE_DOCUMENT_MESSAGE
from conftest import auth_headers, create_product


# ===== FIXTURES =====

@pytest.fixture
def client_data():
    return {
        "businessName": "Distribuidora La Esquina SAS",
        "documentType": "NIT",
        "identification": "900.123.456",
        "nit": "900123456",
        "dv": "8",
        "email": "compras@laesquina.com",
        "phone": "3001234567",
        "hasCredit": True,
        "creditLimit": 500000
    }


@pytest.fixture
def existing_client(db, tenant):
    customer = Client(
        tenant_id=tenant.id,
        business_name="Juan Pérez",
        document_type=DocumentType.CC,
        identification="1020304050"
    )
    db.add(customer)
    db.commit()
    return customer


# ===== TESTS =====

class TestCreateClient:

    def test_create_with_valid_nit(self, client, admin_headers, client_data):
        response = client.post("/clients/", json=client_data, headers=admin_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["businessName"] == "Distribuidora La Esquina SAS"
        assert body["identification"] == "900123456"
        assert body["documentType"] == "NIT"
        assert body["creditLimit"] == 500000.0
        assert body["currentDebt"] == 0.0

    def test_invalid_dv(self, client, admin_headers, client_data):
        response = client.post("/clients/", json={**client_data, "dv": "3"}, headers=admin_headers)
        assert response.status_code == 400

    @pytest.mark.parametrize("identification", ["12345", "0123456789", "12345678901"])
    def test_invalid_cedula(self, client, admin_headers, identification):
        response = client.post("/clients/", json={
            "businessName": "Cliente Cédula",
            "documentType": "CC",
            "identification": identification
        }, headers=admin_headers)
        assert response.status_code == 400

    def test_short_document_is_valid_for_passport(self, client, admin_headers):
        response = client.post("/clients/", json={
            "businessName": "Turista",
            "documentType": "PASSPORT",
            "identification": "12345"
        }, headers=admin_headers)
        assert response.status_code == 201

    def test_minimal_client(self, client, admin_headers):
        response = client.post("/clients/", json={"businessName": "Consumidor Final"}, headers=admin_headers)
        assert response.status_code == 201
        assert response.json()["documentType"] is None

    def test_duplicate_document(self, client, admin_headers, existing_client):
        response = client.post("/clients/", json={
            "businessName": "Otro Nombre",
            "documentType": "CC",
            "identification": "1.020.304.050"
        }, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == DUPLICATE_DOCUMENT_MESSAGE

    def test_same_number_with_other_document_type(self, client, admin_headers, existing_client):
        response = client.post("/clients/", json={
            "businessName": "Juan Pérez",
            "documentType": "PASSPORT",
            "identification": "1020304050"
        }, headers=admin_headers)
        assert response.status_code == 201

    def test_same_document_in_other_tenant(self, client, existing_client, other_admin):
        response = client.post("/clients/", json={
            "businessName": "Juan Pérez",
            "documentType": "CC",
            "identification": "1020304050"
        }, headers=auth_headers(other_admin))
        assert response.status_code == 201

    def test_cashier_cannot_create(self, client, cashier_headers, client_data):
        assert client.post("/clients/", json=client_data, headers=cashier_headers).status_code == 403


class TestReadClients:

    def test_search(self, client, admin_headers, cashier_headers, client_data, existing_client):
        client.post("/clients/", json=client_data, headers=admin_headers)

        by_name = client.get("/clients/", params={"search": "esquina"}, headers=cashier_headers).json()
        assert by_name["total"] == 1

        by_document = client.get("/clients/", params={"search": "102030"}, headers=cashier_headers).json()
        assert [c["businessName"] for c in by_document["clients"]] == ["Juan Pérez"]

        everything = client.get("/clients/", headers=cashier_headers).json()
        assert everything["total"] == 2

    def test_get_by_id(self, client, cashier_headers, existing_client):
        response = client.get(f"/clients/{existing_client.id}", headers=cashier_headers)
        assert response.status_code == 200
        assert response.json()["identification"] == "1020304050"

    def test_other_tenant_is_not_found(self, client, existing_client, other_admin):
        response = client.get(f"/clients/{existing_client.id}", headers=auth_headers(other_admin))
        assert response.status_code == 404
        assert response.json()["detail"] == "Cliente no encontrado"


class TestUpdateDeleteClient:

    def test_update(self, client, admin_headers, existing_client):
        response = client.put(
            f"/clients/{existing_client.id}",
            json={"phone": "3109876543", "hasCredit": True, "creditLimit": 100000},
            headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["phone"] == "3109876543"
        assert response.json()["hasCredit"] is True
        assert response.json()["businessName"] == "Juan Pérez"

    def test_update_to_taken_document(self, client, admin_headers, client_data, existing_client):
        created = client.post("/clients/", json=client_data, headers=admin_headers).json()

        response = client.put(
            f"/clients/{created['id']}",
            json={"documentType": "CC", "identification": "1020304050"},
            headers=admin_headers
        )
        assert response.status_code == 400

    def test_update_with_invalid_cedula(self, client, admin_headers, existing_client):
        response = client.put(
            f"/clients/{existing_client.id}",
            json={"documentType": "CC", "identification": "0123"},
            headers=admin_headers
        )
        assert response.status_code == 400

    def test_cashier_cannot_update(self, client, cashier_headers, existing_client):
        response = client.put(f"/clients/{existing_client.id}", json={"phone": "1"}, headers=cashier_headers)
        assert response.status_code == 403

    def test_delete_keeps_invoices(self, client, db, tenant, admin_headers, existing_client):
        product = create_product(db, tenant, stock=5)
        sale = client.post("/invoices/", json={
            "number": "C-1",
            "clientId": str(existing_client.id),
            "items": [{"productId": str(product.id), "quantity": 1}]
        }, headers=admin_headers).json()["invoice"]

        response = client.delete(f"/clients/{existing_client.id}", headers=admin_headers)

        assert response.status_code == 200
        invoice = client.get(f"/invoices/{sale['id']}", headers=admin_headers).json()
        assert invoice["clientId"] is None
        assert invoice["client"] is None
