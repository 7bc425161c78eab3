"""
Tests para el módulo de productos

- CRUD restringido a administradores
- SKU único
- Listado con búsqueda, filtro de activos y paginación
- Productos con stock bajo
- Aislamiento entre tenants
"""

import pytest

from app.modules.products.models import Product
from conftest import auth_headers, create_product


# ===== FIXTURES =====

@pytest.fixture
def product_data():
    return {
        "name": "Aceite Girasol 1L",
        "sku": "ACE-001",
        "description": "Botella de 1 litro",
        "price": 12500,
        "cost": 9800,
        "stock": 24
    }


# ===== CREACIÓN =====

class TestCreateProduct:

    def test_admin_creates_product(self, client, db, admin_headers, product_data):
        response = client.post("/products/", json=product_data, headers=admin_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "Aceite Girasol 1L"
        assert body["sku"] == "ACE-001"
        assert body["price"] == 12500.0
        assert body["stock"] == 24
        assert body["isActive"] is True
        assert db.query(Product).count() == 1

    def test_cashier_cannot_create(self, client, cashier_headers, product_data):
        response = client.post("/products/", json=product_data, headers=cashier_headers)
        assert response.status_code == 403

    def test_duplicate_sku(self, client, admin_headers, product_data):
        client.post("/products/", json=product_data, headers=admin_headers)

        response = client.post("/products/", json={**product_data, "name": "Otro"}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Ya está en uso un producto con este SKU"

    def test_blank_sku_is_stored_as_null(self, client, admin_headers, product_data):
        first = client.post("/products/", json={**product_data, "sku": "  "}, headers=admin_headers)
        second = client.post("/products/", json={**product_data, "sku": None}, headers=admin_headers)

        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()["sku"] is None

    @pytest.mark.parametrize("override", [
        {"name": ""},
        {"price": -1},
        {"cost": -5},
        {"stock": -1},
    ])
    def test_invalid_data(self, client, admin_headers, product_data, override):
        response = client.post("/products/", json={**product_data, **override}, headers=admin_headers)
        assert response.status_code == 400


# ===== CONSULTA =====

class TestListProducts:

    def test_search_and_active_filter(self, client, db, tenant, cashier_headers):
        create_product(db, tenant, name="Arroz Diana", sku="ARR-1")
        create_product(db, tenant, name="Frijol", sku="FRI-1")
        inactive = create_product(db, tenant, name="Arroz Roa", sku="ARR-2")
        inactive.is_active = False
        db.commit()

        by_name = client.get("/products/", params={"search": "arroz"}, headers=cashier_headers).json()
        assert by_name["total"] == 2

        by_sku = client.get("/products/", params={"search": "FRI"}, headers=cashier_headers).json()
        assert [p["name"] for p in by_sku["products"]] == ["Frijol"]

        active = client.get("/products/", params={"search": "arroz", "activeOnly": True}, headers=cashier_headers).json()
        assert [p["name"] for p in active["products"]] == ["Arroz Diana"]

    def test_pagination(self, client, db, tenant, admin_headers):
        for i in range(5):
            create_product(db, tenant, name=f"Producto {i}")

        page = client.get("/products/", params={"limit": 2, "offset": 2}, headers=admin_headers).json()

        assert page["total"] == 5
        assert page["limit"] == 2
        assert page["offset"] == 2
        assert len(page["products"]) == 2

    def test_low_stock(self, client, db, tenant, admin_headers):
        create_product(db, tenant, name="Lleno", stock=50)
        create_product(db, tenant, name="Límite", stock=5)
        create_product(db, tenant, name="Agotado", stock=0)
        hidden = create_product(db, tenant, name="Inactivo", stock=1)
        hidden.is_active = False
        db.commit()

        response = client.get("/products/low-stock", headers=admin_headers)

        assert response.status_code == 200
        assert [p["name"] for p in response.json()] == ["Agotado", "Límite"]

    def test_get_missing_product(self, client, admin_headers):
        response = client.get("/products/00000000-0000-0000-0000-000000000000", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Producto no encontrado"


# ===== EDICIÓN Y BORRADO =====

class TestUpdateDeleteProduct:

    def test_update_ignores_stock(self, client, db, tenant, admin_headers):
        product = create_product(db, tenant, name="Sal", stock=10, price="1500")

        response = client.put(
            f"/products/{product.id}",
            json={"price": 1800, "stock": 999, "name": "Sal Refisal"},
            headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["price"] == 1800.0
        assert response.json()["name"] == "Sal Refisal"
        assert response.json()["stock"] == 10

    def test_update_to_taken_sku(self, client, db, tenant, admin_headers):
        create_product(db, tenant, name="Uno", sku="SKU-1")
        second = create_product(db, tenant, name="Dos", sku="SKU-2")

        response = client.put(f"/products/{second.id}", json={"sku": "SKU-1"}, headers=admin_headers)
        assert response.status_code == 400

        same = client.put(f"/products/{second.id}", json={"sku": "SKU-2"}, headers=admin_headers)
        assert same.status_code == 200

    def test_cashier_cannot_update_or_delete(self, client, db, tenant, cashier_headers):
        product = create_product(db, tenant)

        assert client.put(f"/products/{product.id}", json={"price": 1}, headers=cashier_headers).status_code == 403
        assert client.delete(f"/products/{product.id}", headers=cashier_headers).status_code == 403

    def test_delete(self, client, db, tenant, admin_headers):
        product = create_product(db, tenant)

        response = client.delete(f"/products/{product.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["id"] == str(product.id)
        assert client.get(f"/products/{product.id}", headers=admin_headers).status_code == 404


# ===== MULTI-TENANT =====

class TestProductIsolation:

    def test_other_tenant_products_are_invisible(self, client, db, tenant, other_tenant, admin_headers, other_admin):
        mine = create_product(db, tenant, name="Mío")
        theirs = create_product(db, other_tenant, name="Ajeno")

        listing = client.get("/products/", headers=admin_headers).json()
        assert [p["name"] for p in listing["products"]] == ["Mío"]

        assert client.get(f"/products/{theirs.id}", headers=admin_headers).status_code == 404
        assert client.put(f"/products/{theirs.id}", json={"price": 1}, headers=admin_headers).status_code == 404
        assert client.delete(f"/products/{theirs.id}", headers=admin_headers).status_code == 404

        foreign = client.get(f"/products/{mine.id}", headers=auth_headers(other_admin))
        assert foreign.status_code == 404
