"""
Tests para el módulo de autenticación

- Política de roles (is_role_allowed) probada de forma aislada
- Registro de empresa + administrador, login y /auth/me
- Rechazo de tokens inválidos, de otro tenant o sin permisos
"""

import pytest
from datetime import timedelta

from app.modules.auth.dependencies import is_role_allowed
from app.modules.auth.models import Tenant, UserRole
from app.modules.auth.utils import create_access_token, decode_access_token, hash_password, verify_password
from conftest import TEST_PASSWORD


# ===== POLÍTICA DE ROLES =====

class TestRolePolicy:

    def test_empty_requirement_allows_any_authenticated_role(self):
        assert is_role_allowed([], UserRole.ADMIN)
        assert is_role_allowed([], UserRole.CASHIER)

    def test_empty_requirement_rejects_missing_role(self):
        assert not is_role_allowed([], None)

    def test_admin_only(self):
        assert is_role_allowed([UserRole.ADMIN], UserRole.ADMIN)
        assert not is_role_allowed([UserRole.ADMIN], UserRole.CASHIER)

    def test_accepts_role_names_as_strings(self):
        assert is_role_allowed(["admin"], UserRole.ADMIN)
        assert is_role_allowed([UserRole.CASHIER, UserRole.ADMIN], "CASHIER")
        assert not is_role_allowed(["ADMIN"], "CASHIER")


# ===== UTILIDADES =====

class TestAuthUtils:

    def test_password_hashing(self):
        hashed = hash_password("clave-segura")
        assert hashed != "clave-segura"
        assert verify_password("clave-segura", hashed)
        assert not verify_password("otra", hashed)
        assert not verify_password("clave-segura", "")

    def test_token_carries_identity(self, admin):
        payload = decode_access_token(create_access_token(admin.id, admin.tenant_id, "ADMIN"))
        assert payload["sub"] == str(admin.id)
        assert payload["tenant_id"] == str(admin.tenant_id)
        assert payload["role"] == "ADMIN"
        assert payload["type"] == "access"


# ===== ENDPOINTS =====

class TestAuthEndpoints:

    def test_register_creates_tenant_and_admin(self, client, db):
        response = client.post("/auth/register", json={
            "email": "Dueno@Negocio.com",
            "password": "secreto123",
            "fullName": "Dueño Negocio",
            "tenantName": "Mi Negocio"
        })

        assert response.status_code == 201
        body = response.json()
        assert body["token"]
        assert body["user"]["email"] == "dueno@negocio.com"
        assert body["user"]["role"] == "ADMIN"

        tenant = db.query(Tenant).filter(Tenant.name == "Mi Negocio").one()
        assert str(tenant.id) == body["user"]["tenantId"]
        assert tenant.slug.startswith("mi-negocio-")

    def test_register_duplicate_email(self, client, admin):
        response = client.post("/auth/register", json={
            "email": admin.email,
            "password": "secreto123",
            "fullName": "Otro Usuario"
        })
        assert response.status_code == 400
        assert "email" in response.json()["detail"]

    def test_register_rejects_short_password(self, client):
        response = client.post("/auth/register", json={
            "email": "nuevo@negocio.com",
            "password": "123",
            "fullName": "Nuevo"
        })
        assert response.status_code == 400

    def test_login_and_me(self, client, cashier):
        response = client.post("/auth/login", json={"email": cashier.email, "password": TEST_PASSWORD})
        assert response.status_code == 200
        token = response.json()["token"]

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["id"] == str(cashier.id)
        assert me.json()["role"] == "CASHIER"

    def test_login_wrong_password(self, client, admin):
        response = client.post("/auth/login", json={"email": admin.email, "password": "incorrecta"})
        assert response.status_code == 401

    def test_login_inactive_user(self, client, db, admin):
        admin.is_active = False
        db.commit()
        response = client.post("/auth/login", json={"email": admin.email, "password": TEST_PASSWORD})
        assert response.status_code == 403


class TestAuthGuards:

    def test_missing_token(self, client):
        assert client.get("/auth/me").status_code == 401

    def test_garbage_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer no-es-un-jwt"})
        assert response.status_code == 401

    def test_expired_token(self, client, admin):
        token = create_access_token(admin.id, admin.tenant_id, "ADMIN", expires_delta=timedelta(minutes=-1))
        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_with_foreign_tenant_is_rejected(self, client, admin, other_tenant):
        token = create_access_token(admin.id, other_tenant.id, "ADMIN")
        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_role_is_read_from_database(self, client, cashier):
        # Un token que dice ADMIN no eleva a un cajero
        token = create_access_token(cashier.id, cashier.tenant_id, "ADMIN")
        response = client.get("/reports/dashboard", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 403

    @pytest.mark.parametrize("path", [
        "/reports/dashboard",
        "/reports/revenue-by-month",
        "/reports/daily-weekly-revenue",
        "/reports/top-selling-products",
        "/reports/last-shift-closeout",
    ])
    def test_cashier_cannot_read_admin_reports(self, client, cashier_headers, path):
        response = client.get(path, headers=cashier_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "No tienes permisos para acceder a este recurso"

    def test_cashier_can_use_any_role_endpoints(self, client, cashier_headers):
        assert client.get("/products/", headers=cashier_headers).status_code == 200
        assert client.get("/invoices/", headers=cashier_headers).status_code == 200
