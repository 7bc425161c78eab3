"""
Tests para el módulo de reportes

- Resumen del dashboard
- Ingresos por mes, día y semana en la zona horaria del negocio
- Productos más vendidos
- Valores por defecto cuando faltan tablas
"""

import pytest
from datetime import date, datetime
from decimal import Decimal

from app.common.time_utils import utcnow
from app.modules.clients.models import Client
from app.modules.invoices.models import Invoice, InvoiceItem, InvoiceStatus
from app.modules.invoices.schemas import InvoiceCreate
from app.modules.invoices.service import InvoiceService
from app.modules.reports.services import DashboardReportService, RevenueReportService
from app.modules.reports.services.revenue import month_label, one_year_before, week_label
from conftest import auth_headers, create_product

# Miércoles 12 de marzo de 2025, 10:00 en Bogotá
NOW = datetime(2025, 3, 12, 15, 0)


# ===== HELPERS =====

def add_invoice(db, tenant, number, total, issue_date, status=InvoiceStatus.ISSUED):
    invoice = Invoice(
        tenant_id=tenant.id,
        number=number,
        status=status,
        issue_date=issue_date,
        subtotal=Decimal(str(total)),
        tax_total=Decimal("0"),
        total=Decimal(str(total)),
        total_paid=Decimal("0")
    )
    db.add(invoice)
    db.commit()
    return invoice


def sell(db, tenant, number, *lines, status=InvoiceStatus.PAID):
    data = InvoiceCreate(
        number=number,
        status=status,
        items=[{"product_id": product.id, "quantity": quantity} for product, quantity in lines]
    )
    return InvoiceService(db).create_invoice(data, tenant.id)["invoice"]


# ===== HELPERS DE FECHAS =====

class TestLabels:

    def test_month_label(self):
        assert month_label(2025, 3) == "marzo de 2025"
        assert month_label(2024, 12) == "diciembre de 2024"

    def test_week_label(self):
        assert week_label(date(2025, 3, 10)) == "Sem 10/3"

    def test_one_year_before_leap_day(self):
        assert one_year_before(date(2024, 2, 29)) == date(2023, 2, 28)
        assert one_year_before(date(2025, 3, 12)) == date(2024, 3, 12)


# ===== DASHBOARD =====

class TestDashboardSummary:

    def test_empty_tenant(self, client, admin_headers):
        response = client.get("/reports/dashboard", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {
            "totalClients": 0,
            "totalProducts": 0,
            "inventoryValue": 0.0,
            "lowStockProducts": 0,
            "totalInvoices": 0
        }

    def test_summary_values(self, client, db, tenant, other_tenant, admin_headers):
        db.add(Client(tenant_id=tenant.id, business_name="Cliente"))
        db.add(Client(tenant_id=other_tenant.id, business_name="Ajeno"))
        db.commit()
        create_product(db, tenant, name="A", stock=10, cost="60")
        create_product(db, tenant, name="B", stock=3, cost="100")
        inactive = create_product(db, tenant, name="C", stock=1, cost="1000")
        inactive.is_active = False
        db.commit()
        create_product(db, other_tenant, name="D", stock=100, cost="5")
        add_invoice(db, tenant, "D-1", 100, NOW)
        add_invoice(db, tenant, "D-2", 100, NOW, status=InvoiceStatus.DRAFT)

        body = client.get("/reports/dashboard", headers=admin_headers).json()

        assert body["totalClients"] == 1
        assert body["totalProducts"] == 2
        assert body["inventoryValue"] == 900.0
        assert body["lowStockProducts"] == 1
        assert body["totalInvoices"] == 2

    def test_defaults_when_tables_are_missing(self, db, db_engine, tenant):
        InvoiceItem.__table__.drop(db_engine)
        Invoice.__table__.drop(db_engine)

        summary = DashboardReportService(db, tenant.id).get_dashboard_summary()

        assert summary == DashboardReportService._empty_summary()


# ===== INGRESOS =====

class TestRevenueByMonth:

    def test_groups_by_local_month(self, db, tenant):
        add_invoice(db, tenant, "M-1", 100, datetime(2024, 3, 1, 12, 0))       # fuera de los 12 meses
        add_invoice(db, tenant, "M-2", 250, datetime(2024, 12, 15, 12, 0))
        add_invoice(db, tenant, "M-3", 40, datetime(2025, 3, 1, 3, 0))         # 28 feb en Bogotá
        add_invoice(db, tenant, "M-4", 300, datetime(2025, 3, 10, 12, 0))
        add_invoice(db, tenant, "M-5", 50, datetime(2025, 3, 11, 12, 0), status=InvoiceStatus.PAID)
        add_invoice(db, tenant, "M-6", 999, datetime(2025, 3, 11, 12, 0), status=InvoiceStatus.DRAFT)
        add_invoice(db, tenant, "M-7", 999, datetime(2025, 3, 11, 12, 0), status=InvoiceStatus.CANCELLED)

        result = RevenueReportService(db, tenant.id).get_revenue_by_month(now=NOW)

        assert result == [
            {"month": "diciembre de 2024", "revenue": Decimal("250")},
            {"month": "febrero de 2025", "revenue": Decimal("40")},
            {"month": "marzo de 2025", "revenue": Decimal("350")},
        ]

    def test_other_tenant_is_excluded(self, db, tenant, other_tenant):
        add_invoice(db, other_tenant, "M-1", 100, NOW)
        assert RevenueReportService(db, tenant.id).get_revenue_by_month(now=NOW) == []

    def test_endpoint(self, client, db, tenant, admin_headers):
        add_invoice(db, tenant, "M-1", 120, utcnow())

        response = client.get("/reports/revenue-by-month", headers=admin_headers)

        assert response.status_code == 200
        assert len(response.json()) == 1
        assert response.json()[0]["revenue"] == 120.0


class TestDailyAndWeeklyRevenue:

    def test_shape_without_sales(self, db, tenant):
        result = RevenueReportService(db, tenant.id).get_daily_and_weekly_revenue(now=NOW)

        assert [d["date"] for d in result["daily"]] == [
            "2025-03-06", "2025-03-07", "2025-03-08", "2025-03-09",
            "2025-03-10", "2025-03-11", "2025-03-12"
        ]
        assert [d["day"] for d in result["daily"]] == ["jue", "vie", "sáb", "dom", "lun", "mar", "mié"]
        assert [w["week"] for w in result["weekly"]] == ["Sem 17/2", "Sem 24/2", "Sem 3/3", "Sem 10/3"]
        assert all(d["revenue"] == 0 for d in result["daily"])
        assert all(w["revenue"] == 0 for w in result["weekly"])

    def test_buckets_use_business_timezone(self, db, tenant):
        add_invoice(db, tenant, "D-1", 100, datetime(2025, 3, 12, 3, 0))    # 11 mar 22:00 local
        add_invoice(db, tenant, "D-2", 50, datetime(2025, 3, 12, 12, 0))
        add_invoice(db, tenant, "D-3", 200, datetime(2025, 3, 3, 14, 0))
        add_invoice(db, tenant, "D-4", 75, datetime(2025, 2, 17, 5, 30))     # lunes 17 feb 00:30 local
        add_invoice(db, tenant, "D-5", 500, datetime(2025, 2, 17, 4, 0))     # domingo 16 feb local
        add_invoice(db, tenant, "D-6", 999, datetime(2025, 3, 12, 12, 0), status=InvoiceStatus.DRAFT)

        result = RevenueReportService(db, tenant.id).get_daily_and_weekly_revenue(now=NOW)

        daily = {d["date"]: d["revenue"] for d in result["daily"]}
        assert daily["2025-03-11"] == Decimal("100")
        assert daily["2025-03-12"] == Decimal("50")
        assert sum(daily.values()) == Decimal("150")

        weekly = {w["week"]: w["revenue"] for w in result["weekly"]}
        assert weekly == {
            "Sem 17/2": Decimal("75"),
            "Sem 24/2": Decimal("0"),
            "Sem 3/3": Decimal("200"),
            "Sem 10/3": Decimal("150"),
        }

    def test_endpoint_shape(self, client, admin_headers):
        response = client.get("/reports/daily-weekly-revenue", headers=admin_headers)

        assert response.status_code == 200
        assert len(response.json()["daily"]) == 7
        assert len(response.json()["weekly"]) == 4

    def test_defaults_when_tables_are_missing(self, client, db_engine, admin_headers):
        InvoiceItem.__table__.drop(db_engine)
        Invoice.__table__.drop(db_engine)

        assert client.get("/reports/daily-weekly-revenue", headers=admin_headers).json() == {"daily": [], "weekly": []}
        assert client.get("/reports/revenue-by-month", headers=admin_headers).json() == []


# ===== MÁS VENDIDOS =====

class TestTopSellingProducts:

    def test_ranking(self, client, db, tenant, other_tenant, admin_headers):
        cheap = create_product(db, tenant, name="Chicle", stock=50, price="100")
        pricey = create_product(db, tenant, name="Vino", stock=50, price="40000")
        single = create_product(db, tenant, name="Pan", stock=50, price="500")
        foreign = create_product(db, other_tenant, name="Ajeno", stock=50, price="1")

        sell(db, tenant, "V-1", (cheap, 2), (single, 1))
        sell(db, tenant, "V-2", (cheap, 3), (pricey, 5))
        sell(db, tenant, "V-3", (single, 20), status=InvoiceStatus.DRAFT)
        sell(db, other_tenant, "V-1", (foreign, 40))

        response = client.get("/reports/top-selling-products", headers=admin_headers)

        assert response.status_code == 200
        ranking = response.json()
        assert [p["productName"] for p in ranking] == ["Vino", "Chicle", "Pan"]
        assert ranking[0]["totalQuantity"] == 5
        assert ranking[0]["totalRevenue"] == 200000.0
        assert ranking[1]["totalQuantity"] == 5
        assert ranking[1]["totalRevenue"] == 500.0
        assert ranking[2]["productId"] == str(single.id)

    def test_limit(self, db, tenant):
        products = [create_product(db, tenant, name=f"P{i}", stock=50) for i in range(12)]
        sell(db, tenant, "V-1", *[(product, i + 1) for i, product in enumerate(products)])

        ranking = DashboardReportService(db, tenant.id).get_top_selling_products()

        assert len(ranking) == 10
        assert ranking[0]["product_name"] == "P11"
        assert ranking[0]["total_quantity"] == 12

    def test_empty_when_tables_are_missing(self, db, db_engine, tenant):
        InvoiceItem.__table__.drop(db_engine)
        assert DashboardReportService(db, tenant.id).get_top_selling_products() == []


# ===== PERMISOS =====

class TestReportPermissions:

    @pytest.mark.parametrize("path", [
        "/reports/dashboard",
        "/reports/revenue-by-month",
        "/reports/daily-weekly-revenue",
        "/reports/top-selling-products",
        "/reports/last-shift-closeout",
    ])
    def test_admin_only(self, client, cashier_headers, admin_headers, path):
        assert client.get(path, headers=cashier_headers).status_code == 403
        assert client.get(path, headers=admin_headers).status_code == 200

    def test_reports_are_tenant_scoped(self, client, db, tenant, other_admin):
        add_invoice(db, tenant, "R-1", 100, utcnow())
        body = client.get("/reports/dashboard", headers=auth_headers(other_admin)).json()
        assert body["totalInvoices"] == 0
