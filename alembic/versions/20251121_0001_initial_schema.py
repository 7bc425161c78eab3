"""initial schema: tenants, users, clients, products, invoices, cash registers

Revision ID: 0001_initial
Revises:
Create Date: 2025-11-21 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("is_synced", sa.Boolean(), server_default=sa.false(), nullable=False),
    ]


def _sync_indexes(table: str):
    op.create_index(f"ix_{table}_updated_at", table, ["updated_at"])
    op.create_index(f"ix_{table}_is_synced", table, ["is_synced"])


def _tenant_fk():
    return sa.Column("tenant_id", sa.Uuid(), sa.ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)


def upgrade():
    op.create_table(
        "tenants",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(120), nullable=False, unique=True),
        sa.Column("email", sa.String(200), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        *_timestamps(),
    )
    _sync_indexes("tenants")

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _tenant_fk(),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(200), nullable=False, unique=True),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("role", sa.Enum("ADMIN", "CASHIER", name="user_role"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_tenant_id", "users", ["tenant_id"])
    _sync_indexes("users")

    op.create_table(
        "clients",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _tenant_fk(),
        sa.Column("business_name", sa.String(200), nullable=False),
        sa.Column("document_type", sa.Enum("CC", "NIT", "PASSPORT", name="document_type"), nullable=True),
        sa.Column("identification", sa.String(50), nullable=True),
        sa.Column("nit", sa.String(20), nullable=True),
        sa.Column("dv", sa.String(1), nullable=True),
        sa.Column("email", sa.String(100), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("has_credit", sa.Boolean(), nullable=False),
        sa.Column("credit_limit", sa.Numeric(18, 2), nullable=False),
        sa.Column("current_debt", sa.Numeric(18, 2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "document_type", "identification", name="uq_client_tenant_document"),
    )
    op.create_index("ix_clients_tenant_id", "clients", ["tenant_id"])
    op.create_index("ix_clients_business_name", "clients", ["business_name"])
    op.create_index("ix_clients_identification", "clients", ["identification"])
    _sync_indexes("clients")

    op.create_table(
        "products",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _tenant_fk(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("sku", sa.String(50), nullable=True, unique=True),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("price", sa.Numeric(18, 2), nullable=False),
        sa.Column("cost", sa.Numeric(18, 2), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
    )
    op.create_index("ix_products_tenant_id", "products", ["tenant_id"])
    _sync_indexes("products")

    op.create_table(
        "invoices",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _tenant_fk(),
        sa.Column("client_id", sa.Uuid(), sa.ForeignKey("clients.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_by_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("number", sa.String(50), nullable=False),
        sa.Column("status", sa.Enum("DRAFT", "ISSUED", "PAID", "CANCELLED", name="invoice_status"), nullable=False),
        sa.Column("payment_method", sa.Enum("CASH", "CREDIT", "TRANSFER", name="payment_method"), nullable=False),
        sa.Column("issue_date", sa.DateTime(), nullable=False),
        sa.Column("due_date", sa.DateTime(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("is_credit_sale", sa.Boolean(), nullable=False),
        sa.Column("subtotal", sa.Numeric(18, 2), nullable=False),
        sa.Column("tax_total", sa.Numeric(18, 2), nullable=False),
        sa.Column("total", sa.Numeric(18, 2), nullable=False),
        sa.Column("total_paid", sa.Numeric(18, 2), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "number", name="uq_invoice_tenant_number"),
    )
    op.create_index("ix_invoices_tenant_id", "invoices", ["tenant_id"])
    op.create_index("ix_invoices_client_id", "invoices", ["client_id"])
    op.create_index("ix_invoices_status", "invoices", ["status"])
    op.create_index("ix_invoices_issue_date", "invoices", ["issue_date"])
    _sync_indexes("invoices")

    op.create_table(
        "invoice_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("invoice_id", sa.Uuid(), sa.ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_id", sa.Uuid(), sa.ForeignKey("products.id", ondelete="SET NULL"), nullable=True),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(18, 2), nullable=False),
        sa.Column("tax_rate_applied", sa.Numeric(5, 2), nullable=False),
        sa.Column("tax_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(18, 2), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_invoice_items_invoice_id", "invoice_items", ["invoice_id"])
    op.create_index("ix_invoice_items_product_id", "invoice_items", ["product_id"])
    _sync_indexes("invoice_items")

    op.create_table(
        "cash_registers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        _tenant_fk(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("current_balance", sa.Numeric(18, 2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_cash_registers_tenant_id", "cash_registers", ["tenant_id"])
    _sync_indexes("cash_registers")

    op.create_table(
        "shift_closeouts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _tenant_fk(),
        sa.Column("cash_register_id", sa.Integer(), sa.ForeignKey("cash_registers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("closing_time", sa.DateTime(), nullable=False),
        sa.Column("starting_balance", sa.Numeric(18, 2), nullable=False),
        sa.Column("final_balance", sa.Numeric(18, 2), nullable=False),
        sa.Column("sales_total", sa.Numeric(18, 2), nullable=False),
        sa.Column("closed_by_user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_shift_closeouts_tenant_id", "shift_closeouts", ["tenant_id"])
    op.create_index("ix_shift_closeouts_cash_register_id", "shift_closeouts", ["cash_register_id"])
    op.create_index("ix_shift_closeouts_closing_time", "shift_closeouts", ["closing_time"])
    _sync_indexes("shift_closeouts")


def downgrade():
    for table in ("shift_closeouts", "cash_registers", "invoice_items", "invoices",
                  "products", "clients", "users", "tenants"):
        op.drop_table(table)

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for enum_name in ("payment_method", "invoice_status", "document_type", "user_role"):
            sa.Enum(name=enum_name).drop(bind, checkfirst=True)
