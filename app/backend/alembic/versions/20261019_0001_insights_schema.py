"""insights schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _id() -> sa.Column:
    return sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True, nullable=False)


def _fk(name: str, target: str, *, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.BigInteger(), sa.ForeignKey(target), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "user_settings",
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id"), primary_key=True, nullable=False),
        sa.Column("main_currency", sa.String(length=10), nullable=False, server_default="EUR"),
    )

    op.create_table(
        "businesses",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "name", name="uq_businesses"),
    )
    op.create_index("idx_businesses_user_active", "businesses", ["user_id", "is_active"])

    op.create_table(
        "accounts",
        _id(),
        _fk("user_id", "users.id"),
        _fk("business_id", "businesses.id", nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False, server_default="EUR"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("include_in_budget", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("idx_accounts_user", "accounts", ["user_id"])
    op.create_index("idx_accounts_business", "accounts", ["business_id"])

    op.create_table(
        "income_sources",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=True),
    )

    op.create_table(
        "categories",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("name", sa.String(length=255), nullable=False),
    )

    op.create_table(
        "transactions",
        _id(),
        _fk("user_id", "users.id"),
        _fk("business_id", "businesses.id", nullable=True),
        _fk("account_id", "accounts.id"),
        _fk("income_source_id", "income_sources.id", nullable=True),
        _fk("category_id", "categories.id", nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("direction", sa.String(length=3), nullable=False),
        sa.Column("type", sa.String(length=30), nullable=True),
        sa.Column("label", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("raw_label", sa.String(length=255), nullable=True),
        sa.CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        sa.CheckConstraint("direction IN ('in', 'out')", name="ck_transactions_direction"),
    )
    op.create_index("idx_transactions_user_date", "transactions", ["user_id", "date"])
    op.create_index("idx_transactions_business_date", "transactions", ["business_id", "date"])

    op.create_table(
        "clients",
        _id(),
        _fk("business_id", "businesses.id"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.UniqueConstraint("business_id", "name", name="uq_clients"),
    )

    op.create_table(
        "services",
        _id(),
        _fk("business_id", "businesses.id"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.UniqueConstraint("business_id", "name", name="uq_services"),
    )

    op.create_table(
        "quotes",
        _id(),
        _fk("business_id", "businesses.id"),
        _fk("client_id", "clients.id", nullable=True),
        sa.Column("quote_number", sa.String(length=50), nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("total_ttc", sa.Numeric(12, 2), nullable=True, server_default="0.00"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("idx_quotes_business_status", "quotes", ["business_id", "status"])

    op.create_table(
        "projects",
        _id(),
        _fk("user_id", "users.id"),
        _fk("business_id", "businesses.id", nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="planned"),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_projects_business_status", "projects", ["business_id", "status"])
    op.create_index("idx_projects_user", "projects", ["user_id"])

    op.create_table(
        "project_tasks",
        _id(),
        _fk("project_id", "projects.id"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="todo"),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("estimated_hours", sa.Numeric(10, 2), nullable=True),
        sa.Column("actual_hours", sa.Numeric(10, 2), nullable=True),
        sa.Column("sort_index", sa.Integer(), nullable=False, server_default="0"),
        sa.CheckConstraint(
            "estimated_hours IS NULL OR estimated_hours >= 0",
            name="ck_project_tasks_estimated_hours_non_negative",
        ),
        sa.CheckConstraint(
            "actual_hours IS NULL OR actual_hours >= 0",
            name="ck_project_tasks_actual_hours_non_negative",
        ),
    )
    op.create_index("idx_project_tasks_project", "project_tasks", ["project_id"])

    op.create_table(
        "invoices",
        _id(),
        _fk("business_id", "businesses.id"),
        _fk("client_id", "clients.id", nullable=True),
        _fk("project_id", "projects.id", nullable=True),
        sa.Column("invoice_number", sa.String(length=50), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        sa.Column("total_ttc", sa.Numeric(12, 2), nullable=False, server_default="0.00"),
    )
    op.create_index("idx_invoices_business_client", "invoices", ["business_id", "client_id"])
    op.create_index("idx_invoices_business_date", "invoices", ["business_id", "invoice_date"])

    op.create_table(
        "invoice_lines",
        _id(),
        _fk("invoice_id", "invoices.id"),
        _fk("service_id", "services.id", nullable=True),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("quantity", sa.Numeric(12, 2), nullable=False, server_default="1.00"),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False, server_default="0.00"),
    )
    op.create_index("idx_invoice_lines_invoice", "invoice_lines", ["invoice_id"])

    op.create_table(
        "invoice_payments",
        _id(),
        _fk("invoice_id", "invoices.id"),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("paid_at", sa.Date(), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_invoice_payments_amount_positive"),
    )
    op.create_index("idx_invoice_payments_invoice", "invoice_payments", ["invoice_id"])


def downgrade() -> None:
    op.drop_index("idx_invoice_payments_invoice", table_name="invoice_payments")
    op.drop_table("invoice_payments")

    op.drop_index("idx_invoice_lines_invoice", table_name="invoice_lines")
    op.drop_table("invoice_lines")

    op.drop_index("idx_invoices_business_date", table_name="invoices")
    op.drop_index("idx_invoices_business_client", table_name="invoices")
    op.drop_table("invoices")

    op.drop_index("idx_project_tasks_project", table_name="project_tasks")
    op.drop_table("project_tasks")

    op.drop_index("idx_projects_user", table_name="projects")
    op.drop_index("idx_projects_business_status", table_name="projects")
    op.drop_table("projects")

    op.drop_index("idx_quotes_business_status", table_name="quotes")
    op.drop_table("quotes")

    op.drop_table("services")
    op.drop_table("clients")

    op.drop_index("idx_transactions_business_date", table_name="transactions")
    op.drop_index("idx_transactions_user_date", table_name="transactions")
    op.drop_table("transactions")

    op.drop_table("categories")
    op.drop_table("income_sources")

    op.drop_index("idx_accounts_business", table_name="accounts")
    op.drop_index("idx_accounts_user", table_name="accounts")
    op.drop_table("accounts")

    op.drop_index("idx_businesses_user_active", table_name="businesses")
    op.drop_table("businesses")

    op.drop_table("user_settings")
    op.drop_table("users")
