"""Initial schema: tenants, accounts, sessions, catalog, shifts, sales, security events

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _soft_delete_columns():
    return [
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _active_unique(name, table, columns):
    op.create_index(
        name,
        table,
        columns,
        unique=True,
        sqlite_where=sa.text("deleted_at IS NULL"),
        postgresql_where=sa.text("deleted_at IS NULL"),
    )


def upgrade():
    op.create_table(
        "tenants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(64), nullable=False),
        sa.Column("tier", sa.String(16), nullable=False, server_default="basic"),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_tenants_slug", "tenants", ["slug"], unique=True)
    op.create_index("ix_tenants_is_active", "tenants", ["is_active"])

    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id"), nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        *_soft_delete_columns(),
        *_timestamps(),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("deleted_at IS NULL OR NOT is_active", name="ck_accounts_deleted_inactive"),
        sa.CheckConstraint("role = 'operator' OR tenant_id IS NOT NULL", name="ck_accounts_tenant_required"),
    )
    op.create_index("ix_accounts_tenant_id", "accounts", ["tenant_id"])
    op.create_index("ix_accounts_email", "accounts", ["email"])
    op.create_index("ix_accounts_tenant_role", "accounts", ["tenant_id", "role"])
    op.create_index("ix_accounts_is_active", "accounts", ["is_active"])
    op.create_index("ix_accounts_deleted_at", "accounts", ["deleted_at"])
    _active_unique("uq_accounts_tenant_email_active", "accounts", ["tenant_id", "email"])

    op.create_table(
        "session_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id"), nullable=True),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("token_hash", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("is_revoked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_reason", sa.String(255), nullable=True),
    )
    op.create_index("ix_session_tokens_token_hash", "session_tokens", ["token_hash"], unique=True)
    op.create_index("ix_session_tokens_account_id", "session_tokens", ["account_id"])
    op.create_index("ix_session_tokens_tenant_id", "session_tokens", ["tenant_id"])
    op.create_index("ix_session_tokens_expires_at", "session_tokens", ["expires_at"])
    op.create_index("ix_session_tokens_is_revoked", "session_tokens", ["is_revoked"])
    op.create_index("ix_session_tokens_account_active", "session_tokens", ["account_id", "is_revoked"])

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_soft_delete_columns(),
        *_timestamps(),
        sa.CheckConstraint("deleted_at IS NULL OR NOT is_active", name="ck_categories_deleted_inactive"),
    )
    op.create_index("ix_categories_tenant_id", "categories", ["tenant_id"])
    op.create_index("ix_categories_is_active", "categories", ["is_active"])
    op.create_index("ix_categories_deleted_at", "categories", ["deleted_at"])
    _active_unique("uq_categories_tenant_name_active", "categories", ["tenant_id", "name"])

    op.create_table(
        "catalog_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        *_soft_delete_columns(),
        *_timestamps(),
        sa.CheckConstraint("deleted_at IS NULL OR NOT is_active", name="ck_catalog_items_deleted_inactive"),
        sa.CheckConstraint("price_cents >= 0", name="ck_catalog_items_price_nonnegative"),
    )
    op.create_index("ix_catalog_items_tenant_id", "catalog_items", ["tenant_id"])
    op.create_index("ix_catalog_items_category_id", "catalog_items", ["category_id"])
    op.create_index("ix_catalog_items_tenant_category", "catalog_items", ["tenant_id", "category_id"])
    op.create_index("ix_catalog_items_is_active", "catalog_items", ["is_active"])
    op.create_index("ix_catalog_items_deleted_at", "catalog_items", ["deleted_at"])
    _active_unique("uq_catalog_items_tenant_name_active", "catalog_items", ["tenant_id", "name"])

    op.create_table(
        "shifts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("opened_by_account_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="open"),
        sa.Column("opening_cash_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("closing_cash_cents", sa.Integer(), nullable=True),
        sa.Column("cash_sales_cents", sa.Integer(), nullable=True),
        sa.Column("expected_cash_cents", sa.Integer(), nullable=True),
        sa.Column("variance_cents", sa.Integer(), nullable=True),
        sa.Column("opened_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.CheckConstraint("status IN ('open', 'closed')", name="ck_shifts_status"),
        sa.CheckConstraint(
            "status = 'open' OR (closing_cash_cents IS NOT NULL "
            "AND variance_cents IS NOT NULL AND closed_at IS NOT NULL)",
            name="ck_shifts_closed_reconciled",
        ),
        sa.CheckConstraint("opening_cash_cents >= 0", name="ck_shifts_opening_nonnegative"),
    )
    op.create_index("ix_shifts_tenant_id", "shifts", ["tenant_id"])
    op.create_index("ix_shifts_account_id", "shifts", ["account_id"])
    op.create_index("ix_shifts_status", "shifts", ["status"])
    op.create_index("ix_shifts_opened_at", "shifts", ["opened_at"])
    op.create_index("ix_shifts_tenant_status", "shifts", ["tenant_id", "status"])
    op.create_index(
        "uq_shifts_open_per_account",
        "shifts",
        ["account_id", "tenant_id"],
        unique=True,
        sqlite_where=sa.text("status = 'open'"),
        postgresql_where=sa.text("status = 'open'"),
    )

    op.create_table(
        "sales",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("shift_id", sa.Integer(), sa.ForeignKey("shifts.id"), nullable=False),
        sa.Column("catalog_item_id", sa.Integer(), sa.ForeignKey("catalog_items.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price_cents", sa.Integer(), nullable=False),
        sa.Column("total_cents", sa.Integer(), nullable=False),
        sa.Column("payment_method", sa.String(16), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="completed"),
        sa.Column("created_by_account_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("voided_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("quantity > 0", name="ck_sales_quantity_positive"),
        sa.CheckConstraint("total_cents >= 0", name="ck_sales_total_nonnegative"),
    )
    op.create_index("ix_sales_tenant_id", "sales", ["tenant_id"])
    op.create_index("ix_sales_shift_id", "sales", ["shift_id"])
    op.create_index("ix_sales_catalog_item_id", "sales", ["catalog_item_id"])
    op.create_index("ix_sales_status", "sales", ["status"])
    op.create_index("ix_sales_created_at", "sales", ["created_at"])
    op.create_index("ix_sales_shift_status", "sales", ["shift_id", "status"])
    op.create_index("ix_sales_tenant_created", "sales", ["tenant_id", "created_at"])

    op.create_table(
        "security_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id"), nullable=True),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=True),
        sa.Column("event_type", sa.String(64), nullable=False),
        sa.Column("resource", sa.String(128), nullable=True),
        sa.Column("action", sa.String(64), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_security_events_tenant_id", "security_events", ["tenant_id"])
    op.create_index("ix_security_events_account_id", "security_events", ["account_id"])
    op.create_index("ix_security_events_event_type", "security_events", ["event_type"])
    op.create_index("ix_security_events_success", "security_events", ["success"])
    op.create_index("ix_security_events_occurred_at", "security_events", ["occurred_at"])
    op.create_index("ix_security_events_account_type", "security_events", ["account_id", "event_type"])
    op.create_index("ix_security_events_tenant_occurred", "security_events", ["tenant_id", "occurred_at"])


def downgrade():
    op.drop_table("security_events")
    op.drop_table("sales")
    op.drop_table("shifts")
    op.drop_table("catalog_items")
    op.drop_table("categories")
    op.drop_table("session_tokens")
    op.drop_table("accounts")
    op.drop_table("tenants")
