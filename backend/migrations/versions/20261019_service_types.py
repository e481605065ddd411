"""Service types and the catalog item link to them

Revision ID: 20261019_service_types
Revises: 20261019_initial
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_service_types"
down_revision = "20261019_initial"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "service_types",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("icon", sa.String(64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("deleted_at IS NULL OR NOT is_active", name="ck_service_types_deleted_inactive"),
    )
    op.create_index("ix_service_types_tenant_id", "service_types", ["tenant_id"])
    op.create_index("ix_service_types_is_active", "service_types", ["is_active"])
    op.create_index("ix_service_types_deleted_at", "service_types", ["deleted_at"])
    op.create_index(
        "uq_service_types_tenant_name_active",
        "service_types",
        ["tenant_id", "name"],
        unique=True,
        sqlite_where=sa.text("deleted_at IS NULL"),
        postgresql_where=sa.text("deleted_at IS NULL"),
    )

    with op.batch_alter_table("catalog_items") as batch_op:
        batch_op.add_column(sa.Column("service_type_id", sa.Integer(), nullable=True))
        batch_op.create_foreign_key(
            "fk_catalog_items_service_type_id_service_types",
            "service_types",
            ["service_type_id"],
            ["id"],
        )
        batch_op.create_index("ix_catalog_items_service_type_id", ["service_type_id"])


def downgrade():
    with op.batch_alter_table("catalog_items") as batch_op:
        batch_op.drop_index("ix_catalog_items_service_type_id")
        batch_op.drop_constraint("fk_catalog_items_service_type_id_service_types", type_="foreignkey")
        batch_op.drop_column("service_type_id")
    op.drop_table("service_types")
