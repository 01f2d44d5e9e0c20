"""Initial inventory schema.

Revision ID: 0001_initial_inventory_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial_inventory_schema"
down_revision = None
branch_labels = None
depends_on = None

PERMISSION_ROLES = ("viewer", "editor", "admin")
ITEM_STATES = ("ok", "damaged", "lost", "orphaned")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("username", sa.String(length=150), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column(
            "permission_role",
            sa.Enum(*PERMISSION_ROLES, name="permission_role"),
            nullable=False,
            server_default="viewer",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_permission_role", "users", ["permission_role"])

    op.create_table(
        "organisations",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
    )

    op.create_table(
        "inventory_item_types",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("consumable", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("manufacturer_id", sa.String(length=36), sa.ForeignKey("organisations.id"), nullable=True),
    )
    op.create_index("ix_inventory_item_types_manufacturer_id", "inventory_item_types", ["manufacturer_id"])

    op.create_table(
        "inventory_item_type_sources",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("item_type_id", sa.String(length=36), sa.ForeignKey("inventory_item_types.id"), nullable=False),
        sa.Column("manufacturer_id", sa.String(length=36), sa.ForeignKey("organisations.id"), nullable=False),
        sa.Column("model_name", sa.String(length=255), nullable=False),
        sa.Column("resupply_uri", sa.String(length=2048), nullable=True),
        sa.Column("unit_price", sa.Integer(), nullable=True),
        sa.Column("unit_price_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "unit_price IS NULL OR unit_price >= 0",
            name="ck_item_type_sources_unit_price_non_negative",
        ),
    )
    op.create_index("ix_inventory_item_type_sources_item_type_id", "inventory_item_type_sources", ["item_type_id"])
    op.create_index("ix_inventory_item_type_sources_manufacturer_id", "inventory_item_type_sources", ["manufacturer_id"])
    op.create_index(
        "ix_item_type_sources_type_created",
        "inventory_item_type_sources",
        ["item_type_id", "created_at"],
    )

    op.create_table(
        "bom_items",
        sa.Column("item_type_id", sa.String(length=36), sa.ForeignKey("inventory_item_types.id"), nullable=False),
        sa.Column(
            "ingredient_type_id",
            sa.String(length=36),
            sa.ForeignKey("inventory_item_types.id"),
            nullable=False,
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("reclaimable", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("item_type_id", "ingredient_type_id", name="pk_bom_items"),
        sa.CheckConstraint("item_type_id <> ingredient_type_id", name="ck_bom_items_no_self_loop"),
        sa.CheckConstraint("quantity > 0", name="ck_bom_items_quantity_positive"),
    )
    op.create_index("ix_bom_items_ingredient", "bom_items", ["ingredient_type_id"])

    op.create_table(
        "inventory_items",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("tag", sa.String(length=64), nullable=True),
        sa.Column("type_id", sa.String(length=36), sa.ForeignKey("inventory_item_types.id"), nullable=False),
        sa.Column(
            "source_id",
            sa.String(length=36),
            sa.ForeignKey("inventory_item_type_sources.id"),
            nullable=False,
        ),
        sa.Column("location_id", sa.String(length=36), sa.ForeignKey("inventory_items.id"), nullable=True),
        sa.Column(
            "state",
            sa.Enum(*ITEM_STATES, name="inventory_item_state"),
            nullable=False,
            server_default="ok",
        ),
        sa.Column("summary", sa.String(length=1024), nullable=True),
        sa.Column("is_countable", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("unit_price", sa.Integer(), nullable=True),
        sa.Column("acquired_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "location_id IS NULL OR location_id <> id",
            name="ck_inventory_items_not_own_location",
        ),
    )
    op.create_index("ix_inventory_items_tag", "inventory_items", ["tag"])
    op.create_index("ix_inventory_items_type_id", "inventory_items", ["type_id"])
    op.create_index("ix_inventory_items_source_id", "inventory_items", ["source_id"])
    op.create_index("ix_inventory_items_state", "inventory_items", ["state"])
    op.create_index("ix_inventory_items_location", "inventory_items", ["location_id"])

    op.create_table(
        "inventory_item_stock_counts",
        sa.Column("item_id", sa.String(length=36), sa.ForeignKey("inventory_items.id"), nullable=False),
        sa.Column("count_date", sa.Date(), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False),
        sa.Column("administrative", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("item_id", "count_date", name="pk_inventory_item_stock_counts"),
        sa.CheckConstraint("count >= 0", name="ck_stock_counts_count_non_negative"),
    )
    op.create_index("ix_stock_counts_user", "inventory_item_stock_counts", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_stock_counts_user", table_name="inventory_item_stock_counts")
    op.drop_table("inventory_item_stock_counts")

    for index_name in (
        "ix_inventory_items_location",
        "ix_inventory_items_state",
        "ix_inventory_items_source_id",
        "ix_inventory_items_type_id",
        "ix_inventory_items_tag",
    ):
        op.drop_index(index_name, table_name="inventory_items")
    op.drop_table("inventory_items")

    op.drop_index("ix_bom_items_ingredient", table_name="bom_items")
    op.drop_table("bom_items")

    for index_name in (
        "ix_item_type_sources_type_created",
        "ix_inventory_item_type_sources_manufacturer_id",
        "ix_inventory_item_type_sources_item_type_id",
    ):
        op.drop_index(index_name, table_name="inventory_item_type_sources")
    op.drop_table("inventory_item_type_sources")

    op.drop_index("ix_inventory_item_types_manufacturer_id", table_name="inventory_item_types")
    op.drop_table("inventory_item_types")
    op.drop_table("organisations")

    op.drop_index("ix_users_permission_role", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    sa.Enum(name="inventory_item_state").drop(bind, checkfirst=True)
    sa.Enum(name="permission_role").drop(bind, checkfirst=True)
