"""initial schema

Revision ID: 20260101000000
Revises:
Create Date: 2026-01-01 00:00:00
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "20260101000000"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=8), nullable=False),
        sa.Column("status", sa.String(length=9), nullable=False, server_default="active"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("role IN ('admin', 'employee')", name="user_role_enum"),
        sa.CheckConstraint("status IN ('active', 'suspended')", name="user_status_enum"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "inventory_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("location", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("quantity >= 0", name="ck_inventory_items_quantity"),
    )
    op.create_index("idx_inventory_items_name", "inventory_items", ["name"])
    op.create_index("idx_inventory_items_category", "inventory_items", ["category"])

    op.create_table(
        "defective_items_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "inventory_item_id",
            sa.Integer(),
            sa.ForeignKey("inventory_items.id", ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column("item_name_at_log_time", sa.String(length=100), nullable=False),
        sa.Column("quantity_defective", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Pending Review"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("logged_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("quantity_defective > 0", name="ck_defective_items_log_quantity"),
        sa.CheckConstraint(
            "status IN ('Pending Review', 'Returned to Supplier', 'Disposed', 'Repaired', 'Awaiting Parts')",
            name="defect_status_enum",
        ),
    )
    op.create_index("idx_defective_items_log_inventory_item_id", "defective_items_log", ["inventory_item_id"])
    op.create_index("idx_defective_items_log_status", "defective_items_log", ["status"])

    op.create_table(
        "activity_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("username_at_log_time", sa.String(length=50), nullable=False),
        sa.Column("action", sa.String(length=120), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("logged_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_activity_log_user_id", "activity_log", ["user_id"])
    op.create_index("idx_activity_log_logged_at", "activity_log", ["logged_at"])


def downgrade() -> None:
    op.drop_index("idx_activity_log_logged_at", table_name="activity_log")
    op.drop_index("idx_activity_log_user_id", table_name="activity_log")
    op.drop_table("activity_log")
    op.drop_index("idx_defective_items_log_status", table_name="defective_items_log")
    op.drop_index("idx_defective_items_log_inventory_item_id", table_name="defective_items_log")
    op.drop_table("defective_items_log")
    op.drop_index("idx_inventory_items_category", table_name="inventory_items")
    op.drop_index("idx_inventory_items_name", table_name="inventory_items")
    op.drop_table("inventory_items")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
