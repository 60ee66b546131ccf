"""initial quote schema

Revision ID: 5c2f0e8d41a7
Revises:
Create Date: 2026-10-18 09:12:44.108230

customers, products, quotes, tasks, materials. Quote summary columns
(subtotal_* / *_charge / grand_total / total_with_tax) are only ever written
by the pricing engine's recompute step.
Idempotent — tables that already exist (create_all) are left alone.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '5c2f0e8d41a7'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

QUOTE_STATUS = sa.Enum("DRAFT", "SENT", "ACCEPTED", "REJECTED", "EXPIRED", name="quotestatus")
COSTING_MODE = sa.Enum("LUMP_SUM", "ITEMIZED", name="costingmode")


def _table_exists(table_name):
    """Check if a table exists."""
    bind = op.get_bind()
    insp = inspect(bind)
    return table_name in insp.get_table_names()


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    if not _table_exists("customers"):
        op.create_table(
            "customers",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("company", sa.String(), nullable=True),
            sa.Column("email", sa.String(), nullable=True),
            sa.Column("phone", sa.String(), nullable=True),
            sa.Column("address", sa.Text(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_customers_id", "customers", ["id"])

    if not _table_exists("products"):
        op.create_table(
            "products",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("category", sa.String(), nullable=True),
            sa.Column("unit_price", sa.Float(), nullable=False),
            sa.Column("unit", sa.String(), nullable=True),
            sa.Column("sku", sa.String(), nullable=True),
            sa.Column("manufacturer", sa.String(), nullable=True),
            sa.Column("supplier", sa.String(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_products_id", "products", ["id"])
        op.create_index("ix_products_category", "products", ["category"])

    if not _table_exists("quotes"):
        op.create_table(
            "quotes",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("quote_number", sa.String(), nullable=False),
            sa.Column("title", sa.String(), nullable=False),
            sa.Column("customer_id", sa.Integer(), nullable=False),
            sa.Column("status", QUOTE_STATUS, nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("valid_until", sa.DateTime(), nullable=True),
            sa.Column("complexity_percentage", sa.Float(), nullable=True),
            sa.Column("markup_percentage", sa.Float(), nullable=True),
            sa.Column("tax_percentage", sa.Float(), nullable=True),
            sa.Column("subtotal_tasks", sa.Float(), nullable=True),
            sa.Column("subtotal_materials", sa.Float(), nullable=True),
            sa.Column("subtotal_combined", sa.Float(), nullable=True),
            sa.Column("complexity_charge", sa.Float(), nullable=True),
            sa.Column("markup_charge", sa.Float(), nullable=True),
            sa.Column("grand_total", sa.Float(), nullable=True),
            sa.Column("tax_charge", sa.Float(), nullable=True),
            sa.Column("total_with_tax", sa.Float(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["customer_id"], ["customers.id"]),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("quote_number"),
        )
        op.create_index("ix_quotes_id", "quotes", ["id"])

    if not _table_exists("tasks"):
        op.create_table(
            "tasks",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("quote_id", sa.Integer(), nullable=False),
            sa.Column("description", sa.String(), nullable=False),
            sa.Column("price", sa.Float(), nullable=True),
            sa.Column("position", sa.Integer(), nullable=True),
            sa.Column("material_costing_mode", COSTING_MODE, nullable=False),
            sa.Column("lump_sum_estimate", sa.Float(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["quote_id"], ["quotes.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_tasks_id", "tasks", ["id"])

    if not _table_exists("materials"):
        op.create_table(
            "materials",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("task_id", sa.Integer(), nullable=False),
            sa.Column("product_id", sa.Integer(), nullable=True),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("quantity", sa.Float(), nullable=True),
            sa.Column("unit_price", sa.Float(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["task_id"], ["tasks.id"]),
            sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_materials_id", "materials", ["id"])


def downgrade() -> None:
    for table_name in ["materials", "tasks", "quotes", "products", "customers"]:
        if _table_exists(table_name):
            op.drop_table(table_name)

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        COSTING_MODE.drop(bind, checkfirst=True)
        QUOTE_STATUS.drop(bind, checkfirst=True)
