"""product categories and shop settings

Revision ID: 7a3e9c1f5b28
Revises: 5c2f0e8d41a7
Create Date: 2026-10-18 15:40:02.771904

Product categories become their own table; the free-text products.category
column is converted to products.category_id (one category row per distinct
value). Adds the single-row shop_settings table.
Idempotent — pieces already created by create_all are skipped.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '7a3e9c1f5b28'
down_revision: Union[str, None] = '5c2f0e8d41a7'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _table_exists(table_name):
    """Check if a table exists."""
    bind = op.get_bind()
    insp = inspect(bind)
    return table_name in insp.get_table_names()


def _column_exists(table_name, column_name):
    """Check if a column exists on a table."""
    bind = op.get_bind()
    insp = inspect(bind)
    return column_name in [c["name"] for c in insp.get_columns(table_name)]


def _index_exists(table_name, index_name):
    bind = op.get_bind()
    insp = inspect(bind)
    return index_name in [i["name"] for i in insp.get_indexes(table_name)]


def upgrade() -> None:
    if not _table_exists("product_categories"):
        op.create_table(
            "product_categories",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("name"),
        )
        op.create_index("ix_product_categories_id", "product_categories", ["id"])

    if not _table_exists("shop_settings"):
        op.create_table(
            "shop_settings",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("currency", sa.String(), nullable=False),
            sa.Column("currency_symbol", sa.String(), nullable=False),
            sa.Column("default_complexity_percentage", sa.Float(), nullable=True),
            sa.Column("default_markup_percentage", sa.Float(), nullable=True),
            sa.Column("default_tax_percentage", sa.Float(), nullable=True),
            sa.Column("default_task_price", sa.Float(), nullable=True),
            sa.Column("default_material_price", sa.Float(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_shop_settings_id", "shop_settings", ["id"])

    if not _column_exists("products", "category_id"):
        with op.batch_alter_table("products") as batch_op:
            batch_op.add_column(sa.Column("category_id", sa.Integer(), nullable=True))
            batch_op.create_foreign_key(
                "fk_products_category_id", "product_categories",
                ["category_id"], ["id"], ondelete="SET NULL",
            )
            batch_op.create_index("ix_products_category_id", ["category_id"])

    if _column_exists("products", "category"):
        bind = op.get_bind()
        bind.execute(sa.text(
            "INSERT INTO product_categories (name, created_at, updated_at) "
            "SELECT DISTINCT category, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP FROM products "
            "WHERE category IS NOT NULL AND category <> '' "
            "AND category NOT IN (SELECT name FROM product_categories)"
        ))
        bind.execute(sa.text(
            "UPDATE products SET category_id = "
            "(SELECT pc.id FROM product_categories pc WHERE pc.name = products.category) "
            "WHERE category IS NOT NULL AND category <> ''"
        ))
        with op.batch_alter_table("products") as batch_op:
            if _index_exists("products", "ix_products_category"):
                batch_op.drop_index("ix_products_category")
            batch_op.drop_column("category")


def downgrade() -> None:
    if not _column_exists("products", "category"):
        with op.batch_alter_table("products") as batch_op:
            batch_op.add_column(sa.Column("category", sa.String(), nullable=True))
            batch_op.create_index("ix_products_category", ["category"])

    if _column_exists("products", "category_id"):
        bind = op.get_bind()
        bind.execute(sa.text(
            "UPDATE products SET category = "
            "(SELECT pc.name FROM product_categories pc WHERE pc.id = products.category_id)"
        ))
        with op.batch_alter_table("products") as batch_op:
            batch_op.drop_index("ix_products_category_id")
            batch_op.drop_constraint("fk_products_category_id", type_="foreignkey")
            batch_op.drop_column("category_id")

    for table_name in ["shop_settings", "product_categories"]:
        if _table_exists(table_name):
            op.drop_table(table_name)
