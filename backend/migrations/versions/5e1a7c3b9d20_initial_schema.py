"""initial_schema

Revision ID: 5e1a7c3b9d20
Revises:
Create Date: 2026-10-19 10:12:31.402113

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5e1a7c3b9d20"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _identified_columns() -> list[sa.Column]:
    """Storage key, sequential id and timestamps shared by identified entities."""
    return [
        sa.Column("key", sa.Uuid(), nullable=False),
        sa.Column("id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name)


def upgrade() -> None:
    op.create_table(
        "sequence_counters",
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("next_value", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("name"),
    )

    op.create_table(
        "users",
        *_identified_columns(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("role", _enum("userrole", "personal", "institute", "admin"), nullable=False),
        sa.Column("status", _enum("userstatus", "active", "suspended"), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("otp", sa.String(), nullable=True),
        sa.Column("otp_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column(
            "verification_status",
            _enum("verificationstatus", "pending", "approved", "rejected"),
            nullable=True,
        ),
        sa.Column("institute_name", sa.String(), nullable=True),
        sa.Column("institute_type", _enum("institutetype", "school", "college", "wholesaler"), nullable=True),
        sa.Column("invoice_number", sa.String(), nullable=True),
        sa.Column("pan_number", sa.String(), nullable=True),
        sa.Column("gst_number", sa.String(), nullable=True),
        sa.Column("contact_number", sa.String(), nullable=True),
        sa.Column("verification_comments", sa.String(), nullable=True),
        sa.Column("verified_by_id", sa.Integer(), nullable=True),
        sa.Column("verified_by_legacy_key", sa.String(), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("key"),
        sa.CheckConstraint(
            "verified_by_id IS NULL OR verified_by_legacy_key IS NULL",
            name="ck_users_verified_by_ref",
        ),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=True)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "categories",
        *_identified_columns(),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=True),
        sa.PrimaryKeyConstraint("key"),
    )
    op.create_index(op.f("ix_categories_id"), "categories", ["id"], unique=True)
    op.create_index(op.f("ix_categories_name"), "categories", ["name"], unique=True)

    op.create_table(
        "products",
        *_identified_columns(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("author", sa.String(length=100), nullable=False),
        sa.Column("genre", sa.String(length=100), nullable=False),
        sa.Column("stock_quantity", sa.Integer(), nullable=False),
        sa.Column("image_url", sa.String(length=200), nullable=False),
        sa.PrimaryKeyConstraint("key"),
        sa.CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
        sa.CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )
    op.create_index(op.f("ix_products_id"), "products", ["id"], unique=True)
    op.create_index(op.f("ix_products_category"), "products", ["category"], unique=False)

    op.create_table(
        "orders",
        *_identified_columns(),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("user_legacy_key", sa.String(), nullable=True),
        sa.Column("institute_id", sa.Integer(), nullable=True),
        sa.Column("institute_legacy_key", sa.String(), nullable=True),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("discount", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("shipping_address", sa.String(), nullable=False),
        sa.Column("shipping_city", sa.String(), nullable=False),
        sa.Column("shipping_state", sa.String(), nullable=False),
        sa.Column("shipping_zip_code", sa.String(), nullable=False),
        sa.Column("shipping_country", sa.String(), nullable=True),
        sa.Column("payment_method", _enum("paymentmethod", "esewa", "khalti", "cod"), nullable=False),
        sa.Column("payment_status", _enum("paymentstatus", "pending", "completed", "failed"), nullable=False),
        sa.Column(
            "order_status",
            _enum(
                "orderstatus",
                "pending",
                "confirmed",
                "preparing",
                "shipped",
                "out_for_delivery",
                "delivered",
                "cancelled",
            ),
            nullable=False,
        ),
        sa.Column("order_type", _enum("ordertype", "regular", "bulk"), nullable=False),
        sa.Column("tracking_number", sa.String(), nullable=True),
        sa.Column("transaction_id", sa.String(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("key"),
        sa.CheckConstraint("(user_id IS NULL) <> (user_legacy_key IS NULL)", name="ck_orders_user_ref"),
        sa.CheckConstraint(
            "institute_id IS NULL OR institute_legacy_key IS NULL",
            name="ck_orders_institute_ref",
        ),
    )
    op.create_index(op.f("ix_orders_id"), "orders", ["id"], unique=True)
    op.create_index(op.f("ix_orders_user_id"), "orders", ["user_id"], unique=False)
    op.create_index(op.f("ix_orders_institute_id"), "orders", ["institute_id"], unique=False)

    op.create_table(
        "order_line_items",
        sa.Column("key", sa.Uuid(), nullable=False),
        sa.Column("order_key", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=True),
        sa.Column("product_legacy_key", sa.String(), nullable=True),
        sa.Column("product_name", sa.String(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["order_key"], ["orders.key"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("key"),
        sa.CheckConstraint(
            "(product_id IS NULL) <> (product_legacy_key IS NULL)",
            name="ck_order_line_items_product_ref",
        ),
    )
    op.create_index(op.f("ix_order_line_items_order_key"), "order_line_items", ["order_key"], unique=False)
    op.create_index(op.f("ix_order_line_items_product_id"), "order_line_items", ["product_id"], unique=False)

    op.create_table(
        "cart_items",
        sa.Column("key", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("user_legacy_key", sa.String(), nullable=True),
        sa.Column("product_id", sa.Integer(), nullable=True),
        sa.Column("product_legacy_key", sa.String(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("key"),
        sa.CheckConstraint("(user_id IS NULL) <> (user_legacy_key IS NULL)", name="ck_cart_items_user_ref"),
        sa.CheckConstraint(
            "(product_id IS NULL) <> (product_legacy_key IS NULL)",
            name="ck_cart_items_product_ref",
        ),
    )
    op.create_index(op.f("ix_cart_items_user_id"), "cart_items", ["user_id"], unique=False)

    op.create_table(
        "wishlist_entries",
        sa.Column("key", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("user_legacy_key", sa.String(), nullable=True),
        sa.Column("product_id", sa.Integer(), nullable=True),
        sa.Column("product_legacy_key", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("key"),
        sa.CheckConstraint("(user_id IS NULL) <> (user_legacy_key IS NULL)", name="ck_wishlist_entries_user_ref"),
        sa.CheckConstraint(
            "(product_id IS NULL) <> (product_legacy_key IS NULL)",
            name="ck_wishlist_entries_product_ref",
        ),
        sa.UniqueConstraint("user_id", "product_id", name="uq_wishlist_entries_user_product"),
    )
    op.create_index(op.f("ix_wishlist_entries_user_id"), "wishlist_entries", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_wishlist_entries_user_id"), table_name="wishlist_entries")
    op.drop_table("wishlist_entries")
    op.drop_index(op.f("ix_cart_items_user_id"), table_name="cart_items")
    op.drop_table("cart_items")
    op.drop_index(op.f("ix_order_line_items_product_id"), table_name="order_line_items")
    op.drop_index(op.f("ix_order_line_items_order_key"), table_name="order_line_items")
    op.drop_table("order_line_items")
    op.drop_index(op.f("ix_orders_institute_id"), table_name="orders")
    op.drop_index(op.f("ix_orders_user_id"), table_name="orders")
    op.drop_index(op.f("ix_orders_id"), table_name="orders")
    op.drop_table("orders")
    op.drop_index(op.f("ix_products_category"), table_name="products")
    op.drop_index(op.f("ix_products_id"), table_name="products")
    op.drop_table("products")
    op.drop_index(op.f("ix_categories_name"), table_name="categories")
    op.drop_index(op.f("ix_categories_id"), table_name="categories")
    op.drop_table("categories")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_table("users")
    op.drop_table("sequence_counters")

    for enum_name in (
        "ordertype",
        "orderstatus",
        "paymentstatus",
        "paymentmethod",
        "institutetype",
        "verificationstatus",
        "userstatus",
        "userrole",
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
