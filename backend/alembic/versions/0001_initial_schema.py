"""Initial schema: users, customers, catalog, templates, enquiries, inventory.

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(150), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "customers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("company_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(50)),
        sa.Column("source", sa.Enum("web", "manual", name="customersource")),
        *_timestamps(),
    )
    op.create_index("ix_customers_company_name", "customers", ["company_name"], unique=True)

    op.create_table(
        "categories",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.Text()),
        *_timestamps(),
    )

    op.create_table(
        "products",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("category_id", sa.String(36), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("image_url", sa.Text()),
        sa.Column("sizes", sa.JSON()),
        sa.Column("materials", sa.JSON()),
        sa.Column("is_active", sa.Boolean()),
        sa.Column("top_seller", sa.Boolean()),
        *_timestamps(),
    )
    op.create_index("ix_products_name", "products", ["name"])
    op.create_index("ix_products_category_id", "products", ["category_id"])

    op.create_table(
        "templates",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("category", sa.String(100)),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean()),
        *_timestamps(),
    )
    op.create_index("ix_templates_type", "templates", ["type"])

    op.create_table(
        "enquiries",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("customer_id", sa.String(36), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("product_id", sa.String(36), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("size", sa.String(100)),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("material", sa.String(255)),
        sa.Column("delivery_date", sa.String(50)),
        sa.Column("comments", sa.Text()),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column(
            "reply_template_id",
            sa.String(36),
            sa.ForeignKey("templates.id", ondelete="SET NULL"),
        ),
        sa.Column("quotation_amount", sa.Numeric(12, 2)),
        sa.Column("invoice_number", sa.String(100)),
        *_timestamps(),
    )
    op.create_index("ix_enquiries_customer_id", "enquiries", ["customer_id"])
    op.create_index("ix_enquiries_product_id", "enquiries", ["product_id"])
    op.create_index("ix_enquiries_status", "enquiries", ["status"])
    op.create_index("ix_enquiries_created_at", "enquiries", ["created_at"])

    op.create_table(
        "enquiry_activity",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "enquiry_id",
            sa.String(36),
            sa.ForeignKey("enquiries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("action", sa.String(30), nullable=False),
        sa.Column("note", sa.Text()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_enquiry_activity_enquiry_id", "enquiry_activity", ["enquiry_id"])

    op.create_table(
        "inventory",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("item_name", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("threshold", sa.Integer(), nullable=False),
        sa.Column("supplier_whatsapp", sa.String(30)),
        sa.Column("supplier_name", sa.String(255)),
        sa.Column("unit_price", sa.Float()),
        *_timestamps(),
        sa.CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
    )


def downgrade() -> None:
    op.drop_table("inventory")
    op.drop_index("ix_enquiry_activity_enquiry_id", table_name="enquiry_activity")
    op.drop_table("enquiry_activity")
    op.drop_table("enquiries")
    op.drop_table("templates")
    op.drop_table("products")
    op.drop_table("categories")
    op.drop_table("customers")
    sa.Enum(name="customersource").drop(op.get_bind(), checkfirst=True)
    op.drop_table("users")
