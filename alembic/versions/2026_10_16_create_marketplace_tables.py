from alembic import op
import sqlalchemy as sa

revision = "2026_10_16_create_marketplace_tables"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("username", sa.Text, nullable=False, unique=True),
        sa.Column("password", sa.Text, nullable=False),
    )
    op.create_table(
        "properties",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("address", sa.Text, nullable=False),
        sa.Column("city", sa.Text, nullable=False),
        sa.Column("state", sa.Text, nullable=False),
        sa.Column("zip_code", sa.Text, nullable=False),
        sa.Column("property_type", sa.Text, nullable=False),
        sa.Column("listing_type", sa.Text, nullable=False),
        sa.Column("bedrooms", sa.Integer, nullable=False),
        sa.Column("bathrooms", sa.Numeric(3, 1), nullable=False),
        sa.Column("square_feet", sa.Integer, nullable=False),
        sa.Column("year_built", sa.Integer),
        sa.Column("status", sa.Text, nullable=False, server_default="active"),
        sa.Column("views", sa.Integer, nullable=False, server_default="0"),
        sa.Column("seller_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column("updated_at", sa.DateTime, nullable=False, server_default=sa.func.current_timestamp()),
    )
    op.create_index("ix_properties_seller_id", "properties", ["seller_id"])
    op.create_table(
        "property_features",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("property_id", sa.Integer, sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, unique=True),
        *[
            sa.Column(flag, sa.Boolean, nullable=False, server_default=sa.false())
            for flag in (
                "has_pool", "has_garden", "has_garage", "has_balcony",
                "has_air_conditioning", "has_gym", "has_security_system", "has_fireplace",
            )
        ],
    )
    op.create_table(
        "property_images",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("property_id", sa.Integer, sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("image_url", sa.Text, nullable=False),
        sa.Column("is_main", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.current_timestamp()),
    )
    op.create_index("ix_property_images_property_id", "property_images", ["property_id"])
    op.create_table(
        "inquiries",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("property_id", sa.Integer, sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("email", sa.Text, nullable=False),
        sa.Column("phone", sa.Text),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("is_viewed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.current_timestamp()),
    )
    op.create_index("ix_inquiries_property_id", "inquiries", ["property_id"])

def downgrade():
    op.drop_index("ix_inquiries_property_id", "inquiries")
    op.drop_table("inquiries")
    op.drop_index("ix_property_images_property_id", "property_images")
    op.drop_table("property_images")
    op.drop_table("property_features")
    op.drop_index("ix_properties_seller_id", "properties")
    op.drop_table("properties")
    op.drop_table("users")
