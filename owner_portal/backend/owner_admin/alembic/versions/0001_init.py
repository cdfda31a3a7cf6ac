"""init schema: users, properties, accountant memberships, owner api keys, otp codes

Revision ID: 0001_init
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=24), primary_key=True),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=False),
        sa.Column("phone", sa.String(length=40), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("companies_json", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "properties",
        sa.Column("id", sa.String(length=24), primary_key=True),
        sa.Column("external_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=60), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=False),
        sa.Column("bathrooms", sa.Integer(), nullable=False),
        sa.Column("max_guests", sa.Integer(), nullable=False),
        sa.Column("hostkit_id", sa.String(length=120), nullable=False),
        sa.Column("hostkit_api_key", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=30), nullable=False),
        sa.Column("amenities_json", sa.Text(), nullable=True),
        sa.Column("images_json", sa.Text(), nullable=True),
        sa.Column("owner_id", sa.String(length=24), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("is_admin_owned", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "(owner_id IS NULL AND is_admin_owned) OR (owner_id IS NOT NULL AND NOT is_admin_owned)",
            name="ck_properties_single_holder",
        ),
    )
    op.create_index("ix_properties_external_id", "properties", ["external_id"], unique=True)
    op.create_index("ix_properties_owner_id", "properties", ["owner_id"])

    op.create_table(
        "property_accountants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "property_id",
            sa.String(length=24),
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("accountant_id", sa.String(length=24), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("property_id", "accountant_id", name="uq_property_accountants_property_accountant"),
    )
    op.create_index("ix_property_accountants_property_id", "property_accountants", ["property_id"])
    op.create_index("ix_property_accountants_accountant_id", "property_accountants", ["accountant_id"])

    op.create_table(
        "owner_api_keys",
        sa.Column("id", sa.String(length=24), primary_key=True),
        sa.Column("owner_id", sa.String(length=24), nullable=False),
        sa.Column("hostkit_api_key", sa.String(length=255), nullable=False),
        sa.Column("hostkit_api_secret", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_owner_api_keys_owner_id", "owner_api_keys", ["owner_id"], unique=True)

    op.create_table(
        "otp_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=200), nullable=False),
        sa.Column("code_hash", sa.String(length=128), nullable=False),
        sa.Column("purpose", sa.String(length=30), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_otp_tokens_email", "otp_tokens", ["email"], unique=True)
    op.create_index("ix_otp_tokens_expires_at", "otp_tokens", ["expires_at"])


def downgrade():
    op.drop_table("otp_tokens")
    op.drop_table("owner_api_keys")
    op.drop_table("property_accountants")
    op.drop_table("properties")
    op.drop_table("users")
