"""Initial schema: merchants, games, skus, merchant_games, users, merchant_users, orders, merchant_applications.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "merchants",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column(
            "status",
            sa.Enum("ACTIVE", "SUSPENDED", name="merchantstatus"),
            nullable=False,
            server_default="ACTIVE",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_merchants_status", "merchants", ["status"])

    op.create_table(
        "games",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("merchant_id", sa.String(36), nullable=False),
        sa.Column("name_zh", sa.String(255), nullable=False),
        sa.Column("name_ja", sa.String(255), nullable=False),
        sa.Column("name_en", sa.String(255), nullable=False),
        sa.Column("developer", sa.String(255), nullable=False),
        sa.Column("icon_url", sa.String(512), nullable=False),
        sa.Column("banner_url", sa.String(512), nullable=False),
        sa.Column("badge", sa.String(32), nullable=False),
        sa.Column("rating", sa.Float(), nullable=False, server_default="4.5"),
        sa.Column("downloads", sa.String(32), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["merchant_id"], ["merchants.id"]),
    )
    op.create_index("ix_games_merchant_id", "games", ["merchant_id"])

    op.create_table(
        "skus",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("game_id", sa.String(36), nullable=False),
        sa.Column("name_zh", sa.String(255), nullable=False),
        sa.Column("name_ja", sa.String(255), nullable=False),
        sa.Column("name_en", sa.String(255), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("original_price", sa.Integer(), nullable=False),
        sa.Column("bonus", sa.String(255), nullable=False, server_default=""),
        sa.Column("currency", sa.String(8), nullable=False),
        sa.Column("limited", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("image_url", sa.String(512), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_skus_game_id", "skus", ["game_id"])

    op.create_table(
        "merchant_games",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("merchant_id", sa.String(36), nullable=False),
        sa.Column("game_id", sa.String(36), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["merchant_id"], ["merchants.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("merchant_id", "game_id", name="uq_merchant_games_merchant_game"),
    )
    op.create_index("ix_merchant_games_merchant_id", "merchant_games", ["merchant_id"])
    op.create_index("ix_merchant_games_game_id", "merchant_games", ["game_id"])
    op.create_index("ix_merchant_games_created_at", "merchant_games", ["created_at"])

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("auth_sub", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column(
            "role",
            sa.Enum("USER", "MERCHANT", "ADMIN", name="userrole"),
            nullable=False,
            server_default="USER",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_auth_sub", "users", ["auth_sub"], unique=True)

    op.create_table(
        "merchant_users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("merchant_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["merchant_id"], ["merchants.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("merchant_id", "user_id", name="uq_merchant_users_merchant_user"),
    )
    op.create_index("ix_merchant_users_merchant_id", "merchant_users", ["merchant_id"])
    op.create_index("ix_merchant_users_user_id", "merchant_users", ["user_id"])

    op.create_table(
        "orders",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("merchant_id", sa.String(36), nullable=False),
        sa.Column("game_id", sa.String(36), nullable=False),
        sa.Column("sku_id", sa.String(36), nullable=False),
        sa.Column("visitor_id", sa.String(255), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(8), nullable=False),
        sa.Column(
            "status",
            sa.Enum("PENDING", "PAID", "FAILED", name="orderstatus"),
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column("provider", sa.Enum("STRIPE", "PAYPAL", name="paymentprovider"), nullable=True),
        sa.Column("provider_payment_id", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["merchant_id"], ["merchants.id"]),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.ForeignKeyConstraint(["sku_id"], ["skus.id"]),
    )
    op.create_index("ix_orders_user_id", "orders", ["user_id"])
    op.create_index("ix_orders_merchant_id", "orders", ["merchant_id"])
    op.create_index("ix_orders_game_id", "orders", ["game_id"])
    op.create_index("ix_orders_sku_id", "orders", ["sku_id"])
    op.create_index("ix_orders_status", "orders", ["status"])
    op.create_index("ix_orders_provider_payment_id", "orders", ["provider_payment_id"])
    op.create_index("ix_orders_created_at", "orders", ["created_at"])

    op.create_table(
        "merchant_applications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("company_name", sa.String(200), nullable=False),
        sa.Column("contact_name", sa.String(100), nullable=False),
        sa.Column("contact_email", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("PENDING", "APPROVED", "REJECTED", name="applicationstatus"),
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column("review_note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_merchant_applications_user_id", "merchant_applications", ["user_id"])
    op.create_index("ix_merchant_applications_status", "merchant_applications", ["status"])


def downgrade() -> None:
    op.drop_table("merchant_applications")
    op.drop_table("orders")
    op.drop_table("merchant_users")
    op.drop_table("users")
    op.drop_table("merchant_games")
    op.drop_table("skus")
    op.drop_table("games")
    op.drop_table("merchants")
    op.execute("DROP TYPE IF EXISTS applicationstatus")
    op.execute("DROP TYPE IF EXISTS paymentprovider")
    op.execute("DROP TYPE IF EXISTS orderstatus")
    op.execute("DROP TYPE IF EXISTS userrole")
    op.execute("DROP TYPE IF EXISTS merchantstatus")
