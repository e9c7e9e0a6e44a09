"""create affiliate report tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _amount(name: str, **kwargs) -> sa.Column:
    return sa.Column(name, sa.Numeric(precision=14, scale=4), nullable=True, **kwargs)


def _rate(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(precision=10, scale=6), nullable=True)


def _text(name: str, length: int = 64) -> sa.Column:
    return sa.Column(name, sa.String(length=length), nullable=True)


def upgrade() -> None:
    op.create_table(
        "affiliate_transactions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column("order_id", sa.String(length=64), nullable=False),
        sa.Column("item_id", sa.BigInteger(), nullable=False),
        sa.Column("purchase_time", sa.DateTime(timezone=True), nullable=True,
                  comment="UTC instant of purchase"),
        sa.Column("complete_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("click_time", sa.DateTime(timezone=True), nullable=True),
        _text("status"),
        _text("order_status"),
        _text("conversion_status"),
        _text("buyer_type"),
        _text("checkout_id"),
        _text("shop_name", 255),
        _text("shop_id"),
        _text("shop_type"),
        sa.Column("item_name", sa.Text(), nullable=True),
        _text("item_model_id"),
        _text("product_type"),
        _text("promotion_id"),
        _text("category_l1", 255),
        _text("category_l2", 255),
        _text("category_l3", 255),
        _amount("item_price"),
        sa.Column("qty", sa.Integer(), nullable=True),
        sa.Column("item_notes", sa.Text(), nullable=True),
        _text("attribution_type"),
        _text("campaign_partner_name", 255),
        _amount("actual_amount"),
        _amount("refund_amount"),
        _rate("item_shopee_commission_rate"),
        _amount("shopee_commission"),
        _rate("item_seller_commission_rate"),
        _amount("brand_commission"),
        _amount("seller_commission"),
        _amount("item_total_commission"),
        _amount("gross_commission"),
        _amount("total_commission"),
        _text("mcn_name", 255),
        _rate("mcn_fee_rate"),
        _amount("mcn_fee"),
        _rate("rate"),
        _amount("net_commission", comment="Order-level commission, repeated on every item line"),
        _text("sub_id1", 255),
        _text("sub_id2", 255),
        _text("sub_id3", 255),
        _text("sub_id4", 255),
        _text("sub_id5", 255),
        _text("channel"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "tenant_id",
            "order_id",
            "item_id",
            name="uq_affiliate_transactions_tenant_order_item",
        ),
    )
    op.create_index(
        "ix_affiliate_transactions_tenant_purchase_time",
        "affiliate_transactions",
        ["tenant_id", "purchase_time"],
        unique=False,
    )
    op.create_index(
        "ix_affiliate_transactions_tenant_order",
        "affiliate_transactions",
        ["tenant_id", "order_id"],
        unique=False,
    )

    op.create_table(
        "affiliate_clicks",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column("click_time", sa.DateTime(timezone=True), nullable=False),
        _text("region", 120),
        _text("referrer", 255),
        _text("sub_id1", 255),
        _text("sub_id2", 255),
        _text("sub_id3", 255),
        _text("sub_id4", 255),
        _text("sub_id5", 255),
        sa.Column("click_pv", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_affiliate_clicks_tenant_click_time",
        "affiliate_clicks",
        ["tenant_id", "click_time"],
        unique=False,
    )

    op.create_table(
        "upload_history",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("file_type", sa.String(length=32), nullable=False,
                  comment="transactions, clicks"),
        sa.Column("records_count", sa.Integer(), nullable=False),
        sa.Column("file_size_bytes", sa.BigInteger(), nullable=True),
        sa.Column(
            "uploaded_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_upload_history_tenant_uploaded_at",
        "upload_history",
        ["tenant_id", "uploaded_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_upload_history_tenant_uploaded_at", table_name="upload_history")
    op.drop_table("upload_history")
    op.drop_index("ix_affiliate_clicks_tenant_click_time", table_name="affiliate_clicks")
    op.drop_table("affiliate_clicks")
    op.drop_index("ix_affiliate_transactions_tenant_order", table_name="affiliate_transactions")
    op.drop_index(
        "ix_affiliate_transactions_tenant_purchase_time",
        table_name="affiliate_transactions",
    )
    op.drop_table("affiliate_transactions")
