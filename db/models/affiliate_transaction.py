"""
db/models/affiliate_transaction.py

One item line of an affiliate transaction/commission report.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin

NATURAL_KEY_CONSTRAINT = "uq_affiliate_transactions_tenant_order_item"


def _amount() -> Numeric:
    return Numeric(14, 4, asdecimal=False)


def _rate() -> Numeric:
    return Numeric(10, 6, asdecimal=False)


class AffiliateTransaction(TimestampMixin, Base):
    """
    Stored transaction line.

    The unique constraint on ``(tenant_id, order_id, item_id)`` drives
    upsert semantics: re-ingesting a report overwrites existing lines
    instead of inserting duplicates.
    """

    __tablename__ = "affiliate_transactions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    order_id: Mapped[str] = mapped_column(String(64), nullable=False)
    item_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    purchase_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="UTC instant of purchase",
    )
    complete_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    click_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    status: Mapped[str | None] = mapped_column(String(64), nullable=True)
    order_status: Mapped[str | None] = mapped_column(String(64), nullable=True)
    conversion_status: Mapped[str | None] = mapped_column(String(64), nullable=True)
    buyer_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    checkout_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    shop_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    shop_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    shop_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    item_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    item_model_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    product_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    promotion_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    category_l1: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category_l2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category_l3: Mapped[str | None] = mapped_column(String(255), nullable=True)
    item_price: Mapped[float | None] = mapped_column(_amount(), nullable=True)
    qty: Mapped[int | None] = mapped_column(Integer, nullable=True)
    item_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    attribution_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    campaign_partner_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    actual_amount: Mapped[float | None] = mapped_column(_amount(), nullable=True)
    refund_amount: Mapped[float | None] = mapped_column(_amount(), nullable=True)
    item_shopee_commission_rate: Mapped[float | None] = mapped_column(_rate(), nullable=True)
    shopee_commission: Mapped[float | None] = mapped_column(_amount(), nullable=True)
    item_seller_commission_rate: Mapped[float | None] = mapped_column(_rate(), nullable=True)
    brand_commission: Mapped[float | None] = mapped_column(_amount(), nullable=True)
    seller_commission: Mapped[float | None] = mapped_column(_amount(), nullable=True)
    item_total_commission: Mapped[float | None] = mapped_column(_amount(), nullable=True)
    gross_commission: Mapped[float | None] = mapped_column(_amount(), nullable=True)
    total_commission: Mapped[float | None] = mapped_column(_amount(), nullable=True)
    mcn_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    mcn_fee_rate: Mapped[float | None] = mapped_column(_rate(), nullable=True)
    mcn_fee: Mapped[float | None] = mapped_column(_amount(), nullable=True)
    rate: Mapped[float | None] = mapped_column(_rate(), nullable=True)
    net_commission: Mapped[float | None] = mapped_column(
        _amount(),
        nullable=True,
        comment="Order-level commission, repeated on every item line",
    )

    sub_id1: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sub_id2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sub_id3: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sub_id4: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sub_id5: Mapped[str | None] = mapped_column(String(255), nullable=True)
    channel: Mapped[str | None] = mapped_column(String(64), nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "order_id", "item_id", name=NATURAL_KEY_CONSTRAINT),
        Index("ix_affiliate_transactions_tenant_purchase_time", "tenant_id", "purchase_time"),
        Index("ix_affiliate_transactions_tenant_order", "tenant_id", "order_id"),
    )
