"""
db/models/affiliate_click.py

One click event from an affiliate click report. No natural key: identical
rows are independent events.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class AffiliateClick(Base):
    __tablename__ = "affiliate_clicks"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    click_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    region: Mapped[str | None] = mapped_column(String(120), nullable=True)
    referrer: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sub_id1: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sub_id2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sub_id3: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sub_id4: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sub_id5: Mapped[str | None] = mapped_column(String(255), nullable=True)
    click_pv: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_affiliate_clicks_tenant_click_time", "tenant_id", "click_time"),
    )
