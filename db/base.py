"""
db/base.py

Declarative base and shared mixins for the report store models.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Declarative base for every report table.
    """


class TimestampMixin:
    """
    created_at / updated_at columns for upserted tables.

    ORM updates refresh updated_at through onupdate; bulk upserts set it
    explicitly because onupdate does not fire for ON CONFLICT DO UPDATE.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=lambda: datetime.now(timezone.utc),
    )
