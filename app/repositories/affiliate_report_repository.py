"""
app/repositories/affiliate_report_repository.py

Persistence layer for affiliate transactions, clicks and upload history.

The caller controls commit/rollback; this repository never commits on its own.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import asdict, fields
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from app.domain.affiliate_report import ClickRecord, TransactionRecord
from db.models.affiliate_click import AffiliateClick
from db.models.affiliate_transaction import NATURAL_KEY_CONSTRAINT, AffiliateTransaction
from db.models.upload_history import UploadHistory

TRANSACTION_COLUMNS: tuple[str, ...] = tuple(item.name for item in fields(TransactionRecord))
CLICK_COLUMNS: tuple[str, ...] = tuple(item.name for item in fields(ClickRecord))
_NATURAL_KEY_COLUMNS = {"order_id", "item_id"}


class AffiliateReportRepository:
    """
    Repository for batch persistence and range reads of report records.

    Transactions are upserted on ``(tenant_id, order_id, item_id)``: a
    conflicting row is fully overwritten with the incoming values. Clicks
    are plain inserts.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def upsert_transactions(self, tenant_id: str, records: Sequence[TransactionRecord]) -> int:
        """
        Upsert one batch of transaction records.

        The batch must already be unique on the natural key; PostgreSQL
        rejects an ON CONFLICT statement that touches the same row twice.

        Returns
        -------
        int
            Number of rows written (inserted + updated).
        """
        if not records:
            return 0

        stmt = build_transaction_upsert(tenant_id, records)
        return len(self._session.scalars(stmt).all())

    def insert_clicks(self, tenant_id: str, records: Sequence[ClickRecord]) -> int:
        if not records:
            return 0

        payloads = [
            {"id": uuid.uuid4(), "tenant_id": tenant_id, **asdict(record)}
            for record in records
        ]
        stmt = insert(AffiliateClick).values(payloads).returning(AffiliateClick.id)
        return len(self._session.scalars(stmt).all())

    def record_upload(
        self,
        *,
        tenant_id: str,
        file_name: str,
        file_type: str,
        records_count: int,
        file_size_bytes: int | None,
    ) -> UploadHistory:
        entry = UploadHistory(
            tenant_id=tenant_id,
            file_name=file_name,
            file_type=file_type,
            records_count=records_count,
            file_size_bytes=file_size_bytes,
            uploaded_at=_now_utc(),
        )
        self._session.add(entry)
        self._session.flush()
        return entry

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list_transactions(
        self,
        *,
        tenant_id: str,
        start: datetime,
        end: datetime,
    ) -> list[TransactionRecord]:
        """
        Return stored transaction lines whose ``purchase_time`` lies within
        ``[start, end]`` (inclusive, UTC), ordered by purchase time.
        """
        stmt = (
            select(AffiliateTransaction)
            .where(
                AffiliateTransaction.tenant_id == tenant_id,
                AffiliateTransaction.purchase_time >= start,
                AffiliateTransaction.purchase_time <= end,
            )
            .order_by(AffiliateTransaction.purchase_time, AffiliateTransaction.order_id)
        )
        return [_to_record(row) for row in self._session.scalars(stmt).all()]

    def list_clicks(
        self,
        *,
        tenant_id: str,
        start: datetime,
        end: datetime,
    ) -> list[ClickRecord]:
        """
        Return stored clicks whose ``click_time`` lies within ``[start, end]``
        (inclusive, UTC), ordered by click time.
        """
        stmt = (
            select(AffiliateClick)
            .where(
                AffiliateClick.tenant_id == tenant_id,
                AffiliateClick.click_time >= start,
                AffiliateClick.click_time <= end,
            )
            .order_by(AffiliateClick.click_time)
        )
        return [_to_click(row) for row in self._session.scalars(stmt).all()]

    def count_transactions(self, tenant_id: str) -> int:
        stmt = select(func.count()).select_from(AffiliateTransaction).where(
            AffiliateTransaction.tenant_id == tenant_id
        )
        return int(self._session.scalar(stmt) or 0)


# ---------------------------------------------------------------------------
# Module-level helpers (no business logic)
# ---------------------------------------------------------------------------


def build_transaction_upsert(tenant_id: str, records: Sequence[TransactionRecord]) -> Any:
    """Build the INSERT ... ON CONFLICT DO UPDATE statement for one batch."""
    payloads: list[dict[str, Any]] = [
        {"id": uuid.uuid4(), "tenant_id": tenant_id, **asdict(record)}
        for record in records
    ]
    stmt = insert(AffiliateTransaction).values(payloads)
    overwrite = {
        column: stmt.excluded[column]
        for column in TRANSACTION_COLUMNS
        if column not in _NATURAL_KEY_COLUMNS
    }
    overwrite["updated_at"] = _now_utc()
    return stmt.on_conflict_do_update(
        constraint=NATURAL_KEY_CONSTRAINT,
        set_=overwrite,
    ).returning(AffiliateTransaction.id)


def _to_record(row: AffiliateTransaction) -> TransactionRecord:
    return TransactionRecord(**{column: getattr(row, column) for column in TRANSACTION_COLUMNS})


def _to_click(row: AffiliateClick) -> ClickRecord:
    values = {column: getattr(row, column) for column in CLICK_COLUMNS}
    if values["click_pv"] is None:
        values["click_pv"] = 1
    return ClickRecord(**values)


def _now_utc() -> datetime:
    return datetime.now(tz=timezone.utc)
