"""
app/services/deduplicator.py

Last-wins deduplication of transaction records on their natural key.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from app.domain.affiliate_report import TransactionRecord


@dataclass(frozen=True)
class DeduplicationResult:
    records: list[TransactionRecord]
    duplicates_removed: int


def deduplicate_transactions(records: Sequence[TransactionRecord]) -> DeduplicationResult:
    """
    Collapse records sharing ``order_id|item_id``.

    A later record replaces an earlier one with the same key but keeps the
    earlier record's position, so the output order is the first-seen order
    of each key. Running this on its own output changes nothing.
    """

    latest: dict[str, TransactionRecord] = {}
    for record in records:
        latest[record.natural_key] = record

    return DeduplicationResult(
        records=list(latest.values()),
        duplicates_removed=len(records) - len(latest),
    )
