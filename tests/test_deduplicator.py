"""
tests/test_deduplicator.py

Pytest unit tests for last-wins transaction deduplication.
"""

from __future__ import annotations

from app.domain.affiliate_report import TransactionRecord
from app.services.deduplicator import deduplicate_transactions


def _record(order_id: str, item_id: int, amount: float) -> TransactionRecord:
    return TransactionRecord(order_id=order_id, item_id=item_id, actual_amount=amount)


class TestDeduplicateTransactions:
    def test_last_record_wins(self) -> None:
        result = deduplicate_transactions([_record("A", 1, 10.0), _record("A", 1, 15.0)])

        assert result.duplicates_removed == 1
        assert [record.actual_amount for record in result.records] == [15.0]

    def test_keeps_first_seen_key_order(self) -> None:
        records = [
            _record("A", 1, 1.0),
            _record("B", 1, 2.0),
            _record("A", 1, 3.0),
            _record("C", 2, 4.0),
        ]
        result = deduplicate_transactions(records)

        assert [record.natural_key for record in result.records] == ["A|1", "B|1", "C|2"]
        assert result.records[0].actual_amount == 3.0

    def test_same_order_different_items_are_kept(self) -> None:
        result = deduplicate_transactions([_record("A", 1, 1.0), _record("A", 2, 1.0)])

        assert result.duplicates_removed == 0
        assert len(result.records) == 2

    def test_idempotent(self) -> None:
        records = [_record("A", 1, 1.0), _record("A", 1, 2.0), _record("B", 3, 5.0)]
        once = deduplicate_transactions(records)
        twice = deduplicate_transactions(once.records)

        assert twice.records == once.records
        assert twice.duplicates_removed == 0

    def test_empty_input(self) -> None:
        result = deduplicate_transactions([])
        assert result.records == []
        assert result.duplicates_removed == 0
