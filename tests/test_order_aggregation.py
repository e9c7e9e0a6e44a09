"""
tests/test_order_aggregation.py

Pytest unit tests for OrderAggregator.

Coverage
--------
- GMV summed across items, commission taken once per order (max)
- Absent amounts skipped rather than counted as zero
- Status fallback to order_status
- Source business day of the first purchase time
- Channel from the first item that has one
- First-seen order of orders
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.domain.affiliate_report import TransactionRecord
from app.services.day_bucketer import DayBucketer
from app.services.order_aggregation_service import OrderAggregator


@pytest.fixture()
def aggregator() -> OrderAggregator:
    return OrderAggregator(DayBucketer(source_utc_offset_hours=8, display_utc_offset_hours=-3))


def _line(order_id: str, item_id: int, **kwargs) -> TransactionRecord:
    return TransactionRecord(order_id=order_id, item_id=item_id, **kwargs)


class TestOrderAggregator:
    def test_gmv_sums_and_commission_counts_once(self, aggregator: OrderAggregator) -> None:
        orders = aggregator.aggregate(
            [
                _line("A", 1, actual_amount=10.0, net_commission=5.0),
                _line("A", 2, actual_amount=20.0, net_commission=5.0),
            ]
        )

        assert len(orders) == 1
        assert orders[0].gmv == pytest.approx(30.0)
        assert orders[0].net_commission == pytest.approx(5.0)

    def test_commission_is_max_across_items(self, aggregator: OrderAggregator) -> None:
        orders = aggregator.aggregate(
            [
                _line("A", 1, net_commission=2.0),
                _line("A", 2, net_commission=7.5),
                _line("A", 3, net_commission=None),
            ]
        )
        assert orders[0].net_commission == pytest.approx(7.5)

    def test_absent_values_are_skipped(self, aggregator: OrderAggregator) -> None:
        orders = aggregator.aggregate([_line("A", 1), _line("A", 2, actual_amount=4.0)])

        assert orders[0].gmv == pytest.approx(4.0)
        assert orders[0].net_commission == 0.0

    def test_status_falls_back_to_order_status(self, aggregator: OrderAggregator) -> None:
        orders = aggregator.aggregate(
            [
                _line("A", 1, status=None, order_status="Pendente"),
                _line("B", 1, status="Completed", order_status="Pendente"),
            ]
        )
        assert [order.status for order in orders] == ["Pendente", "Completed"]

    def test_day_is_source_business_day(self, aggregator: OrderAggregator) -> None:
        orders = aggregator.aggregate(
            [
                _line("A", 1),
                _line("A", 2, purchase_time=datetime(2024, 1, 1, 16, 30, tzinfo=timezone.utc)),
            ]
        )
        assert orders[0].day == "2024-01-02"

    def test_order_without_purchase_time_has_no_day(self, aggregator: OrderAggregator) -> None:
        assert aggregator.aggregate([_line("A", 1)])[0].day is None

    def test_sub_ids_come_from_first_item(self, aggregator: OrderAggregator) -> None:
        orders = aggregator.aggregate(
            [
                _line("A", 1, sub_id1="insta", sub_id3="reels"),
                _line("A", 2, sub_id1="tiktok"),
            ]
        )
        assert orders[0].sub_ids == ("insta", None, "reels", None, None)

    def test_channel_is_first_non_empty_item_channel(self, aggregator: OrderAggregator) -> None:
        orders = aggregator.aggregate(
            [
                _line("A", 1),
                _line("A", 2, channel="Instagram"),
                _line("A", 3, channel="Websites"),
                _line("B", 1),
            ]
        )

        assert [order.channel for order in orders] == ["Instagram", None]

    def test_first_seen_order(self, aggregator: OrderAggregator) -> None:
        orders = aggregator.aggregate([_line("B", 1), _line("A", 1), _line("B", 2)])
        assert [order.order_id for order in orders] == ["B", "A"]
