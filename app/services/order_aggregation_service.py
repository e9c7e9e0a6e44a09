"""
app/services/order_aggregation_service.py

Collapses item-level transaction records into one aggregate per order.

GMV is summed across an order's item rows. Net commission is the maximum
across those rows: the platform repeats the order-level commission on
every item line, so summing would count it once per item.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from app.domain.affiliate_report import OrderAggregate, TransactionRecord
from app.services.day_bucketer import DayBucketer, get_day_bucketer

logger = logging.getLogger(__name__)


@dataclass
class _OrderAccumulator:
    order_id: str
    gmv: float = 0.0
    net_commission: float | None = None
    status: str | None = None
    day: str | None = None
    sub_ids: tuple[str | None, ...] = field(default=(None, None, None, None, None))
    channel: str | None = None


class OrderAggregator:
    """
    Groups deduplicated transaction records by ``order_id``.
    """

    def __init__(self, bucketer: DayBucketer | None = None) -> None:
        self._bucketer = bucketer or get_day_bucketer()

    def aggregate(self, records: Sequence[TransactionRecord]) -> list[OrderAggregate]:
        """
        Return one aggregate per order, in first-seen order.

        Absent amounts are skipped rather than counted as zero. An order with
        no commission value on any item reports ``0.0``.
        """

        orders: dict[str, _OrderAccumulator] = {}
        for record in records:
            accumulator = orders.get(record.order_id)
            if accumulator is None:
                accumulator = _OrderAccumulator(
                    order_id=record.order_id,
                    sub_ids=(
                        record.sub_id1,
                        record.sub_id2,
                        record.sub_id3,
                        record.sub_id4,
                        record.sub_id5,
                    ),
                )
                orders[record.order_id] = accumulator

            if record.actual_amount is not None:
                accumulator.gmv += record.actual_amount
            if record.net_commission is not None:
                if accumulator.net_commission is None:
                    accumulator.net_commission = record.net_commission
                else:
                    accumulator.net_commission = max(
                        accumulator.net_commission, record.net_commission
                    )
            if accumulator.status is None:
                accumulator.status = record.status or record.order_status
            if accumulator.channel is None:
                accumulator.channel = record.channel
            if accumulator.day is None and record.purchase_time is not None:
                accumulator.day = self._bucketer.source_day(record.purchase_time)

        logger.debug("Aggregated %d records into %d orders", len(records), len(orders))
        return [
            OrderAggregate(
                order_id=accumulator.order_id,
                gmv=accumulator.gmv,
                net_commission=accumulator.net_commission or 0.0,
                status=accumulator.status,
                day=accumulator.day,
                sub_ids=accumulator.sub_ids,
                channel=accumulator.channel,
            )
            for accumulator in orders.values()
        ]
