"""
app/services/kpi_service.py

Deterministic KPI calculation over order aggregates.

All calculation functions operate on pre-built ``OrderAggregate`` values.
No database logic lives inside the calculation layer; the caller loads
transaction records and runs them through ``OrderAggregator`` first.

Only orders whose status is in the valid-status allowlist (completed or
pending, in any letter case, English or Portuguese) contribute, with one
exception: the status breakdown reports every status it sees.

Formulas
--------
Total GMV       = Σ order.gmv
Net Commission  = Σ order.net_commission
Total Orders    = number of valid orders
Avg Ticket      = Total GMV / Total Orders   (0.0 when there are no orders)
"""

from __future__ import annotations

import logging
import unicodedata
from typing import Iterable, Sequence

from app.domain.affiliate_report import (
    SUB_ID_FIELDS,
    ChannelBreakdownEntry,
    DailySeriesPoint,
    DashboardFilters,
    KPISummary,
    OrderAggregate,
    StatusBreakdownEntry,
    SubIdBreakdownEntry,
)

logger = logging.getLogger(__name__)

VALID_ORDER_STATUSES: frozenset[str] = frozenset(
    {
        "completed",
        "complete",
        "concluído",
        "concluido",
        "pending",
        "pendente",
    }
)

EMPTY_SUB_ID_LABEL = "Sem Sub ID"
EMPTY_CHANNEL_LABEL = "Não identificado"
EMPTY_STATUS_LABEL = "Desconhecido"

_SUB_ID_POSITIONS: dict[str, int] = {
    sub_id_field.value: position for position, sub_id_field in enumerate(SUB_ID_FIELDS)
}


def _fold(value: str) -> str:
    return unicodedata.normalize("NFC", value.strip()).casefold()


def is_valid_status(status: str | None) -> bool:
    """
    Return True when ``status`` is a completed or pending token.
    """

    if status is None:
        return False
    return _fold(status) in VALID_ORDER_STATUSES


def apply_filters(
    orders: Iterable[OrderAggregate], filters: DashboardFilters | None
) -> list[OrderAggregate]:
    """
    Keep the orders that match every non-empty dimension of ``filters``.

    Status and channel compare case-insensitively; sub ids compare exactly
    after trimming. An order with no value for a filtered dimension never
    matches it.
    """

    if filters is None or filters.is_empty:
        return list(orders)

    statuses = {_fold(status) for status in filters.statuses}
    channels = {_fold(channel) for channel in filters.channels}
    sub_id_sets = [{value.strip() for value in values} for values in filters.sub_ids]

    kept: list[OrderAggregate] = []
    for order in orders:
        if statuses and (order.status is None or _fold(order.status) not in statuses):
            continue
        if channels and (order.channel is None or _fold(order.channel) not in channels):
            continue
        if any(
            accepted and order.sub_ids[position] not in accepted
            for position, accepted in enumerate(sub_id_sets)
        ):
            continue
        kept.append(order)
    return kept


class KPIService:
    """
    Stateless KPI calculation engine.

    Usage::

        orders = OrderAggregator().aggregate(records)
        summary = KPIService().calculate_summary(orders)
        print(summary.avg_ticket)
    """

    def valid_orders(self, orders: Iterable[OrderAggregate]) -> list[OrderAggregate]:
        return [order for order in orders if is_valid_status(order.status)]

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def calculate_summary(self, orders: Sequence[OrderAggregate]) -> KPISummary:
        """
        Calculate total GMV, net commission, order count and average ticket.

        Edge cases
        ----------
        * No valid orders → every figure is ``0`` / ``0.0``; the average
          ticket is never NaN or infinite.
        """
        valid = self.valid_orders(orders)
        total_gmv = sum(order.gmv for order in valid)
        net_commission = sum(order.net_commission for order in valid)
        total_orders = len(valid)
        avg_ticket = total_gmv / total_orders if total_orders > 0 else 0.0

        logger.debug(
            "KPI summary computed: %d valid of %d orders, gmv=%.2f commission=%.2f",
            total_orders,
            len(orders),
            total_gmv,
            net_commission,
        )
        return KPISummary(
            total_gmv=float(total_gmv),
            net_commission=float(net_commission),
            total_orders=total_orders,
            avg_ticket=float(avg_ticket),
        )

    # ------------------------------------------------------------------
    # Daily series
    # ------------------------------------------------------------------

    def daily_series(self, orders: Sequence[OrderAggregate]) -> list[DailySeriesPoint]:
        """
        Group valid orders by source business day, ascending by day.

        Orders without a purchase day are left out.
        """
        days: dict[str, list[OrderAggregate]] = {}
        for order in self.valid_orders(orders):
            if order.day is None:
                continue
            days.setdefault(order.day, []).append(order)

        return [
            DailySeriesPoint(
                day=day,
                gmv=float(sum(order.gmv for order in day_orders)),
                net_commission=float(sum(order.net_commission for order in day_orders)),
                orders=len(day_orders),
            )
            for day, day_orders in sorted(days.items())
        ]

    # ------------------------------------------------------------------
    # Sub ID breakdown
    # ------------------------------------------------------------------

    def sub_id_breakdown(
        self,
        orders: Sequence[OrderAggregate],
        *,
        field: str = "sub_id1",
    ) -> list[SubIdBreakdownEntry]:
        """
        Net commission and order count per value of one sub id field.

        Each order counts once, under the sub id of its first item row.
        Empty sub ids are grouped under ``EMPTY_SUB_ID_LABEL``. Entries are
        sorted by commission, highest first.
        """
        position = _SUB_ID_POSITIONS.get(field)
        if position is None:
            raise ValueError(
                f"Unknown sub id field {field!r}. Allowed: {', '.join(_SUB_ID_POSITIONS)}."
            )

        commission: dict[str, float] = {}
        counts: dict[str, int] = {}
        for order in self.valid_orders(orders):
            sub_id = order.sub_ids[position] or EMPTY_SUB_ID_LABEL
            commission[sub_id] = commission.get(sub_id, 0.0) + order.net_commission
            counts[sub_id] = counts.get(sub_id, 0) + 1

        entries = [
            SubIdBreakdownEntry(sub_id=sub_id, net_commission=value, orders=counts[sub_id])
            for sub_id, value in commission.items()
        ]
        entries.sort(key=lambda entry: (-entry.net_commission, entry.sub_id))
        return entries

    # ------------------------------------------------------------------
    # Channel / status breakdowns
    # ------------------------------------------------------------------

    def channel_breakdown(self, orders: Sequence[OrderAggregate]) -> list[ChannelBreakdownEntry]:
        """
        GMV and order count per channel over valid orders, highest GMV first.

        Orders without a channel are grouped under ``EMPTY_CHANNEL_LABEL``.
        """
        gmv: dict[str, float] = {}
        counts: dict[str, int] = {}
        for order in self.valid_orders(orders):
            channel = order.channel or EMPTY_CHANNEL_LABEL
            gmv[channel] = gmv.get(channel, 0.0) + order.gmv
            counts[channel] = counts.get(channel, 0) + 1

        entries = [
            ChannelBreakdownEntry(channel=channel, gmv=value, orders=counts[channel])
            for channel, value in gmv.items()
        ]
        entries.sort(key=lambda entry: (-entry.gmv, entry.channel))
        return entries

    def status_breakdown(self, orders: Sequence[OrderAggregate]) -> list[StatusBreakdownEntry]:
        """
        Net commission, GMV and order count per raw status value.

        Every order counts here, whatever its status, so cancelled or
        unpaid commission is visible next to the valid figures. Orders
        without a status are grouped under ``EMPTY_STATUS_LABEL``. Entries
        are sorted by commission, highest first.
        """
        totals: dict[str, list[float]] = {}
        counts: dict[str, int] = {}
        for order in orders:
            status = (order.status or "").strip() or EMPTY_STATUS_LABEL
            commission_gmv = totals.setdefault(status, [0.0, 0.0])
            commission_gmv[0] += order.net_commission
            commission_gmv[1] += order.gmv
            counts[status] = counts.get(status, 0) + 1

        entries = [
            StatusBreakdownEntry(
                status=status,
                net_commission=commission,
                gmv=gmv,
                orders=counts[status],
            )
            for status, (commission, gmv) in totals.items()
        ]
        entries.sort(key=lambda entry: (-entry.net_commission, entry.status))
        return entries
