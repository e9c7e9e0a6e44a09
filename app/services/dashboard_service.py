"""
app/services/dashboard_service.py

Read side of the affiliate dashboard.

Stored transaction lines for a display-date range are loaded, collapsed into
order aggregates, narrowed by the optional dashboard filters and handed to
``KPIService``. Stored clicks for the same kind of range go through
``ClickAnalyticsService``. Nothing computed here is persisted.
"""

from __future__ import annotations

import logging
from datetime import date
from functools import lru_cache
from typing import Callable

from sqlalchemy.orm import Session

from app.domain.affiliate_report import (
    ChannelBreakdownEntry,
    ClickOverview,
    DailySeriesPoint,
    DashboardFilters,
    KPISummary,
    OrderAggregate,
    StatusBreakdownEntry,
    SubIdBreakdownEntry,
)
from app.repositories.affiliate_report_repository import AffiliateReportRepository
from app.services.click_analytics_service import ClickAnalyticsService
from app.services.day_bucketer import DayBucketer, get_day_bucketer
from app.services.kpi_service import KPIService, apply_filters
from app.services.order_aggregation_service import OrderAggregator

logger = logging.getLogger(__name__)


class DashboardService:
    """
    Produces KPI summaries, daily series, breakdowns and click analytics for
    one tenant.
    """

    def __init__(
        self,
        *,
        bucketer: DayBucketer | None = None,
        kpi_service: KPIService | None = None,
        click_service: ClickAnalyticsService | None = None,
        repository_factory: Callable[[Session], AffiliateReportRepository] | None = None,
    ) -> None:
        self._bucketer = bucketer or get_day_bucketer()
        self._aggregator = OrderAggregator(self._bucketer)
        self._kpi_service = kpi_service or KPIService()
        self._click_service = click_service or ClickAnalyticsService(self._bucketer)
        self._repository_factory = repository_factory or AffiliateReportRepository

    def load_orders(
        self,
        *,
        db: Session,
        tenant_id: str,
        start_date: date,
        end_date: date,
        filters: DashboardFilters | None = None,
    ) -> list[OrderAggregate]:
        """
        Aggregate stored lines purchased between ``start_date`` and
        ``end_date`` (display-timezone dates, inclusive), then keep the
        orders matching ``filters``.
        """
        start, end = self._bucketer.display_range_bounds(start_date, end_date)
        records = self._repository_factory(db).list_transactions(
            tenant_id=tenant_id,
            start=start,
            end=end,
        )
        orders = apply_filters(self._aggregator.aggregate(records), filters)
        logger.debug(
            "Dashboard range tenant=%r %s..%s -> %d lines, %d orders",
            tenant_id,
            start.isoformat(),
            end.isoformat(),
            len(records),
            len(orders),
        )
        return orders

    def summary(
        self,
        *,
        db: Session,
        tenant_id: str,
        start_date: date,
        end_date: date,
        filters: DashboardFilters | None = None,
    ) -> KPISummary:
        orders = self.load_orders(
            db=db, tenant_id=tenant_id, start_date=start_date, end_date=end_date, filters=filters
        )
        return self._kpi_service.calculate_summary(orders)

    def daily_series(
        self,
        *,
        db: Session,
        tenant_id: str,
        start_date: date,
        end_date: date,
        filters: DashboardFilters | None = None,
    ) -> list[DailySeriesPoint]:
        orders = self.load_orders(
            db=db, tenant_id=tenant_id, start_date=start_date, end_date=end_date, filters=filters
        )
        return self._kpi_service.daily_series(orders)

    def sub_id_breakdown(
        self,
        *,
        db: Session,
        tenant_id: str,
        start_date: date,
        end_date: date,
        field: str = "sub_id1",
        filters: DashboardFilters | None = None,
    ) -> list[SubIdBreakdownEntry]:
        orders = self.load_orders(
            db=db, tenant_id=tenant_id, start_date=start_date, end_date=end_date, filters=filters
        )
        return self._kpi_service.sub_id_breakdown(orders, field=field)

    def channel_breakdown(
        self,
        *,
        db: Session,
        tenant_id: str,
        start_date: date,
        end_date: date,
        filters: DashboardFilters | None = None,
    ) -> list[ChannelBreakdownEntry]:
        orders = self.load_orders(
            db=db, tenant_id=tenant_id, start_date=start_date, end_date=end_date, filters=filters
        )
        return self._kpi_service.channel_breakdown(orders)

    def status_breakdown(
        self,
        *,
        db: Session,
        tenant_id: str,
        start_date: date,
        end_date: date,
        filters: DashboardFilters | None = None,
    ) -> list[StatusBreakdownEntry]:
        orders = self.load_orders(
            db=db, tenant_id=tenant_id, start_date=start_date, end_date=end_date, filters=filters
        )
        return self._kpi_service.status_breakdown(orders)

    def click_overview(
        self,
        *,
        db: Session,
        tenant_id: str,
        start_date: date,
        end_date: date,
        referrer_limit: int = 10,
    ) -> ClickOverview:
        """
        Click totals, daily counts, regions and top referrers for clicks
        made between ``start_date`` and ``end_date`` (display-timezone
        dates, inclusive).
        """
        start, end = self._bucketer.display_range_bounds(start_date, end_date)
        clicks = self._repository_factory(db).list_clicks(
            tenant_id=tenant_id,
            start=start,
            end=end,
        )
        return self._click_service.overview(clicks, referrer_limit=referrer_limit)


@lru_cache(maxsize=1)
def get_dashboard_service() -> DashboardService:
    return DashboardService()
