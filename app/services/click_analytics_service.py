"""
app/services/click_analytics_service.py

Aggregates stored click events for the dashboard.

Every stored row is one click. Totals count rows; the distinct counts skip
empty values. Days are source business days, like the order series.
"""

from __future__ import annotations

import logging
from typing import Sequence

from app.domain.affiliate_report import (
    ClickCountEntry,
    ClickOverview,
    ClickRecord,
    ClickSummary,
)
from app.services.day_bucketer import DayBucketer, get_day_bucketer

logger = logging.getLogger(__name__)

EMPTY_REGION_LABEL = "Desconhecida"
EMPTY_REFERRER_LABEL = "Direto"
DEFAULT_TOP_REFERRERS = 10


class ClickAnalyticsService:
    def __init__(self, bucketer: DayBucketer | None = None) -> None:
        self._bucketer = bucketer or get_day_bucketer()

    def summarize(self, clicks: Sequence[ClickRecord]) -> ClickSummary:
        return ClickSummary(
            total_clicks=len(clicks),
            unique_regions=len({click.region for click in clicks if click.region}),
            unique_referrers=len({click.referrer for click in clicks if click.referrer}),
            unique_sub_ids=len({click.sub_id1 for click in clicks if click.sub_id1}),
        )

    def clicks_by_day(self, clicks: Sequence[ClickRecord]) -> list[ClickCountEntry]:
        """
        Click counts per source day, ascending by day.
        """
        counts: dict[str, int] = {}
        for click in clicks:
            day = self._bucketer.source_day(click.click_time)
            counts[day] = counts.get(day, 0) + 1
        return [ClickCountEntry(key=day, clicks=count) for day, count in sorted(counts.items())]

    def clicks_by_region(self, clicks: Sequence[ClickRecord]) -> list[ClickCountEntry]:
        return _ranked(click.region or EMPTY_REGION_LABEL for click in clicks)

    def top_referrers(
        self,
        clicks: Sequence[ClickRecord],
        *,
        limit: int = DEFAULT_TOP_REFERRERS,
    ) -> list[ClickCountEntry]:
        """
        The ``limit`` most frequent referrers; clicks without one are direct.
        """
        return _ranked(click.referrer or EMPTY_REFERRER_LABEL for click in clicks)[: max(0, limit)]

    def overview(
        self,
        clicks: Sequence[ClickRecord],
        *,
        referrer_limit: int = DEFAULT_TOP_REFERRERS,
    ) -> ClickOverview:
        logger.debug("Click overview over %d clicks", len(clicks))
        return ClickOverview(
            summary=self.summarize(clicks),
            daily=self.clicks_by_day(clicks),
            regions=self.clicks_by_region(clicks),
            referrers=self.top_referrers(clicks, limit=referrer_limit),
        )


def _ranked(keys) -> list[ClickCountEntry]:
    counts: dict[str, int] = {}
    for key in keys:
        counts[key] = counts.get(key, 0) + 1
    entries = [ClickCountEntry(key=key, clicks=count) for key, count in counts.items()]
    entries.sort(key=lambda entry: (-entry.clicks, entry.key))
    return entries
