"""
app/services/day_bucketer.py

Calendar-day handling for two fixed, unrelated offsets.

* Source business day: the reporting day of the affiliate platform
  (UTC+8). Used to bucket orders for trend series.
* Display day: the calendar date a user selects (UTC-3). Converted into a
  UTC instant range that bounds queries on stored timestamps.

The two offsets are kept as separate settings and never substitute for one
another.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache

from app.config import get_timezone_settings

DEFAULT_SOURCE_UTC_OFFSET_HOURS = 8
DEFAULT_DISPLAY_UTC_OFFSET_HOURS = -3

DayInput = date | str


class DayBucketer:
    """
    Converts instants to source business days and display dates to query bounds.
    """

    def __init__(
        self,
        *,
        source_utc_offset_hours: float = DEFAULT_SOURCE_UTC_OFFSET_HOURS,
        display_utc_offset_hours: float = DEFAULT_DISPLAY_UTC_OFFSET_HOURS,
    ) -> None:
        self.source_timezone = timezone(timedelta(hours=source_utc_offset_hours))
        self.display_timezone = timezone(timedelta(hours=display_utc_offset_hours))

    def source_day(self, instant: datetime) -> str:
        """
        Return the ``YYYY-MM-DD`` source business day containing ``instant``.

        Naive instants are taken to be UTC, matching stored timestamps.
        """

        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return instant.astimezone(self.source_timezone).date().isoformat()

    def display_day_bounds(self, day: DayInput) -> tuple[datetime, datetime]:
        """
        Return the UTC ``[start, end]`` instants of one display-timezone date.

        ``end`` is the last representable microsecond of the day, so the range
        is meant for inclusive comparisons.
        """

        return self.display_range_bounds(day, day)

    def display_range_bounds(
        self,
        start_day: DayInput,
        end_day: DayInput,
    ) -> tuple[datetime, datetime]:
        """
        Return the UTC ``[start, end]`` instants covering ``start_day`` through
        ``end_day`` inclusive, both read as display-timezone dates.
        """

        start = _coerce_date(start_day)
        end = _coerce_date(end_day)
        if end < start:
            raise ValueError(
                f"Range end {end.isoformat()} is before range start {start.isoformat()}."
            )

        local_start = datetime.combine(start, time.min, tzinfo=self.display_timezone)
        local_end = datetime.combine(end, time.max, tzinfo=self.display_timezone)
        return local_start.astimezone(timezone.utc), local_end.astimezone(timezone.utc)


def _coerce_date(value: DayInput) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


@lru_cache(maxsize=1)
def get_day_bucketer() -> DayBucketer:
    """
    Build and cache the day bucketer with env-driven offsets.
    """

    settings = get_timezone_settings()
    return DayBucketer(
        source_utc_offset_hours=settings.source_utc_offset_hours,
        display_utc_offset_hours=settings.display_utc_offset_hours,
    )
