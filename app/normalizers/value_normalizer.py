"""
app/normalizers/value_normalizer.py

Typed parsing of raw report cells.

Every parser returns ``None`` for input it cannot interpret; an absent value
is never coerced to zero or to an empty string.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from dateutil import parser as date_parser

from app.domain.affiliate_report import CanonicalField, FieldKind

# Source platform reports are written in UTC+8 wall-clock time.
DEFAULT_NAIVE_TIMEZONE = timezone(timedelta(hours=8))

_CURRENCY_NOISE = re.compile(r"R\$|[$€£\s]")
_INTEGER = re.compile(r"^[+-]?\d+$")
_ISO_DATETIME = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})(?:\s+(\d{2}):(\d{2}):(\d{2}))?$"
)
_DAY_FIRST_DATETIME = re.compile(
    r"^(\d{1,2})/(\d{1,2})/(\d{4})(?:\s+(\d{1,2}):(\d{2})(?::(\d{2}))?)?$"
)
_FALLBACK_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


class ValueNormalizer:
    """
    Parses raw cell text into the value kind of a canonical field.
    """

    def __init__(self, *, naive_timezone: tzinfo = DEFAULT_NAIVE_TIMEZONE) -> None:
        self._naive_timezone = naive_timezone
        self._parsers: dict[FieldKind, Callable[[str | None], Any]] = {
            FieldKind.CURRENCY: self.parse_currency,
            FieldKind.PERCENTAGE: self.parse_percentage,
            FieldKind.DATETIME: self.parse_datetime,
            FieldKind.INTEGER: self.parse_integer,
            FieldKind.TEXT: self.parse_text,
        }

    def normalize(self, canonical_field: CanonicalField, value: str | None) -> Any:
        """
        Parse ``value`` according to the kind declared by ``canonical_field``.
        """

        return self._parsers[canonical_field.kind](value)

    @staticmethod
    def parse_currency(value: str | None) -> float | None:
        """
        Parse a locale-variant amount.

        ``"21.9"`` is already dot-decimal, ``"21,90"`` uses a decimal comma,
        and ``"1.250,50"`` uses dots for thousands and a decimal comma.
        """

        if value is None:
            return None
        cleaned = _CURRENCY_NOISE.sub("", value)
        if not cleaned or set(cleaned) == {"-"}:
            return None

        has_dot = "." in cleaned
        has_comma = "," in cleaned
        if has_dot and has_comma:
            cleaned = cleaned.replace(".", "").replace(",", ".")
        elif has_comma:
            cleaned = cleaned.replace(",", ".")

        # Decimal accepts exponent notation; report amounts never use it.
        if "e" in cleaned or "E" in cleaned:
            return None
        try:
            amount = Decimal(cleaned)
        except (InvalidOperation, ValueError):
            return None
        if not amount.is_finite():
            return None
        return float(amount)

    @classmethod
    def parse_percentage(cls, value: str | None) -> float | None:
        if value is None:
            return None
        amount = cls.parse_currency(value.strip().rstrip("%"))
        if amount is None:
            return None
        return amount / 100

    def parse_datetime(self, value: str | None) -> datetime | None:
        """
        Parse a report timestamp into a timezone-aware UTC datetime.

        Patterns are tried in order: ``YYYY-MM-DD[ HH:mm:ss]``, then
        ``D/M/YYYY[ H:mm[:ss]]``, then a generic ISO-8601 / free-form parse.
        Naive values are read as wall-clock time in the configured timezone.
        """

        if value is None:
            return None
        raw = value.strip()
        if not raw:
            return None

        # A value shaped like one of the fixed patterns is judged by that
        # pattern alone; an impossible date there is never re-read by the
        # generic parser.
        iso_match = _ISO_DATETIME.match(raw)
        day_first_match = _DAY_FIRST_DATETIME.match(raw)
        if iso_match is not None:
            year, month, day, hours, minutes, seconds = iso_match.groups()
            parsed = _build_datetime(year, month, day, hours, minutes, seconds)
        elif day_first_match is not None:
            day, month, year, hours, minutes, seconds = day_first_match.groups()
            parsed = _build_datetime(year, month, day, hours, minutes, seconds)
        else:
            parsed = self._parse_fallback(raw)

        if parsed is None:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=self._naive_timezone)
        return parsed.astimezone(timezone.utc)

    @staticmethod
    def parse_integer(value: str | None) -> int | None:
        if value is None:
            return None
        raw = value.strip()
        if not _INTEGER.match(raw):
            return None
        return int(raw, 10)

    @staticmethod
    def parse_text(value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip()
        return stripped if stripped else None

    @staticmethod
    def _parse_fallback(raw: str) -> datetime | None:
        normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
        try:
            return datetime.fromisoformat(normalized)
        except ValueError:
            pass

        # dateutil fills missing date parts from ``default``; two different
        # defaults only agree when the text names a full calendar date.
        try:
            first = date_parser.parse(raw, dayfirst=True, default=_FALLBACK_DEFAULTS[0])
            second = date_parser.parse(raw, dayfirst=True, default=_FALLBACK_DEFAULTS[1])
        except (ValueError, OverflowError):
            return None
        if first.date() != second.date():
            return None
        return first


def _build_datetime(
    year: str,
    month: str,
    day: str,
    hours: str | None,
    minutes: str | None,
    seconds: str | None,
) -> datetime | None:
    try:
        return datetime(
            int(year),
            int(month),
            int(day),
            int(hours or 0),
            int(minutes or 0),
            int(seconds or 0),
        )
    except ValueError:
        return None
