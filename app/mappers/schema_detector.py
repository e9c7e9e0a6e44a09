"""
app/mappers/schema_detector.py

Header normalization and report family detection.
"""

from __future__ import annotations

from typing import Sequence

from app.domain.affiliate_report import ReportType

_BYTE_ORDER_MARK = "\ufeff"

# Substring tokens, matched against normalized headers. English and
# Portuguese spellings both appear in exports of the same report.
ORDER_TOKENS: tuple[str, ...] = ("order", "pedido")
COMMISSION_TOKENS: tuple[str, ...] = ("commission", "comiss")
CLICK_TOKENS: tuple[str, ...] = ("click", "clique")


def normalize_header(header: str) -> str:
    """
    Lower-case and trim a raw header, dropping a leading byte-order mark.
    """

    return header.lstrip(_BYTE_ORDER_MARK).strip().lower()


def _contains_any(header: str, tokens: Sequence[str]) -> bool:
    return any(token in header for token in tokens)


def detect_report_type(headers: Sequence[str]) -> ReportType:
    """
    Classify a header row as a transaction report, a click report, or neither.

    Rules are evaluated in order: any order or commission header marks a
    transaction report; otherwise any click header that is not also an order
    header marks a click report.
    """

    normalized = [normalize_header(header) for header in headers if header]

    for header in normalized:
        if _contains_any(header, ORDER_TOKENS) or _contains_any(header, COMMISSION_TOKENS):
            return ReportType.TRANSACTIONS

    for header in normalized:
        if _contains_any(header, CLICK_TOKENS) and not _contains_any(header, ORDER_TOKENS):
            return ReportType.CLICKS

    return ReportType.UNRECOGNIZED
