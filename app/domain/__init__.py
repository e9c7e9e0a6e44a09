"""
app/domain package marker.
"""

from app.domain.affiliate_report import (
    REQUIRED_FIELDS,
    SUB_ID_FIELDS,
    CanonicalField,
    ChannelBreakdownEntry,
    ClickCountEntry,
    ClickOverview,
    ClickRecord,
    ClickSummary,
    DailySeriesPoint,
    DashboardFilters,
    FieldKind,
    IngestionStatus,
    IngestionSummary,
    KPISummary,
    OrderAggregate,
    ReportType,
    RowValidationError,
    StatusBreakdownEntry,
    SubIdBreakdownEntry,
    TransactionRecord,
)
from app.domain.errors import DetectionError, ParseFatalError, PersistenceError, ReportIngestionError

__all__ = [
    "CanonicalField",
    "ChannelBreakdownEntry",
    "ClickCountEntry",
    "ClickOverview",
    "ClickRecord",
    "ClickSummary",
    "DailySeriesPoint",
    "DashboardFilters",
    "DetectionError",
    "FieldKind",
    "IngestionStatus",
    "IngestionSummary",
    "KPISummary",
    "OrderAggregate",
    "ParseFatalError",
    "PersistenceError",
    "REQUIRED_FIELDS",
    "ReportIngestionError",
    "ReportType",
    "RowValidationError",
    "SUB_ID_FIELDS",
    "StatusBreakdownEntry",
    "SubIdBreakdownEntry",
    "TransactionRecord",
]
