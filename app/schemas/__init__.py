"""
app/schemas package marker.
"""

from app.schemas.dashboard import (
    ChannelBreakdownEntryResponse,
    ChannelBreakdownResponse,
    ClickCountEntryResponse,
    ClickOverviewResponse,
    DailySeriesPointResponse,
    DailySeriesResponse,
    KPISummaryResponse,
    StatusBreakdownEntryResponse,
    StatusBreakdownResponse,
    SubIdBreakdownEntryResponse,
    SubIdBreakdownResponse,
)
from app.schemas.report_ingestion import (
    ReportIngestionSummaryResponse,
    ReportValidationErrorResponse,
)

__all__ = [
    "ChannelBreakdownEntryResponse",
    "ChannelBreakdownResponse",
    "ClickCountEntryResponse",
    "ClickOverviewResponse",
    "DailySeriesPointResponse",
    "DailySeriesResponse",
    "KPISummaryResponse",
    "ReportIngestionSummaryResponse",
    "ReportValidationErrorResponse",
    "StatusBreakdownEntryResponse",
    "StatusBreakdownResponse",
    "SubIdBreakdownEntryResponse",
    "SubIdBreakdownResponse",
]
