"""
app/services package marker.
"""

from app.services.click_analytics_service import ClickAnalyticsService
from app.services.dashboard_service import DashboardService, get_dashboard_service
from app.services.day_bucketer import DayBucketer, get_day_bucketer
from app.services.deduplicator import DeduplicationResult, deduplicate_transactions
from app.services.kpi_service import KPIService, apply_filters, is_valid_status
from app.services.order_aggregation_service import OrderAggregator
from app.services.report_ingestion_service import (
    ReportIngestionService,
    get_report_ingestion_service,
)

__all__ = [
    "ClickAnalyticsService",
    "DashboardService",
    "get_dashboard_service",
    "DayBucketer",
    "get_day_bucketer",
    "DeduplicationResult",
    "deduplicate_transactions",
    "KPIService",
    "apply_filters",
    "is_valid_status",
    "OrderAggregator",
    "ReportIngestionService",
    "get_report_ingestion_service",
]
