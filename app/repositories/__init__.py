"""
app/repositories package marker.
"""

from app.repositories.affiliate_report_repository import (
    AffiliateReportRepository,
    build_transaction_upsert,
)

__all__ = [
    "AffiliateReportRepository",
    "build_transaction_upsert",
]
