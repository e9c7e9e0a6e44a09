"""
app/mappers package marker.
"""

from app.mappers.header_mapper import (
    CLICK_HEADER_ALIASES,
    TRANSACTION_HEADER_ALIASES,
    HeaderMapper,
    build_header_lookup,
)
from app.mappers.schema_detector import detect_report_type, normalize_header

__all__ = [
    "CLICK_HEADER_ALIASES",
    "TRANSACTION_HEADER_ALIASES",
    "HeaderMapper",
    "build_header_lookup",
    "detect_report_type",
    "normalize_header",
]
