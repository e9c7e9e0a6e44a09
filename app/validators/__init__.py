"""
app/validators package marker.
"""

from app.validators.record_builder import CLICK_FIELDS, TRANSACTION_FIELDS, RecordBuilder

__all__ = [
    "CLICK_FIELDS",
    "RecordBuilder",
    "TRANSACTION_FIELDS",
]
