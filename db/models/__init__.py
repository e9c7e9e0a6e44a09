"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.affiliate_click import AffiliateClick
from db.models.affiliate_transaction import AffiliateTransaction
from db.models.upload_history import UploadHistory

__all__ = [
    "AffiliateClick",
    "AffiliateTransaction",
    "UploadHistory",
]
