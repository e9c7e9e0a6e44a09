"""
app/domain/errors.py

Exceptions raised by the report ingestion flow.
"""

from __future__ import annotations

from typing import Sequence


class ReportIngestionError(Exception):
    """Base exception for report ingestion failures."""


class DetectionError(ReportIngestionError):
    """
    Raised when a header row matches neither report family.

    Fatal: the run stops before any persistence is attempted.
    """

    def __init__(self, message: str, *, headers: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.headers = tuple(headers)


class ParseFatalError(ReportIngestionError):
    """Raised when the uploaded file cannot be decoded or read as CSV."""


class PersistenceError(ReportIngestionError):
    """
    Raised when one batch of records cannot be written.

    Recovered by the ingestion loop: the batch is counted as failed and the
    next batch proceeds.
    """

    def __init__(self, message: str, *, batch_size: int) -> None:
        super().__init__(message)
        self.batch_size = batch_size
