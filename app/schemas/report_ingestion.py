"""
app/schemas/report_ingestion.py

Response schemas for report ingestion endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.affiliate_report import IngestionStatus, IngestionSummary, ReportType


class ReportValidationErrorResponse(BaseModel):
    """
    API response model for one row-level validation error.
    """

    row_number: int = Field(..., ge=1)
    message: str
    column: str | None = None
    value: str | None = None


class ReportIngestionSummaryResponse(BaseModel):
    """
    API response model for one report ingestion run.
    """

    report_type: ReportType
    status: IngestionStatus
    rows_total: int = Field(..., ge=0)
    rows_accepted: int = Field(..., ge=0)
    rows_failed: int = Field(..., ge=0)
    duplicates_removed: int = Field(..., ge=0)
    validation_errors: list[ReportValidationErrorResponse] = Field(default_factory=list)
    error_message: str | None = None

    @classmethod
    def from_summary(cls, summary: IngestionSummary) -> "ReportIngestionSummaryResponse":
        return cls(
            report_type=summary.report_type,
            status=summary.status,
            rows_total=summary.rows_total,
            rows_accepted=summary.rows_accepted,
            rows_failed=summary.rows_failed,
            duplicates_removed=summary.duplicates_removed,
            validation_errors=[
                ReportValidationErrorResponse(
                    row_number=error.row_number,
                    column=error.column,
                    message=error.message,
                    value=error.value,
                )
                for error in summary.validation_errors
            ],
            error_message=summary.error_message,
        )
