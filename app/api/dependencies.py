"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from datetime import date

from fastapi import File, HTTPException, Query, UploadFile, status

from app.domain.affiliate_report import DashboardFilters

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}

# Filter value meaning "do not filter this dimension".
ALL_FILTER_VALUE = "all"


def get_report_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded report is a CSV by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    is_csv_filename = filename.endswith(".csv")
    is_csv_content_type = content_type in CSV_CONTENT_TYPES

    if not is_csv_filename and not is_csv_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are allowed.",
        )

    return file


def get_tenant_id(
    tenant_id: str = Query(..., min_length=1, max_length=64, description="Tenant owning the records"),
) -> str:
    tenant = tenant_id.strip()
    if not tenant:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="tenant_id must not be blank.",
        )
    return tenant


class DateRange:
    """
    Inclusive display-timezone date range taken from query parameters.
    """

    def __init__(
        self,
        start_date: date = Query(..., description="First display date (YYYY-MM-DD)"),
        end_date: date = Query(..., description="Last display date (YYYY-MM-DD)"),
    ) -> None:
        if end_date < start_date:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="end_date must not be before start_date.",
            )
        self.start_date = start_date
        self.end_date = end_date


def _split_filter_values(values: list[str] | None) -> tuple[str, ...]:
    """
    Flatten repeated and comma-separated query values; ``all`` clears the
    filter.
    """

    if not values:
        return ()
    items = [item.strip() for value in values for item in value.split(",")]
    items = [item for item in items if item]
    if any(item.casefold() == ALL_FILTER_VALUE for item in items):
        return ()
    return tuple(dict.fromkeys(items))


def get_dashboard_filters(
    status_filter: list[str] | None = Query(
        default=None, alias="status", description="Order statuses, repeated or comma-separated"
    ),
    channel: list[str] | None = Query(default=None, description="Channels, repeated or comma-separated"),
    sub_id1: list[str] | None = Query(default=None),
    sub_id2: list[str] | None = Query(default=None),
    sub_id3: list[str] | None = Query(default=None),
    sub_id4: list[str] | None = Query(default=None),
    sub_id5: list[str] | None = Query(default=None),
) -> DashboardFilters:
    return DashboardFilters(
        statuses=_split_filter_values(status_filter),
        channels=_split_filter_values(channel),
        sub_ids=tuple(
            _split_filter_values(values)
            for values in (sub_id1, sub_id2, sub_id3, sub_id4, sub_id5)
        ),
    )
