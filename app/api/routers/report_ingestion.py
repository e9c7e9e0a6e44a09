"""
app/api/routers/report_ingestion.py

Affiliate report upload endpoint.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_report_upload, get_tenant_id
from app.domain.errors import DetectionError, ParseFatalError
from app.schemas.report_ingestion import ReportIngestionSummaryResponse
from app.services.report_ingestion_service import (
    ReportIngestionService,
    get_report_ingestion_service,
)
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["ingestion"])


@router.post("/upload", response_model=ReportIngestionSummaryResponse)
def upload_report(
    file: UploadFile = Depends(get_report_upload),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
    ingestion_service: ReportIngestionService = Depends(get_report_ingestion_service),
) -> ReportIngestionSummaryResponse:
    """
    Ingest one transactions or clicks report.

    Partial batch failures still return 200; they show up in the counts.
    """

    try:
        content = file.file.read()
        summary = ingestion_service.ingest_report(
            content=content,
            file_name=file.filename or "upload.csv",
            tenant_id=tenant_id,
            db=db,
        )
    except (DetectionError, ParseFatalError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    finally:
        file.file.close()

    return ReportIngestionSummaryResponse.from_summary(summary)
