"""
app/services/report_ingestion_service.py

Service layer for affiliate report ingestion.

One call ingests one complete file and walks the run through

    idle -> parsing -> uploading -> success | error

Detection and read failures end the run in ``parsing`` before anything is
written. Once uploading starts, batches are written strictly one after the
other: each batch is committed before the next begins so a later batch's
upsert always lands after an earlier one for the same natural key. A batch
that fails to persist is rolled back, counted as failed, and the loop moves
on. There is no retry.

Transaction reports are deduplicated on ``order_id|item_id`` twice: over the
whole parsed file, then again inside each batch right before it is written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_report_ingestion_settings
from app.domain.affiliate_report import (
    ClickRecord,
    IngestionStatus,
    IngestionSummary,
    ReportType,
    RowValidationError,
    TransactionRecord,
)
from app.domain.errors import DetectionError, PersistenceError, ReportIngestionError
from app.mappers.header_mapper import HeaderMapper
from app.mappers.schema_detector import detect_report_type
from app.normalizers.value_normalizer import ValueNormalizer
from app.parsing.report_reader import ParsedReport, ReportReader
from app.repositories.affiliate_report_repository import AffiliateReportRepository
from app.services.day_bucketer import get_day_bucketer
from app.services.deduplicator import deduplicate_transactions
from app.validators.record_builder import RecordBuilder

logger = logging.getLogger(__name__)

RepositoryFactory = Callable[[Session], AffiliateReportRepository]

_ALLOWED_TRANSITIONS: dict[IngestionStatus, frozenset[IngestionStatus]] = {
    IngestionStatus.IDLE: frozenset({IngestionStatus.PARSING}),
    IngestionStatus.PARSING: frozenset({IngestionStatus.UPLOADING, IngestionStatus.ERROR}),
    IngestionStatus.UPLOADING: frozenset({IngestionStatus.SUCCESS, IngestionStatus.ERROR}),
    IngestionStatus.SUCCESS: frozenset(),
    IngestionStatus.ERROR: frozenset(),
}

UNRECOGNIZED_REPORT_MESSAGE = (
    "Could not identify the report type. Check that the header row is correct."
)


@dataclass
class _IngestionRun:
    """
    Mutable state of one ingestion run.
    """

    file_name: str
    status: IngestionStatus = IngestionStatus.IDLE
    report_type: ReportType = ReportType.UNRECOGNIZED
    rows_total: int = 0
    rows_accepted: int = 0
    rows_failed: int = 0
    duplicates_removed: int = 0
    validation_errors: list[RowValidationError] = field(default_factory=list)

    def advance(self, target: IngestionStatus) -> None:
        if target not in _ALLOWED_TRANSITIONS[self.status]:
            raise RuntimeError(
                f"Invalid ingestion transition {self.status.value} -> {target.value}."
            )
        logger.info(
            "Report ingestion file=%r status %s -> %s",
            self.file_name,
            self.status.value,
            target.value,
        )
        self.status = target

    def to_summary(self, error_message: str | None = None) -> IngestionSummary:
        return IngestionSummary(
            report_type=self.report_type,
            status=self.status,
            rows_total=self.rows_total,
            rows_accepted=self.rows_accepted,
            rows_failed=self.rows_failed,
            duplicates_removed=self.duplicates_removed,
            validation_errors=list(self.validation_errors),
            error_message=error_message,
        )


class ReportIngestionService:
    """
    Coordinates report reading, detection, mapping, validation,
    deduplication and batch persistence.
    """

    def __init__(
        self,
        *,
        batch_size: int,
        max_validation_errors: int,
        log_validation_errors: bool,
        reader: ReportReader | None = None,
        mapper: HeaderMapper | None = None,
        builder: RecordBuilder | None = None,
        repository_factory: RepositoryFactory | None = None,
    ) -> None:
        self._batch_size = max(1, batch_size)
        self._max_validation_errors = max(1, max_validation_errors)
        self._log_validation_errors = log_validation_errors
        self._reader = reader or ReportReader()
        self._mapper = mapper or HeaderMapper()
        self._builder = builder or RecordBuilder()
        self._repository_factory = repository_factory or AffiliateReportRepository

    def ingest_report(
        self,
        *,
        content: bytes,
        file_name: str,
        tenant_id: str,
        db: Session,
    ) -> IngestionSummary:
        """
        Ingest one report file for ``tenant_id``.

        Raises:
            DetectionError:  the header row matches neither report family.
            ParseFatalError: the file is not UTF-8 or not readable as CSV.

        Any other failure after uploading has started ends the run in the
        ``error`` state; the returned summary keeps the counts accumulated
        up to that point.
        """
        run = _IngestionRun(file_name=file_name)
        run.advance(IngestionStatus.PARSING)

        try:
            report = self._reader.read(content)
            run.rows_total = len(report.rows)
            run.report_type = detect_report_type(report.headers)
            if run.report_type is ReportType.UNRECOGNIZED:
                raise DetectionError(UNRECOGNIZED_REPORT_MESSAGE, headers=report.headers)
        except ReportIngestionError as exc:
            run.advance(IngestionStatus.ERROR)
            logger.warning("Report ingestion aborted file=%r: %s", file_name, exc)
            raise

        records = self._build_records(run=run, report=report)
        if run.report_type is ReportType.TRANSACTIONS:
            deduped = deduplicate_transactions(records)
            records = deduped.records
            run.duplicates_removed += deduped.duplicates_removed

        run.advance(IngestionStatus.UPLOADING)
        repository = self._repository_factory(db)
        try:
            for start in range(0, len(records), self._batch_size):
                batch = records[start : start + self._batch_size]
                if run.report_type is ReportType.TRANSACTIONS:
                    deduped = deduplicate_transactions(batch)
                    batch = deduped.records
                    run.duplicates_removed += deduped.duplicates_removed
                try:
                    run.rows_accepted += self._persist_batch(
                        repository=repository,
                        db=db,
                        tenant_id=tenant_id,
                        report_type=run.report_type,
                        batch=batch,
                    )
                except PersistenceError as exc:
                    run.rows_failed += exc.batch_size
                    logger.error(
                        "Report batch failed file=%r offset=%d size=%d: %s",
                        file_name,
                        start,
                        exc.batch_size,
                        exc.__cause__ or exc,
                    )
        except Exception as exc:  # noqa: BLE001
            db.rollback()
            logger.exception("Report ingestion failed during upload file=%r", file_name)
            run.advance(IngestionStatus.ERROR)
            return run.to_summary(error_message=f"Ingestion stopped: {exc}")

        run.advance(IngestionStatus.SUCCESS)
        self._record_upload(
            repository=repository,
            db=db,
            tenant_id=tenant_id,
            run=run,
            file_size_bytes=len(content),
        )
        logger.info(
            "Report ingested file=%r type=%s total=%d accepted=%d failed=%d duplicates=%d",
            file_name,
            run.report_type.value,
            run.rows_total,
            run.rows_accepted,
            run.rows_failed,
            run.duplicates_removed,
        )
        return run.to_summary()

    # ------------------------------------------------------------------
    # Ingestion internals
    # ------------------------------------------------------------------

    def _build_records(
        self,
        *,
        run: _IngestionRun,
        report: ParsedReport,
    ) -> list:
        mapped_headers = self._mapper.map_headers(report.headers, run.report_type)
        records: list = []

        for row_number, raw_row in report.rows:
            mapped_row = self._mapper.map_row(
                raw_row=raw_row,
                headers=report.headers,
                mapped_headers=mapped_headers,
            )
            if run.report_type is ReportType.TRANSACTIONS:
                record, errors = self._builder.build_transaction(
                    mapped_row=mapped_row,
                    row_number=row_number,
                )
            else:
                record, errors = self._builder.build_click(
                    mapped_row=mapped_row,
                    row_number=row_number,
                )

            if record is None:
                run.rows_failed += 1
                for error in errors:
                    self._record_error(run.validation_errors, error)
                continue
            records.append(record)

        return records

    def _persist_batch(
        self,
        *,
        repository: AffiliateReportRepository,
        db: Session,
        tenant_id: str,
        report_type: ReportType,
        batch: Sequence[TransactionRecord] | Sequence[ClickRecord],
    ) -> int:
        if not batch:
            return 0

        try:
            if report_type is ReportType.TRANSACTIONS:
                written = repository.upsert_transactions(tenant_id, batch)
            else:
                written = repository.insert_clicks(tenant_id, batch)
            db.commit()
            return written
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError(
                "Failed to persist report batch.", batch_size=len(batch)
            ) from exc

    def _record_upload(
        self,
        *,
        repository: AffiliateReportRepository,
        db: Session,
        tenant_id: str,
        run: _IngestionRun,
        file_size_bytes: int,
    ) -> None:
        # At most once, never retried; a failure leaves the summary unchanged.
        try:
            repository.record_upload(
                tenant_id=tenant_id,
                file_name=run.file_name,
                file_type=run.report_type.value,
                records_count=run.rows_accepted,
                file_size_bytes=file_size_bytes,
            )
            db.commit()
        except Exception as exc:  # noqa: BLE001
            db.rollback()
            logger.warning(
                "Upload history write failed file=%r tenant=%r: %s",
                run.file_name,
                tenant_id,
                exc,
            )

    def _record_error(
        self,
        captured_errors: list[RowValidationError],
        error: RowValidationError,
    ) -> None:
        if self._log_validation_errors:
            logger.warning(
                "Report validation error row=%s column=%s message=%s value=%r",
                error.row_number,
                error.column,
                error.message,
                error.value,
            )

        if len(captured_errors) < self._max_validation_errors:
            captured_errors.append(error)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_report_ingestion_service() -> ReportIngestionService:
    """
    Build and cache the ingestion service with env-driven settings.
    """
    settings = get_report_ingestion_settings()
    bucketer = get_day_bucketer()
    return ReportIngestionService(
        batch_size=settings.batch_size,
        max_validation_errors=settings.max_validation_errors,
        log_validation_errors=settings.log_validation_errors,
        builder=RecordBuilder(ValueNormalizer(naive_timezone=bucketer.source_timezone)),
    )
