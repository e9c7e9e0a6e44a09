"""
tests/test_report_ingestion_service.py

Pytest unit tests for ReportIngestionService.

Persistence goes through an in-memory repository that mimics the upsert
semantics of the real table; the session is a MagicMock, so no database is
needed.

Coverage
--------
- Transaction and click runs end in ``success`` with correct counts
- Re-ingesting an identical file does not grow the store or change KPIs
- A failing batch is rolled back, counted as failed, and later batches proceed
- Duplicates are counted separately from failed rows
- Each batch is deduplicated again right before it is written
- Rows missing required fields are counted as failed and never persisted
- Unrecognized headers abort before any write
- Validation error capping
- Upload history is best-effort
"""

from __future__ import annotations

import logging
from typing import Sequence
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from app.domain.affiliate_report import (
    ClickRecord,
    IngestionStatus,
    ReportType,
    TransactionRecord,
)
from app.domain.errors import DetectionError, ParseFatalError
from app.services import report_ingestion_service
from app.services.day_bucketer import DayBucketer
from app.services.deduplicator import DeduplicationResult, deduplicate_transactions
from app.services.kpi_service import KPIService
from app.services.order_aggregation_service import OrderAggregator
from app.services.report_ingestion_service import ReportIngestionService


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeReportRepository:
    """In-memory stand-in for AffiliateReportRepository."""

    def __init__(self, *, fail_on_calls: Sequence[int] = (), fail_history: bool = False) -> None:
        self.transactions: dict[tuple[str, str, int], TransactionRecord] = {}
        self.clicks: list[tuple[str, ClickRecord]] = []
        self.uploads: list[dict] = []
        self.batch_sizes: list[int] = []
        self._fail_on_calls = set(fail_on_calls)
        self._fail_history = fail_history
        self._calls = 0

    def _maybe_fail(self) -> None:
        self._calls += 1
        if self._calls in self._fail_on_calls:
            raise OperationalError("INSERT ...", {}, Exception("connection reset"))

    def upsert_transactions(self, tenant_id: str, records: Sequence[TransactionRecord]) -> int:
        self._maybe_fail()
        keys = [(tenant_id, record.order_id, record.item_id) for record in records]
        assert len(set(keys)) == len(keys), "batch must be unique on the natural key"
        self.batch_sizes.append(len(records))
        for key, record in zip(keys, records):
            self.transactions[key] = record
        return len(records)

    def insert_clicks(self, tenant_id: str, records: Sequence[ClickRecord]) -> int:
        self._maybe_fail()
        self.batch_sizes.append(len(records))
        self.clicks.extend((tenant_id, record) for record in records)
        return len(records)

    def record_upload(self, **kwargs) -> None:
        if self._fail_history:
            raise RuntimeError("history table unavailable")
        self.uploads.append(kwargs)


def _service(repository: FakeReportRepository, **overrides) -> ReportIngestionService:
    settings = {
        "batch_size": 100,
        "max_validation_errors": 500,
        "log_validation_errors": True,
    }
    settings.update(overrides)
    return ReportIngestionService(repository_factory=lambda db: repository, **settings)


def _csv(*lines: str) -> bytes:
    return ("\n".join(lines) + "\n").encode("utf-8")


TRANSACTION_HEADER = (
    "ID do pedido;ID do item;Status do Pedido;Horário do pedido;"
    "Valor de Compra(R$);Comissão líquida do afiliado(R$);Sub_id1"
)

TRANSACTIONS_CSV = _csv(
    TRANSACTION_HEADER,
    "A1;1;Concluído;2024-01-01 10:00:00;10,00;5,00;insta",
    "A1;2;Concluído;2024-01-01 10:00:00;20,00;5,00;insta",
    "B2;1;Pendente;02/01/2024 09:15:00;1.250,50;100,25;",
    "C3;1;Cancelado;2024-01-02 11:00:00;99,00;9,00;tiktok",
)


@pytest.fixture()
def db() -> MagicMock:
    return MagicMock()


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


class TestTransactionIngestion:
    def test_successful_run(self, db: MagicMock) -> None:
        repository = FakeReportRepository()
        summary = _service(repository).ingest_report(
            content=TRANSACTIONS_CSV,
            file_name="orders.csv",
            tenant_id="acme",
            db=db,
        )

        assert summary.report_type is ReportType.TRANSACTIONS
        assert summary.status is IngestionStatus.SUCCESS
        assert summary.rows_total == 4
        assert summary.rows_accepted == 4
        assert summary.rows_failed == 0
        assert summary.duplicates_removed == 0
        assert summary.error_message is None
        assert len(repository.transactions) == 4

        stored = repository.transactions[("acme", "B2", 1)]
        assert stored.actual_amount == pytest.approx(1250.50)
        assert stored.order_status == "Pendente"

    def test_upload_history_recorded_once(self, db: MagicMock) -> None:
        repository = FakeReportRepository()
        _service(repository).ingest_report(
            content=TRANSACTIONS_CSV,
            file_name="orders.csv",
            tenant_id="acme",
            db=db,
        )

        assert repository.uploads == [
            {
                "tenant_id": "acme",
                "file_name": "orders.csv",
                "file_type": "transactions",
                "records_count": 4,
                "file_size_bytes": len(TRANSACTIONS_CSV),
            }
        ]

    def test_reingesting_same_file_is_idempotent(self, db: MagicMock) -> None:
        repository = FakeReportRepository()
        service = _service(repository)
        kpis = KPIService()
        aggregator = OrderAggregator(DayBucketer())

        service.ingest_report(content=TRANSACTIONS_CSV, file_name="a.csv", tenant_id="acme", db=db)
        first_count = len(repository.transactions)
        first_summary = kpis.calculate_summary(
            aggregator.aggregate(list(repository.transactions.values()))
        )

        service.ingest_report(content=TRANSACTIONS_CSV, file_name="a.csv", tenant_id="acme", db=db)
        second_summary = kpis.calculate_summary(
            aggregator.aggregate(list(repository.transactions.values()))
        )

        assert len(repository.transactions) == first_count
        assert second_summary == first_summary
        assert first_summary.total_orders == 2
        assert first_summary.total_gmv == pytest.approx(1280.50)
        assert first_summary.net_commission == pytest.approx(105.25)

    def test_tenants_do_not_collide(self, db: MagicMock) -> None:
        repository = FakeReportRepository()
        service = _service(repository)

        service.ingest_report(content=TRANSACTIONS_CSV, file_name="a.csv", tenant_id="acme", db=db)
        service.ingest_report(content=TRANSACTIONS_CSV, file_name="a.csv", tenant_id="globex", db=db)

        assert len(repository.transactions) == 8

    def test_duplicates_are_not_failures(self, db: MagicMock) -> None:
        repository = FakeReportRepository()
        content = _csv(
            TRANSACTION_HEADER,
            "A1;1;Concluído;2024-01-01 10:00:00;10,00;5,00;insta",
            "A1;1;Concluído;2024-01-01 10:00:00;12,00;6,00;insta",
            "B2;1;Pendente;2024-01-01 10:00:00;3,00;1,00;",
        )

        summary = _service(repository).ingest_report(
            content=content, file_name="dup.csv", tenant_id="acme", db=db
        )

        assert summary.duplicates_removed == 1
        assert summary.rows_failed == 0
        assert summary.rows_accepted == 2
        assert repository.transactions[("acme", "A1", 1)].actual_amount == pytest.approx(12.0)

    def test_batches_are_deduplicated_before_write(
        self, db: MagicMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls: list[int] = []

        def file_pass_passthrough(records):
            calls.append(len(records))
            if len(calls) == 1:
                return DeduplicationResult(records=list(records), duplicates_removed=0)
            return deduplicate_transactions(records)

        monkeypatch.setattr(
            report_ingestion_service, "deduplicate_transactions", file_pass_passthrough
        )
        repository = FakeReportRepository()
        content = _csv(
            TRANSACTION_HEADER,
            "A1;1;Concluído;2024-01-01 10:00:00;10,00;5,00;insta",
            "A1;1;Concluído;2024-01-01 10:00:00;12,00;6,00;insta",
            "B2;1;Pendente;2024-01-01 10:00:00;3,00;1,00;",
        )

        summary = _service(repository, batch_size=2).ingest_report(
            content=content, file_name="dup.csv", tenant_id="acme", db=db
        )

        assert calls == [3, 2, 1]
        assert repository.batch_sizes == [1, 1]
        assert summary.duplicates_removed == 1
        assert summary.rows_accepted == 2
        assert summary.rows_failed == 0
        assert repository.transactions[("acme", "A1", 1)].actual_amount == pytest.approx(12.0)

    def test_missing_order_id_is_failed_and_not_persisted(self, db: MagicMock) -> None:
        repository = FakeReportRepository()
        content = _csv(
            TRANSACTION_HEADER,
            ";1;Concluído;2024-01-01 10:00:00;10,00;5,00;insta",
            "B2;1;Pendente;2024-01-01 10:00:00;3,00;1,00;",
        )

        summary = _service(repository).ingest_report(
            content=content, file_name="x.csv", tenant_id="acme", db=db
        )

        assert summary.rows_failed == 1
        assert summary.rows_accepted == 1
        assert [(error.row_number, error.column) for error in summary.validation_errors] == [
            (2, "order_id")
        ]
        assert list(repository.transactions) == [("acme", "B2", 1)]

    def test_rows_are_written_in_fixed_size_batches(self, db: MagicMock) -> None:
        repository = FakeReportRepository()
        _service(repository, batch_size=3).ingest_report(
            content=TRANSACTIONS_CSV, file_name="x.csv", tenant_id="acme", db=db
        )

        assert repository.batch_sizes == [3, 1]
        assert db.commit.call_count == 3  # two batches plus upload history


class TestBatchFailure:
    def test_failed_batch_is_counted_and_loop_continues(self, db: MagicMock) -> None:
        repository = FakeReportRepository(fail_on_calls=(1,))
        summary = _service(repository, batch_size=3).ingest_report(
            content=TRANSACTIONS_CSV, file_name="x.csv", tenant_id="acme", db=db
        )

        assert summary.status is IngestionStatus.SUCCESS
        assert summary.rows_failed == 3
        assert summary.rows_accepted == 1
        assert list(repository.transactions) == [("acme", "C3", 1)]
        db.rollback.assert_called_once()

    def test_unexpected_error_ends_run_in_error_state(self, db: MagicMock) -> None:
        repository = FakeReportRepository()
        repository.upsert_transactions = MagicMock(side_effect=[3, KeyError("boom")])

        summary = _service(repository, batch_size=3).ingest_report(
            content=TRANSACTIONS_CSV, file_name="x.csv", tenant_id="acme", db=db
        )

        assert summary.status is IngestionStatus.ERROR
        assert summary.rows_accepted == 3
        assert summary.error_message is not None
        assert repository.uploads == []
        db.rollback.assert_called_once()


# ---------------------------------------------------------------------------
# Clicks
# ---------------------------------------------------------------------------


class TestClickIngestion:
    def test_clicks_are_inserted(self, db: MagicMock) -> None:
        repository = FakeReportRepository()
        content = _csv(
            "Click id,Click Time,Region,Sub_id1",
            "1,2024-01-01 10:00:00,SP,insta",
            "2,2024-01-01 10:00:00,SP,insta",
            "3,,RJ,",
        )

        summary = _service(repository).ingest_report(
            content=content, file_name="clicks.csv", tenant_id="acme", db=db
        )

        assert summary.report_type is ReportType.CLICKS
        assert summary.rows_accepted == 2
        assert summary.rows_failed == 1
        assert summary.duplicates_removed == 0
        assert [record.click_pv for _, record in repository.clicks] == [1, 1]
        assert repository.uploads[0]["file_type"] == "clicks"


# ---------------------------------------------------------------------------
# Fatal errors and ambient behaviour
# ---------------------------------------------------------------------------


class TestFatalErrors:
    def test_unrecognized_headers_abort_before_writes(self, db: MagicMock) -> None:
        repository = FakeReportRepository()
        with pytest.raises(DetectionError) as exc_info:
            _service(repository).ingest_report(
                content=_csv("name,email", "a,b"), file_name="x.csv", tenant_id="acme", db=db
            )

        assert exc_info.value.headers == ("name", "email")
        assert repository.transactions == {}
        assert repository.uploads == []
        db.commit.assert_not_called()

    def test_undecodable_file_is_fatal(self, db: MagicMock) -> None:
        with pytest.raises(ParseFatalError):
            _service(FakeReportRepository()).ingest_report(
                content=b"\xff\xfeO\x00r\x00", file_name="x.csv", tenant_id="acme", db=db
            )


class TestAmbient:
    def test_validation_errors_are_capped(self, db: MagicMock) -> None:
        rows = [";1;Concluído;;;;" for _ in range(5)]
        summary = _service(FakeReportRepository(), max_validation_errors=2).ingest_report(
            content=_csv(TRANSACTION_HEADER, *rows), file_name="x.csv", tenant_id="acme", db=db
        )

        assert summary.rows_failed == 5
        assert len(summary.validation_errors) == 2

    def test_upload_history_failure_does_not_change_summary(
        self, db: MagicMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        repository = FakeReportRepository(fail_history=True)
        with caplog.at_level(logging.WARNING):
            summary = _service(repository).ingest_report(
                content=TRANSACTIONS_CSV, file_name="x.csv", tenant_id="acme", db=db
            )

        assert summary.status is IngestionStatus.SUCCESS
        assert summary.rows_accepted == 4
        assert "Upload history write failed" in caplog.text

    def test_state_transitions_are_logged(self, db: MagicMock, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="app.services.report_ingestion_service"):
            _service(FakeReportRepository()).ingest_report(
                content=TRANSACTIONS_CSV, file_name="x.csv", tenant_id="acme", db=db
            )

        assert "idle -> parsing" in caplog.text
        assert "parsing -> uploading" in caplog.text
        assert "uploading -> success" in caplog.text
