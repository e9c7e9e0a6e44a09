"""
tests/test_report_api.py

HTTP-level tests for the upload and dashboard routers.

A bare FastAPI app is assembled from the routers so no environment or
database is needed; services and the session dependency are overridden.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.routers import dashboard_router, report_ingestion_router
from app.domain.affiliate_report import ClickRecord, TransactionRecord
from app.services.dashboard_service import DashboardService, get_dashboard_service
from app.services.day_bucketer import DayBucketer
from app.services.report_ingestion_service import (
    ReportIngestionService,
    get_report_ingestion_service,
)
from db.session import get_db


class InMemoryRepository:
    def __init__(self) -> None:
        self.transactions: dict[tuple[str, str, int], TransactionRecord] = {}
        self.clicks: list[tuple[str, ClickRecord]] = []
        self.uploads: list[dict] = []

    def upsert_transactions(self, tenant_id: str, records: Sequence[TransactionRecord]) -> int:
        for record in records:
            self.transactions[(tenant_id, record.order_id, record.item_id)] = record
        return len(records)

    def insert_clicks(self, tenant_id: str, records: Sequence[ClickRecord]) -> int:
        self.clicks.extend((tenant_id, record) for record in records)
        return len(records)

    def record_upload(self, **kwargs) -> None:
        self.uploads.append(kwargs)

    def list_transactions(
        self, *, tenant_id: str, start: datetime, end: datetime
    ) -> list[TransactionRecord]:
        return [
            record
            for (tenant, _, _), record in self.transactions.items()
            if tenant == tenant_id
            and record.purchase_time is not None
            and start <= record.purchase_time <= end
        ]

    def list_clicks(self, *, tenant_id: str, start: datetime, end: datetime) -> list[ClickRecord]:
        return [
            record
            for tenant, record in self.clicks
            if tenant == tenant_id and start <= record.click_time <= end
        ]


@pytest.fixture()
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture()
def client(repository: InMemoryRepository) -> TestClient:
    application = FastAPI()
    application.include_router(report_ingestion_router)
    application.include_router(dashboard_router)

    def _db():
        yield MagicMock()

    application.dependency_overrides[get_db] = _db
    application.dependency_overrides[get_report_ingestion_service] = lambda: ReportIngestionService(
        batch_size=100,
        max_validation_errors=50,
        log_validation_errors=False,
        repository_factory=lambda db: repository,
    )
    application.dependency_overrides[get_dashboard_service] = lambda: DashboardService(
        bucketer=DayBucketer(source_utc_offset_hours=8, display_utc_offset_hours=-3),
        repository_factory=lambda db: repository,
    )
    return TestClient(application)


REPORT = (
    "Order id,Item id,Order Status,Purchase Time,Actual Amount,Net Commission,Sub_id1,Channel\n"
    "A1,1,Completed,2024-01-02 00:30:00,10.00,5.00,insta,Instagram\n"
    "A1,2,Completed,2024-01-02 00:30:00,20.00,5.00,insta,Instagram\n"
    "B2,1,Pending,2024-01-01 20:00:00,40.00,4.00,,\n"
    "C3,1,Cancelled,2024-01-01 21:00:00,80.00,8.00,tiktok,Websites\n"
    ",3,Completed,2024-01-01 20:00:00,1.00,1.00,,\n"
).encode("utf-8")

CLICKS = (
    "Click Time,Region,Referrer,Sub_id1\n"
    "2024-01-01 20:00:00,SP,instagram.com,insta\n"
    "2024-01-01 21:00:00,SP,instagram.com,insta\n"
    "2024-01-01 22:00:00,,,\n"
    "2023-12-01 10:00:00,RJ,google.com,search\n"
).encode("utf-8")

DAY = {"tenant_id": "acme", "start_date": "2024-01-01", "end_date": "2024-01-01"}


def _upload(client: TestClient, content: bytes = REPORT, name: str = "orders.csv"):
    return client.post(
        "/reports/upload",
        params={"tenant_id": "acme"},
        files={"file": (name, content, "text/csv")},
    )


class TestUploadEndpoint:
    def test_upload_returns_summary(self, client: TestClient) -> None:
        response = _upload(client)

        assert response.status_code == 200
        body = response.json()
        assert body["report_type"] == "transactions"
        assert body["status"] == "success"
        assert body["rows_total"] == 5
        assert body["rows_accepted"] == 4
        assert body["rows_failed"] == 1
        assert body["validation_errors"][0]["column"] == "order_id"

    def test_unrecognized_report_is_bad_request(self, client: TestClient) -> None:
        response = _upload(client, content=b"name,email\na,b\n")

        assert response.status_code == 400
        assert "Could not identify the report type" in response.json()["detail"]

    def test_non_csv_upload_is_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/reports/upload",
            params={"tenant_id": "acme"},
            files={"file": ("orders.pdf", b"%PDF", "application/pdf")},
        )
        assert response.status_code == 400

    def test_tenant_is_required(self, client: TestClient) -> None:
        response = client.post(
            "/reports/upload",
            files={"file": ("orders.csv", REPORT, "text/csv")},
        )
        assert response.status_code == 422


class TestDashboardEndpoints:
    def test_kpis_for_display_day(self, client: TestClient) -> None:
        _upload(client)

        response = client.get(
            "/dashboard/kpis",
            params={"tenant_id": "acme", "start_date": "2024-01-01", "end_date": "2024-01-01"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total_orders"] == 2
        assert body["total_gmv"] == pytest.approx(70.0)
        assert body["net_commission"] == pytest.approx(9.0)
        assert body["avg_ticket"] == pytest.approx(35.0)

    def test_empty_range_has_zero_average(self, client: TestClient) -> None:
        response = client.get(
            "/dashboard/kpis",
            params={"tenant_id": "acme", "start_date": "2023-01-01", "end_date": "2023-01-31"},
        )

        assert response.status_code == 200
        assert response.json()["avg_ticket"] == 0.0

    def test_daily_series_uses_source_day(self, client: TestClient) -> None:
        _upload(client)

        response = client.get(
            "/dashboard/daily",
            params={"tenant_id": "acme", "start_date": "2024-01-01", "end_date": "2024-01-01"},
        )

        points = response.json()["points"]
        assert [(point["day"], point["orders"]) for point in points] == [
            ("2024-01-01", 1),
            ("2024-01-02", 1),
        ]

    def test_sub_id_breakdown(self, client: TestClient) -> None:
        _upload(client)

        response = client.get(
            "/dashboard/sub-ids",
            params={"tenant_id": "acme", "start_date": "2024-01-01", "end_date": "2024-01-01"},
        )

        entries = response.json()["entries"]
        assert [(entry["sub_id"], entry["orders"]) for entry in entries] == [
            ("insta", 1),
            ("Sem Sub ID", 1),
        ]

    def test_unknown_sub_id_field_is_bad_request(self, client: TestClient) -> None:
        response = client.get(
            "/dashboard/sub-ids",
            params={
                "tenant_id": "acme",
                "start_date": "2024-01-01",
                "end_date": "2024-01-01",
                "field": "sub_id7",
            },
        )
        assert response.status_code == 400

    def test_reversed_range_is_bad_request(self, client: TestClient) -> None:
        response = client.get(
            "/dashboard/kpis",
            params={"tenant_id": "acme", "start_date": "2024-01-02", "end_date": "2024-01-01"},
        )
        assert response.status_code == 400

    def test_kpis_filtered_by_channel(self, client: TestClient) -> None:
        _upload(client)

        response = client.get("/dashboard/kpis", params={**DAY, "channel": "instagram"})

        body = response.json()
        assert body["total_orders"] == 1
        assert body["total_gmv"] == pytest.approx(30.0)

    def test_status_filter_accepts_comma_list_and_all(self, client: TestClient) -> None:
        _upload(client)

        pending = client.get("/dashboard/kpis", params={**DAY, "status": "Pending,Unpaid"})
        everything = client.get("/dashboard/kpis", params={**DAY, "status": "all"})

        assert pending.json()["total_orders"] == 1
        assert pending.json()["total_gmv"] == pytest.approx(40.0)
        assert everything.json()["total_orders"] == 2

    def test_sub_id_filter(self, client: TestClient) -> None:
        _upload(client)

        response = client.get("/dashboard/daily", params={**DAY, "sub_id1": ["insta", "nope"]})

        assert [point["day"] for point in response.json()["points"]] == ["2024-01-02"]

    def test_channel_breakdown(self, client: TestClient) -> None:
        _upload(client)

        response = client.get("/dashboard/channels", params=DAY)

        assert response.status_code == 200
        entries = response.json()["entries"]
        assert [(entry["channel"], entry["gmv"]) for entry in entries] == [
            ("Não identificado", 40.0),
            ("Instagram", 30.0),
        ]

    def test_status_breakdown_includes_cancelled(self, client: TestClient) -> None:
        _upload(client)

        response = client.get("/dashboard/statuses", params=DAY)

        assert response.status_code == 200
        entries = response.json()["entries"]
        assert [(entry["status"], entry["net_commission"], entry["orders"]) for entry in entries] == [
            ("Cancelled", 8.0, 1),
            ("Completed", 5.0, 1),
            ("Pending", 4.0, 1),
        ]

    def test_click_overview(self, client: TestClient) -> None:
        upload = _upload(client, content=CLICKS, name="clicks.csv")
        assert upload.json()["report_type"] == "clicks"

        response = client.get("/dashboard/clicks", params=DAY)

        assert response.status_code == 200
        body = response.json()
        assert body["total_clicks"] == 3
        assert body["unique_regions"] == 1
        assert body["unique_referrers"] == 1
        assert body["unique_sub_ids"] == 1
        assert body["daily"] == [{"key": "2024-01-01", "clicks": 3}]
        assert body["regions"] == [
            {"key": "SP", "clicks": 2},
            {"key": "Desconhecida", "clicks": 1},
        ]
        assert body["referrers"] == [
            {"key": "instagram.com", "clicks": 2},
            {"key": "Direto", "clicks": 1},
        ]
