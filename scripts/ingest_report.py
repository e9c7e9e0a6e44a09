"""
Ingest one affiliate report file from the command line.

Usage:
    python scripts/ingest_report.py --tenant-id acme reports/orders.csv

Prints the ingestion summary as JSON. Exit status is 0 on success, 1 when
the run ended in the error state, and 2 when the file could not be read or
recognized.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import asdict
from pathlib import Path

from app.domain.affiliate_report import IngestionStatus
from app.domain.errors import DetectionError, ParseFatalError
from app.services.report_ingestion_service import get_report_ingestion_service
from db.session import session_scope


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ingest one affiliate report CSV.")
    parser.add_argument(
        "--tenant-id",
        dest="tenant_id",
        required=True,
        help="Tenant owning the ingested records.",
    )
    parser.add_argument("path", type=Path, help="Path to the report CSV file.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    content = args.path.read_bytes()
    service = get_report_ingestion_service()
    try:
        with session_scope() as db:
            summary = service.ingest_report(
                content=content,
                file_name=args.path.name,
                tenant_id=args.tenant_id,
                db=db,
            )
    except (DetectionError, ParseFatalError) as exc:
        print(json.dumps({"status": IngestionStatus.ERROR.value, "error_message": str(exc)}, indent=2))
        return 2

    payload = asdict(summary)
    payload["report_type"] = summary.report_type.value
    payload["status"] = summary.status.value
    print(json.dumps(payload, indent=2))
    return 0 if summary.status is IngestionStatus.SUCCESS else 1


if __name__ == "__main__":
    raise SystemExit(main())
