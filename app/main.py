from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Raises RuntimeError listing every problem so the operator can fix them
    in one restart cycle. SQLite and other non-PostgreSQL URLs are rejected.
    """

    from app.config import numeric_setting_errors
    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    database_url = (
        os.getenv("DATABASE_URL", "").strip()
        or os.getenv("CLOUD_DATABASE_URL", "").strip()
        or os.getenv("LOCAL_DATABASE_URL", "").strip()
    )
    if not database_url:
        errors.append(
            "No database URL configured. Set DATABASE_URL, CLOUD_DATABASE_URL "
            "or LOCAL_DATABASE_URL."
        )
    elif not database_url.startswith(("postgres://", "postgresql")):
        errors.append("Database URL must point at PostgreSQL.")

    errors.extend(numeric_setting_errors())

    if errors:
        raise RuntimeError(
            "Startup validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Every report table must exist before traffic is served. Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401  registers report tables on Base.metadata
    from db.base import Base
    from db.session import get_engine

    actual = set(sa_inspect(get_engine()).get_table_names())
    missing = sorted(set(Base.metadata.tables.keys()) - actual)

    if missing:
        logging.getLogger(__name__).critical(
            "Report tables missing from the database: %s. Run 'alembic upgrade head' and restart.",
            ", ".join(missing),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing ({', '.join(missing)})."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema on boot."""
    log = logging.getLogger(__name__)
    _check_db()
    log.info("Database connectivity confirmed")
    _check_schema()
    log.info("Database schema validated")
    yield
    log.info("Shutting down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Affiliate Reports API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import dashboard_router, report_ingestion_router

    application.include_router(report_ingestion_router)
    application.include_router(dashboard_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
