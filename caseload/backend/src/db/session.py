"""SQLAlchemy engine and session factory configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import sessionmaker

from caseload.backend.src.core.config import get_settings

LOGGER = structlog.get_logger(__name__)
PROJECT_ROOT = Path(__file__).resolve().parents[4]


def _normalize_database_url(raw_url: str) -> URL:
    """Return an absolute :class:`~sqlalchemy.engine.URL` for SQLite files."""

    url = make_url(raw_url)
    if not url.drivername.startswith("sqlite"):
        return url

    database = url.database or ""
    if database in {"", ":memory:"}:
        return url

    db_path = Path(database)
    resolved = db_path if db_path.is_absolute() else PROJECT_ROOT / db_path
    return url.set(database=str(resolved.resolve()))


def _connect_args(url: URL) -> dict[str, Any]:
    # Request handlers run in a threadpool; SQLite must allow cross-thread use.
    if url.drivername.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


_settings = get_settings()
_database_url = _normalize_database_url(_settings.database_url)
engine = create_engine(
    _database_url,
    pool_pre_ping=True,
    connect_args=_connect_args(_database_url),
    future=True,
)
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)

LOGGER.info("database_engine_initialized", url=_database_url.render_as_string(hide_password=True))

__all__ = ["engine", "SessionLocal"]
