"""Health check and metrics endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..db import get_session_dependency

router = APIRouter(tags=["health"])


@router.get("/health/live")
def liveness() -> dict[str, str]:
    return {"status": "live"}


@router.get("/health/ready")
def readiness(session: Annotated[Session, Depends(get_session_dependency)]) -> dict[str, str]:
    """Report ready once the database answers a trivial query."""

    session.execute(text("SELECT 1"))
    return {"status": "ready"}


@router.get("/metrics")
def metrics() -> Response:
    """Expose note-generation and status-correction counters."""

    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
