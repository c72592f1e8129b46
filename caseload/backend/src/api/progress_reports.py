"""Progress report endpoints."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from caseload.backend.src.core.config import get_settings
from caseload.backend.src.db import get_session_dependency
from caseload.backend.src.models import ProgressReport
from caseload.backend.src.schemas.due_items import (
    ProgressReportCreate,
    ProgressReportRead,
    ProgressReportUpdate,
)
from caseload.backend.src.services import due_items as due_item_service

LOGGER = structlog.get_logger(__name__)

router = APIRouter(prefix="/progress-reports", tags=["progress-reports"])

SessionDep = Annotated[Session, Depends(get_session_dependency)]


@router.get("", response_model=list[ProgressReportRead])
def list_progress_reports(
    session: SessionDep,
    student_id: Annotated[str | None, Query(alias="studentId")] = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
) -> list[ProgressReport]:
    return due_item_service.list_progress_reports(
        session, student_id=student_id, status_filter=status_filter
    )


@router.get("/upcoming", response_model=list[ProgressReportRead])
def list_upcoming(
    session: SessionDep,
    days: Annotated[int | None, Query(ge=0)] = None,
) -> list[ProgressReport]:
    """Return reports not yet completed that fall due within the window."""

    window = days if days is not None else get_settings().upcoming_window_days
    return due_item_service.list_upcoming_progress_reports(session, window)


@router.get("/{report_id}", response_model=ProgressReportRead)
def get_progress_report(report_id: int, session: SessionDep) -> ProgressReport:
    return due_item_service.get_progress_report(session, report_id)


@router.post("", response_model=ProgressReportRead, status_code=status.HTTP_201_CREATED)
def create_progress_report(payload: ProgressReportCreate, session: SessionDep) -> ProgressReport:
    return due_item_service.create_progress_report(session, **payload.model_dump())


@router.put("/{report_id}", response_model=ProgressReportRead)
def update_progress_report(
    report_id: int, payload: ProgressReportUpdate, session: SessionDep
) -> ProgressReport:
    report = due_item_service.update_progress_report(
        session, report_id, payload.model_dump(exclude_unset=True)
    )
    LOGGER.info("progress_report_updated", report_id=report.id, status=report.status)
    return report


@router.post("/{report_id}/complete", response_model=ProgressReportRead)
def complete_progress_report(report_id: int, session: SessionDep) -> ProgressReport:
    return due_item_service.complete_progress_report(session, report_id)


@router.post("/{report_id}/uncomplete", response_model=ProgressReportRead)
def uncomplete_progress_report(report_id: int, session: SessionDep) -> ProgressReport:
    return due_item_service.uncomplete_progress_report(session, report_id)


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_progress_report(report_id: int, session: SessionDep) -> Response:
    due_item_service.delete_progress_report(session, report_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
