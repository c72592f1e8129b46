"""Due-date item endpoints."""

from __future__ import annotations

from datetime import date
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from caseload.backend.src.core.config import get_settings
from caseload.backend.src.db import get_session_dependency
from caseload.backend.src.models import DueDateItem
from caseload.backend.src.schemas.due_items import (
    DueDateItemCreate,
    DueDateItemRead,
    DueDateItemUpdate,
)
from caseload.backend.src.services import due_items as due_item_service

LOGGER = structlog.get_logger(__name__)

router = APIRouter(prefix="/due-date-items", tags=["due-date-items"])

SessionDep = Annotated[Session, Depends(get_session_dependency)]


@router.get("", response_model=list[DueDateItemRead])
def list_due_items(
    session: SessionDep,
    student_id: Annotated[str | None, Query(alias="studentId")] = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    category: str | None = None,
    start_date: Annotated[date | None, Query(alias="startDate")] = None,
    end_date: Annotated[date | None, Query(alias="endDate")] = None,
) -> list[DueDateItem]:
    """Return due items, correcting any stale statuses first."""

    return due_item_service.list_due_items(
        session,
        student_id=student_id,
        status_filter=status_filter,
        category=category,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/upcoming", response_model=list[DueDateItemRead])
def list_upcoming(
    session: SessionDep,
    days: Annotated[int | None, Query(ge=0)] = None,
) -> list[DueDateItem]:
    """Return open items due within the upcoming window."""

    window = days if days is not None else get_settings().upcoming_window_days
    return due_item_service.list_upcoming_due_items(session, window)


@router.get("/{item_id}", response_model=DueDateItemRead)
def get_due_item(item_id: int, session: SessionDep) -> DueDateItem:
    return due_item_service.get_due_item(session, item_id)


@router.post("", response_model=DueDateItemRead, status_code=status.HTTP_201_CREATED)
def create_due_item(payload: DueDateItemCreate, session: SessionDep) -> DueDateItem:
    item = due_item_service.create_due_item(session, **payload.model_dump())
    LOGGER.info("due_item_created", item_id=item.id, status=item.status)
    return item


@router.put("/{item_id}", response_model=DueDateItemRead)
def update_due_item(
    item_id: int, payload: DueDateItemUpdate, session: SessionDep
) -> DueDateItem:
    return due_item_service.update_due_item(
        session, item_id, payload.model_dump(exclude_unset=True)
    )


@router.post("/{item_id}/complete", response_model=DueDateItemRead)
def complete_due_item(item_id: int, session: SessionDep) -> DueDateItem:
    return due_item_service.complete_due_item(session, item_id)


@router.post("/{item_id}/uncomplete", response_model=DueDateItemRead)
def uncomplete_due_item(item_id: int, session: SessionDep) -> DueDateItem:
    return due_item_service.uncomplete_due_item(session, item_id)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_due_item(item_id: int, session: SessionDep) -> Response:
    due_item_service.delete_due_item(session, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
