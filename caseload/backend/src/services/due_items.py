"""Service layer for due-date items and progress reports.

Statuses are recomputed on every read and written back only for rows whose
stored value is stale.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, timedelta
from typing import Any, TypeVar

import structlog
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from caseload.backend.src.models import DueDateItem, ProgressReport
from caseload.backend.src.services.metrics import due_status_corrections_total
from caseload.backend.src.services.status_lifecycle import (
    EXTERNALLY_DRIVEN_STATUSES,
    STATUS_COMPLETED,
    STATUS_PENDING,
    compute_status,
    mark_completed,
    mark_uncompleted,
)

LOGGER = structlog.get_logger(__name__)

DueModel = TypeVar("DueModel", DueDateItem, ProgressReport)

DUE_ITEM_FIELDS: frozenset[str] = frozenset(
    {"title", "description", "due_date", "student_id", "category", "priority"}
)
DUE_ITEM_REQUIRED: frozenset[str] = frozenset({"title", "due_date"})

PROGRESS_REPORT_FIELDS: frozenset[str] = frozenset(
    {"student_id", "report_type", "due_date", "period_start", "period_end"}
)
PROGRESS_REPORT_REQUIRED: frozenset[str] = frozenset({"student_id", "report_type", "due_date"})

DUE_ITEM_LABEL = "Due date item"
PROGRESS_REPORT_LABEL = "Progress report"


def _now(now: datetime | None) -> datetime:
    return now or datetime.now()


def refresh_statuses(
    session: Session, items: Sequence[DueModel], now: datetime | None = None
) -> int:
    """Recompute statuses in place, persisting only the rows that changed."""

    current = _now(now)
    corrected = 0
    for item in items:
        derived = compute_status(item, current)
        if derived == item.status:
            continue
        LOGGER.info(
            "status_recomputed",
            entity=item.__tablename__,
            item_id=item.id,
            previous=item.status,
            status=derived,
        )
        item.status = derived
        item.updated_at = current
        session.add(item)
        corrected += 1

    if corrected:
        session.commit()
        entity = items[0].__tablename__
        due_status_corrections_total.labels(entity=entity).inc(corrected)
    return corrected


def _get_or_404(session: Session, model: type[DueModel], item_id: int, label: str) -> DueModel:
    item = session.get(model, item_id)
    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{label} not found",
        )
    return item


def _apply_changes(
    item: DueModel,
    changes: dict[str, Any],
    fields: frozenset[str],
    required: frozenset[str],
) -> None:
    # A null for a required column means "leave unchanged".
    for field_name, value in changes.items():
        if field_name not in fields:
            continue
        if value is None and field_name in required:
            continue
        setattr(item, field_name, value)


def _apply_requested_status(item: DueModel, requested: str | None, now: datetime) -> None:
    """Honour an explicitly requested status, else re-derive it.

    ``completed`` marks completion, a scheduling state is taken as given, and
    ``pending`` or ``overdue`` reverse any completion before re-deriving.
    """

    if requested == STATUS_COMPLETED:
        if item.completed_date is None:
            mark_completed(item, now)
        item.status = STATUS_COMPLETED
    elif requested in EXTERNALLY_DRIVEN_STATUSES:
        item.completed_date = None
        item.status = requested
    elif requested is not None:
        mark_uncompleted(item, now)
    else:
        item.status = compute_status(item, now)


def _save(session: Session, item: DueModel, now: datetime) -> DueModel:
    item.updated_at = now
    session.add(item)
    session.commit()
    session.refresh(item)
    return item


def _upcoming(
    session: Session, model: type[DueModel], days: int, now: datetime | None
) -> list[DueModel]:
    current = _now(now)
    today = current.date()
    query = session.query(model).filter(
        model.status != STATUS_COMPLETED,
        model.due_date >= today,
        model.due_date <= today + timedelta(days=days),
    )
    if model is DueDateItem:
        query = query.order_by(model.due_date.asc(), model.priority.desc())
    else:
        query = query.order_by(model.due_date.asc())
    items = query.all()
    refresh_statuses(session, items, current)
    return items


def list_due_items(
    session: Session,
    *,
    student_id: str | None = None,
    status_filter: str | None = None,
    category: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    now: datetime | None = None,
) -> list[DueDateItem]:
    """Return due items ordered by due date, with statuses brought current."""

    query = session.query(DueDateItem)
    if student_id:
        query = query.filter(DueDateItem.student_id == student_id)
    if category:
        query = query.filter(DueDateItem.category == category)
    if start_date:
        query = query.filter(DueDateItem.due_date >= start_date)
    if end_date:
        query = query.filter(DueDateItem.due_date <= end_date)
    items = query.order_by(DueDateItem.due_date.asc(), DueDateItem.priority.desc()).all()

    refresh_statuses(session, items, now)
    if status_filter:
        items = [item for item in items if item.status == status_filter]
    return items


def list_upcoming_due_items(
    session: Session, days: int, now: datetime | None = None
) -> list[DueDateItem]:
    """Return open items due between today and ``days`` days from now."""

    return _upcoming(session, DueDateItem, days, now)


def get_due_item(session: Session, item_id: int, now: datetime | None = None) -> DueDateItem:
    item = _get_or_404(session, DueDateItem, item_id, DUE_ITEM_LABEL)
    refresh_statuses(session, [item], now)
    return item


def create_due_item(
    session: Session,
    *,
    title: str,
    due_date: date,
    description: str | None = None,
    student_id: str | None = None,
    category: str | None = None,
    priority: str | None = None,
    now: datetime | None = None,
) -> DueDateItem:
    """Create a due item with its initial status derived from the due date."""

    current = _now(now)
    item = DueDateItem(
        title=title.strip(),
        description=description,
        due_date=due_date,
        student_id=student_id,
        category=category,
        priority=priority,
        status=STATUS_PENDING,
        created_at=current,
        updated_at=current,
    )
    item.status = compute_status(item, current)
    session.add(item)
    session.commit()
    session.refresh(item)
    return item


def update_due_item(
    session: Session,
    item_id: int,
    changes: dict[str, Any],
    now: datetime | None = None,
) -> DueDateItem:
    """Apply field changes, honouring explicit completion or reversal."""

    current = _now(now)
    item = _get_or_404(session, DueDateItem, item_id, DUE_ITEM_LABEL)
    _apply_changes(item, changes, DUE_ITEM_FIELDS, DUE_ITEM_REQUIRED)
    if isinstance(changes.get("title"), str):
        item.title = changes["title"].strip()
    _apply_requested_status(item, changes.get("status"), current)
    return _save(session, item, current)


def complete_due_item(session: Session, item_id: int, now: datetime | None = None) -> DueDateItem:
    current = _now(now)
    item = _get_or_404(session, DueDateItem, item_id, DUE_ITEM_LABEL)
    mark_completed(item, current)
    _save(session, item, current)
    LOGGER.info("due_item_completed", item_id=item.id)
    return item


def uncomplete_due_item(session: Session, item_id: int, now: datetime | None = None) -> DueDateItem:
    current = _now(now)
    item = _get_or_404(session, DueDateItem, item_id, DUE_ITEM_LABEL)
    mark_uncompleted(item, current)
    _save(session, item, current)
    LOGGER.info("due_item_reopened", item_id=item.id, status=item.status)
    return item


def delete_due_item(session: Session, item_id: int) -> None:
    item = _get_or_404(session, DueDateItem, item_id, DUE_ITEM_LABEL)
    session.delete(item)
    session.commit()


def list_progress_reports(
    session: Session,
    *,
    student_id: str | None = None,
    status_filter: str | None = None,
    now: datetime | None = None,
) -> list[ProgressReport]:
    query = session.query(ProgressReport)
    if student_id:
        query = query.filter(ProgressReport.student_id == student_id)
    reports = query.order_by(ProgressReport.due_date.asc()).all()

    refresh_statuses(session, reports, now)
    if status_filter:
        reports = [report for report in reports if report.status == status_filter]
    return reports


def list_upcoming_progress_reports(
    session: Session, days: int, now: datetime | None = None
) -> list[ProgressReport]:
    """Return reports not yet completed that fall due within ``days`` days."""

    return _upcoming(session, ProgressReport, days, now)


def get_progress_report(
    session: Session, report_id: int, now: datetime | None = None
) -> ProgressReport:
    report = _get_or_404(session, ProgressReport, report_id, PROGRESS_REPORT_LABEL)
    refresh_statuses(session, [report], now)
    return report


def create_progress_report(
    session: Session,
    *,
    student_id: str,
    due_date: date,
    report_type: str = "quarterly",
    period_start: date | None = None,
    period_end: date | None = None,
    status: str | None = None,
    now: datetime | None = None,
) -> ProgressReport:
    """Create a report; without a requested status it is derived from the due date."""

    current = _now(now)
    report = ProgressReport(
        student_id=student_id.strip(),
        report_type=report_type,
        due_date=due_date,
        period_start=period_start,
        period_end=period_end,
        status=STATUS_PENDING,
        created_at=current,
        updated_at=current,
    )
    _apply_requested_status(report, status, current)
    _save(session, report, current)
    LOGGER.info("progress_report_created", report_id=report.id, status=report.status)
    return report


def update_progress_report(
    session: Session,
    report_id: int,
    changes: dict[str, Any],
    now: datetime | None = None,
) -> ProgressReport:
    current = _now(now)
    report = _get_or_404(session, ProgressReport, report_id, PROGRESS_REPORT_LABEL)
    _apply_changes(report, changes, PROGRESS_REPORT_FIELDS, PROGRESS_REPORT_REQUIRED)
    _apply_requested_status(report, changes.get("status"), current)
    return _save(session, report, current)


def complete_progress_report(
    session: Session, report_id: int, now: datetime | None = None
) -> ProgressReport:
    current = _now(now)
    report = _get_or_404(session, ProgressReport, report_id, PROGRESS_REPORT_LABEL)
    mark_completed(report, current)
    return _save(session, report, current)


def uncomplete_progress_report(
    session: Session, report_id: int, now: datetime | None = None
) -> ProgressReport:
    current = _now(now)
    report = _get_or_404(session, ProgressReport, report_id, PROGRESS_REPORT_LABEL)
    mark_uncompleted(report, current)
    return _save(session, report, current)


def delete_progress_report(session: Session, report_id: int) -> None:
    report = _get_or_404(session, ProgressReport, report_id, PROGRESS_REPORT_LABEL)
    session.delete(report)
    session.commit()


__all__ = [
    "complete_due_item",
    "complete_progress_report",
    "create_due_item",
    "create_progress_report",
    "delete_due_item",
    "delete_progress_report",
    "get_due_item",
    "get_progress_report",
    "list_due_items",
    "list_progress_reports",
    "list_upcoming_due_items",
    "list_upcoming_progress_reports",
    "refresh_statuses",
    "uncomplete_due_item",
    "uncomplete_progress_report",
    "update_due_item",
    "update_progress_report",
]
