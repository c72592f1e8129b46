"""Status derivation for due-date items and progress reports."""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol

from caseload.backend.src.services.temporal import is_before

STATUS_PENDING = "pending"
STATUS_OVERDUE = "overdue"
STATUS_COMPLETED = "completed"
STATUS_SCHEDULED = "scheduled"
STATUS_IN_PROGRESS = "in-progress"

DUE_ITEM_STATUSES = (STATUS_PENDING, STATUS_OVERDUE, STATUS_COMPLETED)
PROGRESS_REPORT_STATUSES = (*DUE_ITEM_STATUSES, STATUS_SCHEDULED, STATUS_IN_PROGRESS)

# Driven by report scheduling rather than by the due date.
EXTERNALLY_DRIVEN_STATUSES = frozenset({STATUS_SCHEDULED, STATUS_IN_PROGRESS})


class DueBearing(Protocol):
    status: str
    due_date: date | datetime | str
    completed_date: datetime | None


def compute_status(item: DueBearing, now: datetime) -> str:
    """Return the status ``item`` should have at ``now``.

    Completion is sticky. Otherwise an item is overdue once its due date is a
    calendar day before today, and pending until then.
    """

    if item.status == STATUS_COMPLETED or item.completed_date is not None:
        return STATUS_COMPLETED
    if item.status in EXTERNALLY_DRIVEN_STATUSES:
        return item.status
    if is_before(item.due_date, now):
        return STATUS_OVERDUE
    return STATUS_PENDING


def mark_completed(item: DueBearing, now: datetime) -> DueBearing:
    item.completed_date = now
    item.status = STATUS_COMPLETED
    return item


def mark_uncompleted(item: DueBearing, now: datetime) -> DueBearing:
    """Clear completion and re-derive the status from the due date."""

    item.completed_date = None
    item.status = STATUS_PENDING
    item.status = compute_status(item, now)
    return item


__all__ = [
    "DUE_ITEM_STATUSES",
    "DueBearing",
    "EXTERNALLY_DRIVEN_STATUSES",
    "PROGRESS_REPORT_STATUSES",
    "STATUS_COMPLETED",
    "STATUS_IN_PROGRESS",
    "STATUS_OVERDUE",
    "STATUS_PENDING",
    "STATUS_SCHEDULED",
    "compute_status",
    "mark_completed",
    "mark_uncompleted",
]
