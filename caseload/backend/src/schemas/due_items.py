"""Due-date item and progress report schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

DueItemStatus = Literal["pending", "overdue", "completed"]
ProgressReportStatus = Literal["pending", "overdue", "completed", "scheduled", "in-progress"]
ReportType = Literal["quarterly", "annual"]


def _reject_blank(value: str | None) -> str | None:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


def _reject_null(value: object) -> object:
    if value is None:
        raise ValueError("must not be null")
    return value


class DueDateItemRead(BaseModel):
    """Due item as returned after a status recompute."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None
    due_date: date
    student_id: str | None
    status: str
    completed_date: datetime | None
    category: str | None
    priority: str | None
    created_at: datetime
    updated_at: datetime


class DueDateItemCreate(BaseModel):
    title: str
    due_date: date
    description: str | None = None
    student_id: str | None = None
    category: str | None = None
    priority: str | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        _reject_blank(value)
        return value


class DueDateItemUpdate(BaseModel):
    """Partial update; ``status`` only drives completion or its reversal.

    Omitted fields are left alone. ``title`` and ``due_date`` cannot be
    cleared.
    """

    title: str | None = None
    description: str | None = None
    due_date: date | None = None
    student_id: str | None = None
    category: str | None = None
    priority: str | None = None
    status: DueItemStatus | None = None

    @field_validator("title", "due_date")
    @classmethod
    def _required_when_present(cls, value: object) -> object:
        return _reject_null(value)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        _reject_blank(value)
        return value


class ProgressReportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: str
    report_type: str
    due_date: date
    period_start: date | None
    period_end: date | None
    status: str
    completed_date: datetime | None


class ProgressReportCreate(BaseModel):
    """New report; ``status`` may only preset a scheduling state or completion."""

    student_id: str
    due_date: date
    report_type: ReportType = "quarterly"
    period_start: date | None = None
    period_end: date | None = None
    status: ProgressReportStatus | None = None

    @field_validator("student_id")
    @classmethod
    def _student_not_blank(cls, value: str) -> str:
        _reject_blank(value)
        return value


class ProgressReportUpdate(BaseModel):
    student_id: str | None = None
    due_date: date | None = None
    report_type: ReportType | None = None
    period_start: date | None = None
    period_end: date | None = None
    status: ProgressReportStatus | None = None

    @field_validator("student_id", "due_date", "report_type")
    @classmethod
    def _required_when_present(cls, value: object) -> object:
        return _reject_null(value)


__all__ = [
    "DueDateItemCreate",
    "DueDateItemRead",
    "DueDateItemUpdate",
    "ProgressReportCreate",
    "ProgressReportRead",
    "ProgressReportUpdate",
]
