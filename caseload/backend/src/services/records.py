"""Value types consumed by the timesheet note engine."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

RECURRENCE_NONE = "none"
RECURRENCE_DAILY = "daily"
RECURRENCE_WEEKLY = "weekly"
RECURRENCE_SPECIFIC_DATES = "specific-dates"
RECURRENCE_PATTERNS = (
    RECURRENCE_NONE,
    RECURRENCE_DAILY,
    RECURRENCE_WEEKLY,
    RECURRENCE_SPECIFIC_DATES,
)


@dataclass(frozen=True, slots=True)
class Student:
    """Lookup entry used to label a student on a note."""

    id: str
    name: str | None = None
    grade: str | None = None


@dataclass(frozen=True, slots=True)
class School:
    name: str
    teletherapy: bool = False


@dataclass(frozen=True, slots=True)
class Session:
    """A treatment session row; group sessions share ``group_session_id``."""

    id: str
    student_id: str
    start: datetime
    end: datetime | None = None
    is_direct_services: bool = True
    missed_session: bool = False
    group_session_id: str | None = None


@dataclass(frozen=True, slots=True)
class ArticulationScreener:
    id: str
    student_id: str
    date: datetime


@dataclass(frozen=True, slots=True)
class Meeting:
    id: str
    category: str
    start: datetime
    end: datetime | None = None
    student_id: str | None = None
    activity_subtype: str | None = None


@dataclass(frozen=True, slots=True)
class Communication:
    id: str
    date: datetime
    student_id: str | None = None
    related_to: str | None = None


ActivityRecord = Session | ArticulationScreener | Meeting | Communication


@dataclass(frozen=True, slots=True)
class ScheduledSessionTemplate:
    """A recurring service definition expanded by :mod:`recurrence`.

    Only the field set belonging to ``recurrence_pattern`` is consulted:
    ``day_of_week`` for weekly templates (0 is Sunday) and
    ``specific_dates`` for specific-dates templates.
    """

    id: str
    student_ids: tuple[str, ...]
    start_time: str
    start_date: str
    recurrence_pattern: str = RECURRENCE_NONE
    end_time: str | None = None
    duration: int | None = None
    day_of_week: tuple[int, ...] = ()
    specific_dates: tuple[str, ...] = ()
    end_date: str | None = None
    cancelled_dates: tuple[str, ...] = ()
    active: bool = True
    is_direct_services: bool = True


@dataclass(frozen=True, slots=True)
class Occurrence:
    """One student's concrete instance of a template on a target date."""

    student_id: str
    start: datetime
    end: datetime
    is_direct_services: bool
    scheduled_session_id: str


@dataclass(frozen=True, slots=True)
class DayRecords:
    """Records touching a single day, already filtered by the caller.

    ``group_sessions`` holds every sibling row of the day's group sessions;
    when empty, siblings are looked up among ``sessions``.
    """

    sessions: tuple[Session, ...] = ()
    screeners: tuple[ArticulationScreener, ...] = ()
    meetings: tuple[Meeting, ...] = ()
    communications: tuple[Communication, ...] = ()
    group_sessions: tuple[Session, ...] = ()

    @classmethod
    def from_records(
        cls,
        records: Iterable[ActivityRecord],
        group_sessions: Iterable[Session] = (),
    ) -> "DayRecords":
        """Partition a mixed list of activity records by kind."""

        sessions: list[Session] = []
        screeners: list[ArticulationScreener] = []
        meetings: list[Meeting] = []
        communications: list[Communication] = []
        for record in records:
            if isinstance(record, Session):
                sessions.append(record)
            elif isinstance(record, ArticulationScreener):
                screeners.append(record)
            elif isinstance(record, Meeting):
                meetings.append(record)
            elif isinstance(record, Communication):
                communications.append(record)
            else:
                raise TypeError(f"Unsupported activity record: {type(record).__name__}")
        return cls(
            sessions=tuple(sessions),
            screeners=tuple(screeners),
            meetings=tuple(meetings),
            communications=tuple(communications),
            group_sessions=tuple(group_sessions),
        )


@dataclass(frozen=True, slots=True)
class NoteOptions:
    is_teletherapy: bool = False
    use_specific_times: bool = False

    @property
    def show_times(self) -> bool:
        """Teletherapy notes always carry exact time ranges."""

        return self.use_specific_times or self.is_teletherapy

    @classmethod
    def for_school(cls, school: School | None, use_specific_times: bool = False) -> "NoteOptions":
        return cls(
            is_teletherapy=bool(school and school.teletherapy),
            use_specific_times=use_specific_times,
        )


@dataclass(slots=True)
class ServiceEntry:
    """A deduplicated bucket member carrying the times used for rendering."""

    student_id: str
    start: datetime
    end: datetime | None = None


@dataclass(slots=True)
class ServiceBuckets:
    direct: list[ServiceEntry] = field(default_factory=list)
    missed: list[ServiceEntry] = field(default_factory=list)
    indirect: list[ServiceEntry] = field(default_factory=list)


__all__ = [
    "ActivityRecord",
    "ArticulationScreener",
    "Communication",
    "DayRecords",
    "Meeting",
    "NoteOptions",
    "Occurrence",
    "RECURRENCE_DAILY",
    "RECURRENCE_NONE",
    "RECURRENCE_PATTERNS",
    "RECURRENCE_SPECIFIC_DATES",
    "RECURRENCE_WEEKLY",
    "School",
    "ScheduledSessionTemplate",
    "ServiceBuckets",
    "ServiceEntry",
    "Session",
    "Student",
]
