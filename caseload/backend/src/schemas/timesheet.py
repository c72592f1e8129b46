"""Request and response schemas for timesheet note generation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from caseload.backend.src.services.records import (
    ActivityRecord,
    ArticulationScreener,
    Communication,
    DayRecords,
    Meeting,
    NoteOptions,
    RECURRENCE_NONE,
    ScheduledSessionTemplate,
    School,
    Session,
    Student,
)
from caseload.backend.src.services.temporal import parse_instant


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StudentIn(_CamelModel):
    id: str
    name: str | None = None
    grade: str | None = None

    def to_record(self) -> Student:
        return Student(id=self.id, name=self.name, grade=self.grade)


class SchoolIn(_CamelModel):
    name: str
    teletherapy: bool = False


class SessionIn(_CamelModel):
    id: str
    student_id: str
    date: str
    end_time: str | None = None
    is_direct_services: bool = True
    missed_session: bool = False
    group_session_id: str | None = None

    def to_record(self) -> Session:
        return Session(
            id=self.id,
            student_id=self.student_id,
            start=parse_instant(self.date, "date"),
            end=parse_instant(self.end_time, "endTime") if self.end_time else None,
            is_direct_services=self.is_direct_services,
            missed_session=self.missed_session,
            group_session_id=self.group_session_id or None,
        )


class ScreenerIn(_CamelModel):
    id: str
    student_id: str
    date: str

    def to_record(self) -> ArticulationScreener:
        return ArticulationScreener(
            id=self.id,
            student_id=self.student_id,
            date=parse_instant(self.date, "date"),
        )


class MeetingIn(_CamelModel):
    id: str
    category: str
    date: str
    end_time: str | None = None
    student_id: str | None = None
    activity_subtype: str | None = None

    def to_record(self) -> Meeting:
        return Meeting(
            id=self.id,
            category=self.category,
            start=parse_instant(self.date, "date"),
            end=parse_instant(self.end_time, "endTime") if self.end_time else None,
            student_id=self.student_id or None,
            activity_subtype=self.activity_subtype,
        )


class CommunicationIn(_CamelModel):
    id: str
    date: str
    student_id: str | None = None
    related_to: str | None = None

    def to_record(self) -> Communication:
        return Communication(
            id=self.id,
            date=parse_instant(self.date, "date"),
            student_id=self.student_id or None,
            related_to=self.related_to,
        )


class ScheduledSessionIn(_CamelModel):
    id: str
    student_ids: list[str] = Field(default_factory=list)
    start_time: str
    end_time: str | None = None
    duration: int | None = None
    recurrence_pattern: str = RECURRENCE_NONE
    day_of_week: list[int] = Field(default_factory=list)
    specific_dates: list[str] = Field(default_factory=list)
    start_date: str
    end_date: str | None = None
    cancelled_dates: list[str] = Field(default_factory=list)
    active: bool = True
    is_direct_services: bool = True

    def to_record(self) -> ScheduledSessionTemplate:
        return ScheduledSessionTemplate(
            id=self.id,
            student_ids=tuple(self.student_ids),
            start_time=self.start_time,
            end_time=self.end_time or None,
            duration=self.duration,
            recurrence_pattern=self.recurrence_pattern,
            day_of_week=tuple(self.day_of_week),
            specific_dates=tuple(self.specific_dates),
            start_date=self.start_date,
            end_date=self.end_date or None,
            cancelled_dates=tuple(self.cancelled_dates),
            active=self.active,
            is_direct_services=self.is_direct_services,
        )


class _NoteRequest(_CamelModel):
    students: list[StudentIn] = Field(default_factory=list)
    school: SchoolIn | None = None
    is_teletherapy: bool | None = None
    use_specific_times: bool = False
    meetings: list[MeetingIn] = Field(default_factory=list)

    def note_options(self) -> NoteOptions:
        """Explicit ``isTeletherapy`` wins over the school's flag."""

        if self.is_teletherapy is not None:
            return NoteOptions(
                is_teletherapy=self.is_teletherapy,
                use_specific_times=self.use_specific_times,
            )
        school = School(name=self.school.name, teletherapy=self.school.teletherapy) if self.school else None
        return NoteOptions.for_school(school, self.use_specific_times)

    def student_lookup(self) -> dict[str, Student]:
        return {student.id: student.to_record() for student in self.students}


class RetrospectiveNoteRequest(_NoteRequest):
    """Records for one day, already filtered to that day by the caller."""

    sessions: list[SessionIn] = Field(default_factory=list)
    group_sessions: list[SessionIn] = Field(default_factory=list)
    screeners: list[ScreenerIn] = Field(default_factory=list)
    communications: list[CommunicationIn] = Field(default_factory=list)

    def day_records(self) -> DayRecords:
        records: list[ActivityRecord] = [session.to_record() for session in self.sessions]
        records.extend(screener.to_record() for screener in self.screeners)
        records.extend(meeting.to_record() for meeting in self.meetings)
        records.extend(comm.to_record() for comm in self.communications)
        return DayRecords.from_records(
            records,
            group_sessions=[session.to_record() for session in self.group_sessions],
        )


class ProspectiveNoteRequest(_NoteRequest):
    target_date: str
    scheduled_sessions: list[ScheduledSessionIn] = Field(default_factory=list)

    def templates(self) -> list[ScheduledSessionTemplate]:
        return [template.to_record() for template in self.scheduled_sessions]

    def meeting_records(self) -> list[Meeting]:
        return [meeting.to_record() for meeting in self.meetings]


class NoteResponse(BaseModel):
    note: str


__all__ = [
    "CommunicationIn",
    "MeetingIn",
    "NoteResponse",
    "ProspectiveNoteRequest",
    "RetrospectiveNoteRequest",
    "ScheduledSessionIn",
    "SchoolIn",
    "ScreenerIn",
    "SessionIn",
    "StudentIn",
]
