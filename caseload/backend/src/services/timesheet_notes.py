"""Entry points producing retrospective and prospective timesheet notes."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

import structlog

from caseload.backend.src.services.categorization import (
    SubCategory,
    categorize,
    initial_assessment_meetings,
    speech_screening_meetings,
    student_assessment_meetings,
)
from caseload.backend.src.services.classification import (
    classify_occurrences,
    classify_sessions,
    documentation_students,
    lesson_planning_students,
)
from caseload.backend.src.services.metrics import timesheet_notes_generated_total
from caseload.backend.src.services.note_renderer import DirectContent, NoteRenderer
from caseload.backend.src.services.records import (
    ActivityRecord,
    DayRecords,
    Meeting,
    NoteOptions,
    ScheduledSessionTemplate,
    Student,
)
from caseload.backend.src.services.recurrence import expand_templates
from caseload.backend.src.services.temporal import DateLike, date_key

LOGGER = structlog.get_logger(__name__)

SESSION_DOCUMENTATION_LABEL = "Session Documentation"
LESSON_PLANNING_LABEL = "Lesson Planning"


def _subcategory(label: str, student_ids: Iterable[str]) -> SubCategory:
    return SubCategory(label, set(student_ids))


def generate_retrospective_note(
    records: DayRecords | Sequence[ActivityRecord],
    options: NoteOptions,
    students: Mapping[str, Student],
) -> str:
    """Build the note for a day from records that already exist.

    ``records`` is either a partitioned :class:`DayRecords` or a flat list of
    activity records for the day.
    """

    if not isinstance(records, DayRecords):
        records = DayRecords.from_records(records)
    buckets = classify_sessions(records.sessions, records.group_sessions or None)
    categories = categorize(records.meetings, records.communications, records.screeners)

    direct = DirectContent(
        therapy=buckets.direct,
        student_assessments=student_assessment_meetings(records.meetings),
        initial_assessments=initial_assessment_meetings(records.meetings),
        screeners=records.screeners,
        screening_meetings=speech_screening_meetings(records.meetings),
    )
    indirect = [
        _subcategory(
            SESSION_DOCUMENTATION_LABEL, documentation_students(buckets, records.screeners)
        ),
        categories.email_correspondence,
        _subcategory(LESSON_PLANNING_LABEL, lesson_planning_students(buckets)),
        categories.speech_screening_write_up,
        *categories.meeting_lines,
    ]

    note = NoteRenderer(students, options).render(direct, indirect)
    timesheet_notes_generated_total.labels(mode="retrospective").inc()
    LOGGER.info(
        "timesheet_note_generated",
        mode="retrospective",
        sessions=len(records.sessions),
        direct_students=len(buckets.direct),
        missed_students=len(buckets.missed),
        teletherapy=options.is_teletherapy,
    )
    return note


def generate_prospective_note(
    templates: Iterable[ScheduledSessionTemplate],
    target_date: DateLike,
    options: NoteOptions,
    students: Mapping[str, Student],
    meetings: Iterable[Meeting] = (),
) -> str:
    """Build the note projected from recurring templates for ``target_date``.

    Meetings already booked for the date contribute assessment, screening and
    planning lines; emails and screeners cannot be projected.
    """

    occurrences = expand_templates(templates, target_date)
    buckets = classify_occurrences(occurrences)
    meetings = list(meetings)
    categories = categorize(meetings)

    direct = DirectContent(
        therapy=buckets.direct,
        student_assessments=student_assessment_meetings(meetings),
        initial_assessments=initial_assessment_meetings(meetings),
        screening_meetings=speech_screening_meetings(meetings),
    )
    indirect = [
        _subcategory(SESSION_DOCUMENTATION_LABEL, documentation_students(buckets)),
        _subcategory(LESSON_PLANNING_LABEL, lesson_planning_students(buckets)),
        categories.speech_screening_write_up,
        *categories.meeting_lines,
    ]

    note = NoteRenderer(students, options).render(direct, indirect)
    timesheet_notes_generated_total.labels(mode="prospective").inc()
    LOGGER.info(
        "timesheet_note_generated",
        mode="prospective",
        target_date=date_key(target_date),
        occurrences=len(occurrences),
        teletherapy=options.is_teletherapy,
    )
    return note


__all__ = ["generate_prospective_note", "generate_retrospective_note"]
