"""Rules mapping meetings, screeners and emails onto note sub-categories."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from caseload.backend.src.services.records import (
    ArticulationScreener,
    Communication,
    Meeting,
)

SPEECH_SCREENING_CATEGORY = "Speech screening"
THREE_YEAR_ASSESSMENT_CATEGORY = "3 year assessment"
INITIAL_ASSESSMENT_CATEGORY = "Initial Assessment"
IEP_CATEGORY = "IEP"
IEP_PLANNING_CATEGORY = "IEP planning"
ASSESSMENT_PLANNING_CATEGORY = "Assessment planning"
ASSESSMENT_DOCUMENTATION_CATEGORY = "Assessment documentation"

SUBTYPE_MEETING = "meeting"
SUBTYPE_UPDATES = "updates"
SUBTYPE_ASSESSMENT = "assessment"
DEFAULT_ACTIVITY_SUBTYPE = SUBTYPE_MEETING

SPEECH_SCREENING_WRITE_UP_LABEL = "Speech Screening Write-Up and Staff Collaboration"
EMAIL_CORRESPONDENCE_LABEL = "Email Correspondence"

# (meeting category, line prefix, subtypes that get their own line)
PARTITIONED_CATEGORIES: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    (IEP_CATEGORY, "IEP", (SUBTYPE_MEETING, SUBTYPE_UPDATES, SUBTYPE_ASSESSMENT)),
    (
        THREE_YEAR_ASSESSMENT_CATEGORY,
        "3 year reassessment",
        (SUBTYPE_MEETING, SUBTYPE_UPDATES, SUBTYPE_ASSESSMENT),
    ),
    (IEP_PLANNING_CATEGORY, "IEP planning", (SUBTYPE_MEETING, SUBTYPE_UPDATES)),
    (ASSESSMENT_PLANNING_CATEGORY, "Assessment planning", (SUBTYPE_MEETING, SUBTYPE_UPDATES)),
)

_IEP_MARKERS = ("iep",)
_EVALUATION_MARKERS = ("eval",)


@dataclass(slots=True)
class SubCategory:
    """Students billed under one note line.

    ``without_student`` records that a contributing meeting had no student,
    which is rendered as the line's name instead of being dropped.
    """

    label: str
    student_ids: set[str] = field(default_factory=set)
    without_student: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.student_ids and not self.without_student

    def add(self, student_id: str | None) -> None:
        if student_id:
            self.student_ids.add(student_id)
        else:
            self.without_student = True


@dataclass(slots=True)
class Categorization:
    speech_screening_write_up: SubCategory
    email_correspondence: SubCategory
    meeting_lines: list[SubCategory]


def resolve_activity_subtype(meeting: Meeting) -> str:
    """Return the meeting's subtype stripped and lowercased.

    A missing or blank subtype resolves to ``meeting`` so that records created
    before subtypes existed keep their original billing line.
    """

    if meeting.activity_subtype is None or not meeting.activity_subtype.strip():
        return DEFAULT_ACTIVITY_SUBTYPE
    return meeting.activity_subtype.strip().lower()


def _tag_contains(tag: str | None, markers: tuple[str, ...]) -> bool:
    if not tag:
        return False
    lowered = tag.lower()
    return any(marker in lowered for marker in markers)


def is_iep_related(tag: str | None) -> bool:
    return _tag_contains(tag, _IEP_MARKERS)


def is_evaluation_related(tag: str | None) -> bool:
    """Match ``eval`` and ``evaluation`` tags, case-insensitively."""

    return _tag_contains(tag, _EVALUATION_MARKERS)


def is_email_correspondence(communication: Communication) -> bool:
    """Return ``True`` when an email is billed as generic indirect work.

    IEP and evaluation emails are billed under their own categories. An email
    without a tag counts as correspondence.
    """

    if not communication.student_id:
        return False
    tag = communication.related_to
    return not is_iep_related(tag) and not is_evaluation_related(tag)


def speech_screening_meetings(meetings: Iterable[Meeting]) -> list[Meeting]:
    return [
        meeting
        for meeting in meetings
        if meeting.category == SPEECH_SCREENING_CATEGORY and meeting.student_id
    ]


def student_assessment_meetings(meetings: Iterable[Meeting]) -> list[Meeting]:
    """Direct-contact 3 year assessments."""

    return [
        meeting
        for meeting in meetings
        if meeting.category == THREE_YEAR_ASSESSMENT_CATEGORY
        and meeting.student_id
        and resolve_activity_subtype(meeting) == SUBTYPE_ASSESSMENT
    ]


def initial_assessment_meetings(meetings: Iterable[Meeting]) -> list[Meeting]:
    return [
        meeting
        for meeting in meetings
        if meeting.category == INITIAL_ASSESSMENT_CATEGORY and meeting.student_id
    ]


def _partition_line(subtype: str, subtypes: tuple[str, ...]) -> str:
    if subtype in subtypes:
        return subtype
    return SUBTYPE_MEETING


def categorize(
    meetings: Iterable[Meeting],
    communications: Iterable[Communication] = (),
    screeners: Iterable[ArticulationScreener] = (),
) -> Categorization:
    """Derive the indirect sub-categories fed by non-session records."""

    meetings = list(meetings)
    communications = list(communications)

    write_up = SubCategory(SPEECH_SCREENING_WRITE_UP_LABEL)
    for screener in screeners:
        write_up.add(screener.student_id)

    lines: dict[tuple[str, str], SubCategory] = {}
    for category, prefix, subtypes in PARTITIONED_CATEGORIES:
        for subtype in subtypes:
            lines[(category, subtype)] = SubCategory(f"{prefix} {subtype}")
    assessment_documentation = SubCategory(ASSESSMENT_DOCUMENTATION_CATEGORY)

    partitioned = {category: subtypes for category, _, subtypes in PARTITIONED_CATEGORIES}
    for meeting in meetings:
        if meeting.category == SPEECH_SCREENING_CATEGORY:
            write_up.add(meeting.student_id)
        elif meeting.category == ASSESSMENT_DOCUMENTATION_CATEGORY:
            assessment_documentation.add(meeting.student_id)
        elif meeting.category in partitioned:
            subtype = resolve_activity_subtype(meeting)
            line = _partition_line(subtype, partitioned[meeting.category])
            lines[(meeting.category, line)].add(meeting.student_id)

    email = SubCategory(EMAIL_CORRESPONDENCE_LABEL)
    iep_updates = lines[(IEP_CATEGORY, SUBTYPE_UPDATES)]
    for communication in communications:
        if not communication.student_id:
            continue
        if is_email_correspondence(communication):
            email.add(communication.student_id)
        if is_iep_related(communication.related_to):
            iep_updates.add(communication.student_id)

    return Categorization(
        speech_screening_write_up=write_up,
        email_correspondence=email,
        meeting_lines=[*lines.values(), assessment_documentation],
    )


__all__ = [
    "ASSESSMENT_DOCUMENTATION_CATEGORY",
    "ASSESSMENT_PLANNING_CATEGORY",
    "Categorization",
    "DEFAULT_ACTIVITY_SUBTYPE",
    "IEP_CATEGORY",
    "IEP_PLANNING_CATEGORY",
    "INITIAL_ASSESSMENT_CATEGORY",
    "PARTITIONED_CATEGORIES",
    "SPEECH_SCREENING_CATEGORY",
    "SubCategory",
    "THREE_YEAR_ASSESSMENT_CATEGORY",
    "categorize",
    "initial_assessment_meetings",
    "is_email_correspondence",
    "is_evaluation_related",
    "is_iep_related",
    "resolve_activity_subtype",
    "speech_screening_meetings",
    "student_assessment_meetings",
]
