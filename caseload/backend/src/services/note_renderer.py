"""Rendering of classified records into timesheet note text."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from caseload.backend.src.services.categorization import SubCategory
from caseload.backend.src.services.records import (
    ArticulationScreener,
    Meeting,
    NoteOptions,
    ServiceEntry,
    Student,
)
from caseload.backend.src.services.temporal import format_time_range

UNKNOWN_INITIALS = "??"

DIRECT_LABEL = "Direct services:"
OFFSITE_DIRECT_LABEL = "Offsite Direct Services:"
INDIRECT_LABEL = "Indirect services including:"
OFFSITE_INDIRECT_LABEL = "Offsite Indirect Services Including:"

DIRECT_THERAPY_LABEL = "Direct Therapy:"
STUDENT_ASSESSMENTS_LABEL = "Student Assessments:"
INITIAL_ASSESSMENT_LABEL = "Initial Assessment:"
SPEECH_SCREENING_LABEL = "Speech screening:"


def student_initials(student: Student | None) -> str:
    """Return first-and-last initials, a single initial, or ``??``."""

    if student is None or not student.name:
        return UNKNOWN_INITIALS
    parts = student.name.split()
    if len(parts) >= 2:
        return (parts[0][0] + parts[-1][0]).upper()
    if len(parts) == 1:
        return parts[0][0].upper()
    return UNKNOWN_INITIALS


@dataclass(slots=True)
class DirectContent:
    """Inputs for the direct services section."""

    therapy: Sequence[ServiceEntry] = ()
    student_assessments: Sequence[Meeting] = ()
    initial_assessments: Sequence[Meeting] = ()
    screeners: Sequence[ArticulationScreener] = ()
    screening_meetings: Sequence[Meeting] = ()


class NoteRenderer:
    """Assemble labelled, blank-line separated note sections."""

    def __init__(self, students: Mapping[str, Student], options: NoteOptions) -> None:
        self._students = students
        self._options = options

    def student_label(self, student_id: str) -> str:
        student = self._students.get(student_id)
        grade = (student.grade if student else None) or ""
        return f"{student_initials(student)} ({grade})"

    def _timed(self, entry: ServiceEntry) -> str:
        return f"{self.student_label(entry.student_id)} {format_time_range(entry.start, entry.end)}"

    def sorted_labels(self, student_ids: Iterable[str]) -> list[str]:
        return sorted(self.student_label(student_id) for student_id in set(student_ids))

    def therapy_line(self, entries: Sequence[ServiceEntry]) -> str:
        if not self._options.show_times:
            return ", ".join(sorted(self.student_label(entry.student_id) for entry in entries))

        by_range: dict[str, list[ServiceEntry]] = {}
        for entry in entries:
            by_range.setdefault(format_time_range(entry.start, entry.end), []).append(entry)
        groups = sorted(by_range.values(), key=lambda group: min(e.start for e in group))
        rendered: list[str] = []
        for group in groups:
            rendered.extend(sorted(self._timed(entry) for entry in group))
        return ", ".join(rendered)

    def assessment_line(self, meetings: Sequence[Meeting]) -> str:
        entries = [
            ServiceEntry(student_id=meeting.student_id, start=meeting.start, end=meeting.end)
            for meeting in meetings
            if meeting.student_id
        ]
        if self._options.show_times:
            return ", ".join(self._timed(entry) for entry in sorted(entries, key=lambda e: e.start))
        return ", ".join(self.sorted_labels(entry.student_id for entry in entries))

    def screening_line(
        self, screeners: Sequence[ArticulationScreener], meetings: Sequence[Meeting]
    ) -> str:
        entries = [
            ServiceEntry(student_id=screener.student_id, start=screener.date)
            for screener in screeners
        ]
        entries.extend(
            ServiceEntry(student_id=meeting.student_id, start=meeting.start, end=meeting.end)
            for meeting in meetings
            if meeting.student_id
        )
        entries.sort(key=lambda entry: entry.start)
        if self._options.show_times:
            return ", ".join(self._timed(entry) for entry in entries)

        labels: list[str] = []
        seen: set[str] = set()
        for entry in entries:
            if entry.student_id in seen:
                continue
            seen.add(entry.student_id)
            labels.append(self.student_label(entry.student_id))
        return ", ".join(labels)

    def subcategory_line(self, subcategory: SubCategory) -> str:
        parts = self.sorted_labels(subcategory.student_ids)
        if subcategory.without_student:
            parts.append(subcategory.label)
        return ", ".join(parts)

    def _direct_subsections(self, content: DirectContent) -> list[tuple[str, str]]:
        subsections: list[tuple[str, str]] = []
        if content.therapy:
            subsections.append((DIRECT_THERAPY_LABEL, self.therapy_line(content.therapy)))
        if content.student_assessments:
            subsections.append(
                (STUDENT_ASSESSMENTS_LABEL, self.assessment_line(content.student_assessments))
            )
        if content.initial_assessments:
            subsections.append(
                (INITIAL_ASSESSMENT_LABEL, self.assessment_line(content.initial_assessments))
            )
        if content.screeners or content.screening_meetings:
            subsections.append(
                (
                    SPEECH_SCREENING_LABEL,
                    self.screening_line(content.screeners, content.screening_meetings),
                )
            )
        return subsections

    def render(self, direct: DirectContent, indirect: Sequence[SubCategory]) -> str:
        """Return the note text; empty sections and sub-lines are omitted."""

        lines: list[str] = []

        direct_subsections = self._direct_subsections(direct)
        if direct_subsections:
            lines.append(OFFSITE_DIRECT_LABEL if self._options.is_teletherapy else DIRECT_LABEL)
            lines.append("")
            for label, line in direct_subsections:
                lines.extend((label, line))
            lines.append("")

        indirect_lines = [subcategory for subcategory in indirect if not subcategory.is_empty]
        if indirect_lines:
            lines.append(
                OFFSITE_INDIRECT_LABEL if self._options.is_teletherapy else INDIRECT_LABEL
            )
            lines.append("")
            for subcategory in indirect_lines:
                lines.extend((f"{subcategory.label}:", self.subcategory_line(subcategory)))
            lines.append("")

        while lines and lines[-1] == "":
            lines.pop()
        return "\n".join(lines)


__all__ = [
    "DirectContent",
    "NoteRenderer",
    "UNKNOWN_INITIALS",
    "student_initials",
]
