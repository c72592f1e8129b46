"""Timesheet note generation endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from caseload.backend.src.schemas.timesheet import (
    NoteResponse,
    ProspectiveNoteRequest,
    RetrospectiveNoteRequest,
)
from caseload.backend.src.services.timesheet_notes import (
    generate_prospective_note,
    generate_retrospective_note,
)

router = APIRouter(prefix="/timesheet-notes", tags=["timesheet-notes"])


@router.post("/retrospective", response_model=NoteResponse)
def retrospective_note(payload: RetrospectiveNoteRequest) -> NoteResponse:
    """Generate the note for a day's recorded activity."""

    note = generate_retrospective_note(
        payload.day_records(),
        payload.note_options(),
        payload.student_lookup(),
    )
    return NoteResponse(note=note)


@router.post("/prospective", response_model=NoteResponse)
def prospective_note(payload: ProspectiveNoteRequest) -> NoteResponse:
    """Generate the note projected from scheduled sessions for a future date."""

    note = generate_prospective_note(
        payload.templates(),
        payload.target_date,
        payload.note_options(),
        payload.student_lookup(),
        meetings=payload.meeting_records(),
    )
    return NoteResponse(note=note)


__all__ = ["router"]
