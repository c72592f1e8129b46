"""Public API routers exposed by the FastAPI application."""

from . import due_date_items, health, progress_reports, timesheet_notes

__all__ = [
    "due_date_items",
    "health",
    "progress_reports",
    "timesheet_notes",
]
