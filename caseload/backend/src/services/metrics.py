"""Prometheus metric definitions for note generation and status upkeep."""

from __future__ import annotations

from prometheus_client import Counter

timesheet_notes_generated_total = Counter(
    "timesheet_notes_generated_total",
    "Total timesheet notes generated by mode.",
    labelnames=["mode"],
)

due_status_corrections_total = Counter(
    "due_status_corrections_total",
    "Stored statuses rewritten after a recompute, by entity.",
    labelnames=["entity"],
)

__all__ = [
    "due_status_corrections_total",
    "timesheet_notes_generated_total",
]
