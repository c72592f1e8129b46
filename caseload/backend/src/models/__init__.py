"""ORM models exposed for easy imports."""

from .due_date_item import DueDateItem
from .progress_report import ProgressReport

__all__ = [
    "DueDateItem",
    "ProgressReport",
]
