"""Calendar-date and wall-clock helpers shared by the timesheet engine.

Dates are compared as local calendar days, never as instants, so that a record
stored as ``2025-03-10T23:30:00Z`` is still attributed to March 10th.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time

from caseload.backend.src.core.errors import ParseError

_DATE_PREFIX = re.compile(r"^\s*(\d{4})-(\d{2})-(\d{2})")
_TIME_OF_DAY = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*$")

DateLike = date | datetime | str


def parse_local_date(value: DateLike, field: str | None = None) -> date:
    """Return the calendar date of ``value`` ignoring any time or offset part."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ParseError(value, field)

    match = _DATE_PREFIX.match(value)
    if match is None:
        raise ParseError(value, field)
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise ParseError(value, field) from exc


def parse_instant(value: DateLike, field: str | None = None) -> datetime:
    """Return the wall-clock ``datetime`` written in ``value``.

    Offsets (including a trailing ``Z``) are dropped rather than converted so
    the hour shown on a note matches the hour that was recorded. A date-only
    value resolves to midnight.
    """

    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, time())
    if not isinstance(value, str):
        raise ParseError(value, field)

    candidate = value.strip()
    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1]
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ParseError(value, field) from exc
    return parsed.replace(tzinfo=None)


def parse_time_of_day(value: str | None, field: str | None = None) -> tuple[int, int]:
    """Parse an ``HH:MM`` string into an ``(hour, minute)`` pair."""

    match = _TIME_OF_DAY.match(value or "")
    if match is None:
        raise ParseError(value, field)
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ParseError(value, field)
    return hour, minute


def date_key(value: DateLike) -> str:
    """Return the ``YYYY-MM-DD`` key for ``value``."""

    return parse_local_date(value).isoformat()


def is_same_day(left: DateLike, right: DateLike) -> bool:
    return parse_local_date(left) == parse_local_date(right)


def is_before(left: DateLike, right: DateLike) -> bool:
    """Return ``True`` when ``left`` falls on an earlier calendar day."""

    return parse_local_date(left) < parse_local_date(right)


def is_after(left: DateLike, right: DateLike) -> bool:
    """Return ``True`` when ``left`` falls on a later calendar day."""

    return parse_local_date(left) > parse_local_date(right)


def js_weekday(value: DateLike) -> int:
    """Return the weekday numbered from Sunday (0) to Saturday (6)."""

    return (parse_local_date(value).weekday() + 1) % 7


def format_time_12_hour(instant: datetime) -> str:
    """Render ``instant`` as ``H:MM am`` / ``H:MM pm``."""

    suffix = "pm" if instant.hour >= 12 else "am"
    hour = instant.hour % 12 or 12
    return f"{hour}:{instant.minute:02d} {suffix}"


def format_time_range(start: datetime, end: datetime | None = None) -> str:
    """Render ``start`` alone or ``start-end`` when an end is known."""

    if end is None:
        return format_time_12_hour(start)
    return f"{format_time_12_hour(start)}-{format_time_12_hour(end)}"


__all__ = [
    "DateLike",
    "date_key",
    "format_time_12_hour",
    "format_time_range",
    "is_after",
    "is_before",
    "is_same_day",
    "js_weekday",
    "parse_instant",
    "parse_local_date",
    "parse_time_of_day",
]
