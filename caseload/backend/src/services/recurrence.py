"""Expansion of scheduled-session templates into per-date occurrences."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta

import structlog

from caseload.backend.src.core.errors import ParseError
from caseload.backend.src.services.records import (
    RECURRENCE_DAILY,
    RECURRENCE_NONE,
    RECURRENCE_SPECIFIC_DATES,
    RECURRENCE_WEEKLY,
    Occurrence,
    ScheduledSessionTemplate,
)
from caseload.backend.src.services.temporal import (
    DateLike,
    date_key,
    is_after,
    is_before,
    js_weekday,
    parse_local_date,
    parse_time_of_day,
)

LOGGER = structlog.get_logger(__name__)

DEFAULT_SLOT_MINUTES = 30


def _at_time(target: date, hour: int, minute: int) -> datetime:
    return datetime(target.year, target.month, target.day, hour, minute)


def _within_active_range(template: ScheduledSessionTemplate, target: date) -> bool:
    start = parse_local_date(template.start_date, "start_date")
    if is_before(target, start):
        return False
    if template.end_date:
        end = parse_local_date(template.end_date, "end_date")
        if is_after(target, end):
            return False
    return True


def _date_part(value: str) -> str:
    return value.split("T", 1)[0].strip()


def _matches_pattern(template: ScheduledSessionTemplate, target: date) -> bool:
    pattern = template.recurrence_pattern
    if pattern == RECURRENCE_WEEKLY:
        return js_weekday(target) in set(template.day_of_week)
    if pattern == RECURRENCE_SPECIFIC_DATES:
        target_key = date_key(target)
        return any(_date_part(value) == target_key for value in template.specific_dates)
    if pattern == RECURRENCE_DAILY:
        return True
    if pattern == RECURRENCE_NONE:
        return target == parse_local_date(template.start_date, "start_date")
    return False


def _is_cancelled(template: ScheduledSessionTemplate, target: date) -> bool:
    target_key = date_key(target)
    return any(_date_part(value) == target_key for value in template.cancelled_dates)


def resolve_end(template: ScheduledSessionTemplate, target: date, start: datetime) -> datetime:
    """Resolve the end instant of an occurrence starting at ``start``.

    Resolution order: explicit ``end_time`` on the target date, then
    ``duration`` minutes after the start, then the default slot length.
    """

    if template.end_time:
        hour, minute = parse_time_of_day(template.end_time, "end_time")
        return _at_time(target, hour, minute)

    if template.duration is not None and template.duration > 0:
        return start + timedelta(minutes=template.duration)

    return start + timedelta(minutes=DEFAULT_SLOT_MINUTES)


def expand_template(
    template: ScheduledSessionTemplate, target_date: DateLike
) -> list[Occurrence]:
    """Return the occurrences ``template`` produces on ``target_date``.

    Invalid time-of-day strings and empty student lists produce no
    occurrences. Unparseable calendar dates raise :class:`ParseError`.
    """

    target = parse_local_date(target_date, "target_date")

    if template.active is False:
        return []
    if _is_cancelled(template, target):
        return []
    if not _within_active_range(template, target):
        return []
    if not _matches_pattern(template, target):
        return []
    if not template.student_ids:
        LOGGER.warning("template_skipped_no_students", template_id=template.id)
        return []

    try:
        start_hour, start_minute = parse_time_of_day(template.start_time, "start_time")
        start = _at_time(target, start_hour, start_minute)
        end = resolve_end(template, target, start)
    except ParseError as exc:
        LOGGER.warning(
            "template_skipped_invalid_time",
            template_id=template.id,
            field=exc.field,
            value=exc.value,
        )
        return []

    return [
        Occurrence(
            student_id=student_id,
            start=start,
            end=end,
            is_direct_services=template.is_direct_services,
            scheduled_session_id=template.id,
        )
        for student_id in template.student_ids
    ]


def expand_templates(
    templates: Iterable[ScheduledSessionTemplate], target_date: DateLike
) -> list[Occurrence]:
    """Expand every template against ``target_date`` in input order."""

    target = parse_local_date(target_date, "target_date")
    occurrences: list[Occurrence] = []
    for template in templates:
        occurrences.extend(expand_template(template, target))
    return occurrences


__all__ = [
    "DEFAULT_SLOT_MINUTES",
    "expand_template",
    "expand_templates",
    "resolve_end",
]
