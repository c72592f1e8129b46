"""Partitioning of sessions and occurrences into billing buckets."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence

from caseload.backend.src.services.records import (
    ArticulationScreener,
    Occurrence,
    ServiceBuckets,
    ServiceEntry,
    Session,
)


class _Bucket:
    """Ordered bucket guarded by a per-bucket seen-student set."""

    def __init__(self, entries: list[ServiceEntry]) -> None:
        self.entries = entries
        self.seen_students: set[str] = set()
        self.seen_groups: set[str] = set()

    def add(self, student_id: str, entry: ServiceEntry) -> None:
        if student_id in self.seen_students:
            return
        self.seen_students.add(student_id)
        self.entries.append(entry)


def _entry(session: Session) -> ServiceEntry:
    return ServiceEntry(student_id=session.student_id, start=session.start, end=session.end)


def classify_sessions(
    sessions: Iterable[Session],
    group_sessions: Sequence[Session] | None = None,
) -> ServiceBuckets:
    """Split the day's sessions into direct, missed and indirect buckets.

    The first session of a group seen for a bucket pulls every sibling row of
    that group into the bucket; a student lands in a bucket at most once.
    """

    sessions = list(sessions)
    siblings_by_group: dict[str, list[Session]] = defaultdict(list)
    for sibling in group_sessions or sessions:
        if sibling.group_session_id:
            siblings_by_group[sibling.group_session_id].append(sibling)

    buckets = ServiceBuckets()
    direct = _Bucket(buckets.direct)
    missed = _Bucket(buckets.missed)
    indirect = _Bucket(buckets.indirect)

    for session in sessions:
        if session.is_direct_services:
            bucket = missed if session.missed_session else direct
        else:
            bucket = indirect

        group_id = session.group_session_id
        if not group_id:
            bucket.add(session.student_id, _entry(session))
            continue
        if group_id in bucket.seen_groups:
            continue
        bucket.seen_groups.add(group_id)
        for sibling in siblings_by_group.get(group_id) or [session]:
            bucket.add(sibling.student_id, _entry(sibling))

    return buckets


def classify_occurrences(occurrences: Iterable[Occurrence]) -> ServiceBuckets:
    """Split projected occurrences into direct and indirect buckets."""

    buckets = ServiceBuckets()
    direct = _Bucket(buckets.direct)
    indirect = _Bucket(buckets.indirect)
    for occurrence in occurrences:
        bucket = direct if occurrence.is_direct_services else indirect
        bucket.add(
            occurrence.student_id,
            ServiceEntry(
                student_id=occurrence.student_id,
                start=occurrence.start,
                end=occurrence.end,
            ),
        )
    return buckets


def documentation_students(
    buckets: ServiceBuckets, screeners: Iterable[ArticulationScreener] = ()
) -> set[str]:
    """Students needing session documentation.

    Missed sessions still generate documentation work, as do screeners.
    """

    student_ids = {entry.student_id for entry in buckets.direct}
    student_ids.update(entry.student_id for entry in buckets.missed)
    student_ids.update(screener.student_id for screener in screeners)
    return student_ids


def lesson_planning_students(buckets: ServiceBuckets) -> set[str]:
    """Students from every session bucket, attended or not."""

    return {
        entry.student_id
        for entry in (*buckets.direct, *buckets.missed, *buckets.indirect)
    }


__all__ = [
    "classify_occurrences",
    "classify_sessions",
    "documentation_students",
    "lesson_planning_students",
]
