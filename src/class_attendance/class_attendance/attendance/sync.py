"""Roster drift handling as pure functions over (records, roster).

Nothing here touches a repository; the service persists whatever comes out.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from ..roster.model import Student
from .model import AttendanceRecord


def default_records(roster: Iterable[Student]) -> list[AttendanceRecord]:
    return [AttendanceRecord.default_for(s.student_id) for s in roster]


def prune_orphans(records: Iterable[AttendanceRecord], roster: Iterable[Student]) -> list[AttendanceRecord]:
    """Drop records whose student is no longer on the roster."""

    enrolled = {s.student_id for s in roster}
    return [r for r in records if r.student_id is not None and r.student_id in enrolled]


def append_missing(records: Sequence[AttendanceRecord], roster: Iterable[Student]) -> list[AttendanceRecord]:
    """Append a default Present record for every roster student without one.

    Existing records keep their position and status.
    """

    tracked = {r.student_id for r in records}
    out = list(records)
    for s in roster:
        if s.student_id not in tracked:
            out.append(AttendanceRecord.default_for(s.student_id))
            tracked.add(s.student_id)
    return out


def reconcile_records(records: Sequence[AttendanceRecord], roster: Sequence[Student]) -> list[AttendanceRecord]:
    return prune_orphans(append_missing(records, roster), roster)
