from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Iterable, Optional, Sequence

from ..common.datetime_utils import DayLike, normalize_day
from ..core.constants import DEFAULT_STATUS_REMARKS, SYNC_MAX_ATTEMPTS
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConcurrentUpdateError, DuplicateError, NotFoundError, ValidationError
from ..roster.model import Student
from ..roster.repository import RosterRepository
from . import lock_gate
from .model import Attendance, AttendanceRecord, AttendanceSheet, ResolvedRecord
from .repository import AttendanceRepository
from .sync import default_records, prune_orphans, reconcile_records

logger = logging.getLogger(__name__)


def parse_records(raw: Optional[Iterable[Any]]) -> list[AttendanceRecord]:
    """Validate submitted records (dicts or AttendanceRecord).

    Entries without a student reference are dropped; an unknown status or a
    student listed twice is a ValidationError.
    """

    if raw is None:
        raise ValidationError("records are required")
    if isinstance(raw, (str, bytes, Mapping)):
        raise ValidationError("records must be a list")

    out: list[AttendanceRecord] = []
    seen: set[int] = set()
    for item in raw:
        if isinstance(item, AttendanceRecord):
            student_id, status, remarks = item.student_id, item.status, item.remarks
        elif isinstance(item, Mapping):
            student_id = item.get("student_id", item.get("student"))
            status = item.get("status")
            remarks = item.get("remarks")
        else:
            raise ValidationError(f"Invalid attendance record: {item!r}")

        if student_id is None or student_id == "":
            continue
        try:
            student_id = int(student_id)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid student id: {student_id!r}")
        try:
            status = AttendanceStatus(status)
        except ValueError:
            raise ValidationError(f"Invalid status {status!r} for student {student_id}")
        if student_id in seen:
            raise ValidationError(f"Student {student_id} appears more than once")
        seen.add(student_id)

        out.append(
            AttendanceRecord(
                student_id=student_id,
                status=status,
                remarks=(remarks or DEFAULT_STATUS_REMARKS).strip(),
            )
        )
    return out


class AttendanceService:
    """Daily attendance: roster reconciliation, saving and locking.

    Writes go through ``AttendanceRepository.upsert`` which rejects lost
    updates; idempotent operations (reconcile, lock) re-read and retry.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        roster: RosterRepository,
        *,
        max_attempts: int = SYNC_MAX_ATTEMPTS,
    ):
        self._attendance = attendance
        self._roster = roster
        self._max_attempts = max(int(max_attempts), 1)

    def _require_class(self, class_id: int) -> None:
        if not self._roster.get_class(class_id):
            raise NotFoundError(f"Class {class_id} not found")

    @staticmethod
    def _sheet(attendance: Attendance, roster: Sequence[Student]) -> AttendanceSheet:
        by_id = {s.student_id: s for s in roster}
        resolved = [
            ResolvedRecord(student=by_id[r.student_id], status=r.status, remarks=r.remarks)
            for r in attendance.records
            if r.student_id in by_id
        ]
        return AttendanceSheet(attendance=attendance, records=resolved)

    def reconcile(self, class_id: int, day: DayLike, *, teacher_id: Optional[int] = None) -> AttendanceSheet:
        """Align the day's records with the current roster and return them.

        Creates the document with everyone Present when it does not exist yet.
        A locked document is never rewritten: departed students are only
        hidden from the returned view.
        """

        day = normalize_day(day)
        self._require_class(class_id)

        for attempt in range(1, self._max_attempts + 1):
            roster = list(self._roster.list_students(class_id))
            existing = self._attendance.find(class_id, day)

            if existing is None:
                if teacher_id is None:
                    raise ValidationError("teacher_id is required to start a new attendance sheet")
                doc = Attendance(
                    class_id=class_id,
                    date=day,
                    teacher_id=int(teacher_id),
                    records=tuple(default_records(roster)),
                )
            elif existing.is_locked:
                view = existing.with_records(prune_orphans(existing.records, roster))
                return self._sheet(view, roster)
            else:
                records = reconcile_records(existing.records, roster)
                if tuple(records) == existing.records:
                    return self._sheet(existing, roster)
                doc = existing.with_records(records)

            try:
                stored = self._attendance.upsert(doc)
            except (DuplicateError, ConcurrentUpdateError) as e:
                logger.info(
                    "reconcile class=%s date=%s attempt %d/%d lost a race: %s",
                    class_id, day, attempt, self._max_attempts, e,
                )
                continue

            logger.debug("reconciled class=%s date=%s records=%d", class_id, day, len(stored.records))
            return self._sheet(stored, roster)

        raise ConcurrentUpdateError(
            f"Attendance for class {class_id} on {day.isoformat()} kept changing; try again"
        )

    def save(
        self,
        class_id: int,
        day: DayLike,
        records: Optional[Iterable[Any]],
        *,
        teacher_id: int,
    ) -> AttendanceSheet:
        """Overwrite the day's record list.

        Records for students not on the roster are discarded. Raises
        AttendanceLockedError (nothing written) when the day is locked.
        """

        day = normalize_day(day)
        parsed = parse_records(records)
        self._require_class(class_id)

        roster = list(self._roster.list_students(class_id))
        parsed = prune_orphans(parsed, roster)

        existing = self._attendance.find(class_id, day)
        lock_gate.ensure_unlocked(existing)

        if existing is None:
            doc = Attendance(class_id=class_id, date=day, teacher_id=int(teacher_id), records=tuple(parsed))
        else:
            doc = existing.with_records(parsed)

        stored = self._attendance.upsert(doc)
        logger.info("saved attendance class=%s date=%s records=%d", class_id, day, len(stored.records))
        return self._sheet(stored, roster)

    def lock(self, class_id: int, day: DayLike) -> AttendanceSheet:
        day = normalize_day(day)

        for attempt in range(1, self._max_attempts + 1):
            existing = self._attendance.find(class_id, day)
            if existing is None:
                raise NotFoundError(f"Attendance for class {class_id} on {day.isoformat()} not found")

            roster = list(self._roster.list_students(class_id))
            if existing.is_locked:
                return self._sheet(existing, roster)

            try:
                stored = self._attendance.upsert(lock_gate.locked(existing))
            except ConcurrentUpdateError:
                logger.info("lock class=%s date=%s attempt %d/%d raced", class_id, day, attempt, self._max_attempts)
                continue

            logger.info("locked attendance class=%s date=%s", class_id, day)
            return self._sheet(stored, roster)

        raise ConcurrentUpdateError(
            f"Attendance for class {class_id} on {day.isoformat()} kept changing; try again"
        )

    def history(self, class_id: int, start: DayLike, end: DayLike) -> list[AttendanceSheet]:
        """Attendance documents in ``[start, end]``, oldest first, read-only."""

        start_day = normalize_day(start, "start_date")
        end_day = normalize_day(end, "end_date")
        if start_day > end_day:
            raise ValidationError("start_date must not be after end_date")

        roster = list(self._roster.list_students(class_id))
        docs = self._attendance.find_range(class_id, start_day, end_day)
        return [self._sheet(doc.with_records(prune_orphans(doc.records, roster)), roster) for doc in docs]
