from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Attendance


class AttendanceRepository(Protocol):
    def find(self, class_id: int, day: date) -> Optional[Attendance]:
        raise NotImplementedError

    def upsert(self, attendance: Attendance) -> Attendance:
        """Insert (version 0) or compare-and-swap update on ``attendance.version``.

        Returns the stored document with its new version. Raises
        DuplicateError when an insert loses the race on (class_id, date) and
        ConcurrentUpdateError when the stored version moved on.
        """

        raise NotImplementedError

    def find_range(
        self,
        class_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[Attendance]:
        """Documents with ``start <= date <= end`` (open bounds when None), oldest first."""

        raise NotImplementedError
