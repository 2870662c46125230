from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..attendance.repository import AttendanceRepository
from ..core.exceptions import NotFoundError
from ..reports.builder import student_statistics
from ..roster.repository import RosterRepository
from .model import LowAttendanceStudent

logger = logging.getLogger(__name__)


class LowAttendanceSelector:
    """Picks students whose whole-history attendance is under a threshold."""

    def __init__(self, attendance: AttendanceRepository, roster: RosterRepository):
        self._attendance = attendance
        self._roster = roster

    def select_below_threshold(
        self,
        class_id: int,
        threshold: float,
        student_ids: Optional[Iterable[int]] = None,
    ) -> list[LowAttendanceStudent]:
        if not self._roster.get_class(class_id):
            raise NotFoundError(f"Class {class_id} not found")

        students = list(self._roster.list_students(class_id))
        if student_ids:
            wanted = {int(i) for i in student_ids}
            students = [s for s in students if s.student_id in wanted]

        attendances = list(self._attendance.find_range(class_id))

        selected = []
        for student, stats in student_statistics(attendances, students):
            logger.debug(
                "class=%s student=%s %.2f%% over %d days",
                class_id, student.student_id, stats.attendance_percentage, stats.total_days,
            )
            # No history yet means nothing to judge.
            if stats.total_days > 0 and stats.attendance_percentage < threshold:
                selected.append(LowAttendanceStudent(student=student, statistics=stats))
        return selected
