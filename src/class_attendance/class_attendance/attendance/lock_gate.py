from __future__ import annotations

from dataclasses import replace

from ..core.exceptions import AttendanceLockedError
from .model import Attendance


def ensure_unlocked(attendance: Attendance | None) -> None:
    if attendance is not None and attendance.is_locked:
        raise AttendanceLockedError(
            f"Attendance for {attendance.date.isoformat()} is locked and cannot be modified"
        )


def locked(attendance: Attendance) -> Attendance:
    """Unlocked -> Locked. There is no way back."""

    if attendance.is_locked:
        return attendance
    return replace(attendance, is_locked=True)
