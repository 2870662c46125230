from __future__ import annotations

import math
from typing import Iterable, Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus
from .model import StudentStatistics


def round2(value: float) -> float:
    """Half-up on the scaled float: ``floor(value * 100 + 0.5) / 100``.

    Binary error in ``value * 100`` is not corrected: 1.005 gives 1.0.
    """

    return math.floor(value * 100 + 0.5) / 100


def attendance_percentage(present_days: int, late_days: int, total_days: int) -> float:
    # Late counts as attended.
    if total_days <= 0:
        return 0.0
    return round2((present_days + late_days) / total_days * 100)


def aggregate(records: Iterable[Optional[AttendanceRecord]]) -> StudentStatistics:
    """Summarise one student's per-date records.

    ``None`` marks a date with no record for the student (e.g. not enrolled
    yet) and is not counted. Unknown statuses count toward ``total_days`` only.
    """

    counts = {status.value: 0 for status in AttendanceStatus}
    total = 0
    for record in records:
        if record is None:
            continue
        total += 1
        status = getattr(record.status, "value", record.status)
        if status in counts:
            counts[status] += 1

    present = counts[AttendanceStatus.PRESENT.value]
    late = counts[AttendanceStatus.LATE.value]
    return StudentStatistics(
        total_days=total,
        present_days=present,
        absent_days=counts[AttendanceStatus.ABSENT.value],
        late_days=late,
        leave_days=counts[AttendanceStatus.LEAVE.value],
        attendance_percentage=attendance_percentage(present, late, total),
    )
