from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional, Union

from ..core.constants import DEFAULT_STATUS_REMARKS
from ..core.enums import AttendanceStatus
from ..roster.model import Student


@dataclass(frozen=True)
class AttendanceRecord:
    """One student's status on one date."""

    student_id: int
    # Stored records always hold an AttendanceStatus; raw strings are tolerated for reads.
    status: Union[AttendanceStatus, str] = AttendanceStatus.PRESENT
    remarks: str = DEFAULT_STATUS_REMARKS

    @classmethod
    def default_for(cls, student_id: int) -> "AttendanceRecord":
        return cls(student_id=student_id, status=AttendanceStatus.PRESENT, remarks=DEFAULT_STATUS_REMARKS)


@dataclass(frozen=True)
class Attendance:
    """Aggregate root: one per (class, calendar day)."""

    class_id: int
    date: date
    teacher_id: int
    records: tuple[AttendanceRecord, ...] = ()
    is_locked: bool = False
    attendance_id: Optional[int] = None
    # Optimistic concurrency token; 0 means "not stored yet".
    version: int = 0

    def with_records(self, records) -> "Attendance":
        return replace(self, records=tuple(records))

    def student_ids(self) -> list[int]:
        return [r.student_id for r in self.records]

    def record_for(self, student_id: int) -> Optional[AttendanceRecord]:
        for r in self.records:
            if r.student_id == student_id:
                return r
        return None


@dataclass(frozen=True)
class ResolvedRecord:
    student: Student
    status: Union[AttendanceStatus, str]
    remarks: str

    def to_dict(self) -> dict:
        return {
            "student": self.student.to_dict(),
            "status": getattr(self.status, "value", self.status),
            "remarks": self.remarks,
        }


@dataclass(frozen=True)
class AttendanceSheet:
    """Read-model: an attendance document with student details resolved."""

    attendance: Attendance
    records: list[ResolvedRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        a = self.attendance
        return {
            "attendance_id": a.attendance_id,
            "class_id": a.class_id,
            "date": a.date.isoformat(),
            "teacher_id": a.teacher_id,
            "is_locked": a.is_locked,
            "records": [r.to_dict() for r in self.records],
        }
