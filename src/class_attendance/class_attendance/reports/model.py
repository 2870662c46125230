from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..core.enums import ReportType, ShareChannel


@dataclass(frozen=True)
class StudentStatistics:
    total_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    late_days: int = 0
    leave_days: int = 0
    attendance_percentage: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_days": self.total_days,
            "present_days": self.present_days,
            "absent_days": self.absent_days,
            "late_days": self.late_days,
            "leave_days": self.leave_days,
            "attendance_percentage": self.attendance_percentage,
        }


@dataclass(frozen=True)
class Report:
    """Stored report snapshot. Only the share fields change after creation."""

    title: str
    class_id: int
    report_type: ReportType
    start_date: datetime
    end_date: datetime
    data: dict[str, Any]
    generated_by: int
    student_id: Optional[int] = None
    format: str = "JSON"
    is_shared: bool = False
    share_via: Optional[ShareChannel] = None
    shared_at: Optional[datetime] = None
    report_id: Optional[int] = None
    created_at: Optional[datetime] = field(default=None, compare=False)

    def to_dict(self) -> dict:
        return {
            "report_id": self.report_id,
            "title": self.title,
            "class_id": self.class_id,
            "student_id": self.student_id,
            "report_type": self.report_type.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "data": self.data,
            "generated_by": self.generated_by,
            "format": self.format,
            "is_shared": self.is_shared,
            "share_via": self.share_via.value if self.share_via else None,
            "shared_at": self.shared_at.isoformat() if self.shared_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
