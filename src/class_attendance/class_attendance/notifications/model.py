from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from ..core.enums import AlertChannel, AlertStatus
from ..reports.model import StudentStatistics
from ..roster.model import Student


@dataclass(frozen=True)
class LowAttendanceStudent:
    student: Student
    statistics: StudentStatistics

    def to_dict(self) -> dict:
        s = self.student
        return {
            "student_id": s.student_id,
            "name": s.name,
            "roll_number": s.roll_number,
            "email": s.email,
            "phone": s.phone,
            "parent_phone": s.parent_phone or s.phone,
            "parent_email": s.parent_email or s.email,
            "attendance": self.statistics.to_dict(),
        }


@dataclass(frozen=True)
class AlertMessage:
    """What a sink delivers: a resolved address plus the rendered text.

    ``context`` keeps the template inputs for sinks that render their own body.
    """

    channel: AlertChannel
    target: str
    body: str
    subject: str = ""
    context: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SendResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class AlertOutcome:
    student_id: int
    student_name: str
    status: AlertStatus
    target: Optional[str] = None
    percentage: Optional[float] = None
    message_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "student_id": self.student_id,
            "student_name": self.student_name,
            "status": self.status.value,
            "target": self.target,
            "percentage": self.percentage,
            "message_id": self.message_id,
            "error": self.error,
        }
