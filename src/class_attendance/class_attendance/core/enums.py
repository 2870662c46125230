from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Per-student status stored on an attendance record."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    LEAVE = "Leave"


class ReportType(str, Enum):
    INDIVIDUAL = "Individual"
    CLASS = "Class"


class ShareChannel(str, Enum):
    """Channels a stored report can be marked as shared through."""

    EMAIL = "Email"
    WHATSAPP = "WhatsApp"
    SMS = "SMS"


class AlertChannel(str, Enum):
    """Transport used for low-attendance alerts."""

    SMS = "sms"
    WHATSAPP = "whatsapp"
    EMAIL = "email"

    @property
    def uses_phone(self) -> bool:
        return self in (AlertChannel.SMS, AlertChannel.WHATSAPP)


class AlertStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
