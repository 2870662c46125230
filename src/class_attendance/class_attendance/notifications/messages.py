from __future__ import annotations

from typing import Optional

from ..core.constants import DEFAULT_COUNTRY_CODE
from ..core.enums import AlertChannel
from ..roster.model import ClassRoom, Student
from .model import AlertMessage, LowAttendanceStudent


def resolve_contact(student: Student, channel: AlertChannel) -> Optional[str]:
    """Parent contact first, the student's own as fallback."""

    if channel.uses_phone:
        candidates = (student.parent_phone, student.phone)
    else:
        candidates = (student.parent_email, student.email)
    for value in candidates:
        if value and value.strip():
            return value.strip()
    return None


def format_phone(number: Optional[str], country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """Normalise to E.164-ish ``+<cc><number>``."""

    if not number:
        return ""
    num = str(number).strip().replace(" ", "").replace("-", "")
    if num.startswith("+"):
        return num
    if num.startswith(country_code) and len(num) > 10:
        return f"+{num}"
    if len(num) == 10:
        return f"+{country_code}{num}"
    return f"+{num}"


def _pct(value: float) -> str:
    return f"{value:g}"


def render_alert(
    channel: AlertChannel,
    target: str,
    entry: LowAttendanceStudent,
    *,
    classroom: ClassRoom,
    threshold: float,
) -> AlertMessage:
    student, stats = entry.student, entry.statistics
    context = {
        "student_name": student.name,
        "roll_number": student.roll_number,
        "class_name": classroom.class_name,
        "class_code": classroom.class_code,
        "percentage": stats.attendance_percentage,
        "threshold": threshold,
        "attended_days": stats.present_days + stats.late_days,
        "total_days": stats.total_days,
    }

    if channel == AlertChannel.SMS:
        body = (
            f"Alert: {student.name}'s attendance is {_pct(stats.attendance_percentage)}% "
            f"(threshold: {_pct(threshold)}%). Please contact the department for details. - Attendance Tracker"
        )
        return AlertMessage(channel=channel, target=target, body=body, context=context)

    lines = [
        "LOW ATTENDANCE ALERT",
        "",
        "Your ward's attendance has fallen below the required threshold.",
        "",
        f"Name: {student.name}",
        f"Roll Number: {student.roll_number}",
        f"Subject: {classroom.class_name}",
        f"Class: {classroom.class_code}",
        "",
        f"Current Attendance: {_pct(stats.attendance_percentage)}%",
        f"Minimum Required: {_pct(threshold)}%",
        f"Days Attended: {context['attended_days']}",
        f"Total Days: {stats.total_days}",
        "",
        "If there are any medical or personal issues, kindly contact the department office.",
        "Attendance Tracking System (automated message)",
    ]
    if channel == AlertChannel.EMAIL:
        lines.insert(0, "Dear Parent/Guardian,")
        lines.insert(1, "")
        subject = f"Low Attendance Alert - {student.name}"
    else:
        subject = ""
    return AlertMessage(channel=channel, target=target, subject=subject, body="\n".join(lines), context=context)
