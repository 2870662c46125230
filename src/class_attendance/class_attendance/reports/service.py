from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import DayLike, end_of_day, normalize_day, now_local, start_of_day
from ..common.validators import parse_optional_int, require_present
from ..core.enums import ReportType, ShareChannel
from ..core.exceptions import NoDataError, NotFoundError, ValidationError
from ..roster.repository import RosterRepository
from .builder import build_class_payload, build_individual_payload
from .model import Report
from .repository import ReportRepository

logger = logging.getLogger(__name__)


def _parse_enum(enum_cls, value, field_name: str):
    require_present(value, field_name)
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


class ReportService:
    """Individual and class attendance reports over a date range."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        roster: RosterRepository,
        reports: ReportRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._roster = roster
        self._reports = reports
        self._clock = clock

    def generate(
        self,
        class_id: int,
        *,
        start_date: DayLike,
        end_date: DayLike,
        report_type: ReportType | str,
        generated_by: int,
        teacher_name: str = "",
        student_id: Optional[int] = None,
    ) -> Report:
        start_day = normalize_day(start_date, "start_date")
        end_day = normalize_day(end_date, "end_date")
        if start_day > end_day:
            raise ValidationError("start_date must not be after end_date")
        report_type = _parse_enum(ReportType, report_type, "report_type")
        student_id = parse_optional_int(student_id, "student_id")
        if report_type == ReportType.INDIVIDUAL and student_id is None:
            raise ValidationError("student_id is required for an Individual report")

        classroom = self._roster.get_class(class_id)
        if not classroom:
            raise NotFoundError(f"Class {class_id} not found")

        attendances = list(self._attendance.find_range(class_id, start_day, end_day))
        if not attendances:
            raise NoDataError("No attendance records found for the given date range")

        if report_type == ReportType.INDIVIDUAL:
            student = self._roster.get_student(student_id)
            if not student or student.class_id != class_id:
                raise NotFoundError(f"Student {student_id} not found")
            data = build_individual_payload(attendances, student, classroom, teacher_name)
        else:
            students = list(self._roster.list_students(class_id))
            data = build_class_payload(attendances, students, classroom, teacher_name)

        report = self._reports.create(
            Report(
                title=f"{report_type.value} Attendance Report",
                class_id=class_id,
                student_id=student_id if report_type == ReportType.INDIVIDUAL else None,
                report_type=report_type,
                start_date=start_of_day(start_day),
                end_date=end_of_day(end_day),
                data=data,
                generated_by=int(generated_by),
            )
        )
        logger.info(
            "generated %s report %s for class=%s over %s..%s (%d days)",
            report_type.value, report.report_id, class_id, start_day, end_day, len(attendances),
        )
        return report

    def get(self, report_id: int) -> Report:
        report = self._reports.get(report_id)
        if not report:
            raise NotFoundError(f"Report {report_id} not found")
        return report

    def list_student_reports(self, student_id: int) -> list[Report]:
        return list(self._reports.list_for_student(student_id))

    def list_class_reports(self, class_id: int) -> list[Report]:
        return list(self._reports.list_for_class(class_id, ReportType.CLASS))

    def share(self, report_id: int, share_via: ShareChannel | str) -> Report:
        """Record that a report was shared; delivery itself happens elsewhere."""

        channel = _parse_enum(ShareChannel, share_via, "share_via")
        report = self._reports.mark_shared(report_id, share_via=channel, shared_at=self._clock())
        if not report:
            raise NotFoundError(f"Report {report_id} not found")
        logger.info("report %s shared via %s", report_id, channel.value)
        return report

    def delete(self, report_id: int) -> None:
        if not self._reports.delete(report_id):
            raise NotFoundError(f"Report {report_id} not found")
        logger.info("report %s deleted", report_id)
