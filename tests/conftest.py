from __future__ import annotations

from datetime import date, datetime

import pytest

from src.class_attendance.class_attendance.attendance.service import AttendanceService
from src.class_attendance.class_attendance.core.enums import AlertChannel
from src.class_attendance.class_attendance.reports.service import ReportService
from tests.fakes import CLASS_ID, InMemoryAttendance, InMemoryReports, InMemoryRoster, RecordingSink


@pytest.fixture
def day() -> date:
    return date(2026, 3, 2)


@pytest.fixture
def roster() -> InMemoryRoster:
    r = InMemoryRoster()
    r.add_class(CLASS_ID)
    return r


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def reports_repo() -> InMemoryReports:
    return InMemoryReports()


@pytest.fixture
def attendance_service(attendance_repo, roster) -> AttendanceService:
    return AttendanceService(attendance_repo, roster)


@pytest.fixture
def report_service(attendance_repo, roster, reports_repo) -> ReportService:
    return ReportService(attendance_repo, roster, reports_repo, clock=lambda: datetime(2026, 3, 10, 12, 0, 0))


@pytest.fixture
def sinks() -> dict[AlertChannel, RecordingSink]:
    return {channel: RecordingSink() for channel in AlertChannel}
