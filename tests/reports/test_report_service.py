import json
from datetime import date, datetime

import pytest

from src.class_attendance.class_attendance.attendance.model import Attendance, AttendanceRecord
from src.class_attendance.class_attendance.core.enums import AttendanceStatus, ReportType, ShareChannel
from src.class_attendance.class_attendance.core.exceptions import NoDataError, NotFoundError, ValidationError
from tests.fakes import CLASS_ID, TEACHER_ID, enroll


@pytest.fixture
def class_with_history(roster, attendance_repo):
    asha = enroll(roster, "2", "Asha", email="asha@example.com")
    bilal = enroll(roster, "1", "Bilal")
    for d, statuses in (
        (2, {asha: AttendanceStatus.PRESENT, bilal: AttendanceStatus.ABSENT}),
        (3, {asha: AttendanceStatus.LATE, bilal: AttendanceStatus.PRESENT}),
        (4, {asha: AttendanceStatus.ABSENT, bilal: AttendanceStatus.PRESENT}),
    ):
        attendance_repo.upsert(
            Attendance(
                class_id=CLASS_ID,
                date=date(2026, 3, d),
                teacher_id=TEACHER_ID,
                records=tuple(AttendanceRecord(sid, status) for sid, status in statuses.items()),
            )
        )
    return asha, bilal


def test_class_report_is_stored_with_full_day_range(report_service, reports_repo, class_with_history):
    asha, bilal = class_with_history

    report = report_service.generate(
        CLASS_ID,
        start_date="2026-03-01",
        end_date="2026-03-31",
        report_type="Class",
        generated_by=TEACHER_ID,
        teacher_name="Ms. Rao",
    )

    assert report.report_id is not None
    assert reports_repo.get(report.report_id) == report
    assert report.title == "Class Attendance Report"
    assert report.student_id is None
    assert report.start_date == datetime(2026, 3, 1, 0, 0, 0)
    assert report.end_date == datetime(2026, 3, 31, 23, 59, 59, 999000)
    assert list(report.data["student_reports"]) == [str(bilal), str(asha)]
    assert report.data["student_reports"][str(asha)]["attendance_percentage"] == 66.67
    assert report.data["class_average"] == 66.67
    assert report.data["class_info"]["teacher_name"] == "Ms. Rao"


def test_individual_report_respects_date_range(report_service, class_with_history):
    asha, _ = class_with_history

    report = report_service.generate(
        CLASS_ID,
        start_date=date(2026, 3, 3),
        end_date=date(2026, 3, 4),
        report_type=ReportType.INDIVIDUAL,
        student_id=str(asha),
        generated_by=TEACHER_ID,
    )

    assert report.student_id == asha
    assert report.data["total_days"] == 2
    assert report.data["late_days"] == 1
    assert report.data["attendance_percentage"] == 50.0
    assert report.data["student_details"]["email"] == "asha@example.com"


@pytest.mark.parametrize("report_type", ["Class", "Individual"])
def test_empty_range_raises_no_data(report_service, class_with_history, report_type):
    asha, _ = class_with_history

    with pytest.raises(NoDataError):
        report_service.generate(
            CLASS_ID,
            start_date="2026-04-01",
            end_date="2026-04-30",
            report_type=report_type,
            student_id=asha,
            generated_by=TEACHER_ID,
        )


def test_student_from_another_class_is_not_found(report_service, roster, class_with_history):
    roster.add_class(2, name="Algorithms", code="CS102")
    outsider = enroll(roster, "1", "Omar", class_id=2)

    with pytest.raises(NotFoundError):
        report_service.generate(
            CLASS_ID,
            start_date="2026-03-01",
            end_date="2026-03-31",
            report_type="Individual",
            student_id=outsider,
            generated_by=TEACHER_ID,
        )


def test_unknown_class_is_not_found(report_service):
    with pytest.raises(NotFoundError):
        report_service.generate(
            404, start_date="2026-03-01", end_date="2026-03-31", report_type="Class", generated_by=TEACHER_ID
        )


@pytest.mark.parametrize(
    "kwargs",
    [
        {"start_date": "2026-03-31", "end_date": "2026-03-01", "report_type": "Class"},
        {"start_date": None, "end_date": "2026-03-01", "report_type": "Class"},
        {"start_date": "2026-03-01", "end_date": "2026-03-31", "report_type": "Weekly"},
        {"start_date": "2026-03-01", "end_date": "2026-03-31", "report_type": None},
        {"start_date": "2026-03-01", "end_date": "2026-03-31", "report_type": "Individual"},
    ],
)
def test_invalid_requests_are_rejected(report_service, class_with_history, kwargs):
    with pytest.raises(ValidationError):
        report_service.generate(CLASS_ID, generated_by=TEACHER_ID, **kwargs)


def test_share_marks_report(report_service, class_with_history):
    report = report_service.generate(
        CLASS_ID, start_date="2026-03-01", end_date="2026-03-31", report_type="Class", generated_by=TEACHER_ID
    )

    shared = report_service.share(report.report_id, "WhatsApp")

    assert shared.is_shared
    assert shared.share_via == ShareChannel.WHATSAPP
    assert shared.shared_at == datetime(2026, 3, 10, 12, 0, 0)
    assert shared.data == report.data


def test_share_validates_channel_and_report(report_service, class_with_history):
    report = report_service.generate(
        CLASS_ID, start_date="2026-03-01", end_date="2026-03-31", report_type="Class", generated_by=TEACHER_ID
    )

    with pytest.raises(ValidationError):
        report_service.share(report.report_id, "Fax")
    with pytest.raises(NotFoundError):
        report_service.share(9999, "Email")


def test_listing_and_delete(report_service, class_with_history):
    asha, _ = class_with_history
    common = {"start_date": "2026-03-01", "end_date": "2026-03-31", "generated_by": TEACHER_ID}
    first = report_service.generate(CLASS_ID, report_type="Class", **common)
    individual = report_service.generate(CLASS_ID, report_type="Individual", student_id=asha, **common)
    second = report_service.generate(CLASS_ID, report_type="Class", **common)

    assert [r.report_id for r in report_service.list_class_reports(CLASS_ID)] == [second.report_id, first.report_id]
    assert [r.report_id for r in report_service.list_student_reports(asha)] == [individual.report_id]

    report_service.delete(first.report_id)

    with pytest.raises(NotFoundError):
        report_service.get(first.report_id)
    with pytest.raises(NotFoundError):
        report_service.delete(first.report_id)


@pytest.mark.parametrize("report_type", ["Class", "Individual"])
def test_repeated_generation_gives_identical_payload(report_service, roster, class_with_history, report_type):
    asha, _ = class_with_history
    enroll(roster, "10", "chen")
    enroll(roster, "B", "Dev")
    common = {
        "start_date": "2026-03-01",
        "end_date": "2026-03-31",
        "report_type": report_type,
        "student_id": asha,
        "generated_by": TEACHER_ID,
    }

    first = report_service.generate(CLASS_ID, **common)
    second = report_service.generate(CLASS_ID, **common)

    assert first.report_id != second.report_id
    assert json.dumps(first.data) == json.dumps(second.data)
