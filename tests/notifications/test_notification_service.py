from datetime import date

import pytest

from src.class_attendance.class_attendance.attendance.model import Attendance, AttendanceRecord
from src.class_attendance.class_attendance.core.enums import AlertChannel, AlertStatus, AttendanceStatus
from src.class_attendance.class_attendance.core.exceptions import NotFoundError, ValidationError
from src.class_attendance.class_attendance.notifications.messages import format_phone, render_alert, resolve_contact
from src.class_attendance.class_attendance.notifications.model import LowAttendanceStudent
from src.class_attendance.class_attendance.notifications.selector import LowAttendanceSelector
from src.class_attendance.class_attendance.notifications.service import NO_CONTACT_INFO, NotificationService
from src.class_attendance.class_attendance.reports.model import StudentStatistics
from src.class_attendance.class_attendance.roster.model import Student
from tests.fakes import CLASS_ID, TEACHER_ID, RecordingSink, enroll


def _absent_everywhere(repo, *student_ids):
    repo.upsert(
        Attendance(
            class_id=CLASS_ID,
            date=date(2026, 3, 2),
            teacher_id=TEACHER_ID,
            records=tuple(AttendanceRecord(sid, AttendanceStatus.ABSENT) for sid in student_ids),
        )
    )


def _service(attendance_repo, roster, sinks, **kwargs):
    return NotificationService(LowAttendanceSelector(attendance_repo, roster), roster, sinks, **kwargs)


def test_sms_goes_to_parent_then_student_phone(attendance_repo, roster, sinks):
    a = enroll(roster, "1", "Asha", phone="9000000001", parent_phone="9111111111")
    b = enroll(roster, "2", "Bilal", phone="9000000002")
    _absent_everywhere(attendance_repo, a, b)

    outcomes = _service(attendance_repo, roster, sinks).send_low_attendance_alerts(CLASS_ID, "sms")

    assert [o.status for o in outcomes] == [AlertStatus.SENT, AlertStatus.SENT]
    assert sorted(m.target for m in sinks[AlertChannel.SMS].sent) == ["9000000002", "9111111111"]
    assert [o.target for o in outcomes] == ["9111111111", "9000000002"]


def test_missing_contact_is_a_failed_outcome(attendance_repo, roster, sinks):
    a = enroll(roster, "1", "Asha")
    b = enroll(roster, "2", "Bilal", email="bilal@example.com")
    _absent_everywhere(attendance_repo, a, b)

    outcomes = _service(attendance_repo, roster, sinks).send_low_attendance_alerts(CLASS_ID, AlertChannel.EMAIL)

    assert outcomes[0].student_id == a
    assert outcomes[0].status == AlertStatus.FAILED
    assert outcomes[0].error == NO_CONTACT_INFO
    assert outcomes[1].status == AlertStatus.SENT
    assert sinks[AlertChannel.EMAIL].sent[0].subject == "Low Attendance Alert - Bilal"


def test_one_failing_send_does_not_stop_the_batch(attendance_repo, roster):
    ids = [enroll(roster, str(i), f"Student {i}", parent_phone=f"90000000{i:02d}") for i in range(1, 6)]
    _absent_everywhere(attendance_repo, *ids)
    sink = RecordingSink(raise_targets={"9000000002"}, fail_targets={"9000000004"})

    outcomes = _service(attendance_repo, roster, {AlertChannel.WHATSAPP: sink}, max_workers=3).send_low_attendance_alerts(
        CLASS_ID, "whatsapp"
    )

    assert [o.student_id for o in outcomes] == ids
    assert [o.status for o in outcomes] == [
        AlertStatus.SENT,
        AlertStatus.FAILED,
        AlertStatus.SENT,
        AlertStatus.FAILED,
        AlertStatus.SENT,
    ]
    assert "transport down" in outcomes[1].error
    assert outcomes[3].error == "rejected by provider"
    assert len(sink.sent) == 3


def test_student_ids_limit_recipients(attendance_repo, roster, sinks):
    a = enroll(roster, "1", "Asha", parent_phone="9111111111")
    b = enroll(roster, "2", "Bilal", parent_phone="9222222222")
    _absent_everywhere(attendance_repo, a, b)

    outcomes = _service(attendance_repo, roster, sinks).send_low_attendance_alerts(CLASS_ID, "sms", student_ids=[b])

    assert [o.student_id for o in outcomes] == [b]


def test_unknown_or_unconfigured_channel_is_rejected(attendance_repo, roster):
    service = _service(attendance_repo, roster, {AlertChannel.SMS: RecordingSink()})

    with pytest.raises(ValidationError):
        service.send_low_attendance_alerts(CLASS_ID, "pigeon")
    with pytest.raises(ValidationError):
        service.send_low_attendance_alerts(CLASS_ID, "email")


def test_unknown_class_is_not_found(attendance_repo, roster, sinks):
    with pytest.raises(NotFoundError):
        _service(attendance_repo, roster, sinks).send_low_attendance_alerts(404, "sms")


def test_list_low_attendance_uses_default_threshold(attendance_repo, roster, sinks):
    a = enroll(roster, "1", "Asha", phone="9000000001")
    _absent_everywhere(attendance_repo, a)

    data = _service(attendance_repo, roster, sinks, default_threshold=60).list_low_attendance(CLASS_ID)

    assert data["threshold"] == 60.0
    assert data["count"] == 1
    assert data["class_info"]["class_code"] == "CS101"
    assert data["low_attendance_students"][0]["parent_phone"] == "9000000001"
    with pytest.raises(ValidationError):
        _service(attendance_repo, roster, sinks).list_low_attendance(CLASS_ID, "150")


def test_resolve_contact_ignores_blank_values():
    student = Student(student_id=1, class_id=1, roll_number="1", name="Asha", parent_email="  ", email="a@x.org")

    assert resolve_contact(student, AlertChannel.EMAIL) == "a@x.org"
    assert resolve_contact(student, AlertChannel.SMS) is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("9876543210", "+919876543210"),
        ("98765-43210", "+919876543210"),
        ("919876543210", "+919876543210"),
        ("+1 555 123 4567", "+15551234567"),
        ("", ""),
    ],
)
def test_format_phone(raw, expected):
    assert format_phone(raw) == expected


def test_sms_body_mentions_percentage_and_threshold(roster):
    classroom = roster.get_class(CLASS_ID)
    student = Student(student_id=1, class_id=CLASS_ID, roll_number="7", name="Asha")
    stats = StudentStatistics(total_days=4, present_days=1, absent_days=3, attendance_percentage=25.0)
    entry = LowAttendanceStudent(student, stats)

    message = render_alert(AlertChannel.SMS, "9111111111", entry, classroom=classroom, threshold=75.0)

    assert message.body.startswith("Alert: Asha's attendance is 25% (threshold: 75%).")
    assert message.context["attended_days"] == 1


@pytest.mark.parametrize("student_ids", [["abc"], 5, "7", [None], [1.5, "x"], {"id": 1}])
def test_malformed_student_ids_are_rejected(attendance_repo, roster, sinks, student_ids):
    a = enroll(roster, "1", "Asha", parent_phone="9111111111")
    _absent_everywhere(attendance_repo, a)

    with pytest.raises(ValidationError):
        _service(attendance_repo, roster, sinks).send_low_attendance_alerts(CLASS_ID, "sms", student_ids=student_ids)

    assert sinks[AlertChannel.SMS].sent == []


def test_string_student_ids_are_accepted(attendance_repo, roster, sinks):
    a = enroll(roster, "1", "Asha", parent_phone="9111111111")
    b = enroll(roster, "2", "Bilal", parent_phone="9222222222")
    _absent_everywhere(attendance_repo, a, b)

    outcomes = _service(attendance_repo, roster, sinks).send_low_attendance_alerts(
        CLASS_ID, "sms", student_ids=[str(a)]
    )

    assert [o.student_id for o in outcomes] == [a]
