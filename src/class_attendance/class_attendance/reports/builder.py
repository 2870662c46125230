"""Report payload assembly.

Pure functions over already-loaded attendance documents and roster entries,
shared by report generation and low-attendance selection.
"""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Iterable, Optional, Sequence

from ..attendance.model import Attendance, AttendanceRecord
from ..roster.model import ClassRoom, Student
from .model import StudentStatistics
from .statistics import aggregate, round2

# Roll numbers that count as numeric: plain decimals with optional exponent,
# signed ``Infinity`` and unsigned 0x/0o/0b literals. No ``_`` separators,
# no ``inf``/``nan`` spellings.
_DECIMAL_ROLL = re.compile(r"[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")
_RADIX_ROLL = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")


def _as_number(roll_number: Optional[str]) -> Optional[float]:
    """Numeric value of a roll number, or None when it is text. Blank is 0."""

    text = (roll_number or "").strip()
    if not text:
        return 0.0
    if _RADIX_ROLL.fullmatch(text):
        return float(int(text, 0))
    if _DECIMAL_ROLL.fullmatch(text):
        return float(text.replace("Infinity", "inf"))
    return None


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _text_cmp(a: str, b: str) -> int:
    """Case-insensitive first; on a tie lowercase sorts before uppercase."""

    result = _cmp(a.casefold(), b.casefold())
    if result:
        return result
    return _cmp(a.swapcase(), b.swapcase())


def compare_students(a: Student, b: Student) -> int:
    """Roll number order: numeric when both parse as numbers, else text; then name."""

    ra = (a.roll_number or "").strip()
    rb = (b.roll_number or "").strip()
    na, nb = _as_number(ra), _as_number(rb)

    if na is not None and nb is not None:
        result = _cmp(na, nb)
    else:
        result = _text_cmp(ra, rb)
    if result:
        return result

    result = _text_cmp(a.name or "", b.name or "")
    if result:
        return result
    return _cmp(a.student_id, b.student_id)


def sort_roster(students: Iterable[Student]) -> list[Student]:
    return sorted(students, key=cmp_to_key(compare_students))


def records_for_student(attendances: Sequence[Attendance], student_id: int) -> list[Optional[AttendanceRecord]]:
    """One entry per document: the student's record, or None when absent from it."""

    return [a.record_for(student_id) for a in attendances]


def student_statistics(
    attendances: Sequence[Attendance],
    students: Iterable[Student],
) -> list[tuple[Student, StudentStatistics]]:
    """Per-student statistics in roster sort order."""

    return [(s, aggregate(records_for_student(attendances, s.student_id))) for s in sort_roster(students)]


def class_average(percentages: Sequence[float]) -> float:
    if not percentages:
        return 0.0
    return round2(sum(percentages) / len(percentages))


def class_info(classroom: ClassRoom, teacher_name: str = "") -> dict:
    return {
        "class_name": classroom.class_name or "Class",
        "class_code": classroom.class_code or str(classroom.class_id),
        "teacher_name": teacher_name or "",
    }


def build_individual_payload(
    attendances: Sequence[Attendance],
    student: Student,
    classroom: ClassRoom,
    teacher_name: str = "",
) -> dict:
    stats = aggregate(records_for_student(attendances, student.student_id))
    return {
        **stats.to_dict(),
        "student_details": {
            "name": student.name,
            "roll_number": student.roll_number,
            "email": student.email,
        },
        "class_info": class_info(classroom, teacher_name),
    }


def build_class_payload(
    attendances: Sequence[Attendance],
    students: Sequence[Student],
    classroom: ClassRoom,
    teacher_name: str = "",
) -> dict:
    student_reports: dict[str, dict] = {}
    for student, stats in student_statistics(attendances, students):
        student_reports[str(student.student_id)] = {
            **stats.to_dict(),
            "name": student.name,
            "roll_number": student.roll_number,
        }

    return {
        "total_students": len(student_reports),
        "student_reports": student_reports,
        "class_average": class_average([r["attendance_percentage"] for r in student_reports.values()]),
        "class_info": class_info(classroom, teacher_name),
    }
