from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ClassRoom, Student
from .repository import RosterRepository

_STUDENT_COLUMNS = """
    student_id, class_id, roll_number, name, email, phone_number, parent_email, parent_phone
"""


def _to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        class_id=int(r["class_id"]),
        roll_number=str(r["roll_number"]),
        name=r["name"],
        email=r.get("email"),
        phone=r.get("phone_number"),
        parent_email=r.get("parent_email"),
        parent_phone=r.get("parent_phone"),
    )


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_class(self, class_id: int) -> Optional[ClassRoom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT class_id, class_name, class_code, teacher_id, section, academic_year
                FROM classes
                WHERE class_id=%s
                """,
                (int(class_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ClassRoom(
                class_id=int(r["class_id"]),
                class_name=r["class_name"],
                class_code=r["class_code"],
                teacher_id=int(r["teacher_id"]),
                section=r.get("section") or "A",
                academic_year=r.get("academic_year"),
            )

    def list_students(self, class_id: int) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STUDENT_COLUMNS} FROM students WHERE class_id=%s ORDER BY student_id",
                (int(class_id),),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def get_student(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            r = fetchone(cur)
            return _to_student(r) if r else None
