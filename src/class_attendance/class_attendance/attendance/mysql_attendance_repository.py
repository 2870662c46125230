from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConcurrentUpdateError, DuplicateError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Attendance, AttendanceRecord
from .repository import AttendanceRepository

_DOC_COLUMNS = "attendance_id, class_id, att_date, teacher_id, is_locked, version"


def _to_attendance(r: dict, records: list[AttendanceRecord]) -> Attendance:
    return Attendance(
        attendance_id=int(r["attendance_id"]),
        class_id=int(r["class_id"]),
        date=r["att_date"],
        teacher_id=int(r["teacher_id"]),
        is_locked=bool(r["is_locked"]),
        version=int(r["version"]),
        records=tuple(records),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    """Attendance documents split over ``attendances`` and ``attendance_records``.

    ``upsert`` is a compare-and-swap on ``attendances.version``; the record
    rows are rewritten in the same transaction.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_records(self, cur, attendance_ids: Sequence[int]) -> dict[int, list[AttendanceRecord]]:
        out: dict[int, list[AttendanceRecord]] = {int(a): [] for a in attendance_ids}
        if not attendance_ids:
            return out

        placeholders = ",".join(["%s"] * len(attendance_ids))
        cur.execute(
            f"""
            SELECT attendance_id, student_id, status, remarks
            FROM attendance_records
            WHERE attendance_id IN ({placeholders})
            ORDER BY attendance_id, position
            """,
            tuple(int(a) for a in attendance_ids),
        )
        for r in fetchall(cur):
            out[int(r["attendance_id"])].append(
                AttendanceRecord(
                    student_id=int(r["student_id"]),
                    status=AttendanceStatus(r["status"]),
                    remarks=r.get("remarks") or "",
                )
            )
        return out

    def find(self, class_id: int, day: date) -> Optional[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_DOC_COLUMNS} FROM attendances WHERE class_id=%s AND att_date=%s",
                (int(class_id), day),
            )
            r = fetchone(cur)
            if not r:
                return None
            records = self._load_records(cur, [int(r["attendance_id"])])
            return _to_attendance(r, records[int(r["attendance_id"])])

    def find_range(
        self,
        class_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[Attendance]:
        clauses = ["class_id=%s"]
        params: list[object] = [int(class_id)]
        if start is not None:
            clauses.append("att_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("att_date <= %s")
            params.append(end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_DOC_COLUMNS}
                FROM attendances
                WHERE {" AND ".join(clauses)}
                ORDER BY att_date ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)
            records = self._load_records(cur, [int(r["attendance_id"]) for r in rows])
            return [_to_attendance(r, records[int(r["attendance_id"])]) for r in rows]

    def upsert(self, attendance: Attendance) -> Attendance:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                if attendance.attendance_id is None:
                    cur.execute(
                        """
                        INSERT INTO attendances(class_id, att_date, teacher_id, is_locked, version)
                        VALUES(%s,%s,%s,%s,1)
                        """,
                        (attendance.class_id, attendance.date, attendance.teacher_id, int(attendance.is_locked)),
                    )
                    attendance_id = int(cur.lastrowid)
                    version = 1
                else:
                    attendance_id = int(attendance.attendance_id)
                    cur.execute(
                        """
                        UPDATE attendances
                        SET is_locked=%s, version=version+1
                        WHERE attendance_id=%s AND version=%s
                        """,
                        (int(attendance.is_locked), attendance_id, int(attendance.version)),
                    )
                    if cur.rowcount == 0:
                        raise ConcurrentUpdateError(
                            f"Attendance {attendance_id} changed since version {attendance.version}"
                        )
                    version = int(attendance.version) + 1
                    cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (attendance_id,))

                if attendance.records:
                    cur.executemany(
                        """
                        INSERT INTO attendance_records(attendance_id, position, student_id, status, remarks)
                        VALUES(%s,%s,%s,%s,%s)
                        """,
                        [
                            (
                                attendance_id,
                                pos,
                                int(r.student_id),
                                AttendanceStatus(r.status).value,
                                r.remarks or "",
                            )
                            for pos, r in enumerate(attendance.records)
                        ],
                    )
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e) and attendance.attendance_id is None:
                raise DuplicateError(
                    f"Attendance for class {attendance.class_id} on {attendance.date.isoformat()} already exists"
                )
            raise

        return replace(attendance, attendance_id=attendance_id, version=version)
