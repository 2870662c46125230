from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ReportType, ShareChannel
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json
from .model import Report
from .repository import ReportRepository

_COLUMNS = """
    report_id, title, class_id, student_id, report_type, start_date, end_date, data,
    generated_by, format, is_shared, share_via, shared_at, created_at
"""


def _to_report(r: dict) -> Report:
    return Report(
        report_id=int(r["report_id"]),
        title=r["title"],
        class_id=int(r["class_id"]),
        student_id=int(r["student_id"]) if r.get("student_id") is not None else None,
        report_type=ReportType(r["report_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        data=load_json(r["data"]) or {},
        generated_by=int(r["generated_by"]),
        format=r.get("format") or "JSON",
        is_shared=bool(r.get("is_shared")),
        share_via=ShareChannel(r["share_via"]) if r.get("share_via") else None,
        shared_at=r.get("shared_at"),
        created_at=r.get("created_at"),
    )


class MySQLReportRepository(ReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, report: Report) -> Report:
        created_at = report.created_at or datetime.now()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO reports(title, class_id, student_id, report_type, start_date, end_date, data,
                                    generated_by, format, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    report.title,
                    int(report.class_id),
                    report.student_id,
                    report.report_type.value,
                    report.start_date,
                    report.end_date,
                    json.dumps(report.data, ensure_ascii=False),
                    int(report.generated_by),
                    report.format,
                    created_at,
                ),
            )
            return replace(report, report_id=int(cur.lastrowid), created_at=created_at)

    def get(self, report_id: int) -> Optional[Report]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM reports WHERE report_id=%s", (int(report_id),))
            r = fetchone(cur)
            return _to_report(r) if r else None

    def list_for_student(self, student_id: int) -> Sequence[Report]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM reports WHERE student_id=%s ORDER BY created_at DESC, report_id DESC",
                (int(student_id),),
            )
            return [_to_report(r) for r in fetchall(cur)]

    def list_for_class(self, class_id: int, report_type: Optional[ReportType] = None) -> Sequence[Report]:
        clauses = ["class_id=%s"]
        params: list[object] = [int(class_id)]
        if report_type is not None:
            clauses.append("report_type=%s")
            params.append(report_type.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM reports
                WHERE {" AND ".join(clauses)}
                ORDER BY created_at DESC, report_id DESC
                """,
                tuple(params),
            )
            return [_to_report(r) for r in fetchall(cur)]

    def mark_shared(self, report_id: int, *, share_via: ShareChannel, shared_at: datetime) -> Optional[Report]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE reports SET is_shared=1, share_via=%s, shared_at=%s WHERE report_id=%s",
                (share_via.value, shared_at, int(report_id)),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM reports WHERE report_id=%s", (int(report_id),))
            r = fetchone(cur)
            return _to_report(r) if r else None

    def delete(self, report_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM reports WHERE report_id=%s", (int(report_id),))
            return cur.rowcount > 0
