from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from twilio.rest import Client

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_COUNTRY_CODE, DEFAULT_LOW_ATTENDANCE_THRESHOLD, DEFAULT_NOTIFY_MAX_WORKERS
from .core.enums import AlertChannel
from .database.connection import DatabaseConnection, DBConfig
from .notifications.channels import (
    ConsoleSink,
    NotificationSink,
    SmtpConfig,
    SmtpEmailSink,
    TwilioSmsSink,
    TwilioWhatsAppSink,
)
from .notifications.selector import LowAttendanceSelector
from .notifications.service import NotificationService
from .reports.mysql_report_repository import MySQLReportRepository
from .reports.repository import ReportRepository
from .reports.service import ReportService
from .roster.mysql_roster_repository import MySQLRosterRepository
from .roster.repository import RosterRepository


@dataclass(frozen=True)
class Container:
    roster_repo: RosterRepository
    attendance_repo: AttendanceRepository
    reports_repo: ReportRepository

    attendance_service: AttendanceService
    report_service: ReportService
    low_attendance_selector: LowAttendanceSelector
    notification_service: NotificationService

    conn: Optional[DatabaseConnection] = None


def build_sinks(settings: Any) -> dict[AlertChannel, NotificationSink]:
    """Twilio/SMTP sinks when credentials are configured, console otherwise."""

    console = ConsoleSink()
    sinks: dict[AlertChannel, NotificationSink] = {
        AlertChannel.SMS: console,
        AlertChannel.WHATSAPP: console,
        AlertChannel.EMAIL: console,
    }
    country_code = str(getattr(settings, "DEFAULT_COUNTRY_CODE", DEFAULT_COUNTRY_CODE))

    sid = getattr(settings, "TWILIO_SID", "")
    token = getattr(settings, "TWILIO_AUTH_TOKEN", "")
    if sid and token:
        client = Client(sid, token)
        if getattr(settings, "TWILIO_PHONE", ""):
            sinks[AlertChannel.SMS] = TwilioSmsSink(client, settings.TWILIO_PHONE, country_code=country_code)
        if getattr(settings, "WHATSAPP_FROM", ""):
            sinks[AlertChannel.WHATSAPP] = TwilioWhatsAppSink(client, settings.WHATSAPP_FROM, country_code=country_code)

    if getattr(settings, "SMTP_HOST", ""):
        sinks[AlertChannel.EMAIL] = SmtpEmailSink(
            SmtpConfig(
                host=settings.SMTP_HOST,
                port=int(getattr(settings, "SMTP_PORT", 587)),
                username=getattr(settings, "SMTP_USER", "") or None,
                password=getattr(settings, "SMTP_PASSWORD", "") or None,
                sender=getattr(settings, "SMTP_SENDER", "") or None,
                use_tls=bool(getattr(settings, "SMTP_USE_TLS", True)),
            )
        )
    return sinks


def wire_services(
    *,
    roster_repo: RosterRepository,
    attendance_repo: AttendanceRepository,
    reports_repo: ReportRepository,
    sinks: Mapping[AlertChannel, NotificationSink],
    low_attendance_threshold: float = DEFAULT_LOW_ATTENDANCE_THRESHOLD,
    notify_max_workers: int = DEFAULT_NOTIFY_MAX_WORKERS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    selector = LowAttendanceSelector(attendance_repo, roster_repo)
    return Container(
        roster_repo=roster_repo,
        attendance_repo=attendance_repo,
        reports_repo=reports_repo,
        attendance_service=AttendanceService(attendance_repo, roster_repo),
        report_service=ReportService(attendance_repo, roster_repo, reports_repo),
        low_attendance_selector=selector,
        notification_service=NotificationService(
            selector,
            roster_repo,
            sinks,
            default_threshold=low_attendance_threshold,
            max_workers=notify_max_workers,
        ),
        conn=conn,
    )


def build_container(*, settings: Any) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
    return wire_services(
        roster_repo=MySQLRosterRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        reports_repo=MySQLReportRepository(conn),
        sinks=build_sinks(settings),
        low_attendance_threshold=float(getattr(settings, "LOW_ATTENDANCE_THRESHOLD", DEFAULT_LOW_ATTENDANCE_THRESHOLD)),
        notify_max_workers=int(getattr(settings, "NOTIFY_MAX_WORKERS", DEFAULT_NOTIFY_MAX_WORKERS)),
        conn=conn,
    )
