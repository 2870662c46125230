from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Mapping, Optional

from ..common.validators import parse_id_list, parse_threshold
from ..core.constants import DEFAULT_LOW_ATTENDANCE_THRESHOLD, DEFAULT_NOTIFY_MAX_WORKERS
from ..core.enums import AlertChannel, AlertStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..roster.repository import RosterRepository
from .channels import NotificationSink
from .messages import render_alert, resolve_contact
from .model import AlertMessage, AlertOutcome, LowAttendanceStudent
from .selector import LowAttendanceSelector

logger = logging.getLogger(__name__)

NO_CONTACT_INFO = "no contact info"


def _parse_channel(value: AlertChannel | str) -> AlertChannel:
    try:
        return AlertChannel(str(getattr(value, "value", value)).lower())
    except ValueError:
        raise ValidationError(f"Unsupported channel {value!r}")


class NotificationService:
    def __init__(
        self,
        selector: LowAttendanceSelector,
        roster: RosterRepository,
        sinks: Mapping[AlertChannel, NotificationSink],
        *,
        default_threshold: float = DEFAULT_LOW_ATTENDANCE_THRESHOLD,
        max_workers: int = DEFAULT_NOTIFY_MAX_WORKERS,
    ):
        self._selector = selector
        self._roster = roster
        self._sinks = dict(sinks)
        self._default_threshold = float(default_threshold)
        self._max_workers = max(int(max_workers), 1)

    def list_low_attendance(self, class_id: int, threshold=None) -> dict:
        threshold = parse_threshold(threshold, self._default_threshold)
        classroom = self._roster.get_class(class_id)
        if not classroom:
            raise NotFoundError(f"Class {class_id} not found")

        students = self._selector.select_below_threshold(class_id, threshold)
        return {
            "class_info": {
                "class_id": classroom.class_id,
                "class_name": classroom.class_name,
                "class_code": classroom.class_code,
            },
            "threshold": threshold,
            "low_attendance_students": [s.to_dict() for s in students],
            "count": len(students),
        }

    def send_low_attendance_alerts(
        self,
        class_id: int,
        channel: AlertChannel | str,
        *,
        threshold=None,
        student_ids: Optional[Iterable[int]] = None,
    ) -> list[AlertOutcome]:
        """Alert parents of every student under the threshold.

        Per-student failures (missing contact, sink error) become ``failed``
        outcomes; only failing to enumerate the students raises.
        """

        channel = _parse_channel(channel)
        threshold = parse_threshold(threshold, self._default_threshold)
        student_ids = parse_id_list(student_ids, "student_ids")
        sink = self._sinks.get(channel)
        if sink is None:
            raise ValidationError(f"No sender configured for {channel.value}")

        classroom = self._roster.get_class(class_id)
        if not classroom:
            raise NotFoundError(f"Class {class_id} not found")

        selected = self._selector.select_below_threshold(class_id, threshold, student_ids)
        logger.info(
            "%s alerts for class=%s threshold=%s: %d students selected",
            channel.value, class_id, threshold, len(selected),
        )

        outcomes: list[Optional[AlertOutcome]] = [None] * len(selected)
        jobs: list[tuple[int, LowAttendanceStudent, AlertMessage]] = []
        for idx, entry in enumerate(selected):
            target = resolve_contact(entry.student, channel)
            if not target:
                outcomes[idx] = AlertOutcome(
                    student_id=entry.student.student_id,
                    student_name=entry.student.name,
                    status=AlertStatus.FAILED,
                    percentage=entry.statistics.attendance_percentage,
                    error=NO_CONTACT_INFO,
                )
                continue
            message = render_alert(channel, target, entry, classroom=classroom, threshold=threshold)
            jobs.append((idx, entry, message))

        if jobs:
            with ThreadPoolExecutor(max_workers=min(self._max_workers, len(jobs))) as pool:
                futures = [(idx, pool.submit(self._deliver, sink, entry, message)) for idx, entry, message in jobs]
                for idx, future in futures:
                    outcomes[idx] = future.result()

        sent = sum(1 for o in outcomes if o and o.status == AlertStatus.SENT)
        logger.info("%s alerts for class=%s: %d sent, %d failed", channel.value, class_id, sent, len(outcomes) - sent)
        return [o for o in outcomes if o is not None]

    @staticmethod
    def _deliver(sink: NotificationSink, entry: LowAttendanceStudent, message: AlertMessage) -> AlertOutcome:
        student = entry.student
        try:
            result = sink.send(message)
        except Exception as e:
            # One student's failure must not abort the batch.
            logger.exception("%s alert to %s failed", message.channel.value, message.target)
            return AlertOutcome(
                student_id=student.student_id,
                student_name=student.name,
                status=AlertStatus.FAILED,
                target=message.target,
                percentage=entry.statistics.attendance_percentage,
                error=str(e) or e.__class__.__name__,
            )

        return AlertOutcome(
            student_id=student.student_id,
            student_name=student.name,
            status=AlertStatus.SENT if result.success else AlertStatus.FAILED,
            target=message.target,
            percentage=entry.statistics.attendance_percentage,
            message_id=result.message_id,
            error=result.error,
        )
