from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ReportType, ShareChannel
from .model import Report


class ReportRepository(Protocol):
    def create(self, report: Report) -> Report:
        """Persist and return the report with ``report_id``/``created_at`` set."""

        raise NotImplementedError

    def get(self, report_id: int) -> Optional[Report]:
        raise NotImplementedError

    def list_for_student(self, student_id: int) -> Sequence[Report]:
        """Newest first."""

        raise NotImplementedError

    def list_for_class(self, class_id: int, report_type: Optional[ReportType] = None) -> Sequence[Report]:
        """Newest first."""

        raise NotImplementedError

    def mark_shared(self, report_id: int, *, share_via: ShareChannel, shared_at: datetime) -> Optional[Report]:
        raise NotImplementedError

    def delete(self, report_id: int) -> bool:
        raise NotImplementedError
