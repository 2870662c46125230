from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ClassRoom, Student


class RosterRepository(Protocol):
    """Source of truth for who currently belongs to a class."""

    def get_class(self, class_id: int) -> Optional[ClassRoom]:
        raise NotImplementedError

    def list_students(self, class_id: int) -> Sequence[Student]:
        raise NotImplementedError

    def get_student(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError
