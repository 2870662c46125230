from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ClassRoom:
    class_id: int
    class_name: str
    class_code: str
    teacher_id: int
    section: str = "A"
    academic_year: Optional[str] = None


@dataclass(frozen=True)
class Student:
    student_id: int
    class_id: int
    roll_number: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    parent_email: Optional[str] = None
    parent_phone: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "student_id": self.student_id,
            "roll_number": self.roll_number,
            "name": self.name,
            "email": self.email,
        }
