from __future__ import annotations

from datetime import date, datetime, time
from typing import Union

from ..core.exceptions import ValidationError

DayLike = Union[date, datetime, str]


def parse_iso_date(value: str) -> date:
    """``YYYY-MM-DD`` only; callers trim timestamps first."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def normalize_day(value: DayLike | None, field_name: str = "date") -> date:
    """Strip time-of-day so every attendance lookup keys on one calendar day.

    Accepts ``date``, ``datetime`` or an ISO string (``YYYY-MM-DD`` or a full
    ISO timestamp).
    """

    if value is None or value == "":
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return parse_iso_date(text[:10])
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid date: {value!r}")


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    # 23:59:59.999, matching millisecond-precision stores.
    return datetime.combine(day, time(23, 59, 59, 999000))


def now_local() -> datetime:
    """Naive local time; services take it as an injectable clock."""
    return datetime.now()
