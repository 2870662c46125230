from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_present(value: Any, field_name: str) -> Any:
    if value is None:
        raise ValidationError(f"{field_name} is required")
    return value


def parse_threshold(value: Any, default: float) -> float:
    if value is None or value == "":
        return float(default)
    try:
        threshold = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"threshold must be a number, got {value!r}")
    if threshold < 0 or threshold > 100:
        raise ValidationError("threshold must be between 0 and 100")
    return threshold


def parse_optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def parse_id_list(value: Any, field_name: str) -> Optional[list[int]]:
    """A list of integer ids; None or an empty list means "no filter"."""

    if value is None or value == "":
        return None
    if not isinstance(value, (list, tuple, set)):
        raise ValidationError(f"{field_name} must be a list of ids")
    ids = []
    for item in value:
        if isinstance(item, bool) or item is None or item == "":
            raise ValidationError(f"{field_name} must contain only integer ids, got {item!r}")
        ids.append(parse_optional_int(item, field_name))
    return ids or None
