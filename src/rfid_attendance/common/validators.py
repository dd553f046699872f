from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} must be a non-empty string")
    return value.strip()


def optional_str(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    return value.strip() or None


def require_positive_int(value: Any, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{field_name} must be an integer") from e
    if isinstance(value, bool) or number <= 0:
        raise ValidationError(f"{field_name} must be a positive integer")
    return number


def normalize_tag(value: str) -> str:
    """Readers report the same card with varying case and spacing."""
    return value.strip().upper().replace(" ", "")
