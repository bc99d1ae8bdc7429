from __future__ import annotations

import math
from enum import Enum
from typing import Any, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: Any, field_name: str, min_len: int) -> str:
    if value is None or not isinstance(value, str) or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_email(value: Any, field_name: str = "Email") -> str:
    email = require_non_empty(value, field_name).lower()
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValidationError(f"{field_name} is not a valid address")
    return email


def require_number(value: Any, field_name: str) -> float:
    if value is None or isinstance(value, bool) or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    # float() accepts "nan" and "inf"; neither is a usable amount.
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a finite number")
    return number


def require_enum(value: Any, enum_cls: Type[E], field_name: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field_name}. Valid values are: {allowed}")
