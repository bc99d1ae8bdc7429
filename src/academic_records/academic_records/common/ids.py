"""Entity id helpers.

Ids reach the services from three places: integer primary keys read back from
MySQL, the ``sub`` claim of a token (always a string) and JSON bodies (either).
Every ownership comparison goes through :func:`same_id` so that ``7``, ``"7"``
and ``" 007 "`` are the same entity.
"""
from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def canonical_id(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    text = str(value).strip()
    if not text:
        return None
    if text.isdigit():
        return str(int(text))
    return text


def same_id(left: Any, right: Any) -> bool:
    a = canonical_id(left)
    b = canonical_id(right)
    return a is not None and a == b


def parse_id(value: Any, field_name: str) -> int:
    """Turn an id from a request body or token into a storage key."""
    text = canonical_id(value)
    if text is None or not text.isdigit():
        raise ValidationError(f"Invalid {field_name}")
    return int(text)


def parse_optional_id(value: Any, field_name: str) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_id(value, field_name)
