from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def canonical_day(value: Any, field_name: str = "date") -> date:
    """Normalize a calendar day to its UTC day boundary.

    Accepts ``YYYY-MM-DD`` (taken as a UTC day), a full ISO timestamp (converted
    to UTC before the time part is dropped), or date/datetime objects.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required (YYYY-MM-DD)")

    text = value.strip()
    try:
        return parse_iso_date(text)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid {field_name}, expected YYYY-MM-DD")
    return canonical_day(parsed, field_name)


def utc_now() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch it.
    """
    return datetime.now(timezone.utc)
