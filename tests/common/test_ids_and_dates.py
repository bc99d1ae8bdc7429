from __future__ import annotations

from datetime import date

import pytest

from src.academic_records.academic_records.common.datetime_utils import canonical_day
from src.academic_records.academic_records.common.ids import canonical_id, parse_id, parse_optional_id, same_id
from src.academic_records.academic_records.core.exceptions import ValidationError


def test_same_id_canonicalizes_sources():
    assert same_id(7, "7")
    assert same_id(" 007 ", 7)
    assert not same_id(7, 8)
    assert not same_id(None, None)
    assert not same_id(True, 1)


def test_canonical_id():
    assert canonical_id(12) == "12"
    assert canonical_id("0012") == "12"
    assert canonical_id("   ") is None
    assert canonical_id("abc") == "abc"


def test_parse_id():
    assert parse_id("15", "student ID") == 15
    assert parse_optional_id("", "x") is None
    assert parse_optional_id(None, "x") is None
    with pytest.raises(ValidationError, match="Invalid student ID"):
        parse_id("abc", "student ID")
    with pytest.raises(ValidationError):
        parse_id("-3", "student ID")


def test_canonical_day_accepts_plain_and_iso_timestamps():
    assert canonical_day("2026-03-01") == date(2026, 3, 1)
    assert canonical_day("2026-03-01T10:30:00Z") == date(2026, 3, 1)
    # 23:30 at UTC-05:00 is already the next UTC day.
    assert canonical_day("2026-03-01T23:30:00-05:00") == date(2026, 3, 2)


@pytest.mark.parametrize("value", [None, "", "01/03/2026", "tomorrow", 20260301])
def test_canonical_day_rejects_garbage(value):
    with pytest.raises(ValidationError):
        canonical_day(value)
