from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from roster_attendance.common.datetime_utils import as_utc, parse_iso_date, parse_iso_datetime, to_iso
from roster_attendance.common.validators import parse_enum, require_int, require_min_length, require_non_empty
from roster_attendance.core.enums import AttendanceStatus
from roster_attendance.core.exceptions import ValidationError


def test_parse_iso_datetime_accepts_z_and_offsets():
    assert parse_iso_datetime("2026-03-10T18:00:00Z") == datetime(2026, 3, 10, 18, tzinfo=timezone.utc)
    assert parse_iso_datetime("2026-03-10T20:00:00+02:00") == datetime(2026, 3, 10, 18, tzinfo=timezone.utc)
    assert parse_iso_datetime("2026-03-10T18:00:00").tzinfo is not None


@pytest.mark.parametrize("value, message", [("", "Missing date"), ("tomorrow", "Invalid date")])
def test_parse_iso_datetime_errors(value, message):
    with pytest.raises(ValidationError, match=message):
        parse_iso_datetime(value)


def test_to_iso_uses_z_suffix():
    assert to_iso(datetime(2026, 1, 2, 3, 4, 5)) == "2026-01-02T03:04:05Z"
    assert to_iso(None) is None


def test_as_utc_converts_other_zones():
    assert as_utc(parse_iso_datetime("2026-01-01T01:00:00+01:00")).hour == 0


def test_parse_iso_date():
    assert parse_iso_date("2010-12-31") == date(2010, 12, 31)
    with pytest.raises(ValidationError):
        parse_iso_date("31/12/2010", "dateOfBirth")


def test_validators():
    assert require_non_empty("  x ", "name") == "x"
    assert require_int("12", "eventId") == 12
    assert parse_enum(AttendanceStatus, "excused", "status") is AttendanceStatus.EXCUSED
    with pytest.raises(ValidationError, match="Missing name"):
        require_non_empty("   ", "name")
    with pytest.raises(ValidationError, match="Invalid eventId"):
        require_int("abc", "eventId")
    with pytest.raises(ValidationError, match="at least 8"):
        require_min_length("short", "password", 8)
    with pytest.raises(ValidationError, match="allowed: pending, attending"):
        parse_enum(AttendanceStatus, "maybe", "status")
