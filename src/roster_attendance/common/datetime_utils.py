from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from ..core.exceptions import ValidationError


def now_utc() -> datetime:
    """Current time as an aware UTC datetime.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. from MySQL DATETIME) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso_date(value: str, field_name: str = "date") -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid {field_name} (expected YYYY-MM-DD)")


def parse_iso_datetime(value: str, field_name: str = "date") -> datetime:
    """Parse an ISO-8601 instant; a trailing 'Z' is accepted."""
    v = (value or "").strip()
    if not v:
        raise ValidationError(f"Missing {field_name}")
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        return as_utc(datetime.fromisoformat(v))
    except ValueError:
        raise ValidationError(f"Invalid {field_name} (expected ISO-8601)")


def to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return as_utc(value).isoformat().replace("+00:00", "Z")
