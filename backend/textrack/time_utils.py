from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today() -> date:
    """Business date used for completion dates and due-date math."""
    return utcnow().date()


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string and normalize to UTC-naive datetime.

    - None / "" -> None
    - "YYYY-MM-DDTHH:MM" (naive) is interpreted as UTC
    - "...Z" or "...+/-HH:MM" is converted to UTC and tzinfo is stripped
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)

    # Normalize to UTC-naive
    if dt.tzinfo is None:
        # interpret naive as UTC
        return dt.replace(tzinfo=None)

    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a calendar date. Accepts "YYYY-MM-DD" or a full ISO datetime
    (the date part is kept).
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None
    if len(s) == 10:
        return date.fromisoformat(s)
    dt = parse_iso_datetime(s)
    return dt.date() if dt else None


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


def to_iso_date(d: Optional[date]) -> Optional[str]:
    if d is None:
        return None
    return d.isoformat()


def days_until(due: date, *, as_of: Optional[date] = None) -> int:
    """Whole days from as_of (default today) to due; negative when overdue."""
    return (due - (as_of or today())).days


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """
    Half-open [start, end) range covering one calendar month.
    December rolls over into January of the next year.
    """
    if month < 1 or month > 12:
        raise ValueError("month must be between 1 and 12")
    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end
