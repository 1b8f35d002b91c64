"""Timestamp helpers.

Timestamps are stored as ISO-8601 UTC strings with millisecond precision and a
``Z`` suffix. Calendar-day logic always uses the local timezone.
"""

from datetime import date, datetime, timezone


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return to_iso(datetime.now(timezone.utc))


def to_iso(moment: datetime) -> str:
    """Format an aware or naive-local datetime as a UTC ISO-8601 string."""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware datetime.

    Naive timestamps are interpreted as UTC.
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def local_date_of(value: str) -> date:
    """Return the local calendar day an ISO timestamp falls on."""
    return parse_iso(value).astimezone().date()


def derive_local_date(value: str) -> str:
    """Derive the YYYY-MM-DD local date string for an ISO timestamp."""
    return local_date_of(value).isoformat()


def local_midnight(day: date) -> datetime:
    """Return local midnight at the start of ``day`` as an aware datetime."""
    return datetime(day.year, day.month, day.day).astimezone()


def build_iso_from_date_and_time(date_str: str, time_str: str) -> str:
    """Build a UTC ISO timestamp from a local YYYY-MM-DD date and HH:MM time."""
    year, month, day = (int(part) for part in date_str.split("-"))
    hours, minutes = (int(part) for part in time_str.split(":"))
    return to_iso(datetime(year, month, day, hours, minutes))
