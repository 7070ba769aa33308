"""UTC datetime and calendar-date utilities."""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def today() -> date:
    """Calendar date used for entry validation and period resolution."""
    return date.today()


def parse_date(value: object) -> date:
    """Accept a date or an ISO ``YYYY-MM-DD`` string. Raises ValueError otherwise."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip())
    raise ValueError(f"Invalid date: {value!r}")
