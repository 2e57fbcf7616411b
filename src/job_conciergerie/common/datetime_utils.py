from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator

from ..core.constants import FRENCH_MONTHS
from ..core.exceptions import ValidationError


def parse_iso_datetime(value: str, field_name: str = "Date") -> datetime:
    """Parse an ISO-8601 datetime (``Z`` suffix accepted) into a naive local datetime."""
    if isinstance(value, datetime):
        return value
    raw = (value or "").strip()
    if not raw:
        raise ValidationError(f"{field_name} est requise")
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"{field_name} invalide")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def today_local() -> date:
    return now_local().date()


def dates_in_range(start: datetime, end: datetime) -> Iterator[date]:
    """Every local date from ``start`` to ``end``, both included."""
    current = start.date()
    last = end.date()
    while current <= last:
        yield current
        current += timedelta(days=1)


def days_spanned(start: datetime, end: datetime) -> int:
    return abs((end.date() - start.date()).days) + 1


def format_date(value: datetime) -> str:
    return value.strftime("%d/%m/%Y")


def format_time(value: datetime) -> str:
    return value.strftime("%H:%M")


def format_datetime(value: datetime) -> str:
    return f"{format_date(value)} à {format_time(value)}"


def format_date_range(start: datetime, end: datetime) -> str:
    if start.date() == end.date():
        return f"Le {format_date(start)} de {format_time(start)} à {format_time(end)}"
    return f"Du {format_datetime(start)} au {format_datetime(end)}"


def month_label(value: datetime) -> str:
    """French month heading, e.g. ``Mars 2025``."""
    return f"{FRENCH_MONTHS[value.month - 1]} {value.year}"


def file_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")
