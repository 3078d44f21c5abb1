"""Timestamp helpers shared by the ledger, tax and performance services."""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from .config import DAYS_PER_YEAR

SECONDS_PER_YEAR = DAYS_PER_YEAR * 24 * 60 * 60

TimestampLike = Union[str, datetime, date, None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(moment: datetime) -> datetime:
    """Naive datetimes are taken to already be in UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def parse_timestamp(value: TimestampLike) -> Optional[datetime]:
    """Parses ISO-8601 text (``Z`` suffix included) into an aware UTC datetime.

    Returns ``None`` for empty values; raises ``ValueError`` for text that is
    not a timestamp.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, str):
        raise ValueError(f"Not a timestamp: {value!r}")
    return ensure_utc(isoparse(value.strip()))


def format_timestamp(moment: Optional[datetime]) -> Optional[str]:
    if moment is None:
        return None
    text = ensure_utc(moment).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def years_between(start: datetime, end: datetime) -> float:
    return (ensure_utc(end) - ensure_utc(start)).total_seconds() / SECONDS_PER_YEAR


def format_period(start: date, end: date) -> str:
    """Formats the difference between two days as years/months/days."""
    if isinstance(start, datetime):
        start = start.date()
    if isinstance(end, datetime):
        end = end.date()
    rd = relativedelta(end, start)
    parts: list[str] = []
    if rd.years:
        parts.append(f"{rd.years} year" + ("s" if rd.years > 1 else ""))
    if rd.months:
        parts.append(f"{rd.months} month" + ("s" if rd.months > 1 else ""))
    if rd.days:
        parts.append(f"{rd.days} day" + ("s" if rd.days > 1 else ""))

    if not parts:
        return "0 days"
    if len(parts) == 1:
        return parts[0]
    if len(parts) == 2:
        return " and ".join(parts)
    return f"{parts[0]}, {parts[1]} and {parts[2]}"
