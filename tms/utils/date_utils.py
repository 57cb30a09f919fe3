"""
Date helpers shared by the schedule and staff expense endpoints.

Browsers send datetimes in a handful of shapes ("2024-05-01",
"2024-05-01T10:30:00", "2024-05-01T10:30:00.000Z"). Everything is stored as a
naive local datetime, so zone markers and fractional seconds are dropped.
"""
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

from dateutil import parser as date_parser
from fastapi import HTTPException, status


def parse_lenient_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a client supplied datetime string.

    Returns None for a blank value. Raises ValueError when the value cannot be parsed.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    if value.endswith("Z") or value.endswith("z"):
        value = value[:-1]

    # isoparse is strict about layout; fall back to the general parser for
    # values such as "2024-05-01 10:30"
    try:
        parsed = date_parser.isoparse(value)
    except ValueError:
        parsed = date_parser.parse(value)

    return parsed.replace(tzinfo=None, microsecond=0)


def parse_datetime_param(value: str, field: str) -> datetime:
    """Parse a query parameter, turning bad input into a 400"""
    try:
        parsed = parse_lenient_datetime(value)
    except (ValueError, OverflowError):
        parsed = None
    if parsed is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {field}: {value}"
        )
    return parsed


def parse_date_param(value: str, field: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {field}: {value}. Expected YYYY-MM-DD"
        )


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    return datetime.combine(day, time.min), datetime.combine(day, time(23, 59, 59))


def days_bounds(start: date, end: date) -> Tuple[datetime, datetime]:
    return datetime.combine(start, time.min), datetime.combine(end, time(23, 59, 59))


def current_week_bounds(today: Optional[date] = None) -> Tuple[datetime, datetime]:
    """Monday 00:00:00 to Sunday 23:59:59 of the week containing `today`"""
    today = today or date.today()
    monday = today - timedelta(days=today.weekday())
    return days_bounds(monday, monday + timedelta(days=6))
