"""Local calendar day key helpers."""
import re
from datetime import date, datetime, timedelta
from typing import Union

DAY_KEY_PATTERN = re.compile(r'^(\d{4})-(\d{2})-(\d{2})$')


def start_of_day(timestamp: Union[date, datetime]) -> datetime:
    """Truncate a timestamp to local midnight."""
    if isinstance(timestamp, datetime):
        return timestamp.replace(hour=0, minute=0, second=0, microsecond=0)
    return datetime(timestamp.year, timestamp.month, timestamp.day)


def local_day_key(timestamp: Union[date, datetime]) -> str:
    """
    Format the local calendar date of a timestamp as YYYY-MM-DD.

    Args:
        timestamp: Naive local datetime or date

    Returns:
        Zero-padded day key
    """
    return f"{timestamp.year:04d}-{timestamp.month:02d}-{timestamp.day:02d}"


def parse_day_key(day_key: str) -> datetime:
    """
    Build local midnight for a YYYY-MM-DD day key.

    Args:
        day_key: Day key string

    Returns:
        Naive datetime at local midnight

    Raises:
        ValueError: If the key is not a valid calendar date
    """
    match = DAY_KEY_PATTERN.match(day_key) if isinstance(day_key, str) else None
    if not match:
        raise ValueError(f"Invalid day key: {day_key!r}")

    year, month, day = (int(part) for part in match.groups())
    return datetime(year, month, day)


def is_day_key(value) -> bool:
    """Return True if value is a valid YYYY-MM-DD day key."""
    try:
        parse_day_key(value)
    except ValueError:
        return False
    return True


def week_start_monday(timestamp: Union[date, datetime]) -> datetime:
    """
    Return local midnight of the Monday on or before the given date.

    Args:
        timestamp: Naive local datetime or date

    Returns:
        Monday at local midnight
    """
    day = start_of_day(timestamp)
    # isoweekday: Monday=1 ... Sunday=7
    return day - timedelta(days=day.isoweekday() - 1)


def week_key(day_key: str) -> str:
    """Return the Monday day key of the week containing day_key."""
    return local_day_key(week_start_monday(parse_day_key(day_key)))


def add_days(day_key: str, days: int) -> str:
    """Shift a day key by a number of calendar days."""
    return local_day_key(parse_day_key(day_key) + timedelta(days=days))
