"""
Helpers for slot timestamps.

Slots are stored as naive datetimes in server-local time. Aware inputs are
converted to local time first so that day boundaries match the server's
calendar.
"""
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple, Union


def to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def parse_slot(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an ISO-8601 slot value, returning None when it is not a timestamp."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_local_naive(value)
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return to_local_naive(datetime.fromisoformat(text))
    except ValueError:
        return None


def parse_date(value: Union[str, date]) -> Optional[date]:
    if isinstance(value, datetime):
        return to_local_naive(value).date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        # Accept a full timestamp and use its calendar day
        parsed = parse_slot(value)
        return parsed.date() if parsed else None


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Return the first and last instants of a calendar day."""
    start = datetime.combine(day, time.min)
    end = start + timedelta(days=1) - timedelta(microseconds=1)
    return start, end


def start_of_today(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now()
    return datetime.combine(now.date(), time.min)


def format_time_of_day(value: datetime) -> str:
    return value.strftime("%H:%M")
