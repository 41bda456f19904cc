"""Date and time helpers.

Calendar-day math is always done in an explicit timezone. Stored timestamps
are timezone-aware; naive values are treated as UTC.
"""

import math
from collections.abc import Callable
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Literal

Clock = Callable[[], datetime]

DateFormat = Literal["full", "short", "date", "time", "relative", "iso"]


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, leave aware ones untouched."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def local_date(value: datetime, tz: tzinfo = UTC) -> date:
    """Calendar date of an instant in the given timezone."""
    return ensure_aware(value).astimezone(tz).date()


def start_of_day(value: datetime, tz: tzinfo = UTC) -> datetime:
    """Local midnight (00:00:00) of the day containing ``value``."""
    return datetime.combine(local_date(value, tz), time.min, tzinfo=tz)


def end_of_day(value: datetime, tz: tzinfo = UTC) -> datetime:
    """Last representable instant (23:59:59.999999) of the day containing ``value``."""
    return datetime.combine(local_date(value, tz), time.max, tzinfo=tz)


def day_bounds(value: datetime, tz: tzinfo = UTC) -> tuple[datetime, datetime]:
    """Half-open ``[midnight, next midnight)`` interval of the day containing ``value``."""
    start = start_of_day(value, tz)
    next_day = datetime.combine(start.date() + timedelta(days=1), time.min, tzinfo=tz)
    return start, next_day


def add_days(value: datetime, days: int) -> datetime:
    """Shift a datetime by a (possibly negative) number of days."""
    return value + timedelta(days=days)


def add_hours(value: datetime, hours: int) -> datetime:
    """Shift a datetime by a number of hours."""
    return value + timedelta(hours=hours)


def is_same_day(first: datetime, second: datetime, tz: tzinfo = UTC) -> bool:
    """Whether two instants fall on the same local calendar day."""
    return local_date(first, tz) == local_date(second, tz)


def is_today(value: datetime, now: datetime, tz: tzinfo = UTC) -> bool:
    return local_date(value, tz) == local_date(now, tz)


def is_yesterday(value: datetime, now: datetime, tz: tzinfo = UTC) -> bool:
    return local_date(value, tz) == local_date(now, tz) - timedelta(days=1)


def is_tomorrow(value: datetime, now: datetime, tz: tzinfo = UTC) -> bool:
    return local_date(value, tz) == local_date(now, tz) + timedelta(days=1)


def days_between(first: datetime, second: datetime) -> int:
    """Whole 24h periods between two instants, regardless of order."""
    diff = abs(ensure_aware(second) - ensure_aware(first))
    return diff.days


def get_relative_time(value: datetime, base: datetime) -> str:
    """
    Human readable distance between two instants.

    Args:
        value: Instant to describe
        base: Reference instant, usually "now"

    Returns:
        Strings such as "Just now", "5 minutes ago" or "in 3 days"
    """
    diff_seconds = (ensure_aware(base) - ensure_aware(value)).total_seconds()
    is_future = diff_seconds < 0

    seconds = math.floor(abs(diff_seconds))
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24
    weeks = days // 7
    months = days // 30
    years = days // 365

    def fmt(amount: int, unit: str) -> str:
        plural = "s" if amount != 1 else ""
        if is_future:
            return f"in {amount} {unit}{plural}"
        return f"{amount} {unit}{plural} ago"

    if seconds < 10:
        return "Just now"
    if seconds < 60:
        return fmt(seconds, "second")
    if minutes < 60:
        return fmt(minutes, "minute")
    if hours < 24:
        return fmt(hours, "hour")
    if days < 7:
        return fmt(days, "day")
    if weeks < 4:
        return fmt(weeks, "week")
    if months < 12:
        return fmt(months, "month")
    return fmt(years, "year")


def format_time_12h(value: str | datetime) -> str:
    """Format "HH:MM" strings or datetimes as "h:MM AM/PM"."""
    if isinstance(value, str):
        hours, minutes = (int(part) for part in value.split(":")[:2])
    else:
        hours, minutes = value.hour, value.minute

    period = "PM" if hours >= 12 else "AM"
    hour12 = hours % 12 or 12
    return f"{hour12}:{minutes:02d} {period}"


def format_time_24h(value: str | datetime) -> str:
    """Format datetimes as "HH:MM"; strings are assumed to be formatted already."""
    if isinstance(value, str):
        return value
    return f"{value.hour:02d}:{value.minute:02d}"


def format_date(
    value: datetime | date | float | str | None,
    fmt: DateFormat = "full",
    now: datetime | None = None,
) -> str:
    """
    Render a date-like value for display.

    Args:
        value: datetime, date, epoch milliseconds or ISO string
        fmt: full | short | date | time | relative | iso
        now: Reference instant for the relative format

    Returns:
        Formatted string, "N/A" for empty input and "Invalid date" for
        unparseable input
    """
    if value is None or value == "":
        return "N/A"

    if isinstance(value, datetime):
        parsed: datetime | None = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, int | float):
        parsed = datetime.fromtimestamp(value / 1000, tz=UTC)
    elif isinstance(value, str):
        parsed = parse_date(value)
    else:
        parsed = None

    if parsed is None:
        return "Invalid date"

    if fmt == "full":
        # January 15, 2024 at 3:30 PM
        return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year} at {format_time_12h(parsed)}"
    if fmt == "short":
        return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"
    if fmt == "date":
        return parsed.strftime("%m/%d/%Y")
    if fmt == "time":
        return format_time_12h(parsed)
    if fmt == "relative":
        return get_relative_time(parsed, now or utc_now())
    if fmt == "iso":
        return ensure_aware(parsed).isoformat()
    return str(parsed)


def get_friendly_date_label(value: datetime, now: datetime, tz: tzinfo = UTC) -> str:
    """Today / Yesterday / Tomorrow, the weekday within a week, else a short date."""
    if is_today(value, now, tz):
        return "Today"
    if is_yesterday(value, now, tz):
        return "Yesterday"
    if is_tomorrow(value, now, tz):
        return "Tomorrow"

    if (ensure_aware(now) - ensure_aware(value)).days < 7:
        return get_day_name(value)
    return format_date(value, "short")


def get_day_name(value: datetime | date, short: bool = False) -> str:
    return value.strftime("%a" if short else "%A")


def get_month_name(value: datetime | date, short: bool = False) -> str:
    return value.strftime("%b" if short else "%B")


def get_last_n_days(days: int, today: date) -> list[date]:
    """The ``days`` calendar dates ending at ``today``, oldest first."""
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def get_week_number(value: date) -> int:
    """ISO-8601 week number."""
    return value.isocalendar()[1]


def parse_date(value: str) -> datetime | None:
    """Parse an ISO-8601 date or datetime string, None when it is not one."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_duration(milliseconds: int) -> str:
    """Compact duration such as "2d 3h", "4h 10m", "7m" or "12s"."""
    seconds = milliseconds // 1000
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days}d {hours % 24}h"
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    if minutes > 0:
        return f"{minutes}m"
    return f"{seconds}s"


def is_past(value: datetime, now: datetime) -> bool:
    return ensure_aware(value) < ensure_aware(now)


def is_future(value: datetime, now: datetime) -> bool:
    return ensure_aware(value) > ensure_aware(now)


def is_within_range(value: datetime, start: datetime, end: datetime) -> bool:
    """Inclusive range check."""
    return ensure_aware(start) <= ensure_aware(value) <= ensure_aware(end)


def calculate_age(birth_date: date, today: date) -> int:
    """Age in completed years."""
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age
