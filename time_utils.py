"""Business-week utilities.

The business week runs from Saturday 00:00:00 to Friday 23:59:59.999999
in the configured local timezone. Every other module derives its notion
of "week" from ``week_bounds`` / ``week_start``.
"""

from datetime import date, datetime, time, timedelta
from typing import NamedTuple, Union
import pytz

from config import Config


LOCAL_TZ = pytz.timezone(Config.TIMEZONE)

# datetime.weekday(): Monday=0 ... Saturday=5
WEEK_START_WEEKDAY = 5

DateLike = Union[date, datetime]


class WeekBounds(NamedTuple):
    """Inclusive boundaries of a business week."""

    start: datetime
    end: datetime


def now_local() -> datetime:
    """Get current time in the configured local timezone."""
    return datetime.now(tz=LOCAL_TZ)


def today_local() -> date:
    """Get today's date in the configured local timezone."""
    return now_local().date()


def _as_local_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(LOCAL_TZ)
        return value.date()
    return value


def week_start(value: DateLike) -> date:
    """Get the Saturday that opens the business week containing ``value``.

    Args:
        value: Date or datetime. Aware datetimes are converted to local time first.

    Returns:
        Week start as a date.
    """
    day = _as_local_date(value)
    return day - timedelta(days=(day.weekday() - WEEK_START_WEEKDAY) % 7)


def week_bounds(value: DateLike) -> WeekBounds:
    """Get the boundaries of the business week containing ``value``.

    Args:
        value: Any date or datetime within the week.

    Returns:
        WeekBounds with start (Saturday 00:00:00) and end (Friday 23:59:59.999999).
        Bounds are localized when ``value`` is an aware datetime, naive otherwise.
    """
    start_day = week_start(value)
    start = datetime.combine(start_day, time.min)
    end = datetime.combine(start_day + timedelta(days=6), time.max)

    if isinstance(value, datetime) and value.tzinfo is not None:
        start = LOCAL_TZ.localize(start)
        end = LOCAL_TZ.localize(end)

    return WeekBounds(start, end)


def weeks_between(a: DateLike, b: DateLike) -> int:
    """Get the absolute number of whole weeks between two week-start anchors."""
    return abs((week_start(b) - week_start(a)).days) // 7


def navigate_week(value: DateLike, direction: Union[str, int]) -> DateLike:
    """Move exactly seven days forward or back.

    Args:
        value: Date or datetime to move.
        direction: "next" / 1 or "prev" / -1.

    Returns:
        Value of the same type, shifted by one week.
    """
    if direction in ("next", 1):
        return value + timedelta(weeks=1)
    if direction in ("prev", -1):
        return value - timedelta(weeks=1)
    raise ValueError(f"Unknown week direction: {direction!r}")


def is_same_week(a: DateLike, b: DateLike) -> bool:
    """Check whether two dates fall in the same business week."""
    return week_start(a) == week_start(b)


def format_week_range(start: DateLike, end: DateLike) -> str:
    """Format a week range as 'dd/mm - dd/mm'."""
    return f"{start.strftime('%d/%m')} - {end.strftime('%d/%m')}"


def parse_date(value: Union[str, DateLike]) -> date:
    """Parse YYYY-MM-DD (or YYYY/MM/DD) into a date.

    Dates and datetimes are passed through as dates.
    """
    if isinstance(value, datetime):
        return _as_local_date(value)
    if isinstance(value, date):
        return value
    normalized = value.replace("/", "-").split("T")[0].split()[0]
    return datetime.strptime(normalized, Config.DATE_FORMAT).date()
