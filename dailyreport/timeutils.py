"""Clock-time arithmetic and date helpers.

Work hours are stored as ``HH:MM`` strings. A shift whose end is earlier than
its start is read as crossing midnight once, never as spanning several days.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime
from typing import Final

from dateutil.relativedelta import relativedelta

from dailyreport.exceptions import ValidationError

TIME_PATTERN: Final = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
DATE_PATTERN: Final = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MONTH_PATTERN: Final = re.compile(r"^\d{4}-\d{2}$")

MINUTES_PER_DAY: Final = 24 * 60
WEEKDAYS_JP: Final[list[str]] = ["月", "火", "水", "木", "金", "土", "日"]


# --------------------------------------------------------------------------------------
# Validation
# --------------------------------------------------------------------------------------


def is_valid_time(value: str) -> bool:
    return bool(TIME_PATTERN.match(value or ""))


def is_valid_date(value: str) -> bool:
    """True for a zero-padded ``YYYY-MM-DD`` string naming a real calendar day."""
    if not DATE_PATTERN.match(value or ""):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def is_valid_month(value: str) -> bool:
    if not MONTH_PATTERN.match(value or ""):
        return False
    return 1 <= int(value[5:7]) <= 12


# --------------------------------------------------------------------------------------
# Work-hour arithmetic
# --------------------------------------------------------------------------------------


def time_to_minutes(value: str) -> int:
    """Convert ``HH:MM`` to minutes since midnight."""
    match = TIME_PATTERN.match(value or "")
    if not match:
        raise ValidationError(f"Invalid time (expected HH:MM): {value!r}", errors=[value])
    return int(match.group(1)) * 60 + int(match.group(2))


def elapsed_minutes(start: str, end: str) -> int:
    """Minutes worked between two clock times, wrapping past midnight once.

    >>> elapsed_minutes("09:00", "18:00")
    540
    >>> elapsed_minutes("23:30", "00:30")
    60
    """
    minutes = time_to_minutes(end) - time_to_minutes(start)
    if minutes < 0:
        minutes += MINUTES_PER_DAY
    return minutes


def format_duration(minutes: int) -> str:
    """Format minutes as ``{hours}h{minutes:02}m`` (e.g. ``8h05m``)."""
    return f"{minutes // 60}h{minutes % 60:02d}m"


def work_total(start: str, end: str) -> str:
    """The stored ``workHours.total`` value for a start/end pair."""
    return format_duration(elapsed_minutes(start, end))


def minutes_to_clock(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


# --------------------------------------------------------------------------------------
# Calendar helpers
# --------------------------------------------------------------------------------------


def current_date() -> str:
    return datetime.now().strftime("%Y-%m-%d")


def current_time() -> str:
    return datetime.now().strftime("%H:%M")


def current_timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def current_month() -> str:
    return datetime.now().strftime("%Y-%m")


def previous_month(today: date | None = None) -> str:
    today = today or date.today()
    return (today - relativedelta(months=1)).strftime("%Y-%m")


def _parse_date(date_str: str) -> date:
    if not is_valid_date(date_str):
        raise ValidationError(f"Invalid date (expected YYYY-MM-DD): {date_str!r}", errors=[date_str])
    return datetime.strptime(date_str, "%Y-%m-%d").date()


def format_date_jp(date_str: str) -> str:
    """``2024-06-01`` -> ``2024年06月01日``."""
    return _parse_date(date_str).strftime("%Y年%m月%d日")


def format_month_jp(date_str: str) -> str:
    """``2024-06-01`` (or ``2024-06``) -> ``2024年06月``."""
    if is_valid_month(date_str):
        date_str = f"{date_str}-01"
    return _parse_date(date_str).strftime("%Y年%m月")


def day_of_week_jp(date_str: str) -> str:
    return WEEKDAYS_JP[_parse_date(date_str).weekday()]


def month_bounds(year_month: str) -> tuple[str, str]:
    """First and last calendar day of a ``YYYY-MM`` month."""
    if not is_valid_month(year_month):
        raise ValidationError(f"Invalid month (expected YYYY-MM): {year_month!r}", errors=[year_month])
    year, month = int(year_month[:4]), int(year_month[5:7])
    last_day = calendar.monthrange(year, month)[1]
    return f"{year_month}-01", f"{year_month}-{last_day:02d}"


def dates_in_month(year_month: str) -> list[str]:
    _, end = month_bounds(year_month)
    return [f"{year_month}-{day:02d}" for day in range(1, int(end[8:]) + 1)]
