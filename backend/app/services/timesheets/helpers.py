"""
Pure helpers shared by the daily and weekly timesheet services.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Tuple, Union

from app.core.security import generate_random_numeric

logger = logging.getLogger("vodichron.timesheets")


def format_task_number(task_number: int) -> str:
    """format_task_number(7) -> "TASK007", format_task_number(150) -> "TASK150"."""
    return f"TASK{task_number:03d}"


def generate_task_id(current_count: int) -> str:
    """Task id following `current_count` existing tasks."""
    return format_task_number(current_count + 1)


def generate_request_number() -> int:
    """Six digit request number shown to users (never starts with 0)."""
    number = generate_random_numeric(6)
    while number.startswith("0"):
        number = generate_random_numeric(6)
    return int(number)


def transform_date_to_yyyy_mm_dd(value: Union[str, date, datetime, None]) -> Optional[str]:
    """
    Normalise a date to YYYY-MM-DD.

    Accepts date objects, ISO strings and slash-separated strings. For
    a/b/YYYY the first part is the day when it is greater than 12, otherwise
    it is read as month/day. Returns None for empty or unparseable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        logger.warning(f"Unsupported date value type: {type(value).__name__}")
        return None

    value = value.strip()
    try:
        if len(value) == 10 and value[4] == "-" and value[7] == "-":
            return date.fromisoformat(value).isoformat()
        if "/" in value:
            parts = value.split("/")
            if len(parts) != 3:
                return None
            first, second, year = (int(p) for p in parts)
            if first > 12:
                return date(year, second, first).isoformat()
            return date(year, first, second).isoformat()
        return datetime.fromisoformat(value).date().isoformat()
    except ValueError:
        logger.warning(f"Could not parse date value: {value!r}")
        return None


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    normalised = transform_date_to_yyyy_mm_dd(value)
    return date.fromisoformat(normalised) if normalised else None


def convert_hours_to_decimal(value: Union[str, int, float, None]) -> float:
    """
    "08:30" -> 8.5, "7:15" -> 7.25, "6.5" -> 6.5. Invalid input gives 0.0.
    """
    if value is None or value == "":
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    try:
        if ":" in text:
            hours_str, minutes_str = text.split(":", 1)
            return round(int(hours_str) + int(minutes_str) / 60, 2)
        return float(text)
    except ValueError:
        return 0.0


def decimal_to_hours(value: Union[int, float]) -> str:
    """8.5 -> "08:30"."""
    total_minutes = int(round(float(value) * 60))
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def format_hours_readable(time_str: str) -> str:
    """
    "00:30" -> "30 mins", "01:00" -> "1 hr", "01:45" -> "1 hr 45 mins",
    "02:00" -> "2 hrs".
    """
    hours_str, _, minutes_str = str(time_str).partition(":")
    hours = int(hours_str or 0)
    minutes = int(minutes_str or 0)
    if hours == 0:
        return f"{minutes} mins"
    unit = "hr" if hours == 1 else "hrs"
    if minutes == 0:
        return f"{hours} {unit}"
    return f"{hours} {unit} {minutes} mins"


def format_long_date(value: date) -> str:
    """date(2025, 3, 1) -> "1st March 2025"."""
    day = value.day
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix} {value.strftime('%B %Y')}"


def week_boundaries(day: date) -> Tuple[date, date]:
    """Monday and Sunday of the week containing `day`."""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)
