"""
Utility functions for safe data access and calendar math in insights calculations.
"""

import calendar
import math
from datetime import date, datetime
from typing import Any, Optional

# Average month length used for animal ages
DAYS_PER_MONTH = 30.44


def safe_get(data: Any, key: str, default: Any = None) -> Any:
    """
    Safely get value from dict, handling None values.

    Args:
        data: Dictionary or object with .get() method
        key: Key to retrieve
        default: Default value if key missing or value is None

    Returns:
        Value from dict, or default if missing/None
    """
    if not isinstance(data, dict):
        return default

    value = data.get(key, default)
    return default if value is None else value


def safe_list_get(data: Any, index: int, default: Any = None) -> Any:
    """
    Safely get item from list by index.

    Args:
        data: List to access
        index: Index to retrieve
        default: Default value if index out of range

    Returns:
        Item at index, or default if out of range
    """
    if not isinstance(data, list) or not data:
        return default

    return data[index] if -len(data) <= index < len(data) else default


def safe_float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """
    Safely convert value to float.

    Form and store values arrive as numbers or strings; anything that
    does not parse falls back to the default instead of raising.

    Args:
        value: Value to convert
        default: Default if conversion fails

    Returns:
        Float value, or default
    """
    if value is None or isinstance(value, bool):
        return default

    try:
        if isinstance(value, (int, float)):
            result = float(value)
        elif isinstance(value, str):
            # Remove commas and whitespace
            cleaned = value.replace(",", "").strip()
            if not cleaned:
                return default
            result = float(cleaned)
        else:
            return default
    except (ValueError, TypeError, AttributeError):
        return default

    if math.isnan(result) or math.isinf(result):
        return default
    return result


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a calendar date from a date, datetime or ISO string.

    Timestamps keep only their date component (the ``YYYY-MM-DD`` prefix).

    Returns:
        Parsed date, or None if the value is missing or malformed
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def month_start(day: date) -> date:
    """First day of the month containing ``day``."""
    return date(day.year, day.month, 1)


def shift_months(day: date, months: int) -> date:
    """First day of the month ``months`` away from the month of ``day``."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_end(day: date) -> date:
    """Last day of the month containing ``day``."""
    return date(day.year, day.month, calendar.monthrange(day.year, day.month)[1])


def same_month(day: Optional[date], month: date) -> bool:
    """True when ``day`` falls in the calendar month of ``month``."""
    return day is not None and day.year == month.year and day.month == month.month


def month_label(day: date) -> str:
    """Abbreviated month name plus 2-digit year, e.g. ``Mar 24``."""
    return f"{calendar.month_abbr[day.month]} {day.year % 100:02d}"


def day_label(day: date) -> str:
    """Abbreviated month name plus day of month, e.g. ``Mar 5``."""
    return f"{calendar.month_abbr[day.month]} {day.day}"


def age_in_months(birth_date: date, today: date) -> int:
    """Whole months since birth using an average month of 30.44 days."""
    return math.floor((today - birth_date).days / DAYS_PER_MONTH)
