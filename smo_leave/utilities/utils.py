"""Utility functions for the SMO leave report."""
import calendar
from datetime import date, datetime
from typing import Optional

from smo_leave.utilities.models import DateWindow


def add_months(start: date, months: int) -> date:
    """
    Shift a date by whole months, clamping the day to the month length.

    Args:
        start: Base date
        months: Number of months (may be negative)

    Returns:
        Shifted date
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def create_date_window(
    months_ahead: int,
    today: Optional[date] = None,
) -> DateWindow:
    """
    Create the forward-looking extraction window.

    Args:
        months_ahead: Window length in months
        today: Start of the window (defaults to the current date)

    Returns:
        DateWindow with both bounds inclusive
    """
    first = today or datetime.now().date()
    last = add_months(first, months_ahead)
    description = f"{first.isoformat()} to {last.isoformat()} ({months_ahead} months)"
    return DateWindow(start=first, end=last, description=description)


def encode_date(value: date) -> int:
    """Encode a date as the YYYYMMDD integer used by the scheduling database."""
    return value.year * 10000 + value.month * 100 + value.day
