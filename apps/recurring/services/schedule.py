"""
Due-date rules for recurring expenses.

    daily     every calendar day
    weekly    every Monday
    biweekly  the 15th and the second-to-last day of the month
    monthly   the 1st of the month
"""

import calendar
from datetime import date, timedelta
from typing import List

from apps.recurring.models import Frequency


def _days_in_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def is_due(frequency: str, day: date) -> bool:
    """
    Whether ``day`` is an occurrence date for ``frequency``.

    >>> is_due('biweekly', date(2024, 4, 29))
    True
    >>> is_due('biweekly', date(2024, 5, 30))
    True
    """
    if frequency == Frequency.DAILY:
        return True
    if frequency == Frequency.WEEKLY:
        return day.weekday() == calendar.MONDAY
    if frequency == Frequency.BIWEEKLY:
        return day.day == 15 or day.day == _days_in_month(day) - 1
    if frequency == Frequency.MONTHLY:
        return day.day == 1
    raise ValueError(f"Unknown frequency: {frequency}")


def due_dates(frequency: str, start: date, end: date) -> List[date]:
    """All due dates between start and end, both inclusive, in order."""
    if frequency not in Frequency.values:
        raise ValueError(f"Unknown frequency: {frequency}")

    dates = []
    day = start
    while day <= end:
        if is_due(frequency, day):
            dates.append(day)
        day += timedelta(days=1)
    return dates
