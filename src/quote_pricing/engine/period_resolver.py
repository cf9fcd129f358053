"""
Period Resolver - maps an arrival date to a pricing period.

Calendar rule:
- `special` periods cover their inclusive start/end date range and are
  checked first, in declaration order.
- `month` periods are matched by the English month name (or its
  three-letter abbreviation) of the arrival date, case-insensitive.

The resolver is a pure function of the date and the period table; it
never looks at "today".
"""
import calendar
from datetime import date
from typing import Optional, Sequence

from .errors import NoMatchingPeriod
from .models import PeriodEntry


_MONTHS = {
    name.lower(): number
    for number in range(1, 13)
    for name in (calendar.month_name[number], calendar.month_abbr[number])
}


def month_number(label: str) -> Optional[int]:
    """Month number for a period label, or None if it is not a month name."""
    return _MONTHS.get(label.strip().lower())


def period_covers(entry: PeriodEntry, arrival_date: date) -> bool:
    """Whether a single period entry applies to the arrival date."""
    if entry.period_type == 'special':
        if entry.start_date is None or entry.end_date is None:
            return False
        return entry.start_date <= arrival_date <= entry.end_date
    return month_number(entry.period) == arrival_date.month


def resolve_period(arrival_date: date, periods: Sequence[PeriodEntry]) -> tuple[int, PeriodEntry]:
    """
    Find the period entry that covers `arrival_date`.

    Returns (position, entry). Raises NoMatchingPeriod if no entry does.
    """
    specials = [(i, e) for i, e in enumerate(periods) if e.period_type == 'special']
    months = [(i, e) for i, e in enumerate(periods) if e.period_type != 'special']

    for position, entry in specials + months:
        if period_covers(entry, arrival_date):
            return position, entry

    raise NoMatchingPeriod(arrival_date, [e.period for e in periods])
