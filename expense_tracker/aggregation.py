from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from expense_tracker.domain import Category, Expense, TimeRange


def total_spending(expenses: Iterable[Expense]) -> float:
    return sum((e.value for e in expenses), 0.0)


def spending_by_category(expenses: Iterable[Expense]) -> list[tuple[Category, float]]:
    """Totals per category, largest first; equal totals keep first-seen order."""
    totals: dict[Category, float] = defaultdict(float)
    for e in expenses:
        totals[e.category] += e.value

    return sorted(totals.items(), key=lambda item: item[1], reverse=True)


def spending_by_day(expenses: Iterable[Expense]) -> list[tuple[date, float]]:
    totals: dict[date, float] = defaultdict(float)
    for e in expenses:
        totals[e.date.date()] += e.value

    return sorted(totals.items(), key=lambda item: item[0])


def range_start(time_range: TimeRange, now: datetime, first_weekday: int = 0) -> Optional[datetime]:
    """First instant of the current week/month/year, or None for all time.

    ``first_weekday`` follows ``datetime.weekday()``: 0 is Monday, 6 is Sunday.
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if time_range is TimeRange.WEEK:
        offset = (midnight.weekday() - first_weekday) % 7
        return midnight - timedelta(days=offset)
    if time_range is TimeRange.MONTH:
        return midnight.replace(day=1)
    if time_range is TimeRange.YEAR:
        return midnight.replace(month=1, day=1)
    return None


def expenses_in_range(
    expenses: Iterable[Expense],
    time_range: TimeRange,
    now: datetime,
    first_weekday: int = 0,
) -> tuple[Expense, ...]:
    start = range_start(time_range, now, first_weekday)
    if start is None:
        return tuple(expenses)
    return tuple(e for e in expenses if e.date >= start)
