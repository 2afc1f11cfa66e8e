from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from dateutil.relativedelta import relativedelta

from expense_tracker.domain import Budget, BudgetPeriod, Expense

_PERIOD_STEP = {
    BudgetPeriod.WEEKLY: relativedelta(weeks=1),
    BudgetPeriod.MONTHLY: relativedelta(months=1),
    BudgetPeriod.YEARLY: relativedelta(years=1),
}


@dataclass(frozen=True)
class BudgetStatus:
    budget: Budget
    end_date: datetime
    active: bool
    spent: float
    remaining: float
    progress: float

    @property
    def overspent(self) -> bool:
        return self.remaining < 0


def end_date(b: Budget) -> datetime:
    """Start date plus one calendar period (month ends clamp, e.g. Jan 31 -> Feb 28)."""
    return b.start_date + _PERIOD_STEP[b.period]


def is_active(b: Budget, now: datetime) -> bool:
    return b.start_date <= now <= end_date(b)


def period_expenses(b: Budget, expenses: Iterable[Expense]) -> tuple[Expense, ...]:
    end = end_date(b)
    return tuple(
        e for e in expenses
        if e.category == b.category and b.start_date <= e.date <= end
    )


def spent(b: Budget, expenses: Iterable[Expense]) -> float:
    return sum((e.value for e in period_expenses(b, expenses)), 0.0)


def remaining(b: Budget, expenses: Iterable[Expense]) -> float:
    return b.amount - spent(b, expenses)


def _progress_of(amount: float, total: float) -> float:
    # A non-positive ceiling counts as fully used.
    if amount <= 0:
        return 1.0
    return min(total / amount, 1.0)


def progress(b: Budget, expenses: Iterable[Expense]) -> float:
    return _progress_of(b.amount, spent(b, expenses))


def is_overspent(b: Budget, expenses: Iterable[Expense]) -> bool:
    return remaining(b, expenses) < 0


def budget_status(b: Budget, expenses: Iterable[Expense], now: datetime) -> BudgetStatus:
    total = spent(b, expenses)
    return BudgetStatus(
        budget=b,
        end_date=end_date(b),
        active=is_active(b, now),
        spent=total,
        remaining=b.amount - total,
        progress=_progress_of(b.amount, total),
    )


def split_active(budgets: Iterable[Budget], now: datetime) -> tuple[tuple[Budget, ...], tuple[Budget, ...]]:
    active, inactive = [], []
    for b in budgets:
        (active if is_active(b, now) else inactive).append(b)
    return tuple(active), tuple(inactive)
