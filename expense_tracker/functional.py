import math
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from expense_tracker.domain import Budget, BudgetPeriod, Expense

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T]):
    """Lookup result: Some(value) or Nothing()."""

    @staticmethod
    def of(value: Optional[T]) -> 'Maybe[T]':
        return Nothing() if value is None else Some(value)

    def is_none(self) -> bool:
        return not self.is_some()


@dataclass(frozen=True)
class Some(Maybe[T]):
    value: T

    def is_some(self) -> bool:
        return True

    def get_or_else(self, default: T) -> T:
        return self.value


@dataclass(frozen=True)
class Nothing(Maybe[T]):

    def is_some(self) -> bool:
        return False

    def get_or_else(self, default: T) -> T:
        return default


class Either(Generic[E, T]):
    """Outcome of an operation that can fail: Right(value) or Left(error)."""

    def is_left(self) -> bool:
        return not self.is_right()


@dataclass(frozen=True)
class Right(Either[E, T]):
    value: T

    def is_right(self) -> bool:
        return True

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self.value)

    def get_or_else(self, default: T) -> T:
        return self.value

    def get_error(self) -> E:
        raise ValueError("Right carries no error")


@dataclass(frozen=True)
class Left(Either[E, T]):
    error: E

    def is_right(self) -> bool:
        return False

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def get_error(self) -> E:
        return self.error


def _invalid_number(x: Any) -> bool:
    return not isinstance(x, (int, float)) or isinstance(x, bool) or not math.isfinite(x)


def validate_expense(e: Expense) -> Either[dict, Expense]:
    if not isinstance(e.name, str) or not e.name.strip():
        return Left({
            "error": "empty_name",
            "message": "Expense name must not be empty",
        })
    if _invalid_number(e.value):
        return Left({
            "error": "invalid_amount",
            "message": f"Expense value {e.value!r} is not a finite number",
            "value": e.value,
        })
    return Right(e)


def validate_budget(b: Budget) -> Either[dict, Budget]:
    if not isinstance(b.period, BudgetPeriod):
        return Left({
            "error": "invalid_period",
            "message": f"Unknown budget period {b.period!r}",
            "period": b.period,
        })
    if _invalid_number(b.amount) or b.amount <= 0:
        return Left({
            "error": "invalid_amount",
            "message": f"Budget amount must be greater than zero, got {b.amount!r}",
            "amount": b.amount,
        })
    return Right(b)


def pipe(x, *funcs):
    """Pipe a value through a series of functions.

    pipe(x, f, g, h) == h(g(f(x)))
    """
    res = x
    for f in funcs:
        res = f(res)
    return res
