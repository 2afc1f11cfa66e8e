"""In-memory record store for expenses and budgets.

Every mutation is visible to the next fetch and is announced on the
store's event bus so that views can refresh.
"""
import logging
from dataclasses import replace
from typing import Iterable, Optional, Tuple

from expense_tracker import events
from expense_tracker.domain import Budget, Expense, SortKey
from expense_tracker.events import EventBus
from expense_tracker.functional import Either, Left, Maybe, Right, validate_budget, validate_expense
from expense_tracker.sorting import sort_expenses
from expense_tracker.transforms import (
    Snapshot,
    add_expense,
    budget_to_dict,
    expense_to_dict,
    remove_budget,
    remove_expense,
    replace_budget,
    replace_expense,
    update_budget_amount,
)

logger = logging.getLogger(__name__)


def _not_found(kind: str, record_id: str) -> dict:
    return {
        "error": f"{kind}_not_found",
        "message": f"{kind.capitalize()} with ID {record_id} does not exist",
        f"{kind}_id": record_id,
    }


def _valid_only(records, validate, kind: str) -> tuple:
    kept = []
    for r in records:
        checked = validate(r)
        if checked.is_left():
            logger.warning("Dropping stored %s %s: %s", kind, r.id, checked.get_error()["message"])
            continue
        kept.append(r)
    return tuple(kept)


class RecordStore:

    def __init__(
        self,
        expenses: Iterable[Expense] = (),
        budgets: Iterable[Budget] = (),
        bus: Optional[EventBus] = None,
    ):
        self.bus = bus if bus is not None else EventBus()
        self._expenses: Tuple[Expense, ...] = _valid_only(expenses, validate_expense, "expense")
        self._budgets: Tuple[Budget, ...] = _valid_only(budgets, validate_budget, "budget")

    # expenses

    def fetch_expenses(self, sort_key: Optional[SortKey] = None) -> Tuple[Expense, ...]:
        if sort_key is None:
            return self._expenses
        return sort_expenses(self._expenses, sort_key)

    def get_expense(self, expense_id: str) -> Maybe[Expense]:
        return Maybe.of(next((e for e in self._expenses if e.id == expense_id), None))

    def add_expense(self, e: Expense) -> Either[dict, Expense]:
        checked = validate_expense(e)
        if checked.is_left():
            return checked
        if self.get_expense(e.id).is_some():
            return Left({
                "error": "duplicate_id",
                "message": f"Expense with ID {e.id} already exists",
                "expense_id": e.id,
            })
        self._expenses = add_expense(self._expenses, e)
        logger.debug("Added expense %s", e.id)
        self.bus.publish(events.EXPENSE_ADDED, expense_to_dict(e))
        return Right(e)

    def update_expense(self, e: Expense) -> Either[dict, Expense]:
        if self.get_expense(e.id).is_none():
            return Left(_not_found("expense", e.id))
        checked = validate_expense(e)
        if checked.is_left():
            return checked
        self._expenses = replace_expense(self._expenses, e)
        self.bus.publish(events.EXPENSE_UPDATED, expense_to_dict(e))
        return Right(e)

    def delete_expense(self, expense_id: str) -> bool:
        if self.get_expense(expense_id).is_none():
            return False
        self._expenses = remove_expense(self._expenses, expense_id)
        logger.debug("Deleted expense %s", expense_id)
        self.bus.publish(events.EXPENSE_DELETED, {"id": expense_id})
        return True

    def reset_expenses(self) -> int:
        removed = len(self._expenses)
        self._expenses = ()
        logger.info("Removed all %d expenses", removed)
        self.bus.publish(events.EXPENSES_RESET, {"removed": removed})
        return removed

    # budgets

    def fetch_budgets(self) -> Tuple[Budget, ...]:
        return self._budgets

    def get_budget(self, budget_id: str) -> Maybe[Budget]:
        return Maybe.of(next((b for b in self._budgets if b.id == budget_id), None))

    def add_budget(self, b: Budget) -> Either[dict, Budget]:
        checked = validate_budget(b)
        if checked.is_left():
            return checked
        if self.get_budget(b.id).is_some():
            return Left({
                "error": "duplicate_id",
                "message": f"Budget with ID {b.id} already exists",
                "budget_id": b.id,
            })
        self._budgets = self._budgets + (b,)
        self.bus.publish(events.BUDGET_ADDED, budget_to_dict(b))
        return Right(b)

    def update_budget(self, b: Budget) -> Either[dict, Budget]:
        if self.get_budget(b.id).is_none():
            return Left(_not_found("budget", b.id))
        checked = validate_budget(b)
        if checked.is_left():
            return checked
        self._budgets = replace_budget(self._budgets, b)
        self.bus.publish(events.BUDGET_UPDATED, budget_to_dict(b))
        return Right(b)

    def update_budget_amount(self, budget_id: str, amount: float) -> Either[dict, Budget]:
        current = self.get_budget(budget_id).get_or_else(None)
        if current is None:
            return Left(_not_found("budget", budget_id))
        checked = validate_budget(replace(current, amount=amount))
        if checked.is_left():
            return checked
        self._budgets = update_budget_amount(self._budgets, budget_id, amount)
        updated = self.get_budget(budget_id).get_or_else(None)
        self.bus.publish(events.BUDGET_UPDATED, budget_to_dict(updated))
        return Right(updated)

    def delete_budget(self, budget_id: str) -> bool:
        if self.get_budget(budget_id).is_none():
            return False
        self._budgets = remove_budget(self._budgets, budget_id)
        self.bus.publish(events.BUDGET_DELETED, {"id": budget_id})
        return True

    def snapshot(self) -> Snapshot:
        # both tuples are immutable, so this pair is a coherent view
        return self._expenses, self._budgets
