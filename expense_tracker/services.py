import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

from expense_tracker import events
from expense_tracker.aggregation import (
    expenses_in_range,
    spending_by_category,
    spending_by_day,
    total_spending,
)
from expense_tracker.budgets import budget_status, split_active
from expense_tracker.domain import Budget, Expense, TimeRange
from expense_tracker.events import EventBus

logger = logging.getLogger(__name__)

Aggregator = Callable[..., Dict[str, Any]]


class BudgetService:
    """Facade for the budget screen: per-budget status plus overspend alerts.

    Alerts are published as BUDGET_EXCEEDED on the injected bus; whatever the
    subscribed handlers return is collected in the report.
    """

    def __init__(self, bus: Optional[EventBus] = None):
        self.bus = bus if bus is not None else events.register_default_handlers(EventBus())

    def budget_report(self, budgets: Iterable[Budget], expenses: Iterable[Expense], now: datetime) -> Dict[str, Any]:
        expenses = tuple(expenses)
        active, inactive = split_active(budgets, now)
        report: Dict[str, Any] = {
            "active": [budget_status(b, expenses, now) for b in active],
            "inactive": [budget_status(b, expenses, now) for b in inactive],
            "alerts": [],
        }

        for status in report["active"]:
            if status.overspent:
                b = status.budget
                payload = {
                    "budget_id": b.id,
                    "category": b.category.label,
                    "spent": status.spent,
                    "amount": b.amount,
                }
                results = self.bus.publish(events.BUDGET_EXCEEDED, payload)
                report["alerts"].extend(r for r in results if r and "alert" in r)

        if report["alerts"]:
            logger.info("%d budget(s) over their limit", len(report["alerts"]))
        return report


def agg_total(expenses: Sequence[Expense], acc=None) -> Dict[str, Any]:
    return {"total": total_spending(expenses)}


def agg_by_category(expenses: Sequence[Expense], acc=None) -> Dict[str, Any]:
    return {"by_category": spending_by_category(expenses)}


def agg_by_day(expenses: Sequence[Expense], acc=None) -> Dict[str, Any]:
    return {"by_day": spending_by_day(expenses)}


DEFAULT_AGGREGATORS = (agg_total, agg_by_category, agg_by_day)


class ReportService:
    """Facade for dashboard reports built from injected aggregators.

    Each aggregator takes (expenses, acc) and returns a partial result dict;
    ``acc`` holds what earlier aggregators produced.
    """

    def __init__(self, aggregators: Sequence[Aggregator] = DEFAULT_AGGREGATORS, first_weekday: int = 0):
        self.aggregators = aggregators
        self.first_weekday = first_weekday

    def dashboard(self, expenses: Iterable[Expense], time_range: TimeRange, now: datetime) -> Dict[str, Any]:
        in_range = expenses_in_range(expenses, time_range, now, self.first_weekday)
        report: Dict[str, Any] = {
            "range": time_range,
            "count": len(in_range),
            "steps": [],
            "result": {},
        }

        acc: Dict[str, Any] = {}
        for agg in self.aggregators:
            out = agg(in_range, acc)
            report["steps"].append({"aggregator": getattr(agg, "__name__", str(agg)), "output": out})
            if isinstance(out, dict):
                acc.update(out)

        report["result"] = acc
        return report
