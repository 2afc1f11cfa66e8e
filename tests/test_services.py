from datetime import datetime

from expense_tracker.domain import Budget, BudgetPeriod, Category, Expense, TimeRange
from expense_tracker.events import BUDGET_EXCEEDED, EventBus
from expense_tracker.services import BudgetService, ReportService


def make_exp(category, value, when):
    return Expense(name="x", date=when, value=value, category=category)


NOW = datetime(2025, 1, 25, 12, 0)

FOOD = Budget(id="food", category=Category.FOOD, amount=100.0,
              period=BudgetPeriod.MONTHLY, start_date=datetime(2025, 1, 15))
TRAVEL = Budget(id="travel", category=Category.TRAVEL, amount=50.0,
                period=BudgetPeriod.WEEKLY, start_date=datetime(2024, 12, 1))


def test_budget_report_splits_and_alerts():
    expenses = [
        make_exp(Category.FOOD, 90.0, datetime(2025, 1, 16)),
        make_exp(Category.FOOD, 30.0, datetime(2025, 1, 20)),
        make_exp(Category.TRAVEL, 500.0, datetime(2024, 12, 2)),
    ]
    rpt = BudgetService().budget_report([FOOD, TRAVEL], expenses, NOW)

    assert [s.budget.id for s in rpt["active"]] == ["food"]
    assert [s.budget.id for s in rpt["inactive"]] == ["travel"]
    assert rpt["active"][0].remaining == -20.0
    # inactive overspend does not alert
    assert len(rpt["alerts"]) == 1
    assert rpt["alerts"][0]["category"] == "Food"


def test_budget_report_uses_injected_bus():
    bus = EventBus()
    seen = []
    bus.subscribe(BUDGET_EXCEEDED, lambda event, payload: seen.append(payload) or {})

    expenses = [make_exp(Category.FOOD, 150.0, datetime(2025, 1, 16))]
    rpt = BudgetService(bus=bus).budget_report([FOOD], expenses, NOW)

    assert seen[0]["budget_id"] == "food"
    assert seen[0]["spent"] == 150.0
    # handler returned no alert
    assert rpt["alerts"] == []


def test_budget_report_without_overspend():
    rpt = BudgetService().budget_report([FOOD], [make_exp(Category.FOOD, 40.0, datetime(2025, 1, 20))], NOW)
    assert rpt["alerts"] == []
    assert rpt["active"][0].progress == 0.4


def test_dashboard_default_aggregators():
    expenses = [
        make_exp(Category.FOOD, 10.0, datetime(2025, 1, 2, 9)),
        make_exp(Category.FOOD, 5.0, datetime(2025, 1, 2, 19)),
        make_exp(Category.TRAVEL, 20.0, datetime(2025, 1, 10)),
        make_exp(Category.TRAVEL, 99.0, datetime(2024, 12, 31)),
    ]
    rpt = ReportService().dashboard(expenses, TimeRange.MONTH, NOW)

    assert rpt["range"] is TimeRange.MONTH
    assert rpt["count"] == 3
    assert rpt["result"]["total"] == 35.0
    assert rpt["result"]["by_category"] == [(Category.TRAVEL, 20.0), (Category.FOOD, 15.0)]
    assert [day.isoformat() for day, _ in rpt["result"]["by_day"]] == ["2025-01-02", "2025-01-10"]
    assert [s["aggregator"] for s in rpt["steps"]] == ["agg_total", "agg_by_category", "agg_by_day"]


def test_dashboard_custom_aggregators_see_earlier_results():
    def agg_count(expenses, acc=None):
        return {"count": len(expenses)}

    def agg_average(expenses, acc=None):
        count = acc.get("count", 0)
        return {"average": sum(e.value for e in expenses) / count if count else 0.0}

    svc = ReportService(aggregators=[agg_count, agg_average])
    rpt = svc.dashboard([make_exp(Category.FOOD, 4.0, NOW), make_exp(Category.FOOD, 8.0, NOW)], TimeRange.ALL, NOW)
    assert rpt["result"] == {"count": 2, "average": 6.0}
