from typing import Callable, Dict, List, NamedTuple
from datetime import datetime

__all__ = [
    'Event', 'EventBus',
    'EXPENSE_ADDED', 'EXPENSE_UPDATED', 'EXPENSE_DELETED', 'EXPENSES_RESET',
    'BUDGET_ADDED', 'BUDGET_UPDATED', 'BUDGET_DELETED', 'BUDGET_EXCEEDED',
    'budget_exceeded_handler', 'register_default_handlers',
]

Handler = Callable[['Event', dict], dict]


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name)
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        # copy: a handler may unsubscribe itself
        return [handler(event, payload) for handler in list(handlers)]


EXPENSE_ADDED = "EXPENSE_ADDED"
EXPENSE_UPDATED = "EXPENSE_UPDATED"
EXPENSE_DELETED = "EXPENSE_DELETED"
EXPENSES_RESET = "EXPENSES_RESET"
BUDGET_ADDED = "BUDGET_ADDED"
BUDGET_UPDATED = "BUDGET_UPDATED"
BUDGET_DELETED = "BUDGET_DELETED"
BUDGET_EXCEEDED = "BUDGET_EXCEEDED"


def budget_exceeded_handler(event: Event, payload: dict) -> dict:
    category = payload.get("category", "")
    spent = payload.get("spent", 0)
    amount = payload.get("amount", 0)

    if amount > 0 and spent > amount:
        return {
            "alert": f"Budget exceeded for {category}: spent {spent:.2f} of {amount:.2f}",
            "category": category,
            "spent": spent,
            "amount": amount,
            "over_budget": spent - amount,
        }
    return {}


def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(BUDGET_EXCEEDED, budget_exceeded_handler)
    return bus
