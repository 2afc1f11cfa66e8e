from datetime import datetime

from expense_tracker.events import (
    BUDGET_EXCEEDED,
    EXPENSE_ADDED,
    EXPENSE_DELETED,
    Event,
    EventBus,
    budget_exceeded_handler,
    register_default_handlers,
)


def test_event_bus_subscribe_and_publish():
    bus = EventBus()
    seen = []

    def handler(event: Event, payload: dict) -> dict:
        seen.append((event.name, payload))
        return {"processed": True}

    bus.subscribe(EXPENSE_ADDED, handler)
    results = bus.publish(EXPENSE_ADDED, {"id": "e1"})

    assert results == [{"processed": True}]
    assert seen == [(EXPENSE_ADDED, {"id": "e1"})]


def test_publish_without_subscribers_returns_empty():
    assert EventBus().publish(EXPENSE_DELETED, {"id": "e1"}) == []


def test_unsubscribe_stops_delivery():
    bus = EventBus()
    calls = []

    def handler(event, payload):
        calls.append(payload)
        return {}

    bus.subscribe(EXPENSE_ADDED, handler)
    bus.publish(EXPENSE_ADDED, {"n": 1})
    bus.unsubscribe(EXPENSE_ADDED, handler)
    bus.publish(EXPENSE_ADDED, {"n": 2})
    bus.unsubscribe(EXPENSE_DELETED, handler)

    assert calls == [{"n": 1}]


def test_handler_may_unsubscribe_itself():
    bus = EventBus()
    calls = []

    def once(event, payload):
        calls.append(payload)
        bus.unsubscribe(EXPENSE_ADDED, once)
        return {}

    bus.subscribe(EXPENSE_ADDED, once)
    bus.publish(EXPENSE_ADDED, {})
    bus.publish(EXPENSE_ADDED, {})
    assert len(calls) == 1


def test_budget_exceeded_handler():
    event = Event(name=BUDGET_EXCEEDED, ts=datetime.now().isoformat(), payload={})
    result = budget_exceeded_handler(event, {"category": "Food", "spent": 150.0, "amount": 100.0})
    assert "Budget exceeded for Food" in result["alert"]
    assert result["over_budget"] == 50.0

    assert budget_exceeded_handler(event, {"category": "Food", "spent": 50.0, "amount": 100.0}) == {}
    assert budget_exceeded_handler(event, {"category": "Food", "spent": 50.0, "amount": 0}) == {}


def test_register_default_handlers():
    bus = register_default_handlers(EventBus())
    results = bus.publish(BUDGET_EXCEEDED, {"category": "Travel", "spent": 3.0, "amount": 1.0})
    assert len(results) == 1
    assert results[0]["category"] == "Travel"
