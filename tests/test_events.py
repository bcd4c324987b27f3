from __future__ import annotations

from fatturer.services.events import EventBus, EventType


def test_handlers_run_in_subscription_order():
    bus = EventBus()
    calls = []
    bus.subscribe(EventType.DATA_CHANGED, lambda e: calls.append("primo"))
    bus.subscribe(EventType.DATA_CHANGED, lambda e: calls.append("secondo"))

    event = bus.publish(EventType.DATA_CHANGED, value=1)

    assert calls == ["primo", "secondo"]
    assert event.event_type == "data_changed"
    assert event.data == {"value": 1}


def test_enum_and_string_keys_are_equivalent():
    bus = EventBus()
    received = []
    bus.subscribe("export_enabled", received.append)

    bus.publish(EventType.EXPORT_ENABLED, enabled=True)

    assert [e.data["enabled"] for e in received] == [True]


def test_failing_handler_does_not_stop_the_others():
    bus = EventBus()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(EventType.ERROR_OCCURRED, broken)
    bus.subscribe(EventType.ERROR_OCCURRED, received.append)

    bus.publish(EventType.ERROR_OCCURRED, message="x")

    assert len(received) == 1


def test_unsubscribe_and_duplicate_subscribe():
    bus = EventBus()
    received = []
    bus.subscribe(EventType.STATE_CHANGED, received.append)
    bus.subscribe(EventType.STATE_CHANGED, received.append)

    bus.publish(EventType.STATE_CHANGED, state="loading")
    bus.unsubscribe(EventType.STATE_CHANGED, received.append)
    bus.publish(EventType.STATE_CHANGED, state="loaded")

    assert [e.data["state"] for e in received] == ["loading"]
