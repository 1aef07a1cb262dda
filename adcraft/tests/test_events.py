"""
Event bus tests.
"""
import pytest

from adcraft.errors import EventBusError
from adcraft.events import DataEvents, EventBus


def test_callbacks_run_in_registration_order():
    bus = EventBus()
    calls = []
    bus.subscribe(DataEvents.PRODUCTS_UPDATED, lambda: calls.append("first"))
    bus.subscribe(DataEvents.PRODUCTS_UPDATED, lambda: calls.append("second"))

    bus.emit(DataEvents.PRODUCTS_UPDATED)
    assert calls == ["first", "second"]


def test_topics_are_independent():
    bus = EventBus()
    calls = []
    bus.subscribe(DataEvents.AVATARS_UPDATED, lambda: calls.append("avatars"))

    bus.emit(DataEvents.PRODUCTS_UPDATED)
    assert calls == []


def test_unsubscribe_is_idempotent():
    bus = EventBus()
    calls = []
    unsubscribe = bus.subscribe(DataEvents.ALL_DATA_UPDATED, lambda: calls.append(1))

    unsubscribe()
    unsubscribe()
    bus.emit(DataEvents.ALL_DATA_UPDATED)

    assert calls == []
    assert bus.subscriber_count(DataEvents.ALL_DATA_UPDATED) == 0


def test_same_callback_twice_gets_two_subscriptions():
    bus = EventBus()
    calls = []

    def callback():
        calls.append(1)

    first = bus.subscribe(DataEvents.PRODUCTS_UPDATED, callback)
    bus.subscribe(DataEvents.PRODUCTS_UPDATED, callback)
    first()

    bus.emit(DataEvents.PRODUCTS_UPDATED)
    assert calls == [1]


def test_failing_subscriber_does_not_stop_delivery():
    bus = EventBus()
    calls = []

    def broken():
        raise RuntimeError("boom")

    bus.subscribe(DataEvents.PRODUCTS_UPDATED, broken)
    bus.subscribe(DataEvents.PRODUCTS_UPDATED, lambda: calls.append("ok"))

    bus.emit(DataEvents.PRODUCTS_UPDATED)
    assert calls == ["ok"]


def test_unsubscribe_during_delivery_skips_later_callback():
    bus = EventBus()
    calls = []
    unsubscribers = {}

    def first():
        calls.append("first")
        unsubscribers["second"]()

    bus.subscribe(DataEvents.PRODUCTS_UPDATED, first)
    unsubscribers["second"] = bus.subscribe(DataEvents.PRODUCTS_UPDATED, lambda: calls.append("second"))

    bus.emit(DataEvents.PRODUCTS_UPDATED)
    assert calls == ["first"]


def test_reentrant_emit_is_delivered_after_current_delivery():
    bus = EventBus()
    calls = []

    def on_products():
        calls.append("products:a")
        bus.emit(DataEvents.ALL_DATA_UPDATED)

    bus.subscribe(DataEvents.PRODUCTS_UPDATED, on_products)
    bus.subscribe(DataEvents.PRODUCTS_UPDATED, lambda: calls.append("products:b"))
    bus.subscribe(DataEvents.ALL_DATA_UPDATED, lambda: calls.append("all"))

    bus.emit(DataEvents.PRODUCTS_UPDATED)
    assert calls == ["products:a", "products:b", "all"]


def test_reentrant_emits_keep_order_and_are_not_coalesced():
    bus = EventBus()
    calls = []
    state = {"emitted": False}

    def on_products():
        calls.append("products")
        if not state["emitted"]:
            state["emitted"] = True
            bus.emit(DataEvents.AVATARS_UPDATED)
            bus.emit(DataEvents.PRODUCTS_UPDATED)
            bus.emit(DataEvents.AVATARS_UPDATED)

    bus.subscribe(DataEvents.PRODUCTS_UPDATED, on_products)
    bus.subscribe(DataEvents.AVATARS_UPDATED, lambda: calls.append("avatars"))

    bus.emit(DataEvents.PRODUCTS_UPDATED)
    assert calls == ["products", "avatars", "products", "avatars"]


def test_unknown_topic_and_bad_callback_are_rejected():
    bus = EventBus()
    with pytest.raises(EventBusError):
        bus.subscribe("orders_updated", lambda: None)
    with pytest.raises(EventBusError):
        bus.emit("orders_updated")
    with pytest.raises(EventBusError):
        bus.subscribe(DataEvents.PRODUCTS_UPDATED, "not callable")


def test_buses_are_isolated():
    first, second = EventBus(), EventBus()
    calls = []
    first.subscribe(DataEvents.PRODUCTS_UPDATED, lambda: calls.append(1))

    second.emit(DataEvents.PRODUCTS_UPDATED)
    assert calls == []
