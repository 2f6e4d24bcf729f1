import gc
from enum import Enum, auto

from chatflow.core.events import ChatEvent, EventBus


class MockEvent(Enum):
    TEST_EVENT = auto()
    OTHER_EVENT = auto()


def test_event_bus_subscribe_publish(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event_bus.publish(MockEvent.TEST_EVENT, data="test")

    assert len(received) == 1
    assert received[0].type == MockEvent.TEST_EVENT
    assert received[0]["data"] == "test"


def test_event_bus_unsubscribe(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event_bus.unsubscribe(MockEvent.TEST_EVENT, handler)
    event_bus.publish(MockEvent.TEST_EVENT)

    assert received == []


def test_handlers_called_in_subscription_order(event_bus):
    order = []

    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("first"), weak=False)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("second"), weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert order == ["first", "second"]


def test_weak_handler_is_dropped(event_bus):
    received = []

    class Subscriber:
        def on_event(self, event):
            received.append(event)

    subscriber = Subscriber()
    event_bus.subscribe(MockEvent.TEST_EVENT, subscriber.on_event)
    del subscriber
    gc.collect()

    event_bus.publish(MockEvent.TEST_EVENT)

    assert received == []


def test_nested_publish_is_queued(event_bus):
    order = []

    def first(event):
        order.append("first:start")
        event_bus.publish(MockEvent.OTHER_EVENT)
        order.append("first:end")

    event_bus.subscribe(MockEvent.TEST_EVENT, first, weak=False)
    event_bus.subscribe(MockEvent.OTHER_EVENT, lambda e: order.append("other"), weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert order == ["first:start", "first:end", "other"]


def test_failing_handler_does_not_stop_others(event_bus):
    received = []

    def broken(event):
        raise RuntimeError("boom")

    event_bus.subscribe(ChatEvent.CHAT_ENDED, broken, weak=False)
    event_bus.subscribe(ChatEvent.CHAT_ENDED, lambda e: received.append(e.type), weak=False)

    event_bus.publish(ChatEvent.CHAT_ENDED)

    assert received == [ChatEvent.CHAT_ENDED]


def test_clear(event_bus):
    received = []
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: received.append(1), weak=False)
    event_bus.subscribe(MockEvent.OTHER_EVENT, lambda e: received.append(2), weak=False)

    event_bus.clear(MockEvent.TEST_EVENT)
    event_bus.publish(MockEvent.TEST_EVENT)
    event_bus.publish(MockEvent.OTHER_EVENT)
    assert received == [2]

    event_bus.clear()
    event_bus.publish(MockEvent.OTHER_EVENT)
    assert received == [2]
