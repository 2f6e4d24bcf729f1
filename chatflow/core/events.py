"""
Typed event bus for observing chat sessions.

Event types are Enum members so subscribers never match on strings.
The presenter publishes ChatEvent members; hosts subscribe to drive
side effects (sound cues, analytics, save points) without touching
presenter state.

Usage:
    bus = EventBus()
    bus.subscribe(ChatEvent.CHOICE_SHOWN, on_choice)
    presenter = ChatPresenter(listener, events=bus)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)


class ChatEvent(Enum):
    """Events published by the chat presenter."""
    CHAT_STARTED = auto()     # setup() parsed a new script
    BEAT_STARTED = auto()     # a beat is about to run
    CHOICE_SHOWN = auto()     # listener received a choice
    VARIABLE_SET = auto()     # host recorded a choice result
    LABEL_JUMPED = auto()     # cursor moved to a label
    CHAT_ENDED = auto()       # script ran off the end


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Event-specific payload
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


class EventBus:
    """
    Publish/subscribe hub.

    Handlers are held by weak reference unless subscribed with weak=False.
    Events published from inside a handler are queued, not nested.
    """

    def __init__(self):
        # event type -> [handler or weak ref]
        self._handlers: dict[Enum, list[Any]] = {}
        self._event_queue: list[Event] = []
        self._is_publishing = False

    def subscribe(self, event_type: Enum, handler: EventHandler, weak: bool = True) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            weak: Hold only a weak reference to the handler
        """
        if weak:
            handler_ref = WeakMethod(handler) if hasattr(handler, '__self__') else ref(handler)
        else:
            handler_ref = handler
        self._handlers.setdefault(event_type, []).append(handler_ref)

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        if event_type not in self._handlers:
            return
        self._handlers[event_type] = [
            h for h in self._handlers[event_type]
            if self._get_handler(h) != handler
        ]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """Publish an event and return it."""
        event = Event(type=event_type, data=data)
        if self._is_publishing:
            self._event_queue.append(event)
        else:
            self._dispatch(event)
        return event

    def clear(self, event_type: Enum | None = None) -> None:
        """Drop handlers for one event type, or all of them."""
        if event_type is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_type, None)

    def _dispatch(self, event: Event) -> None:
        handlers = self._handlers.get(event.type)
        if not handlers:
            return

        self._is_publishing = True
        dead = []
        try:
            for handler_ref in list(handlers):
                handler = self._get_handler(handler_ref)
                if handler is None:
                    dead.append(handler_ref)
                    continue

                try:
                    handler(event)
                except Exception:
                    # Handler errors are logged, not propagated
                    logger.exception("Error in event handler for %s", event.type)

            for handler_ref in dead:
                if handler_ref in handlers:
                    handlers.remove(handler_ref)
        finally:
            self._is_publishing = False

        while self._event_queue:
            self._dispatch(self._event_queue.pop(0))

    def _get_handler(self, handler_ref: Any) -> EventHandler | None:
        if isinstance(handler_ref, (ref, WeakMethod)):
            return handler_ref()
        return handler_ref
