"""
Core module - event bus and configuration shared by the chat runtime.
"""

from chatflow.core.config import ChatConfig, load_config
from chatflow.core.events import ChatEvent, Event, EventBus, EventHandler

__all__ = [
    "ChatConfig",
    "load_config",
    "ChatEvent",
    "Event",
    "EventBus",
    "EventHandler",
]
