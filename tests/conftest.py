import os
import sys

import pytest

# Ensure chatflow can be imported without installing
sys.path.append(os.getcwd())

from chatflow.chat.presenter import ChatListener, ChatPresenter
from chatflow.core.config import ChatConfig
from chatflow.core.events import EventBus


class RecordingListener(ChatListener):
    """Listener that records every call in order."""

    def __init__(self):
        self.calls = []

    async def show_text(self, command):
        self.calls.append(("text", command.text))

    async def show_image(self, command):
        self.calls.append(("image", command.image_name))

    def show_choice(self, command):
        self.calls.append(("choice", command.variable_name))

    async def on_end_chat(self):
        self.calls.append(("end",))

    @property
    def shown(self):
        return [call for call in self.calls if call[0] in ("text", "image")]


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    return EventBus()


@pytest.fixture
def fast_config():
    """Config without pacing delay so tests run instantly."""
    return ChatConfig(settle_delay=0.0)


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def presenter(listener, fast_config, event_bus):
    return ChatPresenter(listener, config=fast_config, events=event_bus)
