"""
chatflow

Scripted, branching chat scenes: a small line-based command language,
a parser, and a beat-by-beat presenter that drives any presentation
layer through a listener.

Quick Start:
    from chatflow import ChatPresenter, ChatListener

    class MyListener(ChatListener):
        async def show_text(self, command):
            print(command.text)

        async def show_image(self, command):
            print(f"[{command.image_name}]")

        def show_choice(self, command):
            print(" / ".join(command.choices))

        async def on_end_chat(self):
            print("bye")

    presenter = ChatPresenter(MyListener())
    presenter.setup(open("scene.chat", encoding="utf-8").read())
    await presenter.advance()
"""

__version__ = "0.1.0"

from chatflow.chat import (
    AdvanceContext,
    ChatCommand,
    ChatError,
    ChatListener,
    ChatParser,
    ChatPresenter,
    CommandSyntaxError,
    CommandType,
    ParsedScript,
    PictureCatalog,
    ScriptSyntaxError,
)
from chatflow.core import ChatConfig, ChatEvent, Event, EventBus, load_config

__all__ = [
    # Chat
    "AdvanceContext",
    "ChatCommand",
    "ChatError",
    "ChatListener",
    "ChatParser",
    "ChatPresenter",
    "CommandSyntaxError",
    "CommandType",
    "ParsedScript",
    "PictureCatalog",
    "ScriptSyntaxError",
    # Core
    "ChatConfig",
    "ChatEvent",
    "Event",
    "EventBus",
    "load_config",
]
