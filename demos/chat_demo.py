"""
Chat Demo: Coffee Shop

Demonstrates:
- Parsing a chat script from a file
- Beat pacing (@text, @image, @wait)
- Pausing on @choice and branching with @if/@goto
- Watching a session through the event bus

Run: python -m demos.chat_demo
"""

import asyncio
import logging
from pathlib import Path

from chatflow.chat import (
    ChatParser, ChatPresenter, ConsoleListener, PictureCatalog,
    prompt_choice, run_console_chat,
)
from chatflow.core import ChatConfig, ChatEvent, Event, EventBus

CHATS_DIR = Path(__file__).parent / "chats"


class JumpLogger:
    """Prints every label jump so the branching is visible."""

    def __init__(self, events: EventBus):
        self.jumps = 0
        events.subscribe(ChatEvent.LABEL_JUMPED, self.on_jump)

    def on_jump(self, event: Event) -> None:
        self.jumps += 1
        print(f"   (jump -> {event['label']})")


async def main() -> None:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    events = EventBus()
    jump_logger = JumpLogger(events)

    # Picture files are not shipped with the demo; missing files are only warned about
    pictures = PictureCatalog.load(CHATS_DIR / "pictures.json")
    listener = ConsoleListener(pictures=pictures)

    presenter = ChatPresenter(listener, config=ChatConfig(settle_delay=0.3, goto_ends_beat=True), events=events)
    presenter.load(ChatParser().parse_file(CHATS_DIR / "coffee_shop.chat"))

    await run_console_chat(presenter, prompt_choice)

    print(f"\nChoices made: {presenter.variables}")
    print(f"Jumps taken: {jump_logger.jumps}")


if __name__ == "__main__":
    asyncio.run(main())
