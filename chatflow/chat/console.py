"""
Console host - plays a chat script in a terminal.
"""

from __future__ import annotations

import sys
from typing import Callable, Optional, TextIO

from chatflow.chat.commands import ChoiceCommand, ImageCommand, TextCommand
from chatflow.chat.pictures import PictureCatalog
from chatflow.chat.presenter import ChatListener, ChatPresenter

ChoiceResolver = Callable[[ChoiceCommand], str]


class ConsoleListener(ChatListener):
    """
    Writes chat output as plain text lines.

    Attributes:
        output: Stream to write to
        pictures: Optional catalog used to resolve @image names
        ended: Set once the end of the chat has been shown
    """

    def __init__(self, output: Optional[TextIO] = None, pictures: Optional[PictureCatalog] = None):
        self.output = output or sys.stdout
        self.pictures = pictures
        self.ended = False

    async def show_text(self, command: TextCommand) -> None:
        self._write(f"> {command.text}")

    async def show_image(self, command: ImageCommand) -> None:
        if self.pictures is None:
            self._write(f"[image: {command.image_name}]")
            return

        path = self.pictures.resolve(command.image_name)
        if path is None:
            return
        self._write(f"[image: {command.image_name} ({path})]")

    def show_choice(self, command: ChoiceCommand) -> None:
        for number, choice in enumerate(command.choices, start=1):
            self._write(f"  {number}) {choice}")

    async def on_end_chat(self) -> None:
        self.ended = True
        self._write("-- end of chat --")

    def _write(self, line: str) -> None:
        self.output.write(line + "\n")
        self.output.flush()


def prompt_choice(
    command: ChoiceCommand,
    input_func: Optional[Callable[[str], str]] = None,
    output: Optional[TextIO] = None,
) -> str:
    """Ask for a choice number until a valid one is entered."""
    input_func = input_func or input
    output = output or sys.stdout
    count = len(command.choices)
    while True:
        answer = input_func(f"Choose 1-{count}: ").strip()
        try:
            number = int(answer)
        except ValueError:
            number = 0
        if 1 <= number <= count:
            return command.choices[number - 1]
        output.write(f"Please enter a number between 1 and {count}.\n")


async def run_console_chat(presenter: ChatPresenter, choose: ChoiceResolver) -> None:
    """
    Drive a set-up presenter to the end of its script.

    Each pending choice is answered with choose(command).
    """
    if presenter.listener is None:
        raise ValueError("Presenter has no listener")

    while not presenter.is_finished:
        await presenter.advance()
        choice = presenter.awaiting_choice
        if choice is not None:
            presenter.set_variable(choice.variable_name, choose(choice))
