"""
Chat presenter - runs a parsed chat script one beat at a time.

A beat is the run of commands from the cursor up to and including the
next @text, @if, @wait or @choice (or the end of the script). All
commands of a beat start together and the presenter waits for every
one of them before collecting the next beat. One call to advance() keeps playing
beats until a beat ends on a @choice or the script runs out.

Usage:
    presenter = ChatPresenter(listener)
    presenter.setup(script_text)
    await presenter.advance()              # plays up to the first choice
    presenter.set_variable("mood", "Tired")
    await presenter.advance()              # resumes after the choice
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from chatflow.chat.commands import (
    BEAT_TERMINATORS,
    ChatCommand,
    ChoiceCommand,
    CommandType,
    GotoCommand,
    IfCommand,
    ImageCommand,
    LabelCommand,
    TextCommand,
    WaitCommand,
)
from chatflow.chat.parser import ChatParser, ParsedScript
from chatflow.core.config import ChatConfig
from chatflow.core.events import ChatEvent, EventBus

logger = logging.getLogger(__name__)


class ChatListener(ABC):
    """
    Presentation side of a chat session.

    The presenter awaits show_text/show_image/on_end_chat, so an
    implementation can hold the beat open for an animation. show_choice
    returns immediately; the answer comes back through
    ChatPresenter.set_variable() followed by advance().
    """

    @abstractmethod
    async def show_text(self, command: TextCommand) -> None:
        ...

    @abstractmethod
    async def show_image(self, command: ImageCommand) -> None:
        ...

    @abstractmethod
    def show_choice(self, command: ChoiceCommand) -> None:
        ...

    @abstractmethod
    async def on_end_chat(self) -> None:
        ...


@dataclass
class AdvanceContext:
    """
    Re-entrancy token for one chain of advance() calls.

    Each advance() enters on start and leaves on exit, so nested calls
    sharing a token balance out. The presenter owns a root token per
    session; pass a separate token to run an independent call chain.
    """
    depth: int = 0

    @property
    def is_idle(self) -> bool:
        return self.depth <= 0

    def enter(self) -> None:
        self.depth += 1

    def leave(self) -> None:
        self.depth = max(0, self.depth - 1)

    def reset(self) -> None:
        self.depth = 0


class ChatPresenter:
    """
    Interprets a chat script against a ChatListener.

    Owns the script, the cursor, and the variable store. The cursor is
    always a valid command index or exactly len(script); only
    _advance_linear() and _jump_to() move it once a session is set up.
    """

    def __init__(
        self,
        listener: Optional[ChatListener] = None,
        config: Optional[ChatConfig] = None,
        events: Optional[EventBus] = None,
    ):
        self.listener = listener
        self.config = config or ChatConfig()
        self.events = events

        self._script = ParsedScript()
        self._cursor = 0
        self._variables: dict[str, str] = {}
        self._context = AdvanceContext()
        self._pending_choice: Optional[ChoiceCommand] = None
        self._finished = False

    # -- Session -----------------------------------------------------------

    def setup(self, raw_text: str, source: str = "<script>") -> None:
        """
        Parse a script and reset the session.

        Raises:
            ScriptSyntaxError: If any line fails validation. The previous
                session is left untouched.
        """
        parser = ChatParser(comment_prefix=self.config.comment_prefix)
        self.load(parser.parse(raw_text, source=source))

    def load(self, script: ParsedScript) -> None:
        """Reset the session around an already parsed script."""
        self._script = script
        self._cursor = 0
        self._variables.clear()
        self._context.reset()
        self._pending_choice = None
        self._finished = False

        logger.debug(
            "Chat '%s' set up: %d commands, %d labels",
            script.id, len(script.commands), len(script.labels),
        )
        self._publish(ChatEvent.CHAT_STARTED, script=script)

    @property
    def _terminators(self) -> frozenset[CommandType]:
        terminators = set(BEAT_TERMINATORS)
        if self.config.choice_ends_beat:
            terminators.add(CommandType.CHOICE)
        if self.config.goto_ends_beat:
            terminators.add(CommandType.GOTO)
        return frozenset(terminators)

    @property
    def script(self) -> ParsedScript:
        return self._script

    @property
    def cursor(self) -> int:
        """Index of the next command to collect."""
        return self._cursor

    @property
    def variables(self) -> dict[str, str]:
        """Copy of the variable store."""
        return dict(self._variables)

    @property
    def can_advance(self) -> bool:
        """True when no advance() is in flight; gate the host's "next" control on this."""
        return self._context.is_idle

    @property
    def is_finished(self) -> bool:
        return self._finished

    @property
    def awaiting_choice(self) -> Optional[ChoiceCommand]:
        """The choice the session is waiting on, if any."""
        return self._pending_choice

    def get_variable(self, name: str, default: Any = None) -> Any:
        return self._variables.get(name, default)

    def set_variable(self, name: str, value: str) -> None:
        """Record a choice result. Does not move the cursor."""
        self._variables[name] = value
        self._pending_choice = None
        self._publish(ChatEvent.VARIABLE_SET, name=name, value=value)

    # -- Execution ---------------------------------------------------------

    async def advance(self, context: Optional[AdvanceContext] = None) -> None:
        """
        Play beats until one ends on a choice or the script ends.

        Ignored while a choice is unanswered and after the end of the
        chat has been reported.
        """
        if self.listener is None:
            logger.warning("advance() called without a listener; nothing to present.")
            return
        if self._finished:
            logger.debug("Chat '%s' already finished; advance ignored.", self._script.id)
            return
        if self._pending_choice is not None:
            logger.debug(
                "Waiting for '%s' to be chosen; advance ignored.",
                self._pending_choice.variable_name,
            )
            return

        context = context or self._context
        context.enter()
        try:
            while True:
                beat = self.next_beat()
                if not beat:
                    context.reset()
                    await self._end_chat()
                    return

                self._publish(ChatEvent.BEAT_STARTED, commands=beat)
                await asyncio.gather(*(self.execute_command(command) for command in beat))

                # A nested advance() may have finished the chat meanwhile
                if self._finished:
                    break
                if beat[-1].type == CommandType.CHOICE or self._pending_choice is not None:
                    break
        finally:
            context.leave()

    def next_beat(self) -> list[ChatCommand]:
        """
        Collect the next beat and move the cursor past it.

        Returns an empty list when the cursor is already at the end.
        """
        beat: list[ChatCommand] = []
        while self._cursor < len(self._script.commands):
            command = self._script.commands[self._cursor]
            beat.append(command)
            self._advance_linear()
            if command.type in self._terminators:
                break

        for command in beat[:-1]:
            if command.type in (CommandType.GOTO, CommandType.CHOICE):
                logger.warning(
                    "%s at line %d does not end its beat; lines up to %d run before it takes effect.",
                    command.keyword, command.index, beat[-1].index,
                )

        if beat:
            logger.debug("Beat: %s", [command.type.name for command in beat])
        return beat

    async def execute_command(self, command: ChatCommand) -> None:
        """Apply one command's effect."""
        if self.listener is None:
            return

        if isinstance(command, TextCommand):
            await self.listener.show_text(command)
            await asyncio.sleep(self.config.settle_delay)

        elif isinstance(command, ImageCommand):
            await self.listener.show_image(command)
            await asyncio.sleep(self.config.settle_delay)

        elif isinstance(command, WaitCommand):
            await asyncio.sleep(command.seconds)

        elif isinstance(command, ChoiceCommand):
            self._pending_choice = command
            self.listener.show_choice(command)
            self._publish(ChatEvent.CHOICE_SHOWN, command=command)

        elif isinstance(command, IfCommand):
            actual_value = self._variables.get(command.variable_name)
            if actual_value is None:
                logger.warning(
                    "Variable '%s' not found at line %d. Condition evaluates to false.",
                    command.variable_name, command.index,
                )
            elif command.evaluate(actual_value):
                self._jump_to(command.goto_label)

        elif isinstance(command, GotoCommand):
            self._jump_to(command.goto_label)

        elif isinstance(command, LabelCommand):
            pass

        else:
            logger.warning("Unhandled command type %s at line %d", command.type.name, command.index)

    async def _end_chat(self) -> None:
        self._finished = True
        logger.debug("Chat '%s' finished.", self._script.id)
        self._publish(ChatEvent.CHAT_ENDED, script=self._script)
        await self.listener.on_end_chat()

    # -- Cursor ------------------------------------------------------------

    def _advance_linear(self) -> None:
        if self._cursor < len(self._script.commands):
            self._cursor += 1

    def _jump_to(self, label_name: str) -> None:
        index = self._script.label_index(label_name)
        if index is None:
            logger.error("Label '%s' not found. Cannot jump.", label_name)
            return

        logger.debug("Jump to '%s' (command %d)", label_name, index)
        self._cursor = index
        self._publish(ChatEvent.LABEL_JUMPED, label=label_name, index=index)

    def _publish(self, event_type: ChatEvent, **data: Any) -> None:
        if self.events is not None:
            self.events.publish(event_type, **data)
