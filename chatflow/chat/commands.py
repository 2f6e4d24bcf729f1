"""
Chat commands - one validated instruction per script line.

A script line has the form:

```
@keyword, arg1, arg2, ...
```

Tokens are split on commas and trimmed. The keyword picks the command
class; the class checks arity and content when it is constructed, so an
invalid command never exists. Supported keywords:

```
@text, Hello, world!            # show a text bubble ("Hello, world!")
@image, sunset                  # show a picture by name
@choice, answer, Yes, No        # ask the player; result stored in `answer`
@if, answer, Yes, agreed        # jump to label `agreed` if answer == Yes
@if, score, >20, winner         # numeric comparison (>, <, =)
@label, agreed                  # jump target
@wait, 1.5                      # pause (0 < seconds <= 5)
@goto, ending                   # unconditional jump
```
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar, Optional, Sequence

MAX_WAIT_SECONDS = 5.0
MIN_CHOICES = 2
MAX_CHOICES = 3
NUMERIC_TOLERANCE = 0.0001


class CommandType(Enum):
    """Kinds of chat command."""
    UNKNOWN = auto()
    TEXT = auto()
    IMAGE = auto()
    CHOICE = auto()
    IF = auto()
    LABEL = auto()
    WAIT = auto()
    GOTO = auto()


class EvalType(Enum):
    """How an @if command compares its expected value."""
    STRING = auto()
    NUMERIC = auto()
    BOOLEAN = auto()


class ChatError(Exception):
    """Base class for chat script errors."""


class CommandSyntaxError(ChatError):
    """
    A script line does not satisfy its command's rules.

    Attributes:
        index: 0-based source line of the command
        kind: Command type that rejected the line
        args: Trimmed tokens of the line
        reason: What is wrong, with the expected syntax
    """

    def __init__(self, index: int, kind: CommandType, args: Sequence[str], reason: str):
        self.index = index
        self.kind = kind
        self.args = tuple(args)
        self.reason = reason
        super().__init__(
            f"{reason}\n"
            f"Invalid command at line {index} of type {kind.name} "
            f"with args: {', '.join(self.args)}"
        )


def parse_number(value: str) -> Optional[float]:
    """Parse a finite float, or return None."""
    try:
        number = float(value.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_bool(value: str) -> Optional[bool]:
    """Parse "true"/"false" case-insensitively, or return None."""
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


@dataclass(frozen=True)
class ChatCommand:
    """
    Base class for all chat commands.

    Subclasses set `type` and `usage`, validate in `check()` and derive
    their typed fields in `_bind()`. Both run once, from __post_init__.
    """

    index: int
    args: tuple[str, ...]

    type: ClassVar[CommandType] = CommandType.UNKNOWN
    usage: ClassVar[str] = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, 'args', tuple(arg.strip() for arg in self.args))
        self.check()
        self._bind()

    @property
    def keyword(self) -> str:
        return self.args[0] if self.args else ""

    def check(self) -> None:
        """Raise CommandSyntaxError if the arguments are invalid."""

    def _bind(self) -> None:
        """Populate typed fields from the validated arguments."""

    def _fail(self, reason: str) -> None:
        hint = f"\nex: {self.usage}" if self.usage else ""
        raise CommandSyntaxError(self.index, self.type, self.args, reason + hint)

    def _require_arity(self, minimum: int, maximum: Optional[int] = None) -> None:
        count = len(self.args)
        if count < minimum or (maximum is not None and count > maximum):
            self._fail("Wrong number of arguments.")

    def _require_value(self, position: int, what: str) -> None:
        if not self.args[position]:
            self._fail(f"{what} is empty.")


@dataclass(frozen=True)
class UnknownCommand(ChatCommand):
    """A line whose keyword is not recognised. Construction always fails."""

    type: ClassVar[CommandType] = CommandType.UNKNOWN

    def check(self) -> None:
        self._fail(f"Unknown command '{self.keyword}'.")


@dataclass(frozen=True)
class TextCommand(ChatCommand):
    """Show a text bubble. Commas after the keyword belong to the text."""

    text: str = field(init=False)

    type: ClassVar[CommandType] = CommandType.TEXT
    usage: ClassVar[str] = "@text, <text to show>"

    def check(self) -> None:
        self._require_arity(2)
        if not ", ".join(self.args[1:]).strip():
            self._fail("Text to show is empty.")

    def _bind(self) -> None:
        object.__setattr__(self, 'text', ", ".join(self.args[1:]))


@dataclass(frozen=True)
class ImageCommand(ChatCommand):
    """Show a picture by catalog name."""

    image_name: str = field(init=False)

    type: ClassVar[CommandType] = CommandType.IMAGE
    usage: ClassVar[str] = "@image, <picture name>"

    def check(self) -> None:
        self._require_arity(2, 2)
        self._require_value(1, "Picture name")

    def _bind(self) -> None:
        object.__setattr__(self, 'image_name', self.args[1])


@dataclass(frozen=True)
class ChoiceCommand(ChatCommand):
    """Offer 2-3 options; the chosen text is stored in `variable_name`."""

    variable_name: str = field(init=False)
    choices: tuple[str, ...] = field(init=False)

    type: ClassVar[CommandType] = CommandType.CHOICE
    usage: ClassVar[str] = "@choice, <variable>, <choice 1>, <choice 2>, [choice 3]"

    def check(self) -> None:
        self._require_arity(2 + MIN_CHOICES, 2 + MAX_CHOICES)
        self._require_value(1, "Variable name")
        for position in range(2, len(self.args)):
            self._require_value(position, f"Choice {position - 1}")

    def _bind(self) -> None:
        object.__setattr__(self, 'variable_name', self.args[1])
        object.__setattr__(self, 'choices', self.args[2:])


@dataclass(frozen=True)
class IfCommand(ChatCommand):
    """
    Jump to a label when a variable matches the expected value.

    The expected value decides the comparison once, at parse time:
    - "true" / "false"            -> boolean
    - "20", "=20", ">20", "<20"   -> numeric (= within NUMERIC_TOLERANCE)
    - anything else               -> exact string
    """

    variable_name: str = field(init=False)
    expected_value: str = field(init=False)
    goto_label: str = field(init=False)
    eval_type: EvalType = field(init=False)

    type: ClassVar[CommandType] = CommandType.IF
    usage: ClassVar[str] = "@if, <variable>, <expected value>, <label>"

    NUMERIC_COMPARE_PATTERN: ClassVar[re.Pattern] = re.compile(r'^(>|<|=)(.+)$')

    def check(self) -> None:
        self._require_arity(4, 4)
        self._require_value(1, "Variable name")
        self._require_value(2, "Expected value")
        self._require_value(3, "Jump label")

        match = self.NUMERIC_COMPARE_PATTERN.match(self.args[2])
        if match and parse_number(match.group(2)) is None:
            self._fail("Numeric comparison value is not a number (20, =20, >20, <20).")

    def _bind(self) -> None:
        expected = self.args[2]
        object.__setattr__(self, 'variable_name', self.args[1])
        object.__setattr__(self, 'expected_value', expected)
        object.__setattr__(self, 'goto_label', self.args[3])

        if expected in ("true", "false"):
            eval_type = EvalType.BOOLEAN
        elif self.NUMERIC_COMPARE_PATTERN.match(expected) or parse_number(expected) is not None:
            eval_type = EvalType.NUMERIC
        else:
            eval_type = EvalType.STRING
        object.__setattr__(self, 'eval_type', eval_type)

    def evaluate(self, actual_value: str) -> bool:
        """Compare a variable's value against the expected value."""
        if self.eval_type == EvalType.BOOLEAN:
            actual = parse_bool(actual_value)
            return actual is not None and actual == parse_bool(self.expected_value)

        if self.eval_type == EvalType.NUMERIC:
            match = self.NUMERIC_COMPARE_PATTERN.match(self.expected_value)
            operator, operand = match.groups() if match else ("=", self.expected_value)
            expected = parse_number(operand)
            actual = parse_number(actual_value)
            if expected is None or actual is None:
                return False
            if operator == ">":
                return actual > expected
            if operator == "<":
                return actual < expected
            return abs(actual - expected) < NUMERIC_TOLERANCE

        return actual_value == self.expected_value


@dataclass(frozen=True)
class LabelCommand(ChatCommand):
    """Jump target. Has no effect when executed."""

    label_name: str = field(init=False)

    type: ClassVar[CommandType] = CommandType.LABEL
    usage: ClassVar[str] = "@label, <label name>"

    def check(self) -> None:
        self._require_arity(2, 2)
        self._require_value(1, "Label name")

    def _bind(self) -> None:
        object.__setattr__(self, 'label_name', self.args[1])


@dataclass(frozen=True)
class WaitCommand(ChatCommand):
    """Pause the beat for a number of seconds."""

    seconds: float = field(init=False)

    type: ClassVar[CommandType] = CommandType.WAIT
    usage: ClassVar[str] = "@wait, <seconds>"

    def check(self) -> None:
        self._require_arity(2, 2)
        seconds = parse_number(self.args[1])
        if seconds is None or seconds <= 0 or seconds > MAX_WAIT_SECONDS:
            self._fail(f"Wait must be a number greater than 0 and at most {MAX_WAIT_SECONDS:g}.")

    def _bind(self) -> None:
        object.__setattr__(self, 'seconds', parse_number(self.args[1]))


@dataclass(frozen=True)
class GotoCommand(ChatCommand):
    """Unconditional jump to a label."""

    goto_label: str = field(init=False)

    type: ClassVar[CommandType] = CommandType.GOTO
    usage: ClassVar[str] = "@goto, <label name>"

    def check(self) -> None:
        self._require_arity(2, 2)
        self._require_value(1, "Jump label")

    def _bind(self) -> None:
        object.__setattr__(self, 'goto_label', self.args[1])


COMMAND_KEYWORDS: dict[str, type[ChatCommand]] = {
    "@text": TextCommand,
    "@image": ImageCommand,
    "@choice": ChoiceCommand,
    "@if": IfCommand,
    "@label": LabelCommand,
    "@wait": WaitCommand,
    "@goto": GotoCommand,
}

# Commands that end a beat once collected
BEAT_TERMINATORS: frozenset[CommandType] = frozenset({
    CommandType.TEXT,
    CommandType.IF,
    CommandType.WAIT,
})


def create_command(index: int, tokens: Sequence[str]) -> ChatCommand:
    """
    Build the command for a tokenized line.

    Raises:
        CommandSyntaxError: If the keyword is unknown or the arguments
            break the command's rules.
    """
    keyword = tokens[0].strip() if tokens else ""
    command_class = COMMAND_KEYWORDS.get(keyword, UnknownCommand)
    return command_class(index, tuple(tokens))
