"""
Chat parser - turns chat script text into an indexed command list.

Script format:

```
# comment lines and blank lines are skipped
@text, Good morning!
@choice, mood, Great, Tired
@if, mood, Tired, coffee
@text, Glad to hear it.
@goto, done
@label, coffee
@image, coffee_cup
@text, Have a coffee.
@label, done
```

Each remaining line becomes one command tagged with its 0-based line
number. Parsing stops at the first invalid line. Parsed scripts can be
compiled to JSON and loaded back; loading re-validates every command.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import jsonschema

from chatflow.chat.commands import (
    ChatCommand,
    ChatError,
    CommandSyntaxError,
    LabelCommand,
    create_command,
)

logger = logging.getLogger(__name__)


class ScriptSyntaxError(ChatError):
    """
    A chat script contains an invalid line.

    Attributes:
        line: 0-based line number of the first invalid command
        error: The underlying CommandSyntaxError
    """

    def __init__(self, error: CommandSyntaxError, source: str = "<script>"):
        self.line = error.index
        self.error = error
        self.source = source
        super().__init__(f"{source}: {error}")


class CompiledScriptError(ChatError):
    """A compiled chat script does not match COMPILED_SCRIPT_SCHEMA."""


COMPILED_SCRIPT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["id", "commands"],
    "properties": {
        "id": {"type": "string"},
        "commands": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["index", "args"],
                "properties": {
                    "index": {"type": "integer", "minimum": 0},
                    "type": {"type": "string"},
                    "args": {
                        "type": "array",
                        "minItems": 1,
                        "items": {"type": "string"},
                    },
                },
            },
        },
        "labels": {
            "type": "object",
            "additionalProperties": {"type": "integer", "minimum": 0},
        },
    },
}


@dataclass
class ParsedScript:
    """
    A parsed chat script.

    Attributes:
        commands: Commands in source order
        labels: Label name -> index into commands (first definition wins)
        id: Script identifier (file stem when parsed from a file)
    """
    commands: list[ChatCommand] = field(default_factory=list)
    labels: dict[str, int] = field(default_factory=dict)
    id: str = "parsed"

    def __len__(self) -> int:
        return len(self.commands)

    def label_index(self, label_name: str) -> Optional[int]:
        """Get the command index of a label, or None if undefined."""
        return self.labels.get(label_name)


def build_label_table(commands: list[ChatCommand]) -> dict[str, int]:
    """Map each label name to the index of its first definition."""
    labels: dict[str, int] = {}
    for i, command in enumerate(commands):
        if isinstance(command, LabelCommand) and command.label_name not in labels:
            labels[command.label_name] = i
    return labels


class ChatParser:
    """
    Parses chat scripts from text, files, or compiled JSON.
    """

    def __init__(self, comment_prefix: str = "#"):
        self.comment_prefix = comment_prefix

    def parse(self, raw_text: str, source: str = "<script>") -> ParsedScript:
        """
        Parse a chat script string.

        Raises:
            ScriptSyntaxError: On the first line that fails validation.
        """
        commands: list[ChatCommand] = []

        for i, line in enumerate(raw_text.split('\n')):
            line = line.strip()
            if not line or line.startswith(self.comment_prefix):
                continue

            try:
                commands.append(create_command(i, line.split(',')))
            except CommandSyntaxError as e:
                raise ScriptSyntaxError(e, source) from e

        if not commands:
            logger.warning("No chat commands parsed from %s.", source)

        return ParsedScript(commands=commands, labels=build_label_table(commands))

    def parse_file(self, path: str | Path) -> ParsedScript:
        """Parse a chat script file."""
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()

        script = self.parse(content, source=str(path))
        script.id = path.stem
        return script

    def to_json(self, script: ParsedScript) -> dict:
        """Convert a parsed script to JSON format."""
        return {
            'id': script.id,
            'commands': [
                {
                    'index': command.index,
                    'type': command.type.name.lower(),
                    'args': list(command.args),
                }
                for command in script.commands
            ],
            'labels': dict(script.labels),
        }

    def from_json(self, data: Any) -> ParsedScript:
        """
        Rebuild a parsed script from its JSON form.

        The label table is recomputed rather than trusted.

        Raises:
            CompiledScriptError: If the data does not match the schema.
            ScriptSyntaxError: If a stored command fails validation.
        """
        try:
            jsonschema.validate(instance=data, schema=COMPILED_SCRIPT_SCHEMA)
        except jsonschema.ValidationError as e:
            raise CompiledScriptError(f"Invalid compiled script: {e.message}") from e

        source = data['id']
        commands = []
        for entry in data['commands']:
            try:
                commands.append(create_command(entry['index'], entry['args']))
            except CommandSyntaxError as e:
                raise ScriptSyntaxError(e, source) from e

        return ParsedScript(commands=commands, labels=build_label_table(commands), id=source)

    def save_json(self, script: ParsedScript, path: str | Path) -> None:
        """Save a parsed script as JSON."""
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_json(script), f, indent=2, ensure_ascii=False)

    def load_json(self, path: str | Path) -> ParsedScript:
        """Load a compiled script from a JSON file."""
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return self.from_json(data)


def compile_chat_file(input_path: str | Path, output_path: Optional[str | Path] = None) -> Path:
    """
    Compile a chat script to JSON.

    Args:
        input_path: Path to the script file
        output_path: Path to output .json file (default: same name with .json)

    Returns:
        The path written to.
    """
    input_path = Path(input_path)
    output_path = input_path.with_suffix('.json') if output_path is None else Path(output_path)

    parser = ChatParser()
    script = parser.parse_file(input_path)
    parser.save_json(script, output_path)
    logger.info("Compiled %s -> %s", input_path, output_path)
    return output_path
