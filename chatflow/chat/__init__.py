"""
Chat module - scripted chat scenes.

Provides:
- Command model with per-command validation
- Script parsing and label resolution
- Beat-by-beat execution against a listener
- Choice handling and conditional jumps
- Picture lookup and a console host
"""

from chatflow.chat.commands import (
    COMMAND_KEYWORDS,
    ChatCommand,
    ChatError,
    ChoiceCommand,
    CommandSyntaxError,
    CommandType,
    EvalType,
    GotoCommand,
    IfCommand,
    ImageCommand,
    LabelCommand,
    TextCommand,
    UnknownCommand,
    WaitCommand,
    create_command,
)
from chatflow.chat.console import ConsoleListener, prompt_choice, run_console_chat
from chatflow.chat.parser import (
    ChatParser,
    CompiledScriptError,
    ParsedScript,
    ScriptSyntaxError,
    compile_chat_file,
)
from chatflow.chat.pictures import Picture, PictureCatalog, PictureManifestError
from chatflow.chat.presenter import AdvanceContext, ChatListener, ChatPresenter

__all__ = [
    "COMMAND_KEYWORDS",
    "ChatCommand",
    "ChatError",
    "ChoiceCommand",
    "CommandSyntaxError",
    "CommandType",
    "EvalType",
    "GotoCommand",
    "IfCommand",
    "ImageCommand",
    "LabelCommand",
    "TextCommand",
    "UnknownCommand",
    "WaitCommand",
    "create_command",
    "ChatParser",
    "CompiledScriptError",
    "ParsedScript",
    "ScriptSyntaxError",
    "compile_chat_file",
    "Picture",
    "PictureCatalog",
    "PictureManifestError",
    "AdvanceContext",
    "ChatListener",
    "ChatPresenter",
    "ConsoleListener",
    "prompt_choice",
    "run_console_chat",
]
