"""
Command line entry point.

    python -m chatflow check scene.chat other.chat
    python -m chatflow compile scene.chat -o build/scene.json
    python -m chatflow play scene.chat --pictures pictures.json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from chatflow.chat.commands import ChatError
from chatflow.chat.console import ConsoleListener, prompt_choice, run_console_chat
from chatflow.chat.parser import ChatParser, compile_chat_file
from chatflow.chat.pictures import PictureCatalog
from chatflow.chat.presenter import ChatPresenter
from chatflow.core.config import ChatConfig, load_config

logger = logging.getLogger("chatflow")

# Bad input files: unreadable, not UTF-8, malformed JSON or invalid config
INPUT_ERRORS = (ChatError, OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError)

BEAT_HELP = """\
Beats: a beat runs every line up to the next @text, @if, @wait or @choice
together. @choice ends its beat so a following @if sees the answer; set
"choice_ends_beat": false in the --config file to disable that. @goto does
not end its beat unless "goto_ends_beat": true is set.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chatflow",
        description="Chat scene scripting tools.",
        epilog=BEAT_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    commands = parser.add_subparsers(dest="command", required=True)

    check = commands.add_parser("check", help="Validate chat scripts.")
    check.add_argument("scripts", nargs="+", type=Path)

    compile_ = commands.add_parser("compile", help="Compile a chat script to JSON.")
    compile_.add_argument("script", type=Path)
    compile_.add_argument("-o", "--output", type=Path, default=None)

    play = commands.add_parser(
        "play",
        help="Play a chat script in the terminal.",
        epilog=BEAT_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    play.add_argument("script", type=Path)
    play.add_argument("--pictures", type=Path, default=None, help="Picture manifest (JSON).")
    play.add_argument(
        "--config", type=Path, default=None,
        help="Chat config (JSON): settle_delay, choice_ends_beat, goto_ends_beat, comment_prefix.",
    )

    return parser


def check_scripts(paths: Sequence[Path]) -> int:
    parser = ChatParser()
    failures = 0
    for path in paths:
        try:
            script = parser.parse_file(path)
        except INPUT_ERRORS as e:
            failures += 1
            print(f"FAIL {path}: {e}", file=sys.stderr)
            continue
        print(f"OK   {path} ({len(script.commands)} commands, {len(script.labels)} labels)")
    return 1 if failures else 0


def play_script(path: Path, pictures_path: Optional[Path], config_path: Optional[Path]) -> int:
    config = load_config(config_path) if config_path else ChatConfig()
    pictures = PictureCatalog.load(pictures_path) if pictures_path else None

    presenter = ChatPresenter(ConsoleListener(pictures=pictures), config=config)
    presenter.load(ChatParser(comment_prefix=config.comment_prefix).parse_file(path))
    asyncio.run(run_console_chat(presenter, prompt_choice))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "check":
        return check_scripts(args.scripts)

    try:
        if args.command == "compile":
            output = compile_chat_file(args.script, args.output)
            print(f"Compiled {args.script} -> {output}")
            return 0
        return play_script(args.script, args.pictures, args.config)
    except INPUT_ERRORS as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        return 130
