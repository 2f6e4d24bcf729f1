"""
Presenter configuration.

Pacing and parsing switches for a chat session, validated with Pydantic
so a bad config file fails loudly at load time instead of mid-scene.

Usage:
    config = load_config("chat_config.json")
    presenter = ChatPresenter(listener, config=config)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class ChatConfig(BaseModel):
    """
    Configuration for a ChatPresenter.

    Attributes:
        settle_delay: Seconds to pause after a text or image is shown
        choice_ends_beat: End a beat at @choice so the lines after it
            run only once the answer is known
        goto_ends_beat: Treat @goto as a beat terminator, like @if
        comment_prefix: Lines starting with this are skipped by the parser
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra='forbid',
    )

    settle_delay: float = Field(default=0.5, ge=0.0)
    choice_ends_beat: bool = True
    goto_ends_beat: bool = False
    comment_prefix: str = Field(default="#", min_length=1)


def load_config(path: str | Path) -> ChatConfig:
    """Load a ChatConfig from a JSON file."""
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    config = ChatConfig.model_validate(data)
    logger.debug("Loaded chat config from %s: %s", path, config)
    return config
