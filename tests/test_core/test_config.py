import json

import pytest
from pydantic import ValidationError

from chatflow.core.config import ChatConfig, load_config


def test_defaults():
    config = ChatConfig()
    assert config.settle_delay == 0.5
    assert config.choice_ends_beat is True
    assert config.goto_ends_beat is False
    assert config.comment_prefix == "#"


def test_negative_settle_delay_rejected():
    with pytest.raises(ValidationError):
        ChatConfig(settle_delay=-1)


def test_unknown_field_rejected():
    with pytest.raises(ValidationError):
        ChatConfig(typing_speed=30)


def test_assignment_is_validated():
    config = ChatConfig()
    with pytest.raises(ValidationError):
        config.settle_delay = -0.1


def test_load_config(tmp_path):
    path = tmp_path / "chat_config.json"
    path.write_text(json.dumps({"settle_delay": 0.25, "goto_ends_beat": True}), encoding="utf-8")

    config = load_config(path)

    assert config.settle_delay == 0.25
    assert config.goto_ends_beat is True
    assert config.comment_prefix == "#"
