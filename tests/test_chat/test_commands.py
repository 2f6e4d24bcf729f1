import dataclasses

import pytest

from chatflow.chat.commands import (
    ChoiceCommand,
    CommandSyntaxError,
    CommandType,
    EvalType,
    GotoCommand,
    IfCommand,
    ImageCommand,
    LabelCommand,
    TextCommand,
    WaitCommand,
    create_command,
)


def build(line, index=0):
    return create_command(index, line.split(','))


# -- Text --------------------------------------------------------------------

def test_text_parseable():
    command = build("@text, Hello, world!")
    assert isinstance(command, TextCommand)
    assert command.type == CommandType.TEXT
    assert command.text == "Hello, world!"
    assert command.args == ("@text", "Hello", "world!")


@pytest.mark.parametrize("line", ["@text", "@text,   "])
def test_text_invalid(line):
    with pytest.raises(CommandSyntaxError) as exc_info:
        build(line, index=7)
    assert exc_info.value.kind == CommandType.TEXT
    assert exc_info.value.index == 7


# -- Image -------------------------------------------------------------------

def test_image_parseable():
    command = build("@image,  MyImage ")
    assert isinstance(command, ImageCommand)
    assert command.image_name == "MyImage"


@pytest.mark.parametrize("line", ["@image", "@image,   ", "@image, MyImage, Extra"])
def test_image_invalid(line):
    with pytest.raises(CommandSyntaxError) as exc_info:
        build(line)
    assert exc_info.value.kind == CommandType.IMAGE


# -- Choice ------------------------------------------------------------------

def test_choice_parseable():
    command = build("@choice, user_choice, Option1, Option2")
    assert isinstance(command, ChoiceCommand)
    assert command.variable_name == "user_choice"
    assert command.choices == ("Option1", "Option2")


def test_choice_three_options():
    command = build("@choice, my_var, Option1, Option2, Option3")
    assert command.choices == ("Option1", "Option2", "Option3")


@pytest.mark.parametrize("line", [
    "@choice",
    "@choice, var_name",
    "@choice, var_name, Option1",
    "@choice, var_name, Option1, Option2, Option3, Option4",
    "@choice,   , Option1, Option2",
    "@choice, var_name, Option1,   ",
    "@choice, var_name,   , Option2",
])
def test_choice_invalid(line):
    with pytest.raises(CommandSyntaxError) as exc_info:
        build(line)
    assert exc_info.value.kind == CommandType.CHOICE


# -- If ----------------------------------------------------------------------

@pytest.mark.parametrize("expected, eval_type", [
    ("Alice", EvalType.STRING),
    ("100", EvalType.NUMERIC),
    ("=100", EvalType.NUMERIC),
    (">20", EvalType.NUMERIC),
    ("<20", EvalType.NUMERIC),
    ("-3.5", EvalType.NUMERIC),
    ("true", EvalType.BOOLEAN),
    ("false", EvalType.BOOLEAN),
    ("True", EvalType.STRING),
])
def test_if_eval_type(expected, eval_type):
    command = build(f"@if, score, {expected}, NextScene")
    assert isinstance(command, IfCommand)
    assert command.variable_name == "score"
    assert command.expected_value == expected
    assert command.goto_label == "NextScene"
    assert command.eval_type == eval_type


@pytest.mark.parametrize("line", [
    "@if, varName",
    "@if, varName, value, label, extra",
    "@if,   , value, label",
    "@if, varName,   , label",
    "@if, varName, value,   ",
    "@if, score, >abc, label",
    "@if, score, =1xyz, label",
    "@if, score, <notanumber, label",
])
def test_if_invalid(line):
    with pytest.raises(CommandSyntaxError) as exc_info:
        build(line)
    assert exc_info.value.kind == CommandType.IF


@pytest.mark.parametrize("expected, actual, result", [
    ("20", "20", True),
    ("20", "20.0", True),
    ("20", "21", False),
    (">20", "21", True),
    (">20", "20", False),
    ("<20", "19.9999", True),
    ("<20", "20", False),
    ("=20", "20.00005", True),
    ("=20", "20.001", False),
    ("=20", "twenty", False),
    (">20", "", False),
])
def test_if_evaluate_numeric(expected, actual, result):
    command = build(f"@if, score, {expected}, label")
    assert command.evaluate(actual) is result


@pytest.mark.parametrize("expected, actual, result", [
    ("true", "true", True),
    ("true", "True", True),
    ("true", "false", False),
    ("false", "FALSE", True),
    ("true", "yes", False),
])
def test_if_evaluate_boolean(expected, actual, result):
    command = build(f"@if, flag, {expected}, label")
    assert command.evaluate(actual) is result


def test_if_evaluate_string_is_exact():
    command = build("@if, name, Alice, label")
    assert command.evaluate("Alice") is True
    assert command.evaluate("alice") is False
    assert command.evaluate("Alice ") is False


# -- Label / Wait / Goto -----------------------------------------------------

def test_label_parseable():
    command = build("@label, StartPoint")
    assert isinstance(command, LabelCommand)
    assert command.label_name == "StartPoint"


@pytest.mark.parametrize("line", ["@label", "@label,   ", "@label, StartPoint, Extra"])
def test_label_invalid(line):
    with pytest.raises(CommandSyntaxError):
        build(line)


@pytest.mark.parametrize("line, seconds", [("@wait, 5", 5.0), ("@wait, 0.25", 0.25)])
def test_wait_parseable(line, seconds):
    command = build(line)
    assert isinstance(command, WaitCommand)
    assert command.seconds == seconds


@pytest.mark.parametrize("line", [
    "@wait",
    "@wait, abc",
    "@wait, -1",
    "@wait, 0",
    "@wait, 5.01",
    "@wait, nan",
    "@wait, 2.5, Extra",
])
def test_wait_invalid(line):
    with pytest.raises(CommandSyntaxError) as exc_info:
        build(line)
    assert exc_info.value.kind == CommandType.WAIT


def test_goto_parseable():
    command = build("@goto, EndLabel")
    assert isinstance(command, GotoCommand)
    assert command.goto_label == "EndLabel"


@pytest.mark.parametrize("line", ["@goto", "@goto,   ", "@goto, Label1, Label2"])
def test_goto_invalid(line):
    with pytest.raises(CommandSyntaxError) as exc_info:
        build(line)
    assert exc_info.value.kind == CommandType.GOTO


# -- Common ------------------------------------------------------------------

def test_unknown_keyword_always_fails():
    with pytest.raises(CommandSyntaxError) as exc_info:
        build("@shout, Hello", index=3)
    error = exc_info.value
    assert error.kind == CommandType.UNKNOWN
    assert error.index == 3
    assert "@shout" in str(error)


def test_keyword_match_is_exact():
    with pytest.raises(CommandSyntaxError):
        build("@Text, Hello")


def test_error_message_has_usage_hint():
    with pytest.raises(CommandSyntaxError) as exc_info:
        build("@image", index=12)
    message = str(exc_info.value)
    assert "@image, <picture name>" in message
    assert "line 12" in message
    assert "IMAGE" in message


def test_commands_are_immutable():
    command = build("@label, Start")
    with pytest.raises(dataclasses.FrozenInstanceError):
        command.label_name = "Other"
