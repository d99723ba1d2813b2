import sys

import pytest

from agent_harness.parser import (
    MAX_ARGS_DEPTH,
    NO_THOUGHT,
    MissingDirectiveError,
    ParseError,
    ResponseParseError,
    parse_agent_response,
)

# ---------------------------------------------------------------------------
# Well-formed responses
# ---------------------------------------------------------------------------


def test_parse_action_response():
    response = """<thought>I need to read a file.</thought>
<action tool="read_file" args='{"path": "./file.txt"}'></action>"""
    parsed = parse_agent_response(response)
    assert parsed.thought == "I need to read a file."
    assert parsed.finish is None
    assert parsed.action.tool_name == "read_file"
    assert parsed.action.args == {"path": "./file.txt"}


def test_parse_finish_response():
    response = "<thought>Done.</thought><finish>The answer is 42.</finish>"
    parsed = parse_agent_response(response)
    assert parsed.thought == "Done."
    assert parsed.finish == "The answer is 42."
    assert parsed.action is None


def test_finish_wins_over_action():
    response = (
        "<thought>Both?</thought>"
        "<action tool=\"run_shell_command\" args='{\"command\": \"ls\"}'></action>"
        "<finish>Stopping here.</finish>"
    )
    parsed = parse_agent_response(response)
    assert parsed.finish == "Stopping here."
    assert parsed.action is None


def test_missing_thought_uses_sentinel():
    parsed = parse_agent_response("<finish>ok</finish>")
    assert parsed.thought == NO_THOUGHT


def test_multiline_blocks_are_preserved():
    response = "<thought>line one\nline two</thought>\n<finish>a\nb</finish>"
    parsed = parse_agent_response(response)
    assert parsed.thought == "line one\nline two"
    assert parsed.finish == "a\nb"


def test_empty_finish_still_finishes():
    parsed = parse_agent_response("<thought>t</thought><finish></finish>")
    assert parsed.finish == ""


def test_surrounding_chatter_is_ignored():
    response = (
        "Sure! Here you go.\n<thought>list it</thought>\n"
        "<action tool=\"list_files\" args='{\"path\": \".\"}'></action>\nHope that helps."
    )
    parsed = parse_agent_response(response)
    assert parsed.action.tool_name == "list_files"


def test_first_complete_action_is_used():
    response = (
        "<action tool=\"broken\"></action>"
        "<action tool=\"read_file\" args='{\"path\": \"a\"}'></action>"
        "<action tool=\"write_file\" args='{\"path\": \"b\"}'></action>"
    )
    parsed = parse_agent_response(response)
    assert parsed.action.tool_name == "read_file"


def test_action_args_may_be_any_json_value():
    parsed = parse_agent_response("<action tool=\"x\" args='[1, 2]'></action>")
    assert parsed.action.args == [1, 2]


# ---------------------------------------------------------------------------
# Failure modes
# ---------------------------------------------------------------------------


def test_malformed_args_json_raises_parse_error():
    response = "<thought>oops</thought><action tool=\"read_file\" args='{broken: json}'></action>"
    with pytest.raises(ParseError, match="Failed to parse action args JSON"):
        parse_agent_response(response)


def test_no_directive_raises_missing_directive():
    with pytest.raises(MissingDirectiveError, match="did not contain a valid"):
        parse_agent_response("<thought>just thinking</thought>")


@pytest.mark.parametrize(
    "response",
    [
        "Just a chat response.",
        "<action tool=\"\" args='{}'></action>",
        "<action args='{}'></action>",
        "<action tool=\"read_file\"></action>",
        "<action tool=\"read_file\" args='{}'>",
        "<finish>never closed",
        "<FINISH>wrong case</FINISH>",
    ],
)
def test_incomplete_tags_are_not_directives(response):
    with pytest.raises(MissingDirectiveError):
        parse_agent_response(response)


def test_parse_errors_share_a_base_class():
    assert issubclass(ParseError, ResponseParseError)
    assert issubclass(MissingDirectiveError, ResponseParseError)


# ---------------------------------------------------------------------------
# Hostile args
# ---------------------------------------------------------------------------


def test_unbounded_nesting_is_a_parse_error():
    response = "<action tool=\"x\" args='" + "[" * 100000 + "'></action>"
    with pytest.raises(ParseError):
        parse_agent_response(response)


@pytest.mark.skipif(
    not hasattr(sys, "get_int_max_str_digits"), reason="interpreter has no int digit limit"
)
def test_oversized_integer_is_a_parse_error():
    response = "<action tool=\"x\" args='" + "1" * 5000 + "'></action>"
    with pytest.raises(ParseError, match="Failed to parse action args JSON"):
        parse_agent_response(response)


def test_nesting_beyond_limit_is_rejected():
    depth = MAX_ARGS_DEPTH + 1
    response = "<action tool=\"x\" args='" + "[" * depth + "]" * depth + "'></action>"
    with pytest.raises(ParseError, match=f"the limit is {MAX_ARGS_DEPTH}"):
        parse_agent_response(response)


def test_nesting_at_limit_is_accepted():
    blob = '{"a": ' * (MAX_ARGS_DEPTH - 1) + "{}" + "}" * (MAX_ARGS_DEPTH - 1)
    parsed = parse_agent_response("<action tool=\"x\" args='" + blob + "'></action>")
    assert parsed.action.tool_name == "x"
