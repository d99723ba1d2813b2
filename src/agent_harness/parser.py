# parser.py
# Recognizer for the agent response grammar.
#
#   <thought>...</thought>                          optional
#   <action tool="NAME" args='JSON'></action>       or
#   <finish>...</finish>
#
# The model is untrusted, so this is a small hand-written scanner rather
# than one regex: every way a response can fail maps to a named exception.

import json
from dataclasses import dataclass
from typing import Any

from agent_harness.models import Action

NO_THOUGHT = "No thought provided."

# Args deeper than this never reach the gateway or the history renderer.
MAX_ARGS_DEPTH = 64

_THOUGHT = ("<thought>", "</thought>")
_FINISH = ("<finish>", "</finish>")

_ACTION_OPEN = "<action"
_TOOL_ATTR = ' tool="'
_ARGS_ATTR = '" args=\''
_ACTION_CLOSE = "'></action>"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ResponseParseError(Exception):
    """Base class for responses the loop cannot act on. Always terminal."""


class ParseError(ResponseParseError):
    """Raised when an <action> tag carries an args blob that is not valid JSON."""


class MissingDirectiveError(ResponseParseError):
    """Raised when a response contains neither <action> nor <finish>."""


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParsedResponse:
    """Exactly one of `action` or `finish` is set."""

    thought: str
    action: Action | None = None
    finish: str | None = None


# ---------------------------------------------------------------------------
# Scanning helpers
# ---------------------------------------------------------------------------


def _find_block(text: str, tags: tuple[str, str]) -> str | None:
    """Body of the first complete <tag>...</tag> block, or None."""
    open_tag, close_tag = tags
    start = text.find(open_tag)
    if start == -1:
        return None
    body_start = start + len(open_tag)
    end = text.find(close_tag, body_start)
    if end == -1:
        return None
    return text[body_start:end]


def _match_action_at(text: str, pos: int) -> tuple[str, str] | None:
    """Try to read a full action tag starting at `pos`. Returns (tool, raw_args)."""
    cursor = pos + len(_ACTION_OPEN)
    if not text.startswith(_TOOL_ATTR, cursor):
        return None
    cursor += len(_TOOL_ATTR)

    name_end = text.find('"', cursor)
    if name_end <= cursor:
        # Missing closing quote, or an empty tool name.
        return None
    tool_name = text[cursor:name_end]

    if not text.startswith(_ARGS_ATTR, name_end):
        return None
    args_start = name_end + len(_ARGS_ATTR)

    args_end = text.find(_ACTION_CLOSE, args_start)
    if args_end == -1:
        return None
    return tool_name, text[args_start:args_end]


def _nesting_depth(value: Any) -> int:
    """Deepest list/dict nesting in a decoded JSON value, without recursion."""
    deepest = 0
    pending = [(value, 1)]
    while pending:
        node, depth = pending.pop()
        if isinstance(node, dict):
            children = node.values()
        elif isinstance(node, list):
            children = node
        else:
            continue
        deepest = max(deepest, depth)
        pending.extend((child, depth + 1) for child in children)
    return deepest


def _find_action(text: str) -> tuple[str, str] | None:
    """First structurally complete action tag in `text`."""
    pos = text.find(_ACTION_OPEN)
    while pos != -1:
        match = _match_action_at(text, pos)
        if match is not None:
            return match
        pos = text.find(_ACTION_OPEN, pos + 1)
    return None


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def parse_agent_response(response: str) -> ParsedResponse:
    """
    Extract thought / action / finish from raw model text.

    A <finish> block wins over an <action> block when both are present.
    Raises ParseError for malformed action args and MissingDirectiveError
    when there is nothing to act on.
    """
    thought = _find_block(response, _THOUGHT)
    if thought is None:
        thought = NO_THOUGHT

    finish = _find_block(response, _FINISH)
    if finish is not None:
        return ParsedResponse(thought=thought, finish=finish)

    match = _find_action(response)
    if match is None:
        raise MissingDirectiveError(
            "LLM response did not contain a valid <action> or <finish> tag."
        )

    tool_name, args_raw = match
    try:
        args = json.loads(args_raw)
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError is a ValueError; so is the int digit limit.
        raise ParseError(f"Failed to parse action args JSON: {exc}") from exc

    depth = _nesting_depth(args)
    if depth > MAX_ARGS_DEPTH:
        raise ParseError(
            f"Action args are nested {depth} levels deep; the limit is {MAX_ARGS_DEPTH}."
        )

    return ParsedResponse(thought=thought, action=Action(tool_name=tool_name, args=args))
