# gateway.py
# The secure gateway: the only path from a model-chosen action to a tool.
#
# Gates run in a fixed order and the first failure wins:
#   lookup → validate → path sandbox → command filter → contained execute
#
# Every outcome is a string. A rejection looks exactly like a tool result
# to the caller, so the model sees it as an observation and may correct
# itself on the next step. Nothing here raises.

import logging
import os
import re
from typing import Any

from pydantic import ValidationError

from agent_harness.models import ToolDescriptor, ToolKind
from agent_harness.registry import ToolRegistry

logger = logging.getLogger(__name__)

# Denylist. Known to be incomplete; an allowlist is out of scope here.
DISALLOWED_PROGRAMS = ("rm", "sudo", "mv", "cp")
DISALLOWED_METACHARACTERS = ("&&", "||", ";", "`", "$(", "<")

_PROGRAM_PATTERN = re.compile(r"\b(" + "|".join(DISALLOWED_PROGRAMS) + r")\b")


# ---------------------------------------------------------------------------
# Individual gates
# ---------------------------------------------------------------------------


def _format_issues(exc: ValidationError) -> str:
    lines = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "(root)"
        lines.append(f"  - [{location}]: {error['msg']}")
    return "\n".join(lines)


def resolve_in_sandbox(work_dir: str | os.PathLike[str], path: str) -> str | None:
    """
    Lexically resolve `path` against `work_dir`.

    Returns the normalized absolute path, or None when it falls outside the
    root. No filesystem access: `..` and `.` are collapsed textually and
    symbolic links are not followed, so a link inside the root that points
    elsewhere is not caught. The containment test is a plain string prefix
    on the normalized root.
    """
    root = os.path.normpath(os.path.abspath(os.fspath(work_dir)))
    intended = os.path.normpath(os.path.join(root, path))
    if not intended.startswith(root):
        return None
    return intended


def command_violation(command: str) -> str | None:
    """Reason `command` is disallowed, or None if it passes the denylist."""
    for token in DISALLOWED_METACHARACTERS:
        if token in command:
            return f"shell metacharacter '{token}'"
    match = _PROGRAM_PATTERN.search(command)
    if match:
        return f"program '{match.group(1)}'"
    return None


def _execute_contained(tool: ToolDescriptor, args: dict[str, Any]) -> str:
    try:
        result = tool.execute(args)
        if not isinstance(result, str):
            result = str(result)
    except (Exception, SystemExit) as exc:
        logger.exception("Uncaught error during execution of tool '%s'", tool.name)
        return (
            f"Error: An unexpected error occurred while executing the tool '{tool.name}'. "
            f"Details: {exc}"
        )
    return result


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def secure_execute_tool(
    tool_name: str,
    raw_args: Any,
    registry: ToolRegistry,
    work_dir: str | os.PathLike[str],
) -> str:
    """
    Run one untrusted action through every gate and return the observation.

    `raw_args` is whatever the model produced. `work_dir` is the sandbox
    root that any `path` argument must resolve within.
    """
    # 1. Lookup
    tool = registry.lookup(tool_name)
    if tool is None:
        logger.info("Rejected call to unknown tool %r", tool_name)
        return f"Error: Tool '{tool_name}' not found."

    # 2. Validate
    try:
        validated = tool.input_model.model_validate(raw_args)
    except ValidationError as exc:
        logger.info("Rejected invalid input for tool %r", tool_name)
        return f"Error: Invalid input for tool '{tool_name}'.\nIssues:\n{_format_issues(exc)}"
    args = validated.model_dump()

    # 3. Path sandbox
    path = args.get("path")
    if isinstance(path, str) and resolve_in_sandbox(work_dir, path) is None:
        logger.info("Rejected path traversal for tool %r: %r", tool_name, path)
        return (
            f"Error: Path traversal attempt detected. Access to '{path}' "
            "is outside the allowed working directory."
        )

    # 4. Command filter
    if tool.kind is ToolKind.PROCESS:
        command = args.get("command", "")
        reason = command_violation(command) if isinstance(command, str) else "non-string command"
        if reason is not None:
            logger.info("Rejected command for tool %r: %s", tool_name, reason)
            return f"Error: The command '{command}' is disallowed for security reasons ({reason})."

    # 5. Execute
    return _execute_contained(tool, args)
