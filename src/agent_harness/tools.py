# tools.py
# Built-in tool implementations: file system access and shell execution.
#
# Executors trust their arguments. Lookup, validation, path sandboxing and
# command filtering all happen in gateway.py before anything here runs.
# Expected failures come back as "Error: ..." strings; only genuinely
# unexpected faults raise, and the gateway contains those.

import os
import subprocess
from functools import partial
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from agent_harness.models import ToolDescriptor, ToolKind

DEFAULT_COMMAND_TIMEOUT = 30.0


# ---------------------------------------------------------------------------
# Input shapes
# ---------------------------------------------------------------------------


class ReadFileInput(BaseModel):
    path: str = Field(..., description="The relative path to the file to be read.")


class WriteFileInput(BaseModel):
    path: str = Field(..., description="The relative path for the file to be written.")
    content: str = Field(..., description="The content to be written to the file.")


class ListFilesInput(BaseModel):
    path: str = Field(
        ..., description="The directory whose contents are to be listed. Use '.' for the working directory."
    )


class RunShellCommandInput(BaseModel):
    command: str = Field(..., description="The shell command to execute in the working directory.")


# ---------------------------------------------------------------------------
# File system
# ---------------------------------------------------------------------------


def _tool_read_file(root: Path, args: dict[str, Any]) -> str:
    path = args["path"]
    try:
        return (root / path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return f"Error: File not found at '{path}'."
    except OSError as e:
        return f"Error reading file: {e}"


def _tool_write_file(root: Path, args: dict[str, Any]) -> str:
    path = args["path"]
    content = args["content"]
    target = root / path
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as e:
        return f"Error writing file: {e}"
    return f"Successfully wrote {len(content)} bytes to '{path}'."


def _tool_list_files(root: Path, args: dict[str, Any]) -> str:
    path = args["path"]
    try:
        entries = sorted(os.listdir(root / path))
    except FileNotFoundError:
        return f"Error: Directory not found at '{path}'."
    except OSError as e:
        return f"Error listing files: {e}"
    if not entries:
        return f"Directory '{path}' is empty."
    return "\n".join(entries)


def file_system_tools(work_dir: str | os.PathLike[str]) -> list[ToolDescriptor]:
    """read_file, write_file and list_files, rooted at `work_dir`."""
    root = Path(work_dir)
    return [
        ToolDescriptor(
            name="read_file",
            description=(
                "Reads the entire content of a file at the specified path and returns it "
                "as a string. The path is relative to the working directory."
            ),
            input_model=ReadFileInput,
            execute=partial(_tool_read_file, root),
            kind=ToolKind.FILESYSTEM,
        ),
        ToolDescriptor(
            name="write_file",
            description=(
                "Writes content to a file at the specified path. Existing files are "
                "overwritten and missing parent directories are created."
            ),
            input_model=WriteFileInput,
            execute=partial(_tool_write_file, root),
            kind=ToolKind.FILESYSTEM,
        ),
        ToolDescriptor(
            name="list_files",
            description=(
                "Lists all files and subdirectories within a directory. Returns a "
                "newline-separated list of names."
            ),
            input_model=ListFilesInput,
            execute=partial(_tool_list_files, root),
            kind=ToolKind.FILESYSTEM,
        ),
    ]


# ---------------------------------------------------------------------------
# Shell
# ---------------------------------------------------------------------------


def _tool_run_shell_command(root: Path, timeout: float, args: dict[str, Any]) -> str:
    command = args["command"]
    try:
        completed = subprocess.run(
            command,
            shell=True,
            cwd=root,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        # subprocess.run kills the child before re-raising.
        stdout = _decode(e.stdout) or "No stdout produced."
        stderr = _decode(e.stderr) or "No stderr produced."
        return (
            f"Error: Command timed out after {timeout:g} seconds.\n"
            f"STDOUT:\n{stdout}\nSTDERR:\n{stderr}"
        )
    except OSError as e:
        return f"Error: Command could not be started: {e}"

    if completed.returncode != 0:
        stdout = completed.stdout or "No stdout produced."
        stderr = completed.stderr or "No stderr produced."
        return (
            f"Error: Command failed with exit code {completed.returncode}.\n"
            f"STDOUT:\n{stdout}\nSTDERR:\n{stderr}"
        )
    return f"STDOUT:\n{completed.stdout}\nSTDERR:\n{completed.stderr}\nExit Code: 0"


def _decode(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


def shell_tools(
    work_dir: str | os.PathLike[str], timeout: float = DEFAULT_COMMAND_TIMEOUT
) -> list[ToolDescriptor]:
    """run_shell_command, executed with `work_dir` as its cwd."""
    return [
        ToolDescriptor(
            name="run_shell_command",
            description=(
                "Executes a shell command and returns its standard output, standard error "
                "and exit code. Use this for tasks like running tests or inspecting the "
                f"project. Commands are killed after {timeout:g} seconds."
            ),
            input_model=RunShellCommandInput,
            execute=partial(_tool_run_shell_command, Path(work_dir), timeout),
            kind=ToolKind.PROCESS,
        ),
    ]
