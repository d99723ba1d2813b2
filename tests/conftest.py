import pytest
from pydantic import BaseModel

from agent_harness.models import ToolDescriptor, ToolKind
from agent_harness.provider import CompletionStream
from agent_harness.registry import ToolRegistry


class ScriptedProvider:
    """Replays canned responses, split into fragments, one per stream() call."""

    def __init__(self, responses: list[str], chunk_size: int = 7) -> None:
        self._responses = list(responses)
        self._chunk_size = chunk_size
        self.prompts: list[str] = []

    def stream(self, prompt: str) -> CompletionStream:
        self.prompts.append(prompt)
        # Repeat the last response once the script runs out.
        text = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        size = self._chunk_size
        return CompletionStream(text[i : i + size] for i in range(0, len(text), size))


class PathInput(BaseModel):
    path: str


class CommandInput(BaseModel):
    command: str


@pytest.fixture
def scripted_provider():
    return ScriptedProvider


@pytest.fixture
def echo_registry():
    """A path tool and a shell-kind tool whose executors just echo their args."""
    return ToolRegistry(
        [
            ToolDescriptor(
                name="read_file",
                description="Echoes the path it was given.",
                input_model=PathInput,
                execute=lambda args: f"read {args['path']}",
                kind=ToolKind.FILESYSTEM,
            ),
            ToolDescriptor(
                name="run_shell_command",
                description="Echoes the command it was given.",
                input_model=CommandInput,
                execute=lambda args: f"ran {args['command']}",
                kind=ToolKind.PROCESS,
            ),
        ]
    )
