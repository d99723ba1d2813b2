# models.py
# Data contracts for the agent harness.
# No business logic lives here — pure schema and validation.

from enum import Enum
from typing import Annotated, Any, Callable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Actions and steps
# ---------------------------------------------------------------------------


class Action(BaseModel):
    """A tool invocation chosen by the model, in our internal format."""

    model_config = ConfigDict(frozen=True)

    tool_name: str = Field(..., description="Name the model used to select a tool.")
    args: Any = Field(default=None, description="Raw, untrusted JSON value from the model.")


class Step(BaseModel):
    """One completed Think-Act-Observe cycle."""

    model_config = ConfigDict(frozen=True)

    thought: str
    action: Action
    observation: str = Field(..., description="Gateway result fed back to the model.")


# ---------------------------------------------------------------------------
# Tool descriptors
# ---------------------------------------------------------------------------


class ToolKind(str, Enum):
    """Closed set of capability variants the gateway knows how to police."""

    FILESYSTEM = "filesystem"
    PROCESS = "process"
    GENERIC = "generic"


class ToolDescriptor(BaseModel):
    """
    Declarative unit the registry holds.

    `input_model` is the input shape: the gateway validates raw model
    arguments against it before `execute` is ever called. `execute`
    receives the validated arguments as a plain dict and returns the
    observation string.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1, description="Unique key within a registry.")
    description: str = Field(..., description="Shown to the model, never executed.")
    input_model: type[BaseModel]
    execute: Callable[[dict[str, Any]], str]
    kind: ToolKind = ToolKind.GENERIC

    def argument_schema(self) -> dict[str, Any]:
        """JSON schema of the input shape, as rendered into the prompt."""
        return self.input_model.model_json_schema()


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class TextDeltaEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["text-delta"] = "text-delta"
    delta: str


class ThoughtEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["thought"] = "thought"
    thought: str


class ToolCallEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["tool-call"] = "tool-call"
    action: Action


class ToolOutputEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["tool-output"] = "tool-output"
    observation: str


class FinishEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["finish"] = "finish"
    result: str


class ErrorEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["error"] = "error"
    message: str


AgentEvent = Annotated[
    Union[TextDeltaEvent, ThoughtEvent, ToolCallEvent, ToolOutputEvent, FinishEvent, ErrorEvent],
    Field(discriminator="type"),
]

TERMINAL_EVENT_TYPES = frozenset({"finish", "error"})
