# display.py
# All terminal output for the agent harness CLI.
#
# This module owns presentation entirely. harness.py never formats output —
# run.py feeds each event to render_event() here.
#
# Colour language:
#   cyan    — scaffolding / run lifecycle
#   blue    — streamed model text
#   magenta — ReACT internals (Thought / Action / Observation)
#   green   — finish
#   red     — errors, halts

import json

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from agent_harness.models import (
    AgentEvent,
    ErrorEvent,
    FinishEvent,
    TextDeltaEvent,
    ThoughtEvent,
    ToolCallEvent,
    ToolOutputEvent,
)

console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _label(tag: str, color: str) -> Text:
    t = Text()
    t.append(f" {tag} ", style=f"bold white on {color}")
    return t


def _mono(value: str, max_len: int = 120) -> str:
    # Model text is untrusted; never let it be read as rich markup.
    if len(value) > max_len:
        value = value[:max_len] + "…"
    return escape(value)


# ---------------------------------------------------------------------------
# Run lifecycle
# ---------------------------------------------------------------------------


def banner(model: str, work_dir: str, max_steps: int) -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Agent Harness[/bold cyan]\n"
            "[dim]Think → Act → Observe through a secure tool gateway[/dim]\n\n"
            f"[dim]Model     :[/dim] [white]{model}[/white]\n"
            f"[dim]Work dir  :[/dim] [white]{work_dir}[/white]\n"
            f"[dim]Max steps :[/dim] [white]{max_steps}[/white]",
            border_style="cyan",
            padding=(1, 4),
        )
    )


def goal_received(goal: str) -> None:
    console.print()
    console.print(Rule("[cyan]NEW RUN[/cyan]", style="cyan"))
    console.print(
        Panel(
            f"[white]{escape(goal)}[/white]",
            title=_label("GOAL", "cyan"),
            border_style="cyan",
            padding=(0, 2),
        )
    )


# ---------------------------------------------------------------------------
# Per-step output
# ---------------------------------------------------------------------------


def text_delta(delta: str) -> None:
    console.print(delta, end="", style="blue", markup=False, highlight=False)


def react_thought(thought: str) -> None:
    console.print()
    console.print(f"  [magenta]Thought[/magenta]  [dim white]{_mono(thought, 200)}[/dim white]")


def react_action(tool: str, args: object) -> None:
    console.print(
        f"  [magenta]Action[/magenta]   [bold white]{escape(tool)}[/bold white]"
        f"  [dim]{_mono(json.dumps(args), 160)}[/dim]"
    )


def react_observation(observation: str) -> None:
    style = "red" if observation.startswith("Error:") else "white"
    console.print(f"  [magenta]Observe[/magenta]  [{style}]{_mono(observation, 140)}[/{style}]")


# ---------------------------------------------------------------------------
# Terminal events
# ---------------------------------------------------------------------------


def final_result(result: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[white]{escape(result)}[/white]",
            title=_label("RESULT", "green"),
            border_style="green",
            padding=(1, 2),
        )
    )
    console.print()


def halt(reason: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold white]{escape(reason)}[/bold white]",
            title=_label("HALT", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )
    console.print()


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def render_event(event: AgentEvent, show_deltas: bool = False) -> None:
    if isinstance(event, TextDeltaEvent):
        if show_deltas:
            text_delta(event.delta)
    elif isinstance(event, ThoughtEvent):
        react_thought(event.thought)
    elif isinstance(event, ToolCallEvent):
        react_action(event.action.tool_name, event.action.args)
    elif isinstance(event, ToolOutputEvent):
        react_observation(event.observation)
    elif isinstance(event, FinishEvent):
        final_result(event.result)
    elif isinstance(event, ErrorEvent):
        halt(event.message)
