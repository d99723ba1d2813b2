# run.py
# Entry point. Config and wiring only — no logic lives here.
#
# Swap the model for any OpenRouter-supported model.
# https://openrouter.ai/models

from pathlib import Path
from typing import Optional

import typer

from agent_harness import display
from agent_harness.config import Settings
from agent_harness.harness import AgentExecutor
from agent_harness.logging_config import setup_logging
from agent_harness.models import ErrorEvent, FinishEvent
from agent_harness.provider import OpenRouterProvider
from agent_harness.registry import default_registry

app = typer.Typer(
    name="agent-harness",
    help="Run an LLM agent against a sandboxed working directory.",
    add_completion=False,
)


@app.command()
def main(
    goal: str = typer.Argument(..., help="What the agent should accomplish."),
    work_dir: Optional[Path] = typer.Option(
        None, "--work-dir", "-w", help="Sandbox root for all tool calls.", file_okay=False
    ),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model identifier."),
    max_steps: Optional[int] = typer.Option(None, "--max-steps", min=1, help="Step budget."),
    show_deltas: bool = typer.Option(False, "--show-deltas", help="Echo raw model output as it streams."),
) -> None:
    """Run one goal to completion and print each event."""
    settings = Settings.from_env()
    overrides = {
        key: value
        for key, value in {"work_dir": work_dir, "model": model, "max_steps": max_steps}.items()
        if value is not None
    }
    if overrides:
        settings = settings.model_copy(update=overrides)
    setup_logging(settings.log_level)

    root = settings.work_dir.resolve()
    provider = OpenRouterProvider(settings.model, api_key=settings.api_key, base_url=settings.base_url)
    executor = AgentExecutor(
        goal=goal,
        work_dir=root,
        provider=provider,
        registry=default_registry(root, shell_timeout=settings.shell_timeout),
        max_steps=settings.max_steps,
    )

    display.banner(provider.model, str(root), settings.max_steps)
    display.goal_received(goal)

    exit_code = 1
    for event in executor.run():
        display.render_event(event, show_deltas=show_deltas)
        if isinstance(event, FinishEvent):
            exit_code = 0
        elif isinstance(event, ErrorEvent):
            exit_code = 1
    raise typer.Exit(code=exit_code)


if __name__ == "__main__":
    app()
