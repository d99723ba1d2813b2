# harness.py
# Agent loop.
#
# The executor is the kernel. The model is a passive responder: this class
# owns control flow, state and the step budget. Every model-chosen action
# goes through gateway.secure_execute_tool; nothing else touches a tool.
#
# Control flow per step:
#   render prompt → stream model (yield text deltas) → parse full text
#   → finish? stop : gateway → record step → next step
#
# Events come out of a generator. Exactly one terminal event (finish or
# error) ends every run.

import logging
import os
from enum import Enum
from typing import Iterator

from agent_harness.gateway import secure_execute_tool
from agent_harness.models import (
    AgentEvent,
    ErrorEvent,
    FinishEvent,
    Step,
    TextDeltaEvent,
    ThoughtEvent,
    ToolCallEvent,
    ToolOutputEvent,
)
from agent_harness.parser import ResponseParseError, parse_agent_response
from agent_harness.prompts import build_agent_prompt
from agent_harness.provider import CompletionProvider
from agent_harness.registry import ToolRegistry, default_registry
from agent_harness.state import AgentState

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 10


class LoopStatus(str, Enum):
    RUNNING = "running"
    FINISHED = "finished"
    ERRORED = "errored"


class AgentExecutor:
    """
    Runs one goal to completion as a think-act-observe loop.

    An instance is single-use: it owns the AgentState for exactly one run.
    The registry is injected and may be shared between executors.

    Example:
        executor = AgentExecutor(
            goal="Summarise README.md",
            work_dir="/work",
            provider=OpenRouterProvider("anthropic/claude-3.5-haiku"),
            registry=default_registry("/work"),
        )
        for event in executor.run():
            ...
    """

    def __init__(
        self,
        goal: str,
        work_dir: str | os.PathLike[str],
        provider: CompletionProvider,
        registry: ToolRegistry,
        max_steps: int = DEFAULT_MAX_STEPS,
    ) -> None:
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1.")
        self._work_dir = work_dir
        self._provider = provider
        self._registry = registry
        self._max_steps = max_steps
        self._state = AgentState(goal)
        self._status = LoopStatus.RUNNING
        self._step_count = 0
        self._started = False

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def status(self) -> LoopStatus:
        return self._status

    @property
    def step_count(self) -> int:
        return self._step_count

    @property
    def state(self) -> AgentState:
        return self._state

    # ------------------------------------------------------------------
    # Model round trip
    # ------------------------------------------------------------------

    def _stream_completion(self, prompt: str, chunks: list[str]) -> Iterator[TextDeltaEvent]:
        """Forward fragments as they arrive; `chunks` receives the full text."""
        stream = self._provider.stream(prompt)
        for delta in stream:
            yield TextDeltaEvent(delta=delta)
        chunks.append(stream.text)

    def _stop(self, status: LoopStatus) -> None:
        self._status = status
        logger.debug("Run stopped: status=%s steps=%d", status.value, self._step_count)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self) -> Iterator[AgentEvent]:
        """
        Drive the loop, yielding events in emission order.

        Closing the generator between events stops the run; a tool call
        already in flight is not interrupted.
        """
        if self._started:
            raise RuntimeError("AgentExecutor instances are single-use; create a new one per run.")
        self._started = True

        tools = self._registry.list()

        while self._step_count < self._max_steps:
            logger.debug("Step %d/%d", self._step_count + 1, self._max_steps)
            prompt = build_agent_prompt(self._state, tools)

            # ── Stream the model; parse only after end-of-stream ──────
            full_text: list[str] = []
            try:
                yield from self._stream_completion(prompt, full_text)
            except Exception as exc:
                logger.exception("Completion provider failed")
                self._stop(LoopStatus.ERRORED)
                yield ErrorEvent(message=f"Completion provider failed: {exc}")
                return

            try:
                parsed = parse_agent_response(full_text[0])
            except ResponseParseError as exc:
                self._stop(LoopStatus.ERRORED)
                yield ErrorEvent(message=str(exc))
                return

            yield ThoughtEvent(thought=parsed.thought)

            if parsed.finish is not None:
                self._stop(LoopStatus.FINISHED)
                yield FinishEvent(result=parsed.finish)
                return

            # ── Act through the gateway, observe, record ─────────────
            action = parsed.action
            yield ToolCallEvent(action=action)
            observation = secure_execute_tool(
                action.tool_name, action.args, self._registry, self._work_dir
            )
            yield ToolOutputEvent(observation=observation)

            self._state.add_step(Step(thought=parsed.thought, action=action, observation=observation))
            self._step_count += 1

        self._stop(LoopStatus.ERRORED)
        yield ErrorEvent(message=f"Agent stopped after reaching the maximum of {self._max_steps} steps.")


def run_agent(
    goal: str,
    work_dir: str | os.PathLike[str],
    provider: CompletionProvider,
    registry: ToolRegistry | None = None,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> Iterator[AgentEvent]:
    """
    Convenience wrapper: one executor, one run.

    Without an explicit registry a fresh default_registry(work_dir) is built
    for this run only.
    """
    if registry is None:
        registry = default_registry(work_dir)
    executor = AgentExecutor(goal, work_dir, provider, registry, max_steps=max_steps)
    return executor.run()
