# state.py
# Scratchpad for a single agent run.
#
# Owned by exactly one AgentExecutor for the lifetime of one run and thrown
# away afterwards. Nothing here is persisted.

from agent_harness.models import Step


class AgentState:
    """Append-only history of completed steps for one goal."""

    def __init__(self, goal: str) -> None:
        self._goal = goal
        self._steps: list[Step] = []

    @property
    def goal(self) -> str:
        return self._goal

    @property
    def steps(self) -> tuple[Step, ...]:
        """Read-only snapshot in execution order."""
        return tuple(self._steps)

    def add_step(self, step: Step) -> None:
        self._steps.append(step)

    def __len__(self) -> int:
        return len(self._steps)
