# registry.py
# Name → ToolDescriptor lookup.
#
# Built once, read many. No module-level instance: callers construct a
# registry and hand it to the executor.

import os

from agent_harness.models import ToolDescriptor


class ConfigurationError(Exception):
    """Raised at construction when the tool set is inconsistent. Always fatal."""


class ToolRegistry:
    """
    Immutable collection of tool descriptors keyed by name.

    Raises ConfigurationError if two descriptors share a name, so a bad
    tool set aborts before any agent run starts.
    """

    def __init__(self, tools: list[ToolDescriptor]) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ConfigurationError(
                    f"Duplicate tool name detected: '{tool.name}'. Tool names must be unique."
                )
            self._tools[tool.name] = tool

    def lookup(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    # Defined before list() below, which shadows the builtin in this body.
    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def list(self) -> list[ToolDescriptor]:
        """Snapshot in registration order."""
        return list(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


def default_registry(work_dir: str | os.PathLike[str], shell_timeout: float = 30.0) -> ToolRegistry:
    """Fresh registry holding the built-in file system and shell tools."""
    from agent_harness.tools import file_system_tools, shell_tools

    return ToolRegistry([*file_system_tools(work_dir), *shell_tools(work_dir, timeout=shell_timeout)])
