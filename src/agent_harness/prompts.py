# prompts.py
# Instruction text for the completion provider.
#
# The provider does not enforce the response grammar; this text is the only
# place it is described. The parser in parser.py must agree with it.

import json
from typing import Iterable

from agent_harness.models import Step, ToolDescriptor
from agent_harness.state import AgentState

AGENT_SYSTEM_PROMPT = """\
You are an expert software development assistant. Your task is to accurately \
and efficiently resolve the user's request by thinking step-by-step and using \
the provided tools.

Your response must always be in the following format:

<thought>Your reasoning for the next step, considering previous actions and observations.</thought>
<action tool="tool_name" args='{"arg1": "value1", "arg2": "value2"}'></action>

If you have achieved the goal or cannot make further progress, you must respond with:

<thought>Your final conclusion or explanation.</thought>
<finish>Your final answer or summary of the task.</finish>

Emit exactly one <action> or one <finish> per response. The args attribute \
must be a single-quoted JSON object. All paths are relative to the working \
directory.\
"""


def _format_tools(tools: Iterable[ToolDescriptor]) -> str:
    lines: list[str] = []
    for tool in tools:
        properties = tool.argument_schema().get("properties", {})
        shape = {name: prop.get("type", "any") for name, prop in properties.items()}
        lines.append(f"- {tool.name}: {json.dumps(shape)}")
        lines.append(f"    {tool.description}")
    if not lines:
        return ""
    return "\nAvailable tools and their required JSON arguments:\n" + "\n".join(lines) + "\n"


def _format_step(step: Step) -> str:
    args_json = json.dumps(step.action.args)
    return (
        f"<thought>{step.thought}</thought>\n"
        f"<action tool=\"{step.action.tool_name}\" args='{args_json}'></action>\n"
        f"<observation>{step.observation}</observation>"
    )


def _format_history(steps: tuple[Step, ...]) -> str:
    """Render every prior step. No truncation: prompt cost grows with the run."""
    if not steps:
        return ""
    return (
        "\n--- History ---\n"
        + "\n".join(_format_step(step) for step in steps)
        + "\n--- End History ---\n"
    )


def build_agent_prompt(state: AgentState, tools: Iterable[ToolDescriptor] = ()) -> str:
    """Render goal, tool catalog and full history into one instruction."""
    return (
        f"{AGENT_SYSTEM_PROMPT}\n"
        f"{_format_tools(tools)}"
        f"{_format_history(state.steps)}\n"
        "--- Current Task ---\n"
        f"User's Goal: {state.goal}\n"
        "What is your next thought and action?"
    )
