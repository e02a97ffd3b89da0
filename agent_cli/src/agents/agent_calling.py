# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Functions for making subagent calls"""

import time
import logging

from typing import Optional, TextIO

from .agent_loop import run_agent_loop
from .base_agent import get_agent_profile
from .prompts import build_subagent_system_prompt
from ..llm.base import Message
from ..tools.base_tool import get_tool_definitions, make_tool_executor
from ..tools.context import ToolContext
from ..types.agent_types import AgentType
from ..types.tool_types import ERROR_PREFIX

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

CLEAR_LINE = "\r\x1b[K"


class SubagentProgress:
    """One refreshed terminal line showing what a running subagent is doing."""

    def __init__(self, description: str, agent_type: AgentType, stream: Optional[TextIO] = None):
        self.description = description
        self.agent_type = agent_type
        self.stream = stream
        self.tool_count = 0
        self.start_time = time.monotonic()

    @property
    def prefix(self) -> str:
        return f"  [{self.agent_type.value}] {self.description}"

    def _write(self, text: str) -> None:
        if self.stream is None:
            return
        self.stream.write(text)
        self.stream.flush()

    def start(self) -> None:
        self._write(self.prefix)

    def update(self, tool_name: str, count: int, elapsed: float) -> None:
        self.tool_count = count
        self._write(f"{CLEAR_LINE}{self.prefix} ... {tool_name} (+{count} tools, {elapsed:.1f}s)")

    def complete(self) -> None:
        elapsed = time.monotonic() - self.start_time
        self._write(f"{CLEAR_LINE}{self.prefix} - done ({self.tool_count} tools, {elapsed:.1f}s)\n")

    def error(self, message: str) -> None:
        self._write(f"{CLEAR_LINE}{self.prefix} - error: {message}\n")


def format_task_result(description: str, agent_type: AgentType, history: list[Message]) -> str:
    """Render the subagent's final answer for the calling agent."""
    last = next((m for m in reversed(history) if m.role == "assistant"), None)
    if last is None:
        return f"Subagent finished: {description}\n(no output)"

    return f"""Subagent result ({description}, {agent_type.value}):

{last.text}

---
Subagent finished"""


async def run_task(
    description: str,
    prompt: str,
    agent_type: AgentType,
    context: ToolContext,
) -> str:
    """
    Run a subagent over a fresh history and return its final answer.

    The subagent sees only `prompt`, gets the tool set of its profile (never
    the Task tool) and runs with its own todo list and reminder state. Any
    failure, including a provider error, is returned as an error string so
    that it never aborts the parent's turn.
    """
    agent_type = AgentType(agent_type)
    handle = context.subagent
    stream = handle.progress_stream if handle is not None else None
    progress = SubagentProgress(description, agent_type, stream)

    try:
        if handle is None:
            raise RuntimeError("no model provider is configured for subagents")

        profile = get_agent_profile(agent_type)
        child_context = context.for_subagent(agent_type)

        progress.start()
        logger.info(f"Starting {agent_type.value} subagent: {description}")
        loop_result = await run_agent_loop(
            [Message(role="user", content=prompt)],
            build_subagent_system_prompt(context.workdir, agent_type, description),
            get_tool_definitions(agent_type),
            handle.provider,
            make_tool_executor(child_context),
            max_tokens=profile.MAX_TOKENS,
            max_turns=profile.MAX_TURNS,
            on_tool_call=progress.update,
            reminder=child_context.reminder,
        )
        progress.complete()
        logger.info(
            f"{agent_type.value} subagent finished after {loop_result.turns} turns "
            f"and {loop_result.tool_count} tool calls ({loop_result.usage})"
        )
        return format_task_result(description, agent_type, loop_result.history)

    except Exception as e:
        logger.error(f"Subagent {agent_type.value} ({description}) failed: {e}")
        progress.error(str(e))
        return f"{ERROR_PREFIX} Subagent execution failed: {e}"
