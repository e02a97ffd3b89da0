# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""The per-call context handed from the agent loop to the tool dispatcher."""

import asyncio

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Optional, TextIO

from ..agents.base_agent import TASK_TOOL_NAME, get_agent_profile
from ..skills import SkillLoader
from ..state import TodoTracker, ReminderInjector, PlanMode
from ..types.agent_types import AgentType

if TYPE_CHECKING:
    from ..llm.providers.base_provider import BaseProvider


@dataclass
class SubagentHandle:
    """What the Task tool needs to start a child conversation."""

    provider: "BaseProvider"
    # Where subagent progress lines are written; None keeps them silent
    progress_stream: Optional[TextIO] = None


@dataclass
class UserChannel:
    """The terminal of the person driving the session, for tools that ask questions."""

    input: TextIO
    output: TextIO
    # Serialises questions from tool calls running in parallel
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


@dataclass
class ToolContext:
    """
    Everything a tool may touch: the sandbox root, the caller's capabilities
    and the session state objects. `agent_type` is None for the main agent.
    """

    workdir: str
    agent_type: Optional[AgentType] = None
    todos: TodoTracker = field(default_factory=TodoTracker)
    reminder: ReminderInjector = field(default_factory=ReminderInjector)
    plan_mode: Optional[PlanMode] = None
    skills: Optional[SkillLoader] = None
    subagent: Optional[SubagentHandle] = None
    user: Optional[UserChannel] = None

    @property
    def agent_label(self) -> str:
        return self.agent_type.value if self.agent_type is not None else "main"

    def allows(self, tool_name: str) -> bool:
        if self.agent_type is None:
            return True
        return get_agent_profile(self.agent_type).allows(tool_name)

    def for_subagent(self, agent_type: AgentType) -> "ToolContext":
        """A narrowed context for a child agent.

        The child shares the sandbox, skills and provider, but gets its own
        todo list and reminder counters, no plan mode and no access to the user.
        """
        return replace(
            self,
            agent_type=agent_type,
            todos=TodoTracker(max_items=self.todos.max_items),
            reminder=ReminderInjector(nag_threshold=self.reminder.nag_threshold),
            plan_mode=None,
            user=None,
        )


__all__ = ["ToolContext", "SubagentHandle", "UserChannel", "TASK_TOOL_NAME"]
