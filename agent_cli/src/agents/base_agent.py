# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Base class and registry for the subagent profiles the Task tool can spawn."""

from typing import ClassVar, Optional

from ..types.agent_types import AgentType
from ..types.errors import ConfigurationError

# The delegation tool; never available inside a subagent.
TASK_TOOL_NAME = "Task"

agent_registry: dict[AgentType, type["BaseAgent"]] = {}


class BaseAgent:
    """
    Immutable configuration of one subagent type.

    Subclasses are registered by AGENT_TYPE on definition. AVAILABLE_TOOLS is
    the set of tool names the subagent may call, or None for every registered
    tool (the Task tool is always excluded).
    """

    AGENT_TYPE: ClassVar[AgentType]
    AGENT_DESCRIPTION: ClassVar[str]
    SYSTEM_PROMPT: ClassVar[str]
    AVAILABLE_TOOLS: ClassVar[Optional[frozenset[str]]] = None
    MAX_TURNS: ClassVar[int] = 10
    MAX_TOKENS: ClassVar[int] = 4096

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        agent_registry[cls.AGENT_TYPE] = cls

    @classmethod
    def allows(cls, tool_name: str) -> bool:
        if tool_name == TASK_TOOL_NAME:
            return False
        return cls.AVAILABLE_TOOLS is None or tool_name in cls.AVAILABLE_TOOLS


def get_agent_profile(agent_type: AgentType | str) -> type[BaseAgent]:
    try:
        return agent_registry[AgentType(agent_type)]
    except (KeyError, ValueError) as e:
        raise ConfigurationError(f"Unknown agent type: {agent_type}") from e


def get_agent_type_descriptions() -> str:
    """A bullet list of the subagent types, for prompts and the Task tool."""
    return "\n".join(
        f"- **{agent_type.value}**: {profile.AGENT_DESCRIPTION}"
        for agent_type, profile in sorted(agent_registry.items(), key=lambda kv: kv[0].value)
    )
