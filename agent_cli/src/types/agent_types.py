# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
from enum import Enum
from typing import Awaitable, Callable, Optional
from pydantic import BaseModel, Field

from .llm_types import TokenUsage
from ..llm.base import Message


class AgentType(str, Enum):
    """The kinds of subagent the Task tool can spawn."""

    EXPLORE = "explore"
    CODE = "code"
    PLAN = "plan"


class LoopStatus(str, Enum):
    """How an agent loop invocation ended."""

    DONE = "done"
    MAX_TURNS = "max_turns"


class LoopResult(BaseModel):
    """The outcome of one agent loop invocation."""

    history: list[Message]
    status: LoopStatus
    turns: int = 0
    tool_count: int = 0
    elapsed: float = 0.0
    usage: TokenUsage = Field(default_factory=TokenUsage)

    @property
    def last_assistant_message(self) -> Optional[Message]:
        for message in reversed(self.history):
            if message.role == "assistant":
                return message
        return None


# (tool_name, tool_input) -> result string
ExecuteTool = Callable[[str, dict], Awaitable[str]]

# (tool_name, invocation_index, elapsed_seconds) -> None
ProgressCallback = Callable[[str, int, float], None]
