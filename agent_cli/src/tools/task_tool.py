# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
from pydantic import Field

from .base_tool import BaseTool
from ..agents.base_agent import TASK_TOOL_NAME
from ..types.agent_types import AgentType
from ..types.tool_types import ERROR_PREFIX, ToolResult


class TaskTool(BaseTool):
    TOOL_NAME = TASK_TOOL_NAME
    TOOL_DESCRIPTION = """Delegate a self-contained subtask to a subagent.

The subagent starts with an empty conversation: it cannot see this conversation,
so the prompt must contain everything it needs. It runs with a restricted tool
set and a smaller turn budget, and its final answer is returned to you.

Agent types:
- explore: read-only search and analysis of the codebase
- code: implements changes, with every tool except Task
- plan: analyses the codebase and returns a numbered implementation plan

Run several independent tasks in one response to work on them in parallel.
"""

    description: str = Field(..., description="A short (3-5 word) description of the task", min_length=1)
    prompt: str = Field(..., description="The full, self-contained instructions for the subagent", min_length=1)
    agent_type: AgentType = Field(..., description="Which kind of subagent to run")

    async def run(self) -> ToolResult:
        from ..agents.agent_calling import run_task

        output = await run_task(self.description, self.prompt, self.agent_type, self._context)
        if output.startswith(ERROR_PREFIX):
            return self.error(output.removeprefix(ERROR_PREFIX).strip())
        return self.result(output)
