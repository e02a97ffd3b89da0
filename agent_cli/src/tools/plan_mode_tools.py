# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
from pydantic import Field

from .base_tool import BaseTool
from ..types.tool_types import ERROR_PREFIX, ToolResult


class EnterPlanMode(BaseTool):
    TOOL_NAME = "EnterPlanMode"
    TOOL_DESCRIPTION = """Enter plan mode before a complex change.

Creates a plan file in the working directory. Explore the codebase, write your
analysis and steps into the plan file, then call ExitPlanMode to present the plan.
Do not modify code while in plan mode.
"""

    task_description: str = Field(..., description="What you are planning to do", min_length=1)

    async def run(self) -> ToolResult:
        if self._context.plan_mode is None:
            return self.error("Plan mode is only available to the main agent")
        return _to_result(self, self._context.plan_mode.enter(self.task_description))


class ExitPlanMode(BaseTool):
    TOOL_NAME = "ExitPlanMode"
    TOOL_DESCRIPTION = """Leave plan mode and present the plan file contents for review."""

    async def run(self) -> ToolResult:
        if self._context.plan_mode is None:
            return self.error("Plan mode is only available to the main agent")
        return _to_result(self, self._context.plan_mode.exit())


def _to_result(tool: BaseTool, message: str) -> ToolResult:
    if message.startswith(ERROR_PREFIX):
        return tool.error(message.removeprefix(ERROR_PREFIX).strip())
    return tool.result(message)
