# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
from pydantic import Field

from .base_tool import BaseTool
from ..state.todo import TodoItem
from ..types.tool_types import ERROR_PREFIX, ToolResult


class TodoWrite(BaseTool):
    TOOL_NAME = "TodoWrite"
    TOOL_DESCRIPTION = """Create or update the todo list for the current task.

The whole list is replaced on every call, so always send every item. Use it for
multi-step tasks: mark an item in_progress before starting it (only one item may
be in_progress at a time) and completed as soon as it is done.
"""

    todos: list[TodoItem] = Field(..., description="The complete, updated todo list")

    async def run(self) -> ToolResult:
        rendered = self._context.todos.update(self.todos)
        if rendered.startswith(ERROR_PREFIX):
            return self.error(rendered.removeprefix(ERROR_PREFIX).strip())
        return self.result(rendered)
