# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""
A module of Agent tools

Importing this package registers every built-in tool in `tool_registry`.
"""

from .base_tool import (
    BaseTool,
    tool_registry,
    dispatch,
    make_tool_executor,
    get_tool_definitions,
    validate_tool_registry,
)
from .context import ToolContext, SubagentHandle, UserChannel
from .execute_command import ExecuteCommand
from .file_tools import ReadFile, WriteFile, EditFile
from .search_tools import GlobTool, GrepTool
from .todo_tools import TodoWrite
from .skill_tool import SkillTool
from .task_tool import TaskTool
from .plan_mode_tools import EnterPlanMode, ExitPlanMode
from .web_tools import WebFetch, WebSearch
from .interaction_tools import AskUserQuestion


__all__ = [
    "BaseTool",
    "tool_registry",
    "dispatch",
    "make_tool_executor",
    "get_tool_definitions",
    "validate_tool_registry",
    "ToolContext",
    "SubagentHandle",
    "UserChannel",
]
