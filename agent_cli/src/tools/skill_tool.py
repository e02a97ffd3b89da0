# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
from pydantic import Field

from .base_tool import BaseTool
from ..types.tool_types import ToolResult


class SkillTool(BaseTool):
    TOOL_NAME = "Skill"
    TOOL_DESCRIPTION = """Load a skill: a prepared set of instructions for a specific kind of task.

When the user refers to a skill or a slash command (e.g. "/commit"), call this tool
with the skill name and any arguments before doing anything else, then follow the
returned instructions. Only use skills listed in the system prompt.
"""

    skill: str = Field(..., description="The skill name, e.g. 'commit'", min_length=1)
    args: str = Field(default="", description="Optional arguments for the skill")

    async def run(self) -> ToolResult:
        loader = self._context.skills
        if loader is None:
            return self.error("No skills are available")

        skill = loader.get(self.skill)
        if skill is None:
            available = ", ".join(loader.names) or "none"
            return self.error(f"Unknown skill {self.skill!r} (available: {available})")
        return self.result(skill.render(self.args))
