# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Tests for the tool registry and the dispatcher."""
import json
import pytest

from pydantic import Field

import src.tools  # noqa: F401  registers the built-in tools
from src.config import settings
from src.agents.base_agent import agent_registry
from src.tools.base_tool import (
    BaseTool,
    dispatch,
    get_tool_definitions,
    make_tool_executor,
    tool_registry,
    validate_tool_registry,
)
from src.tools.context import ToolContext
from src.tools.file_tools import ReadFile
from src.tools.task_tool import TaskTool
from src.tools.todo_tools import TodoWrite
from src.types.agent_types import AgentType
from src.types.errors import ConfigurationError
from src.types.tool_types import ToolResult


class TestToolRegistry:
    """Test suite for tool registration and definitions."""

    def setup_method(self):
        # Save the original registry so that test tools can be removed again
        self.original_registry = dict(tool_registry)

    def teardown_method(self):
        tool_registry.clear()
        tool_registry.update(self.original_registry)

    def test_tool_registration(self):
        """Defining a BaseTool subclass registers it by TOOL_NAME."""

        class EchoTool(BaseTool):
            TOOL_NAME = "echo_tool"
            TOOL_DESCRIPTION = "Echo the text back"

            text: str

            async def run(self) -> ToolResult:
                return self.result(self.text)

        assert tool_registry["echo_tool"] is EchoTool

    def test_builtin_tools_are_registered(self):
        for name in ("bash", "read_file", "write_file", "edit_file", "Glob", "Grep",
                     "TodoWrite", "Skill", "Task", "EnterPlanMode", "ExitPlanMode", "WebFetch",
                     "WebSearch", "AskUserQuestion"):
            assert name in tool_registry

    def test_main_agent_sees_every_tool(self):
        names = [d.name for d in get_tool_definitions()]
        assert names == sorted(tool_registry)
        assert "Task" in names

    def test_explore_agent_sees_read_only_tools(self):
        names = [d.name for d in get_tool_definitions(AgentType.EXPLORE)]
        assert names == ["Glob", "Grep", "bash", "read_file"]

    @pytest.mark.parametrize("agent_type", list(AgentType))
    def test_subagents_never_see_task(self, agent_type):
        assert "Task" not in [d.name for d in get_tool_definitions(agent_type)]

    def test_code_agent_sees_everything_but_task(self):
        names = {d.name for d in get_tool_definitions(AgentType.CODE)}
        assert names == set(tool_registry) - {"Task"}

    def test_input_schema_is_plain_json_schema(self):
        schema = ReadFile.input_schema()
        assert schema["type"] == "object"
        assert set(schema["properties"]) == {"path", "limit"}
        assert schema["required"] == ["path"]
        assert "title" not in schema["properties"]["path"]

    def test_nested_models_are_inlined(self):
        dumped = json.dumps(TodoWrite.input_schema())
        assert "$ref" not in dumped
        assert "$defs" not in dumped
        items = TodoWrite.input_schema()["properties"]["todos"]["items"]
        assert "active_form" in items["properties"]

    def test_described_reference_keeps_its_description(self):
        agent_type = TaskTool.input_schema()["properties"]["agent_type"]
        assert agent_type["description"] == "Which kind of subagent to run"
        assert agent_type["enum"] == ["explore", "code", "plan"]
        assert "$ref" not in agent_type

    def test_validate_tool_registry_passes(self):
        validate_tool_registry()

    def test_validate_tool_registry_rejects_unknown_tool(self, monkeypatch):
        bogus = type("BogusProfile", (), {"AVAILABLE_TOOLS": frozenset({"no_such_tool"})})
        monkeypatch.setitem(agent_registry, AgentType.PLAN, bogus)
        with pytest.raises(ConfigurationError, match="no_such_tool"):
            validate_tool_registry()


class TestDispatch:
    """Test suite for the dispatcher's error handling and gating."""

    def setup_method(self):
        self.original_registry = dict(tool_registry)

    def teardown_method(self):
        tool_registry.clear()
        tool_registry.update(self.original_registry)

    @pytest.mark.asyncio
    async def test_unknown_tool(self, tmp_path):
        result = await dispatch("no_such_tool", {}, ToolContext(workdir=str(tmp_path)))
        assert result == 'Error: Unknown tool "no_such_tool"'

    @pytest.mark.asyncio
    async def test_capability_check_for_subagent(self, tmp_path):
        context = ToolContext(workdir=str(tmp_path), agent_type=AgentType.EXPLORE)
        result = await dispatch("write_file", {"path": "x.txt", "content": "x"}, context)
        assert result == "Error: Tool write_file is not available to the explore agent"
        assert not (tmp_path / "x.txt").exists()

    @pytest.mark.asyncio
    async def test_task_is_refused_inside_a_subagent(self, tmp_path):
        context = ToolContext(workdir=str(tmp_path), agent_type=AgentType.CODE)
        result = await dispatch(
            "Task", {"description": "d", "prompt": "p", "agent_type": "explore"}, context
        )
        assert result.startswith("Error: Tool Task is not available")

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, tmp_path):
        result = await dispatch("read_file", {}, ToolContext(workdir=str(tmp_path)))
        assert result.startswith("Error: Invalid arguments for read_file")

    @pytest.mark.asyncio
    async def test_unexpected_arguments(self, tmp_path):
        result = await dispatch("read_file", {"path": "a", "bogus": 1}, ToolContext(workdir=str(tmp_path)))
        assert result.startswith("Error: Invalid arguments for read_file")

    @pytest.mark.asyncio
    async def test_path_escape_is_refused(self, tmp_path):
        result = await dispatch("read_file", {"path": "../secret"}, ToolContext(workdir=str(tmp_path)))
        assert result.startswith("Error: Path escapes the working directory")

    @pytest.mark.asyncio
    async def test_refusal_flags_the_security_reminder(self, tmp_path):
        context = ToolContext(workdir=str(tmp_path))
        await dispatch("read_file", {"path": "../secret"}, context)
        assert context.reminder.suspicious_file_detected

    @pytest.mark.asyncio
    async def test_dangerous_command_is_refused(self, tmp_path):
        result = await dispatch("bash", {"command": "rm -rf /"}, ToolContext(workdir=str(tmp_path)))
        assert result.startswith("Error: Dangerous command blocked")

    @pytest.mark.asyncio
    async def test_explore_agent_bash_is_read_only(self, tmp_path):
        (tmp_path / "keep.txt").write_text("x")
        context = ToolContext(workdir=str(tmp_path), agent_type=AgentType.EXPLORE)
        result = await dispatch("bash", {"command": "rm keep.txt"}, context)
        assert result.startswith("Error: Only read-only commands")
        assert (tmp_path / "keep.txt").exists()

    @pytest.mark.asyncio
    async def test_tool_exception_becomes_error_string(self, tmp_path):
        class ExplodingTool(BaseTool):
            TOOL_NAME = "exploding_tool"
            TOOL_DESCRIPTION = "Always raises"

            async def run(self) -> ToolResult:
                raise RuntimeError("boom")

        result = await dispatch("exploding_tool", {}, ToolContext(workdir=str(tmp_path)))
        assert result == "Error: Tool execution error: boom"

    @pytest.mark.asyncio
    async def test_output_is_truncated(self, tmp_path, monkeypatch):
        class LoudTool(BaseTool):
            TOOL_NAME = "loud_tool"
            TOOL_DESCRIPTION = "Produces a lot of output"

            size: int = Field(..., ge=0)

            async def run(self) -> ToolResult:
                return self.result("x" * self.size)

        monkeypatch.setattr(settings, "MAX_OUTPUT_BYTES", 500)
        result = await dispatch("loud_tool", {"size": 10_000}, ToolContext(workdir=str(tmp_path)))
        assert len(result.encode("utf-8")) <= 500
        assert "output truncated" in result

    @pytest.mark.asyncio
    async def test_failed_result_is_rendered_with_error_prefix(self, tmp_path):
        result = await dispatch("read_file", {"path": "missing.txt"}, ToolContext(workdir=str(tmp_path)))
        assert result == "Error: File not found: missing.txt"

    @pytest.mark.asyncio
    async def test_executor_binds_context(self, tmp_path):
        (tmp_path / "a.txt").write_text("hello")
        execute = make_tool_executor(ToolContext(workdir=str(tmp_path)))
        assert await execute("read_file", {"path": "a.txt"}) == "1→hello"
