# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""
Tool registry and dispatcher.

Every tool is a pydantic model whose fields are the tool's arguments. Defining
a BaseTool subclass registers it by TOOL_NAME, and `dispatch` is the single
entry point through which the agent loop runs a tool call: it routes by name,
checks the caller's capabilities, validates arguments, applies the security
gate through the tool's `guard` and renders every outcome as a string.
"""

import time
import logging

from functools import partial
from typing import ClassVar, Optional
from pydantic import PrivateAttr, ValidationError as ArgumentError

from .context import ToolContext
from ..config import settings
from ..agents.base_agent import agent_registry, get_agent_profile
from ..utils.security import resolve_sandboxed_path, truncate
from ..types.agent_types import AgentType, ExecuteTool
from ..types.errors import ConfigurationError, SecurityError
from ..types.llm_types import ToolDefinition
from ..types.tool_types import ERROR_PREFIX, ToolInterface, ToolResult

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

tool_registry: dict[str, type["BaseTool"]] = {}


class BaseTool(ToolInterface):
    """Abstract base class for all tools"""

    # Class variables for tool metadata
    TOOL_NAME: ClassVar[str]
    TOOL_DESCRIPTION: ClassVar[str]

    _context: ToolContext = PrivateAttr()

    def __init__(self, context: ToolContext, **data):
        super().__init__(**data)
        self._context = context

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        # Skip registering the BaseTool class itself.
        if cls.__name__ != "BaseTool":
            tool_registry[cls.TOOL_NAME] = cls

    def sandboxed(self, path: str) -> str:
        """Resolve a path argument against the sandbox root."""
        return resolve_sandboxed_path(self._context.workdir, path)

    def result(self, output: str, warnings: str | None = None) -> ToolResult:
        return ToolResult(tool_name=self.TOOL_NAME, success=True, output=output, warnings=warnings)

    def error(self, errors: str) -> ToolResult:
        return ToolResult(tool_name=self.TOOL_NAME, success=False, errors=errors)

    @classmethod
    def to_definition(cls) -> ToolDefinition:
        return ToolDefinition(
            name=cls.TOOL_NAME,
            description=cls.TOOL_DESCRIPTION.strip(),
            input_schema=cls.input_schema(),
        )


def get_tool_definitions(agent_type: Optional[AgentType] = None) -> list[ToolDefinition]:
    """The tool catalog advertised to the main agent or to a subagent type."""
    names = sorted(tool_registry)
    if agent_type is not None:
        profile = get_agent_profile(agent_type)
        names = [n for n in names if profile.allows(n)]
    return [tool_registry[n].to_definition() for n in names]


def validate_tool_registry() -> None:
    """Check that every agent profile only names registered tools.

    Raises:
        ConfigurationError: for a missing profile or an unknown tool name.
    """
    for agent_type in AgentType:
        if agent_type not in agent_registry:
            raise ConfigurationError(f"No profile registered for agent type {agent_type.value}")

    for agent_type, profile in agent_registry.items():
        unknown = sorted((profile.AVAILABLE_TOOLS or frozenset()) - set(tool_registry))
        if unknown:
            raise ConfigurationError(
                f"Agent type {agent_type.value} names unregistered tools: {', '.join(unknown)}"
            )


async def dispatch(tool_name: str, tool_input: dict, context: ToolContext) -> str:
    """Run one tool call and return its result as a string.

    Never raises (short of cancellation): unknown tools, refused calls, bad
    arguments and tool crashes all come back as strings starting with
    ERROR_PREFIX.
    """
    tool_cls = tool_registry.get(tool_name)
    if tool_cls is None:
        return f'{ERROR_PREFIX} Unknown tool "{tool_name}"'

    if not context.allows(tool_name):
        return f"{ERROR_PREFIX} Tool {tool_name} is not available to the {context.agent_label} agent"

    try:
        tool = tool_cls(context=context, **(tool_input or {}))
    except ArgumentError as e:
        return f"{ERROR_PREFIX} Invalid arguments for {tool_name}: {e}"
    except Exception as e:
        return f"{ERROR_PREFIX} Could not construct {tool_name}: {e}"

    try:
        await tool.guard()
    except SecurityError as e:
        logger.warning(f"Security gate refused {tool_name} for the {context.agent_label} agent: {e}")
        context.reminder.mark_suspicious_file()
        return f"{ERROR_PREFIX} {e}"
    except Exception as e:
        logger.error(f"Error while checking {tool_name}: {e}")
        return f"{ERROR_PREFIX} Tool execution error: {e}"

    try:
        start_time = time.time()
        tool_result = await tool.run()
        tool_result.duration = time.time() - start_time
    except Exception as e:
        logger.error(f"Error during tool execution: {str(e)}")
        return f"{ERROR_PREFIX} Tool execution error: {e}"

    logger.debug(f"{tool_name} finished in {tool_result.duration:.3f}s (success={tool_result.success})")
    return truncate(str(tool_result), settings.MAX_OUTPUT_BYTES)


def make_tool_executor(context: ToolContext) -> ExecuteTool:
    """Bind the dispatcher to a context, giving the agent loop its executor."""
    return partial(dispatch, context=context)
