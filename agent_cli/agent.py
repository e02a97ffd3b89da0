# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""
The interactive session: owns the conversation history and the session state,
and runs one agent loop per user message.
"""

import sys
import logging

from pathlib import Path
from typing import Optional, TextIO

from .src.config import settings
from .src.llm.base import Message
from .src.agents.agent_loop import run_agent_loop
from .src.agents.prompts import build_system_prompt
from .src.skills import SkillLoader
from .src.state import TodoTracker, ReminderInjector, PlanMode, load_project_context
from .src.tools import ToolContext, SubagentHandle, UserChannel, get_tool_definitions, make_tool_executor
from .src.types.agent_types import LoopResult
from .src.types.llm_types import TextContent, TokenUsage

logger = logging.getLogger(__name__)


class Agent:
    """
    The Agent class acts as the 'root' of the application state for one
    interactive session: the history, the todo list, the reminder counters,
    plan mode and the loaded skills all live here and are handed to the tools
    through a single ToolContext.
    """

    def __init__(
        self,
        provider,
        workdir: Optional[Path | str] = None,
        max_turns: Optional[int] = None,
        max_tokens: Optional[int] = None,
        output: Optional[TextIO] = sys.stdout,
        user_input: Optional[TextIO] = sys.stdin,
    ):
        self.workdir = Path(workdir or Path.cwd()).resolve()
        self.workdir.mkdir(parents=True, exist_ok=True)

        self.provider = provider
        self.max_turns = max_turns or settings.MAX_TURNS
        self.max_tokens = max_tokens or settings.MAX_TOKENS
        self.output = output

        self.history: list[Message] = []
        self.usage = TokenUsage()

        self.todos = TodoTracker()
        self.reminder = ReminderInjector()
        self.plan_mode = PlanMode(self.workdir)
        self.skills = SkillLoader(self.workdir / settings.SKILLS_DIR)
        self.project_context = load_project_context(self.workdir)
        self.reminder.set_has_context(self.project_context is not None)

        self.context = ToolContext(
            workdir=str(self.workdir),
            todos=self.todos,
            reminder=self.reminder,
            plan_mode=self.plan_mode,
            skills=self.skills,
            subagent=SubagentHandle(provider=provider, progress_stream=output),
            user=UserChannel(input=user_input, output=output) if user_input and output else None,
        )
        self.tools = get_tool_definitions()
        self.execute_tool = make_tool_executor(self.context)
        self.system_prompt = build_system_prompt(
            str(self.workdir),
            self.skills.get_descriptions(),
            project_context=self.project_context,
        )

    def _show_tool_call(self, tool_name: str, index: int, elapsed: float) -> None:
        if self.output is not None:
            self.output.write(f"  > {tool_name} (#{index}, {elapsed:.1f}s)\n")
            self.output.flush()

    async def send(self, text: str) -> LoopResult:
        """
        Run one user turn to completion.

        Reminders due for this turn are sent as a separate text block ahead of
        the user's message. If the turn fails the history is left as it was
        before the call, and the exception is re-raised.

        Returns:
            The loop result; its history is the session's new history.
        """
        content = []
        reminders = self.reminder.format_reminders()
        if reminders:
            content.append(TextContent(text=reminders))
        content.append(TextContent(text=text))
        self.reminder.mark_first_message_sent()
        self.reminder.clear_suspicious_file()

        pending = [*self.history, Message(role="user", content=content)]
        try:
            result = await run_agent_loop(
                pending,
                self.system_prompt,
                self.tools,
                self.provider,
                self.execute_tool,
                max_tokens=self.max_tokens,
                max_turns=self.max_turns,
                on_tool_call=self._show_tool_call,
                reminder=self.reminder,
            )
        except Exception as e:
            logger.error(f"Turn failed, discarding the pending user message: {e}")
            raise

        self.history = result.history
        self.usage += result.usage
        logger.info(
            f"Turn finished ({result.status.value}) after {result.turns} model calls, "
            f"{result.tool_count} tool calls and {result.elapsed:.1f}s"
        )
        return result

    def clear(self) -> None:
        """Start a fresh conversation, forgetting todos and reminder counters."""
        self.history = []
        self.todos.reset()
        self.reminder.reset()
        self.plan_mode.reset()
