# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""The turn-based agent loop shared by the main agent and every subagent."""

import time
import asyncio
import logging

from typing import Optional

from ..config import settings
from ..llm.base import Message, validate_tool_results
from ..llm.providers.base_provider import BaseProvider
from ..state.reminder import ReminderInjector
from ..types.errors import ValidationError
from ..types.agent_types import ExecuteTool, LoopResult, LoopStatus, ProgressCallback
from ..types.llm_types import TokenUsage, ToolCallContent, ToolDefinition, ToolResultContent
from ..types.tool_types import ERROR_PREFIX

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


async def _run_tool_call(
    call: ToolCallContent,
    index: int,
    start_time: float,
    execute_tool: ExecuteTool,
    semaphore: asyncio.Semaphore,
    on_tool_call: Optional[ProgressCallback],
) -> ToolResultContent:
    """Execute one tool call, always producing a result for its call id."""
    if call.parse_errors:
        return ToolResultContent(
            call_id=call.call_id,
            tool_name=call.tool_name,
            content=f"{ERROR_PREFIX} {call.parse_errors}",
            is_error=True,
        )

    async with semaphore:
        if on_tool_call is not None:
            try:
                on_tool_call(call.tool_name, index, time.monotonic() - start_time)
            except Exception as e:
                logger.warning(f"Tool progress callback failed: {e}")

        try:
            output = await execute_tool(call.tool_name, call.tool_args)
        except Exception as e:
            logger.error(f"Tool {call.tool_name} raised out of the dispatcher: {e}")
            output = f"{ERROR_PREFIX} Tool execution failed: {e}"

    return ToolResultContent(
        call_id=call.call_id,
        tool_name=call.tool_name,
        content=output,
        is_error=output.startswith(ERROR_PREFIX),
    )


async def run_agent_loop(
    history: list[Message],
    system_prompt: str,
    tools: list[ToolDefinition],
    provider: BaseProvider,
    execute_tool: ExecuteTool,
    *,
    max_tokens: Optional[int] = None,
    max_turns: Optional[int] = None,
    on_tool_call: Optional[ProgressCallback] = None,
    reminder: Optional[ReminderInjector] = None,
    max_concurrency: Optional[int] = None,
) -> LoopResult:
    """
    Run the model until it answers without requesting tools.

    Each turn calls the model once. When the response requests tools, every
    call is executed concurrently (bounded by `max_concurrency`), the results
    are appended in call order as one user message and the model is called
    again. The input history is not mutated; the extended copy is returned.

    Raises:
        Exception: whatever the provider raises; a failed model call ends the
            loop and the caller decides what to do with the turn.
    """
    max_tokens = max_tokens or settings.MAX_TOKENS
    max_turns = max_turns or settings.MAX_TURNS
    semaphore = asyncio.Semaphore(max_concurrency or settings.MAX_PARALLEL_TOOLS)

    messages = list(history)
    usage = TokenUsage()
    tool_count = 0
    start_time = time.monotonic()

    def result(status: LoopStatus, turns: int) -> LoopResult:
        return LoopResult(
            history=messages,
            status=status,
            turns=turns,
            tool_count=tool_count,
            elapsed=time.monotonic() - start_time,
            usage=usage,
        )

    for turn in range(1, max_turns + 1):
        logger.debug(f"Turn {turn}: awaiting completion ({len(messages)} messages)")
        response = await provider.create_message(system_prompt, messages, tools, max_tokens)
        extracted = provider.extract(response)
        if extracted.usage is not None:
            usage += extracted.usage

        if not extracted.requests_tools:
            # Tool calls we will not answer would make the history unreplayable
            messages.append(provider.assistant_message(extracted, include_tool_calls=False))
            if extracted.tool_calls:
                logger.warning(
                    f"Dropped {len(extracted.tool_calls)} tool call(s) from a turn that "
                    f"stopped with {extracted.stop_reason.value}"
                )
            return result(LoopStatus.DONE, turn)

        assistant = provider.assistant_message(extracted)
        messages.append(assistant)

        calls = extracted.tool_calls
        tool_results = await asyncio.gather(
            *(
                _run_tool_call(call, tool_count + i + 1, start_time, execute_tool, semaphore, on_tool_call)
                for i, call in enumerate(calls)
            )
        )
        tool_count += len(calls)

        results_message = provider.format_tool_results(list(tool_results))
        try:
            validate_tool_results(assistant, results_message)
        except ValidationError as e:
            # Only reachable when the provider repeats a call id
            logger.error(f"Tool result pairing check failed: {e}")
        messages.append(results_message)

        if reminder is not None:
            reminder.record_tool_calls([call.tool_name for call in calls])

    logger.warning(f"Agent loop reached the maximum number of turns ({max_turns})")
    return result(LoopStatus.MAX_TURNS, max_turns)
