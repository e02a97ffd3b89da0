# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Tests for the turn-based agent loop."""
import asyncio
import pytest

from src.agents.agent_loop import run_agent_loop
from src.llm.base import Message
from src.llm.providers.base_provider import BaseProvider
from src.state import ReminderInjector
from src.types.agent_types import LoopStatus
from src.types.llm_types import (
    ExtractedResponse,
    StopReason,
    TokenUsage,
    ToolCallContent,
)


class ScriptedProvider(BaseProvider):
    """Replays canned decoded responses; exceptions in the script are raised."""

    def __init__(self, responses):
        super().__init__(client=None, model="scripted")
        self.responses = list(responses)
        self.requests = []

    def convert_tools(self, tools):
        return tools

    def _prepare_messages(self, history):
        return list(history)

    async def create_message(self, system, history, tools, max_tokens):
        self.requests.append(list(history))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def extract(self, response):
        return response


def text_response(text):
    return ExtractedResponse(
        text_blocks=[text], stop_reason=StopReason.COMPLETE, usage=TokenUsage(input_tokens=10, output_tokens=2)
    )


def tool_response(*calls, text=None):
    return ExtractedResponse(
        text_blocks=[text] if text else [],
        tool_calls=list(calls),
        stop_reason=StopReason.TOOL_CALL,
        usage=TokenUsage(input_tokens=10, output_tokens=2),
    )


def call(call_id, name="bash", **args):
    return ToolCallContent(call_id=call_id, tool_name=name, tool_args=args)


async def echo_tool(tool_name, tool_input):
    return f"{tool_name} ran with {tool_input}"


class TestAgentLoop:
    def setup_method(self):
        self.history = [Message(role="user", content="hello")]

    @pytest.mark.asyncio
    async def test_text_answer_ends_the_loop(self):
        provider = ScriptedProvider([text_response("Hi there")])
        result = await run_agent_loop(self.history, "system", [], provider, echo_tool)

        assert result.status == LoopStatus.DONE
        assert result.turns == 1
        assert result.tool_count == 0
        assert [m.role for m in result.history] == ["user", "assistant"]
        assert result.last_assistant_message.text == "Hi there"
        # The caller's list is left alone
        assert len(self.history) == 1

    @pytest.mark.asyncio
    async def test_tool_round_trip(self):
        provider = ScriptedProvider(
            [tool_response(call("a", command="ls"), call("b", command="pwd"), text="Looking"), text_response("Done")]
        )
        result = await run_agent_loop(self.history, "system", [], provider, echo_tool)

        assert [m.role for m in result.history] == ["user", "assistant", "user", "assistant"]
        results = result.history[2].tool_results
        assert [r.call_id for r in results] == ["a", "b"]
        assert results[0].content == "bash ran with {'command': 'ls'}"
        assert not results[0].is_error
        assert result.tool_count == 2
        assert result.turns == 2
        assert result.usage.input_tokens == 20
        # The second request carries the tool results
        assert provider.requests[1][-1].tool_results == results

    @pytest.mark.asyncio
    async def test_results_keep_call_order_under_concurrency(self):
        active = 0
        peak = 0
        finished = []

        async def slow_tool(tool_name, tool_input):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(tool_input["delay"])
            active -= 1
            finished.append(tool_input["delay"])
            return str(tool_input["delay"])

        provider = ScriptedProvider(
            [tool_response(call("slow", delay=0.05), call("fast", delay=0.0)), text_response("ok")]
        )
        result = await run_agent_loop(self.history, "system", [], provider, slow_tool)

        assert peak == 2
        assert finished == [0.0, 0.05]
        assert [r.call_id for r in result.history[2].tool_results] == ["slow", "fast"]

    @pytest.mark.asyncio
    async def test_concurrency_limit(self):
        active = 0
        peak = 0

        async def tool(tool_name, tool_input):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return "ok"

        provider = ScriptedProvider([tool_response(call("a"), call("b"), call("c")), text_response("ok")])
        await run_agent_loop(self.history, "system", [], provider, tool, max_concurrency=1)
        assert peak == 1

    @pytest.mark.asyncio
    async def test_max_turns(self):
        provider = ScriptedProvider([tool_response(call(f"c{i}")) for i in range(3)])
        result = await run_agent_loop(self.history, "system", [], provider, echo_tool, max_turns=3)

        assert result.status == LoopStatus.MAX_TURNS
        assert result.turns == 3
        assert result.tool_count == 3
        assert result.history[-1].role == "user"
        assert len(result.history) == 1 + 2 * 3
        assert provider.responses == []

    @pytest.mark.asyncio
    async def test_provider_failure_propagates(self):
        provider = ScriptedProvider([tool_response(call("a")), RuntimeError("overloaded")])
        with pytest.raises(RuntimeError, match="overloaded"):
            await run_agent_loop(self.history, "system", [], provider, echo_tool)
        assert len(self.history) == 1

    @pytest.mark.asyncio
    async def test_tool_exception_becomes_error_result(self):
        async def broken(tool_name, tool_input):
            raise OSError("disk on fire")

        provider = ScriptedProvider([tool_response(call("a")), text_response("sorry")])
        result = await run_agent_loop(self.history, "system", [], provider, broken)

        (tool_result,) = result.history[2].tool_results
        assert tool_result.is_error
        assert tool_result.content == "Error: Tool execution failed: disk on fire"

    @pytest.mark.asyncio
    async def test_error_strings_are_flagged(self):
        async def refusing(tool_name, tool_input):
            return "Error: Path is outside the working directory"

        provider = ScriptedProvider([tool_response(call("a")), text_response("ok")])
        result = await run_agent_loop(self.history, "system", [], provider, refusing)
        assert result.history[2].tool_results[0].is_error

    @pytest.mark.asyncio
    async def test_unparseable_arguments_skip_execution(self):
        executed = []

        async def tool(tool_name, tool_input):
            executed.append(tool_name)
            return "ok"

        bad = ToolCallContent(call_id="a", tool_name="bash", parse_errors="Could not parse tool arguments")
        provider = ScriptedProvider([tool_response(bad, call("b")), text_response("ok")])
        result = await run_agent_loop(self.history, "system", [], provider, tool)

        first, second = result.history[2].tool_results
        assert first.is_error
        assert first.content == "Error: Could not parse tool arguments"
        assert not second.is_error
        assert executed == ["bash"]

    @pytest.mark.asyncio
    async def test_progress_callback_indexes_across_turns(self):
        seen = []
        provider = ScriptedProvider(
            [tool_response(call("a"), call("b")), tool_response(call("c", name="Glob")), text_response("ok")]
        )
        await run_agent_loop(
            self.history, "system", [], provider, echo_tool, on_tool_call=lambda n, i, t: seen.append((n, i))
        )
        assert sorted(seen) == [("Glob", 3), ("bash", 1), ("bash", 2)]

    @pytest.mark.asyncio
    async def test_failing_progress_callback_is_ignored(self):
        def callback(tool_name, index, elapsed):
            raise ValueError("terminal closed")

        provider = ScriptedProvider([tool_response(call("a")), text_response("ok")])
        result = await run_agent_loop(self.history, "system", [], provider, echo_tool, on_tool_call=callback)
        assert result.status == LoopStatus.DONE
        assert not result.history[2].tool_results[0].is_error

    @pytest.mark.asyncio
    async def test_reminder_counts_tool_rounds(self):
        reminder = ReminderInjector(nag_threshold=2)
        provider = ScriptedProvider(
            [tool_response(call("a")), tool_response(call("b")), text_response("ok")]
        )
        await run_agent_loop(self.history, "system", [], provider, echo_tool, reminder=reminder)
        assert reminder.rounds_without_todo == 2

        provider = ScriptedProvider([tool_response(call("c", name="TodoWrite", todos=[])), text_response("ok")])
        await run_agent_loop(self.history, "system", [], provider, echo_tool, reminder=reminder)
        assert reminder.rounds_without_todo == 0

    @pytest.mark.asyncio
    async def test_unanswered_calls_are_dropped_from_terminal_turn(self):
        truncated = ExtractedResponse(
            text_blocks=["I will now run"], tool_calls=[call("a")], stop_reason=StopReason.LENGTH
        )
        provider = ScriptedProvider([truncated])
        result = await run_agent_loop(self.history, "system", [], provider, echo_tool)

        assert result.status == LoopStatus.DONE
        final = result.history[-1]
        assert final.tool_calls == []
        assert final.text == "I will now run"

    @pytest.mark.asyncio
    async def test_empty_answer_gets_placeholder(self):
        provider = ScriptedProvider([ExtractedResponse(stop_reason=StopReason.COMPLETE)])
        result = await run_agent_loop(self.history, "system", [], provider, echo_tool)
        assert result.history[-1].text == "(no response)"

    @pytest.mark.asyncio
    async def test_repeated_call_ids_do_not_stop_the_loop(self):
        provider = ScriptedProvider([tool_response(call("dup"), call("dup")), text_response("ok")])
        result = await run_agent_loop(self.history, "system", [], provider, echo_tool)
        assert result.status == LoopStatus.DONE
        assert len(result.history[2].tool_results) == 2
