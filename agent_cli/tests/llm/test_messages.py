# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Tests for the canonical message model."""
import pytest

from src.llm.base import Message, validate_tool_results
from src.types.errors import ValidationError
from src.types.llm_types import (
    ExtractedResponse,
    StopReason,
    TextContent,
    TokenUsage,
    ToolCallContent,
    ToolResultContent,
)


def call(call_id, name="bash"):
    return ToolCallContent(call_id=call_id, tool_name=name, tool_args={"command": "ls"})


def answer(call_id, content="ok"):
    return ToolResultContent(call_id=call_id, content=content)


class TestMessage:
    def test_plain_string_content(self):
        message = Message(role="user", content="hello")
        assert message.text == "hello"
        assert message.blocks == [TextContent(text="hello")]
        assert message.tool_calls == []

    def test_block_accessors(self):
        message = Message(
            role="assistant",
            content=[TextContent(text="Let me look."), call("a"), TextContent(text="And this."), call("b")],
        )
        assert message.text == "Let me look.\n\nAnd this."
        assert [c.call_id for c in message.tool_calls] == ["a", "b"]

    def test_content_blocks_are_parsed_from_dicts(self):
        message = Message.model_validate(
            {
                "role": "user",
                "content": [{"type": "tool_result", "call_id": "a", "content": "done", "is_error": True}],
            }
        )
        assert isinstance(message.content[0], ToolResultContent)
        assert message.tool_results[0].is_error

    def test_system_role_is_not_a_message(self):
        with pytest.raises(Exception):
            Message(role="system", content="x")

    def test_parse_errors_are_not_serialised(self):
        block = ToolCallContent(call_id="a", tool_name="bash", parse_errors="bad json")
        assert "parse_errors" not in block.model_dump()


class TestValidateToolResults:
    def setup_method(self):
        self.assistant = Message(role="assistant", content=[call("a"), call("b")])

    def test_complete_answers_pass(self):
        validate_tool_results(self.assistant, Message(role="user", content=[answer("b"), answer("a")]))

    def test_missing_answer(self):
        with pytest.raises(ValidationError, match="without a result: b"):
            validate_tool_results(self.assistant, Message(role="user", content=[answer("a")]))

    def test_unknown_call_id(self):
        with pytest.raises(ValidationError, match="does not match"):
            validate_tool_results(
                self.assistant, Message(role="user", content=[answer("a"), answer("b"), answer("c")])
            )

    def test_duplicate_answer(self):
        with pytest.raises(ValidationError, match="more than once"):
            validate_tool_results(
                self.assistant, Message(role="user", content=[answer("a"), answer("a"), answer("b")])
            )

    def test_roles_are_checked(self):
        with pytest.raises(ValidationError):
            validate_tool_results(self.assistant, Message(role="assistant", content=[answer("a")]))


class TestResponseTypes:
    def test_usage_addition(self):
        total = TokenUsage(input_tokens=10, output_tokens=2) + TokenUsage(input_tokens=1, cache_read_tokens=5)
        assert total.input_tokens == 11
        assert total.total_tokens == 18

    def test_requests_tools_needs_tool_call_stop_reason(self):
        calls = [call("a")]
        assert ExtractedResponse(tool_calls=calls, stop_reason=StopReason.TOOL_CALL).requests_tools
        assert not ExtractedResponse(tool_calls=calls, stop_reason=StopReason.LENGTH).requests_tools
        assert not ExtractedResponse(stop_reason=StopReason.TOOL_CALL).requests_tools
