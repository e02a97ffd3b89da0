# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""The canonical message model spoken by the agent loop and every provider."""

from typing import Literal
from pydantic import BaseModel

from ..types.errors import ValidationError
from ..types.llm_types import (
    TextContent,
    ToolCallContent,
    ToolResultContent,
    ContentTypes,
)


class Message(BaseModel):
    """A message in a conversation with an LLM."""

    role: Literal["user", "assistant"]
    content: str | list[ContentTypes]

    @property
    def blocks(self) -> list[ContentTypes]:
        """The content as a list of blocks, wrapping plain strings."""
        if isinstance(self.content, str):
            return [TextContent(text=self.content)] if self.content else []
        return list(self.content)

    @property
    def text(self) -> str:
        return "\n\n".join(b.text for b in self.blocks if isinstance(b, TextContent))

    @property
    def tool_calls(self) -> list[ToolCallContent]:
        return [b for b in self.blocks if isinstance(b, ToolCallContent)]

    @property
    def tool_results(self) -> list[ToolResultContent]:
        return [b for b in self.blocks if isinstance(b, ToolResultContent)]

    def __str__(self) -> str:
        parts = [f"Message from role={self.role}"]
        for c in self.blocks:
            if isinstance(c, TextContent):
                parts.append(f"Text {'-'*10}\n{c.text}")
            elif isinstance(c, ToolCallContent):
                parts.append(f"{'-'*10}\nTool call {c.tool_name} (id: {c.call_id}): {str(c.tool_args)}\n{'-'*10}")
            elif isinstance(c, ToolResultContent):
                status = "error" if c.is_error else "ok"
                parts.append(f"{'-'*10}\nTool result {c.tool_name} (id: {c.call_id}, {status}): {c.content}\n{'-'*10}")
        return "\n".join(parts)


def validate_tool_results(assistant: Message, results: Message) -> None:
    """Check that `results` answers every tool call in `assistant` exactly once.

    Raises:
        ValidationError: on an unknown call id, a duplicate answer or an
            unanswered call.
    """
    if assistant.role != "assistant" or results.role != "user":
        raise ValidationError("Tool results must follow an assistant message in a user message")

    outstanding = {c.call_id for c in assistant.tool_calls}
    answered: set[str] = set()
    for result in results.tool_results:
        if result.call_id not in outstanding:
            raise ValidationError(f"Tool result {result.call_id} does not match any tool call in this turn")
        if result.call_id in answered:
            raise ValidationError(f"Tool call {result.call_id} was answered more than once")
        answered.add(result.call_id)

    missing = outstanding - answered
    if missing:
        raise ValidationError(f"Tool calls without a result: {', '.join(sorted(missing))}")
