# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Anthropic Messages API provider implementation."""

import logging

from typing import Optional
from anthropic import AsyncAnthropic
from anthropic.types import Message as AntMessage

from .base_provider import BaseProvider
from ..base import Message
from ...types.llm_types import (
    ContentTypes,
    ExtractedResponse,
    StopReason,
    TextContent,
    TokenUsage,
    ToolCallContent,
    ToolDefinition,
    ToolResultContent,
)

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class AnthropicProvider(BaseProvider[AntMessage]):
    """Provider implementation for Anthropic's Claude models."""

    def __init__(self, client: AsyncAnthropic, model: str):
        super().__init__(client, model)

    def map_stop_reason(self, response: AntMessage) -> StopReason:
        """Map Anthropic-specific stop reasons to our standard format."""
        raw_stop_reason = response.stop_reason
        if raw_stop_reason == "tool_use":
            return StopReason.TOOL_CALL
        elif raw_stop_reason in ("end_turn", "stop_sequence", "pause_turn"):
            return StopReason.COMPLETE  # Natural termination
        elif raw_stop_reason == "max_tokens":
            return StopReason.LENGTH
        else:
            logger.warning(f"Unrecognised anthropic stop reason: {raw_stop_reason}")
            return StopReason.ERROR

    def _content_mapping(self, block: ContentTypes) -> dict:
        """Maps our message content types, into provider-specific message formats"""
        if isinstance(block, TextContent):
            return {"type": "text", "text": block.text}
        elif isinstance(block, ToolCallContent):
            return {"type": "tool_use", "id": block.call_id, "name": block.tool_name, "input": block.tool_args}
        elif isinstance(block, ToolResultContent):
            return {
                "type": "tool_result",
                "tool_use_id": block.call_id,
                "content": block.content,
                **({"is_error": True} if block.is_error else {}),
            }
        else:
            raise ValueError(f"Unhandled content type in provider Anthropic: {block}")

    def _prepare_messages(self, history: list[Message]) -> list[dict]:
        """Anthropic takes the system prompt separately, so this is a straight
        block-for-block mapping; plain string content is passed through."""
        anthropic_messages = []
        for msg in history:
            if isinstance(msg.content, str):
                content = msg.content
            else:
                content = [self._content_mapping(block) for block in msg.content]
            anthropic_messages.append({"role": msg.role, "content": content})
        return anthropic_messages

    def _create_token_usage(self, usage_data) -> TokenUsage:
        """Create TokenUsage object from response usage data."""
        if not usage_data:
            return TokenUsage()
        return TokenUsage(
            input_tokens=getattr(usage_data, "input_tokens", 0) or 0,
            output_tokens=getattr(usage_data, "output_tokens", 0) or 0,
            cache_creation_tokens=getattr(usage_data, "cache_creation_input_tokens", 0) or 0,
            cache_read_tokens=getattr(usage_data, "cache_read_input_tokens", 0) or 0,
        )

    def convert_tools(self, tools: list[ToolDefinition]) -> list[dict]:
        return [
            {"name": t.name, "description": t.description, "input_schema": t.input_schema}
            for t in tools
        ]

    async def create_message(
        self,
        system: str,
        history: list[Message],
        tools: list[ToolDefinition],
        max_tokens: int,
    ) -> AntMessage:
        request: dict = dict(
            model=self.model,
            max_tokens=max_tokens,
            system=system,
            messages=self._prepare_messages(history),
        )
        if tools:
            request["tools"] = self.convert_tools(tools)

        logger.debug(f"Anthropic request with {len(history)} messages and {len(tools)} tools")
        return await self._client.messages.create(**request)

    def extract(self, response: AntMessage) -> ExtractedResponse:
        text_blocks: list[str] = []
        tool_calls: list[ToolCallContent] = []
        for block in response.content or []:
            match block.type:
                case "text":
                    text_blocks.append(block.text)
                case "tool_use":
                    tool_calls.append(
                        ToolCallContent(
                            call_id=block.id,
                            tool_name=block.name,
                            tool_args=dict(block.input or {}),
                        )
                    )
                case _:
                    logger.debug(f"Ignoring anthropic content block of type {block.type}")

        return ExtractedResponse(
            text_blocks=text_blocks,
            tool_calls=tool_calls,
            stop_reason=self.map_stop_reason(response),
            usage=self._create_token_usage(getattr(response, "usage", None)),
        )


def create_anthropic_provider(api_key: str, model: str, base_url: Optional[str] = None) -> AnthropicProvider:
    client = AsyncAnthropic(api_key=api_key, base_url=base_url) if base_url else AsyncAnthropic(api_key=api_key)
    return AnthropicProvider(client, model)
