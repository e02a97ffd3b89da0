# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""OpenAI chat completions provider implementation.

Also serves any OpenAI-compatible endpoint (e.g. DeepSeek or a local server)
through the `base_url` argument.
"""

import json
import logging

from typing import Optional
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion

from .base_provider import BaseProvider
from ..base import Message
from ...types.llm_types import (
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


class OpenAIProvider(BaseProvider[ChatCompletion]):
    """Provider implementation for OpenAI-style chat completion APIs."""

    def __init__(self, client: AsyncOpenAI, model: str):
        super().__init__(client, model)

    def map_stop_reason(self, response: ChatCompletion) -> StopReason:
        """Map OpenAI finish reasons to our standard format."""
        if not response.choices:
            return StopReason.ERROR
        finish_reason = response.choices[0].finish_reason
        match finish_reason:
            case "tool_calls" | "function_call":
                return StopReason.TOOL_CALL
            case "stop":
                return StopReason.COMPLETE
            case "length":
                return StopReason.LENGTH
            case _:
                logger.warning(f"Unrecognised openai finish reason: {finish_reason}")
                return StopReason.ERROR

    def _create_token_usage(self, usage) -> TokenUsage:
        if not usage:
            return TokenUsage()
        details = getattr(usage, "prompt_tokens_details", None)
        cached = (getattr(details, "cached_tokens", 0) or 0) if details else 0
        prompt_tokens = getattr(usage, "prompt_tokens", 0) or 0
        return TokenUsage(
            input_tokens=prompt_tokens - cached,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
            cache_read_tokens=cached,
        )

    def convert_tools(self, tools: list[ToolDefinition]) -> list[dict]:
        return [
            {
                "type": "function",
                "function": {
                    "name": t.name,
                    "description": t.description,
                    "parameters": t.input_schema,
                },
            }
            for t in tools
        ]

    def _prepare_messages(self, history: list[Message], system: str = "") -> list[dict]:
        """The system prompt becomes the first message, assistant tool calls
        move into `tool_calls`, and each tool result becomes its own `tool`
        role message."""
        oai_messages: list[dict] = []
        if system:
            oai_messages.append({"role": "system", "content": system})

        for msg in history:
            if isinstance(msg.content, str):
                oai_messages.append({"role": msg.role, "content": msg.content})
                continue

            if msg.role == "assistant":
                text = "".join(b.text for b in msg.content if isinstance(b, TextContent))
                tool_calls = [
                    {
                        "id": b.call_id,
                        "type": "function",
                        "function": {"name": b.tool_name, "arguments": json.dumps(b.tool_args)},
                    }
                    for b in msg.content
                    if isinstance(b, ToolCallContent)
                ]
                entry: dict = {"role": "assistant", "content": text or None}
                if tool_calls:
                    entry["tool_calls"] = tool_calls
                oai_messages.append(entry)
            else:
                text_parts: list[str] = []
                for block in msg.content:
                    if isinstance(block, TextContent):
                        text_parts.append(block.text)
                    elif isinstance(block, ToolResultContent):
                        # Flush any text gathered so far to preserve ordering
                        if text_parts:
                            oai_messages.append({"role": "user", "content": "\n\n".join(text_parts)})
                            text_parts = []
                        oai_messages.append(
                            {"role": "tool", "tool_call_id": block.call_id, "content": block.content}
                        )
                if text_parts:
                    oai_messages.append({"role": "user", "content": "\n\n".join(text_parts)})

        return oai_messages

    async def create_message(
        self,
        system: str,
        history: list[Message],
        tools: list[ToolDefinition],
        max_tokens: int,
    ) -> ChatCompletion:
        args: dict = {
            "model": self.model,
            "messages": self._prepare_messages(history, system),
            "max_tokens": max_tokens,
        }
        if tools:
            args["tools"] = self.convert_tools(tools)

        logger.debug(f"OpenAI request with {len(history)} messages and {len(tools)} tools")
        return await self._client.chat.completions.create(**args)

    def extract(self, response: ChatCompletion) -> ExtractedResponse:
        text_blocks: list[str] = []
        tool_calls: list[ToolCallContent] = []

        if response.choices:
            message = response.choices[0].message
            if message.content:
                text_blocks.append(message.content)
            for call in message.tool_calls or []:
                raw_args = call.function.arguments or "{}"
                parse_errors = None
                try:
                    args = json.loads(raw_args)
                    if not isinstance(args, dict):
                        parse_errors = f"Tool arguments must be a JSON object, got: {raw_args}"
                        args = {}
                except json.JSONDecodeError as e:
                    parse_errors = f"Could not parse tool arguments as JSON ({e}): {raw_args}"
                    args = {}
                if parse_errors:
                    logger.warning(f"Malformed arguments for {call.function.name}: {parse_errors}")
                tool_calls.append(
                    ToolCallContent(
                        call_id=call.id,
                        tool_name=call.function.name,
                        tool_args=args,
                        parse_errors=parse_errors,
                    )
                )

        stop_reason = self.map_stop_reason(response)
        # Some compatible servers report "stop" even when tool calls are present
        if tool_calls and stop_reason == StopReason.COMPLETE:
            stop_reason = StopReason.TOOL_CALL

        return ExtractedResponse(
            text_blocks=text_blocks,
            tool_calls=tool_calls,
            stop_reason=stop_reason,
            usage=self._create_token_usage(getattr(response, "usage", None)),
        )


def create_openai_provider(api_key: str, model: str, base_url: Optional[str] = None) -> OpenAIProvider:
    client = AsyncOpenAI(api_key=api_key, base_url=base_url) if base_url else AsyncOpenAI(api_key=api_key)
    return OpenAIProvider(client, model)
