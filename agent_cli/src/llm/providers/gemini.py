# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Google genai SDK provider implementation."""

import uuid
import logging
import itertools

from typing import Any, Optional
from dataclasses import dataclass, field
from google import genai
from google.genai import types

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

_call_counter = itertools.count(1)

# JSON schema keys the Gemini Schema type understands
_SCHEMA_KEYS = ("description", "enum", "format", "minimum", "maximum")


def new_call_id() -> str:
    """Gemini does not id its function calls, so we mint unique ones."""
    return f"gemini_{next(_call_counter)}_{uuid.uuid4().hex[:12]}"


@dataclass
class GeminiResponse:
    """A raw genai response, with call ids assigned exactly once.

    Both the assistant message and the loop's tool results read the ids from
    here, so they always pair up.
    """

    raw: types.GenerateContentResponse
    tool_calls: list[ToolCallContent] = field(default_factory=list)
    text_blocks: list[str] = field(default_factory=list)

    @classmethod
    def wrap(cls, raw: types.GenerateContentResponse) -> "GeminiResponse":
        wrapped = cls(raw=raw)
        candidates = raw.candidates or []
        if not candidates or not candidates[0].content:
            return wrapped
        for part in candidates[0].content.parts or []:
            if part.function_call is not None:
                wrapped.tool_calls.append(
                    ToolCallContent(
                        call_id=new_call_id(),
                        tool_name=part.function_call.name,
                        tool_args=dict(part.function_call.args or {}),
                    )
                )
            elif part.text and not getattr(part, "thought", False):
                wrapped.text_blocks.append(part.text)
        return wrapped


def json_schema_to_genai(node: Any) -> Any:
    """Convert a plain JSON object schema into the dict form of a genai Schema.

    Tool schemas have already had their references inlined, so only types,
    properties, items, required fields and Optional unions need translating.
    """
    if not isinstance(node, dict):
        return node

    if "anyOf" in node:
        variants = [s for s in node["anyOf"] if s.get("type") != "null"]
        nullable = len(variants) < len(node["anyOf"])
        result = json_schema_to_genai(variants[0]) if variants else {"type": "STRING"}
        if nullable:
            result["nullable"] = True
        if "description" in node:
            result["description"] = node["description"]
        return result

    result: dict = {}
    if "type" in node:
        result["type"] = str(node["type"]).upper()
    for key in _SCHEMA_KEYS:
        if key in node:
            result[key] = node[key]
    if "items" in node:
        result["items"] = json_schema_to_genai(node["items"])
    if node.get("properties"):
        result["properties"] = {
            name: json_schema_to_genai(prop) for name, prop in node["properties"].items()
        }
        if node.get("required"):
            result["required"] = list(node["required"])
    return result


class GeminiProvider(BaseProvider[GeminiResponse]):
    """Provider implementation for Google's Gemini models."""

    def __init__(self, client: genai.Client, model: str):
        super().__init__(client, model)

    def map_stop_reason(self, response: GeminiResponse) -> StopReason:
        """Function calls decide the stop reason; Gemini reports STOP either way."""
        if response.tool_calls:
            return StopReason.TOOL_CALL

        candidates = response.raw.candidates or []
        if not candidates:
            logger.warning("Gemini response has no candidates")
            return StopReason.ERROR

        finish_reason = candidates[0].finish_reason
        match finish_reason:
            case types.FinishReason.STOP | None:
                return StopReason.COMPLETE
            case types.FinishReason.MAX_TOKENS:
                return StopReason.LENGTH
            case _:
                logger.warning(f"Gemini stop reason: {finish_reason}")
                return StopReason.ERROR

    def _role_mapping(self, role: str) -> str:
        return "model" if role == "assistant" else "user"

    def _content_mapping(self, block: ContentTypes, call_names: dict[str, str]) -> types.Part:
        """Maps our message content types, into provider-specific message formats"""
        if isinstance(block, TextContent):
            return types.Part.from_text(text=block.text)
        elif isinstance(block, ToolCallContent):
            return types.Part.from_function_call(name=block.tool_name, args=block.tool_args)
        elif isinstance(block, ToolResultContent):
            name = block.tool_name or call_names.get(block.call_id)
            if name is None:
                raise ValueError(f"No function call found for tool result {block.call_id}")
            key = "error" if block.is_error else "result"
            return types.Part.from_function_response(name=name, response={key: block.content})
        else:
            raise ValueError(f"Unhandled content type in provider Gemini: {block}")

    def _prepare_messages(self, history: list[Message]) -> list[types.Content]:
        """Function responses are matched to calls by name, which we recover
        from the call ids seen earlier in the history."""
        call_names: dict[str, str] = {}
        contents = []
        for msg in history:
            for call in msg.tool_calls:
                call_names[call.call_id] = call.tool_name
            parts = [self._content_mapping(block, call_names) for block in msg.blocks]
            contents.append(types.Content(role=self._role_mapping(msg.role), parts=parts))
        return contents

    def _create_token_usage(self, raw: types.GenerateContentResponse) -> TokenUsage:
        usage_meta = raw.usage_metadata
        if not usage_meta:
            return TokenUsage()
        cached = usage_meta.cached_content_token_count or 0
        return TokenUsage(
            input_tokens=(usage_meta.prompt_token_count or 0) - cached,
            output_tokens=usage_meta.candidates_token_count or 0,
            cache_read_tokens=cached,
        )

    def convert_tools(self, tools: list[ToolDefinition]) -> list[types.Tool]:
        if not tools:
            return []
        declarations = []
        for t in tools:
            parameters = json_schema_to_genai(t.input_schema)
            declarations.append(
                types.FunctionDeclaration(
                    name=t.name,
                    description=t.description,
                    # Parameter-less tools must omit the schema entirely
                    parameters=parameters if parameters.get("properties") else None,
                )
            )
        return [types.Tool(function_declarations=declarations)]

    async def create_message(
        self,
        system: str,
        history: list[Message],
        tools: list[ToolDefinition],
        max_tokens: int,
    ) -> GeminiResponse:
        config = types.GenerateContentConfig(
            system_instruction=system or None,
            max_output_tokens=max_tokens,
            tools=self.convert_tools(tools) or None,
            automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
        )
        logger.debug(f"Gemini request with {len(history)} messages and {len(tools)} tools")
        raw = await self._client.aio.models.generate_content(
            model=self.model,
            contents=self._prepare_messages(history),
            config=config,
        )
        return GeminiResponse.wrap(raw)

    def extract(self, response: GeminiResponse) -> ExtractedResponse:
        return ExtractedResponse(
            text_blocks=list(response.text_blocks),
            tool_calls=list(response.tool_calls),
            stop_reason=self.map_stop_reason(response),
            usage=self._create_token_usage(response.raw),
        )


def create_gemini_provider(api_key: str, model: str, base_url: Optional[str] = None) -> GeminiProvider:
    http_options = types.HttpOptions(base_url=base_url) if base_url else None
    return GeminiProvider(genai.Client(api_key=api_key, http_options=http_options), model)
