# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Base provider interface for LLM interactions."""

import logging

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from ..base import Message
from ...types.llm_types import (
    ExtractedResponse,
    TextContent,
    ToolDefinition,
    ToolResultContent,
)

ResponseT = TypeVar("ResponseT")
logger = logging.getLogger(__name__)

EMPTY_RESPONSE_TEXT = "(no response)"


class BaseProvider(ABC, Generic[ResponseT]):
    """Abstract base class for LLM providers.

    A provider owns all knowledge of one wire protocol: it converts the
    canonical history and tool definitions into request payloads, performs the
    call, and decodes the provider's own response type back into canonical
    form. Network and authentication errors propagate to the caller.
    """

    def __init__(self, client: Any, model: str):
        self._client = client
        self.model = model

    @abstractmethod
    def convert_tools(self, tools: list[ToolDefinition]) -> Any:
        """Re-encode canonical tool definitions for this provider."""
        pass

    @abstractmethod
    def _prepare_messages(self, history: list[Message]) -> Any:
        """Maps our framework-specific message list into provider-specific messages

        Note that this might involve agglomerating content blocks, or splitting
        out into multiple messages.
        """
        pass

    @abstractmethod
    async def create_message(
        self,
        system: str,
        history: list[Message],
        tools: list[ToolDefinition],
        max_tokens: int,
    ) -> ResponseT:
        """Call the model with the given conversation."""
        pass

    @abstractmethod
    def extract(self, response: ResponseT) -> ExtractedResponse:
        """Decode text, tool calls, stop reason and usage from a response."""
        pass

    def format_assistant_message(self, response: ResponseT) -> Message:
        """The canonical assistant message for a response."""
        return self.assistant_message(self.extract(response))

    def assistant_message(
        self, extracted: ExtractedResponse, include_tool_calls: bool = True
    ) -> Message:
        """The canonical assistant message for an already decoded response."""
        content: list = [TextContent(text=t) for t in extracted.text_blocks if t]
        if include_tool_calls:
            content.extend(extracted.tool_calls)
        if not content:
            # Providers reject empty assistant turns when the history is replayed
            content.append(TextContent(text=EMPTY_RESPONSE_TEXT))
        return Message(role="assistant", content=content)

    def format_tool_results(self, results: list[ToolResultContent]) -> Message:
        """The canonical user message carrying a batch of tool results."""
        return Message(role="user", content=list(results))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model!r})"
