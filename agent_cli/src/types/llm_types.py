# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Provider-agnostic content, tool and usage types shared by every LLM adapter."""

from enum import Enum
from typing import Any, Literal, Optional, Union, Annotated
from pydantic import BaseModel, Field


class Provider(str, Enum):
    """The LLM wire protocols we can drive."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GEMINI = "gemini"


class StopReason(str, Enum):
    """Normalised reasons for the end of a model turn.

    Only TOOL_CALL keeps the agent loop running; everything else is terminal.
    """

    TOOL_CALL = "tool_call"
    COMPLETE = "complete"
    LENGTH = "length"
    ERROR = "error"


class TokenUsage(BaseModel):
    """Token accounting for one or more model calls."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return (
            self.input_tokens
            + self.output_tokens
            + self.cache_creation_tokens
            + self.cache_read_tokens
        )

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            cache_creation_tokens=self.cache_creation_tokens + other.cache_creation_tokens,
            cache_read_tokens=self.cache_read_tokens + other.cache_read_tokens,
        )

    def __str__(self) -> str:
        return (
            f"in={self.input_tokens} out={self.output_tokens} "
            f"cache_write={self.cache_creation_tokens} cache_read={self.cache_read_tokens}"
        )


# Content blocks ===============================================================


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolCallContent(BaseModel):
    """A tool invocation requested by the model (a 'tool use' block)."""

    type: Literal["tool_use"] = "tool_use"
    call_id: str
    tool_name: str
    tool_args: dict[str, Any] = Field(default_factory=dict)
    # Set when the provider returned arguments we could not decode
    parse_errors: Optional[str] = Field(default=None, exclude=True)


class ToolResultContent(BaseModel):
    """The answer to a ToolCallContent with the same call_id."""

    type: Literal["tool_result"] = "tool_result"
    call_id: str
    content: str
    is_error: bool = False
    tool_name: Optional[str] = None


ContentTypes = Annotated[
    Union[TextContent, ToolCallContent, ToolResultContent],
    Field(discriminator="type"),
]


class ToolDefinition(BaseModel):
    """A tool as advertised to the model.

    input_schema is a plain JSON object schema (type/properties/required) and
    is re-encoded by each provider, never by the caller.
    """

    name: str
    description: str
    input_schema: dict[str, Any]


class ExtractedResponse(BaseModel):
    """The normalised decode of one provider response."""

    text_blocks: list[str] = Field(default_factory=list)
    tool_calls: list[ToolCallContent] = Field(default_factory=list)
    stop_reason: StopReason = StopReason.COMPLETE
    usage: Optional[TokenUsage] = None

    @property
    def requests_tools(self) -> bool:
        return bool(self.tool_calls) and self.stop_reason == StopReason.TOOL_CALL
