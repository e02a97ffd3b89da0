# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Provider-specific implementations for different LLM services."""

from typing import Optional

from .base_provider import BaseProvider
from .anthropic import AnthropicProvider, create_anthropic_provider
from .openai import OpenAIProvider, create_openai_provider
from .gemini import GeminiProvider, GeminiResponse, create_gemini_provider
from ...types.llm_types import Provider

_factories = {
    Provider.ANTHROPIC: create_anthropic_provider,
    Provider.OPENAI: create_openai_provider,
    Provider.GEMINI: create_gemini_provider,
}


def create_provider(
    provider: Provider | str, api_key: str, model: str, base_url: Optional[str] = None
) -> BaseProvider:
    """Build the adapter for `provider`, wrapping that vendor's async client."""
    return _factories[Provider(provider)](api_key, model, base_url)


__all__ = [
    "BaseProvider",
    "AnthropicProvider",
    "OpenAIProvider",
    "GeminiProvider",
    "GeminiResponse",
    "create_provider",
]
