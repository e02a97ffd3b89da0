# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""LLM integration module.

Provides the canonical message model and one adapter per wire protocol
(Anthropic, OpenAI and Gemini) behind a common BaseProvider interface.
"""

import logging

from .base import Message, validate_tool_results
from .providers import BaseProvider, create_provider

# Quieten LLM API call logs to make stdout more useful
logging.getLogger("httpx").setLevel(logging.WARNING)

__all__ = [
    "Message",
    "validate_tool_results",
    "BaseProvider",
    "create_provider",
]
