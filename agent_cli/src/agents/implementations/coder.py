# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Full-permission coding agent"""

from ..base_agent import BaseAgent
from ...types.agent_types import AgentType


class CodeAgent(BaseAgent):
    """Implements features and fixes bugs with every tool except Task."""

    AGENT_TYPE = AgentType.CODE
    AGENT_DESCRIPTION = "Full-permission agent for implementing features and fixing bugs"

    SYSTEM_PROMPT = """You are a coding agent. Your job is to implement the requested changes efficiently.

## Principles
- Understand the existing code structure and style first
- Follow the project's conventions
- Write concise, maintainable code
- Do not add unnecessary comments
- Verify your changes when you are done

## Safety
- Do not run dangerous operations
- Do not expose secrets
- Refuse to work on malicious code"""

    AVAILABLE_TOOLS = None
    MAX_TURNS = 15
    MAX_TOKENS = 8192
