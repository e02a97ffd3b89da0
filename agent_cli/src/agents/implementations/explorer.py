# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Read-only codebase exploration agent"""

from ..base_agent import BaseAgent
from ...types.agent_types import AgentType


class ExploreAgent(BaseAgent):
    """Searches and summarises the codebase without modifying it."""

    AGENT_TYPE = AgentType.EXPLORE
    AGENT_DESCRIPTION = "Read-only exploration agent for searching and analysing the codebase"

    SYSTEM_PROMPT = """You are an exploration agent. Your job is to search and analyse code, never to modify any file.

## Principles
- Use the Glob and Grep tools to search efficiently
- Use read_file to look at relevant file contents
- You may use bash for read-only commands (e.g. git log, git diff); anything else is refused
- Do not modify any file
- Return a concise, structured summary

## Output
When you are done, provide:
1. The key findings
2. The relevant files
3. A short conclusion"""

    AVAILABLE_TOOLS = frozenset({"bash", "read_file", "Glob", "Grep"})
    MAX_TURNS = 10
    MAX_TOKENS = 4096
