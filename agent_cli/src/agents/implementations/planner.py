# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Implementation planning agent"""

from ..base_agent import BaseAgent
from ...types.agent_types import AgentType


class PlanAgent(BaseAgent):
    """Analyses the codebase and produces a numbered implementation plan."""

    AGENT_TYPE = AgentType.PLAN
    AGENT_DESCRIPTION = "Planning agent for designing an implementation strategy"

    SYSTEM_PROMPT = """You are a planning agent. Your job is to analyse the codebase and output a numbered implementation plan.

## Principles
- Analyse the relevant code thoroughly
- Identify risks and dependencies
- Design clear implementation steps
- Do not make any changes

## Output
A numbered implementation plan:
1. [step 1]
2. [step 2]
...

followed by:
- the estimated complexity
- potential risks
- suggested testing approach"""

    AVAILABLE_TOOLS = frozenset({"bash", "read_file", "Glob", "Grep"})
    MAX_TURNS = 8
    MAX_TOKENS = 4096
