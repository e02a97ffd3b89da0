# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Built-in subagent profiles, one per AgentType."""

from .explorer import ExploreAgent
from .coder import CodeAgent
from .planner import PlanAgent

__all__ = ["ExploreAgent", "CodeAgent", "PlanAgent"]
