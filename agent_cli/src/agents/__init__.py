# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""
The agents module holds the turn-based agent loop and the subagent system.

An agent is an LLM conversation driven by `run_agent_loop`: the model is
called with the system prompt, the history and the tool catalog; any tool
calls in its response are dispatched concurrently and their results appended
as a user message; and the loop repeats until the model answers without
requesting tools or the turn budget runs out.

The main agent sees every tool. Through the Task tool it can delegate a
bounded subtask to a subagent (explore, code or plan), which runs its own loop
over a fresh history with a restricted tool set and a smaller budget, and
whose final answer comes back as the Task tool's result.
"""

# Registers the built-in subagent profiles in agent_registry
from . import implementations  # noqa: F401
