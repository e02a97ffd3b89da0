# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Explicit per-session state objects handed to the loop and the tools."""

from .todo import TodoTracker, TodoItem, TodoStatus
from .reminder import ReminderInjector
from .plan_mode import PlanMode
from .project_context import load_project_context

__all__ = [
    "TodoTracker",
    "TodoItem",
    "TodoStatus",
    "ReminderInjector",
    "PlanMode",
    "load_project_context",
]
