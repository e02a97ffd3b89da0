# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Todo list tracking for the TodoWrite tool."""

import logging

from enum import Enum
from pydantic import BaseModel, Field

from ..config import settings
from ..types.errors import ValidationError
from ..types.tool_types import ERROR_PREFIX

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class TodoStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TodoItem(BaseModel):
    id: str = ""
    content: str = Field(..., description="What needs to be done, in the imperative form")
    status: TodoStatus = Field(..., description="pending, in_progress or completed")
    active_form: str = Field(
        ...,
        description="The present continuous form shown while the item is in progress, e.g. 'Running tests'",
    )


def validate_todos(items: list[TodoItem], max_items: int) -> None:
    """Check a candidate todo list against the list invariants.

    Raises:
        ValidationError: describing the first violation found.
    """
    if len(items) > max_items:
        raise ValidationError(f"Too many todos: {len(items)} (maximum {max_items})")

    seen_ids: set[str] = set()
    in_progress = 0
    for i, item in enumerate(items):
        if not item.content.strip():
            raise ValidationError(f"Todo {i + 1} has empty content")
        if not item.active_form.strip():
            raise ValidationError(f"Todo {i + 1} has an empty active_form")
        if item.id in seen_ids:
            raise ValidationError(f"Duplicate todo id: {item.id}")
        seen_ids.add(item.id)
        if item.status == TodoStatus.IN_PROGRESS:
            in_progress += 1

    if in_progress > 1:
        raise ValidationError(
            f"Only one todo can be in_progress at a time, got {in_progress}"
        )


class TodoTracker:
    """Holds the current todo list; every update replaces it wholesale."""

    def __init__(self, max_items: int | None = None):
        self.max_items = max_items if max_items is not None else settings.MAX_TODOS
        self._items: list[TodoItem] = []

    @property
    def items(self) -> list[TodoItem]:
        return list(self._items)

    def update(self, items: list[TodoItem | dict]) -> str:
        """Replace the list and return its rendering, or an error string."""
        try:
            candidate = [
                TodoItem.model_validate(item) if isinstance(item, dict) else item.model_copy()
                for item in items
            ]
            for i, item in enumerate(candidate):
                if not item.id:
                    item.id = f"todo-{i + 1}"
            validate_todos(candidate, self.max_items)
        except ValidationError as e:
            return f"{ERROR_PREFIX} {e}"
        except Exception as e:
            return f"{ERROR_PREFIX} invalid todo list: {e}"

        self._items = candidate
        logger.debug(f"Todo list updated with {len(candidate)} items")
        return self.render()

    def counts(self) -> tuple[int, int]:
        completed = sum(1 for t in self._items if t.status == TodoStatus.COMPLETED)
        return completed, len(self._items)

    def render(self) -> str:
        if not self._items:
            return "No todos."

        lines = []
        for item in self._items:
            match item.status:
                case TodoStatus.COMPLETED:
                    lines.append(f"✓ {item.content}")
                case TodoStatus.IN_PROGRESS:
                    lines.append(f"● {item.active_form}...")
                case _:
                    lines.append(f"○ {item.content}")

        completed, total = self.counts()
        percent = round(completed / total * 100)
        lines.append("")
        lines.append(f"Progress: {completed}/{total} ({percent}%)")
        return "\n".join(lines)

    def reset(self) -> None:
        self._items = []
