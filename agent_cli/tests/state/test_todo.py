# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Tests for the todo list state."""
import pytest

from src.state.todo import TodoItem, TodoStatus, TodoTracker, validate_todos
from src.types.errors import ValidationError


def item(content, status="pending", active_form=None, id=""):
    return {
        "id": id,
        "content": content,
        "status": status,
        "active_form": active_form or f"Doing {content}",
    }


class TestTodoTracker:
    def setup_method(self):
        self.tracker = TodoTracker(max_items=5)

    def test_empty_list_renders_placeholder(self):
        assert self.tracker.render() == "No todos."
        assert self.tracker.counts() == (0, 0)

    def test_update_replaces_list_and_renders(self):
        output = self.tracker.update(
            [
                item("Write parser", "completed"),
                item("Write tests", "in_progress", "Writing tests"),
                item("Update docs"),
            ]
        )
        assert output == (
            "✓ Write parser\n"
            "● Writing tests...\n"
            "○ Update docs\n"
            "\n"
            "Progress: 1/3 (33%)"
        )
        assert [t.status for t in self.tracker.items] == [
            TodoStatus.COMPLETED,
            TodoStatus.IN_PROGRESS,
            TodoStatus.PENDING,
        ]

    def test_missing_ids_are_assigned_by_position(self):
        self.tracker.update([item("a"), item("b", id="custom")])
        assert [t.id for t in self.tracker.items] == ["todo-1", "custom"]

    def test_two_in_progress_items_are_rejected_without_change(self):
        self.tracker.update([item("keep me")])
        output = self.tracker.update([item("a", "in_progress"), item("b", "in_progress")])
        assert output.startswith("Error:")
        assert "in_progress" in output
        assert [t.content for t in self.tracker.items] == ["keep me"]

    def test_too_many_items_are_rejected(self):
        output = self.tracker.update([item(f"task {i}") for i in range(6)])
        assert output.startswith("Error:")
        assert self.tracker.items == []

    def test_empty_content_is_rejected(self):
        assert self.tracker.update([item("   ")]).startswith("Error:")

    def test_duplicate_ids_are_rejected(self):
        output = self.tracker.update([item("a", id="x"), item("b", id="x")])
        assert output.startswith("Error:")
        assert "Duplicate" in output

    def test_invalid_status_is_rejected(self):
        assert self.tracker.update([item("a", status="blocked")]).startswith("Error:")

    def test_all_completed_is_full_progress(self):
        output = self.tracker.update([item("a", "completed"), item("b", "completed")])
        assert output.endswith("Progress: 2/2 (100%)")

    def test_items_returns_a_copy(self):
        self.tracker.update([item("a")])
        self.tracker.items.clear()
        assert len(self.tracker.items) == 1

    def test_reset_clears_list(self):
        self.tracker.update([item("a")])
        self.tracker.reset()
        assert self.tracker.items == []


def test_validate_todos_accepts_typed_items():
    todos = [
        TodoItem(id="1", content="a", status=TodoStatus.PENDING, active_form="Doing a"),
        TodoItem(id="2", content="b", status=TodoStatus.IN_PROGRESS, active_form="Doing b"),
    ]
    validate_todos(todos, max_items=20)


def test_validate_todos_raises_on_blank_active_form():
    todos = [TodoItem(id="1", content="a", status=TodoStatus.PENDING, active_form=" ")]
    with pytest.raises(ValidationError):
        validate_todos(todos, max_items=20)
