# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Tests for AskUserQuestion."""
import io
import pytest

import src.tools  # noqa: F401
from src.tools.base_tool import dispatch
from src.tools.context import ToolContext, UserChannel


def question(multi_select=False):
    return {
        "question": "Which database should the service use?",
        "header": "Database",
        "options": [
            {"label": "Postgres", "description": "Shared server"},
            {"label": "SQLite"},
        ],
        "multi_select": multi_select,
    }


class TestAskUserQuestion:
    def setup_method(self):
        self.output = io.StringIO()

    def context(self, tmp_path, typed):
        channel = UserChannel(input=io.StringIO(typed), output=self.output)
        return ToolContext(workdir=str(tmp_path), user=channel)

    @pytest.mark.asyncio
    async def test_single_choice(self, tmp_path):
        result = await dispatch("AskUserQuestion", {"questions": [question()]}, self.context(tmp_path, "2\n"))
        assert result == "The user answered:\n\nDatabase: SQLite"

        shown = self.output.getvalue()
        assert "Which database should the service use?" in shown
        assert "  1. Postgres\n     Shared server" in shown
        assert "  3. Other (type your own answer)" in shown
        assert shown.endswith("Choose (1-3): ")

    @pytest.mark.asyncio
    async def test_other_reads_a_free_form_answer(self, tmp_path):
        result = await dispatch(
            "AskUserQuestion", {"questions": [question()]}, self.context(tmp_path, "3\nDuckDB\n")
        )
        assert result.endswith("Database: DuckDB")
        assert self.output.getvalue().endswith("Your answer: ")

    @pytest.mark.asyncio
    async def test_multi_select(self, tmp_path):
        result = await dispatch(
            "AskUserQuestion", {"questions": [question(multi_select=True)]}, self.context(tmp_path, "1, 3\nRedis\n")
        )
        assert result.endswith("Database: Postgres, Redis")

    @pytest.mark.asyncio
    async def test_questions_are_asked_in_order(self, tmp_path):
        second = {**question(), "header": "Cache", "options": [{"label": "None"}, {"label": "Redis"}]}
        result = await dispatch(
            "AskUserQuestion", {"questions": [question(), second]}, self.context(tmp_path, "1\n2\n")
        )
        assert result == "The user answered:\n\nDatabase: Postgres\nCache: Redis"

    @pytest.mark.asyncio
    async def test_out_of_range_choice(self, tmp_path):
        result = await dispatch("AskUserQuestion", {"questions": [question()]}, self.context(tmp_path, "9\n"))
        assert result.endswith("Database: (invalid choice)")

    @pytest.mark.asyncio
    async def test_closed_input(self, tmp_path):
        result = await dispatch("AskUserQuestion", {"questions": [question()]}, self.context(tmp_path, ""))
        assert result == "Error: Could not ask the user: the user's input was closed"

    @pytest.mark.asyncio
    async def test_without_a_user(self, tmp_path):
        result = await dispatch("AskUserQuestion", {"questions": [question()]}, ToolContext(workdir=str(tmp_path)))
        assert result == "Error: There is no user to ask in the main agent"

    @pytest.mark.asyncio
    async def test_needs_at_least_two_options(self, tmp_path):
        lonely = {**question(), "options": [{"label": "Postgres"}]}
        result = await dispatch("AskUserQuestion", {"questions": [lonely]}, self.context(tmp_path, "1\n"))
        assert result.startswith("Error: Invalid arguments for AskUserQuestion")
