# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
import logging

from pathlib import Path
from pydantic import Field, PrivateAttr

from .base_tool import BaseTool
from ..utils.security import truncate
from ..types.tool_types import ToolResult

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

MAX_READ_BYTES = 50 * 1024


class ReadFile(BaseTool):
    TOOL_NAME = "read_file"
    TOOL_DESCRIPTION = """Read a text file from the working directory.

Lines are returned numbered as `N→line`. Use `limit` to read only the first N
lines of a long file. Large files are truncated.
"""

    path: str = Field(..., description="Path of the file, relative to the working directory")
    limit: int | None = Field(
        default=None,
        description="Only return the first `limit` lines",
        gt=0,
    )

    _resolved: str = PrivateAttr()

    async def guard(self) -> None:
        self._resolved = self.sandboxed(self.path)

    async def run(self) -> ToolResult:
        path = Path(self._resolved)
        if not path.exists():
            return self.error(f"File not found: {self.path}")
        if path.is_dir():
            return self.error(f"{self.path} is a directory; use Glob or `ls` to list it")

        try:
            lines = path.read_text(encoding="utf-8").split("\n")
        except UnicodeDecodeError:
            return self.error(f"{self.path} is not a UTF-8 text file")
        except OSError as e:
            return self.error(f"Could not read {self.path}: {e}")

        shown = lines[: self.limit] if self.limit else lines
        numbered = "\n".join(f"{i + 1}→{line}" for i, line in enumerate(shown))
        if self.limit and len(lines) > self.limit:
            return self.result(f"{numbered}\n\n[showing the first {self.limit} of {len(lines)} lines]")
        return self.result(truncate(numbered, MAX_READ_BYTES))


class WriteFile(BaseTool):
    TOOL_NAME = "write_file"
    TOOL_DESCRIPTION = """Write a file in the working directory, replacing any existing content.

Parent directories are created as needed. Prefer edit_file for small changes to
existing files.
"""

    path: str = Field(..., description="Path of the file, relative to the working directory")
    content: str = Field(..., description="The full content to write")

    _resolved: str = PrivateAttr()

    async def guard(self) -> None:
        self._resolved = self.sandboxed(self.path)

    async def run(self) -> ToolResult:
        path = Path(self._resolved)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.content, encoding="utf-8")
        except OSError as e:
            return self.error(f"Could not write {self.path}: {e}")

        size_kb = path.stat().st_size / 1024
        num_lines = len(self.content.split("\n"))
        return self.result(f"Wrote {self.path} ({size_kb:.2f} KB, {num_lines} lines)")


class EditFile(BaseTool):
    TOOL_NAME = "edit_file"
    TOOL_DESCRIPTION = """Replace one exact occurrence of `old_text` with `new_text` in a file.

`old_text` must match the file exactly (including whitespace) and must occur
exactly once; include surrounding lines to make it unique.
"""

    path: str = Field(..., description="Path of the file, relative to the working directory")
    old_text: str = Field(..., description="The exact text to replace", min_length=1)
    new_text: str = Field(..., description="The replacement text")

    _resolved: str = PrivateAttr()

    async def guard(self) -> None:
        self._resolved = self.sandboxed(self.path)

    async def run(self) -> ToolResult:
        path = Path(self._resolved)
        if not path.is_file():
            return self.error(f"File not found: {self.path}")

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return self.error(f"Could not read {self.path}: {e}")

        matches = content.count(self.old_text)
        if matches == 0:
            return self.error(
                f"old_text was not found in {self.path}; it must match exactly.\n"
                f"First 100 characters of the file: {content[:100]}..."
            )
        if matches > 1:
            return self.error(
                f"old_text occurs {matches} times in {self.path}; include more context to make it unique"
            )

        new_content = content.replace(self.old_text, self.new_text, 1)
        try:
            path.write_text(new_content, encoding="utf-8")
        except OSError as e:
            return self.error(f"Could not write {self.path}: {e}")

        old_lines = len(self.old_text.split("\n"))
        line_diff = len(self.new_text.split("\n")) - old_lines
        return self.result(
            f"Edited {self.path}: replaced {old_lines} lines ({line_diff:+d}), "
            f"file now has {len(new_content.split(chr(10)))} lines"
        )
