# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
import re
import logging

from enum import Enum
from pathlib import Path
from pydantic import Field, PrivateAttr

from .base_tool import BaseTool
from ..utils.security import resolve_sandboxed_path
from ..types.errors import PathEscapeError
from ..types.tool_types import ToolResult

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

IGNORED_DIRS = frozenset(
    {".git", "node_modules", "__pycache__", ".venv", "venv", "dist", "build", ".mypy_cache", ".pytest_cache"}
)
IGNORED_SUFFIXES = (".min.js", ".map", ".DS_Store")


def iter_files(root: Path, pattern: str, sandbox_root: str) -> list[Path]:
    """Files under `root` matching the glob pattern, minus ignored directories
    and anything that resolves outside the sandbox."""
    files = []
    for path in root.glob(pattern):
        rel_parts = path.relative_to(root).parts
        if any(part in IGNORED_DIRS for part in rel_parts):
            continue
        if path.name.endswith(IGNORED_SUFFIXES) or not path.is_file():
            continue
        try:
            resolve_sandboxed_path(sandbox_root, str(path))
        except PathEscapeError:
            continue
        files.append(path)
    return files


class GlobTool(BaseTool):
    TOOL_NAME = "Glob"
    TOOL_DESCRIPTION = """Find files by glob pattern, e.g. `**/*.py` or `src/**/test_*.ts`.

Returns paths relative to the search directory, most recently modified first.
Version control, dependency and build directories are skipped.
"""

    pattern: str = Field(..., description="The glob pattern to match", min_length=1)
    path: str = Field(default=".", description="Directory to search in, relative to the working directory")
    max_results: int = Field(default=10000, description="Maximum number of paths to return", ge=1)

    _resolved: str = PrivateAttr()

    async def guard(self) -> None:
        self._resolved = self.sandboxed(self.path)

    async def run(self) -> ToolResult:
        root = Path(self._resolved)
        if not root.is_dir():
            return self.error(f"Not a directory: {self.path}")

        try:
            files = iter_files(root, self.pattern, self._context.workdir)
        except (ValueError, NotImplementedError) as e:
            return self.error(f"Invalid glob pattern {self.pattern!r}: {e}")

        if not files:
            return self.result(f'No files match "{self.pattern}"')

        files.sort(key=lambda p: p.stat().st_mtime, reverse=True)
        shown = files[: self.max_results]
        header = f"Found {len(shown)} matching files"
        if len(files) > self.max_results:
            header += f" (showing the first {self.max_results} of {len(files)})"
        body = "\n".join(str(p.relative_to(root)) for p in shown)
        return self.result(f"{header}:\n\n{body}")


class GrepOutputMode(str, Enum):
    FILES_WITH_MATCHES = "files_with_matches"
    CONTENT = "content"
    COUNT = "count"


class GrepTool(BaseTool):
    TOOL_NAME = "Grep"
    TOOL_DESCRIPTION = """Search file contents with a regular expression (Python `re` syntax).

Output modes:
- files_with_matches (default): the files containing a match
- content: matching lines as `file:line` with optional context lines
- count: the number of matching lines per file

Narrow the search with `glob` (e.g. `**/*.py`) or `path`.
"""

    pattern: str = Field(..., description="The regular expression to search for", min_length=1)
    path: str = Field(default=".", description="Directory to search in, relative to the working directory")
    glob: str = Field(default="**/*", description="Glob pattern selecting the files to search")
    output_mode: GrepOutputMode = Field(default=GrepOutputMode.FILES_WITH_MATCHES, description="How to report matches")
    case_insensitive: bool = Field(default=False, description="Ignore case when matching")
    context_lines: int = Field(default=0, description="Lines of context around each match in content mode", ge=0, le=10)
    max_results: int = Field(default=100, description="Maximum number of matching lines in content mode", ge=1)

    _resolved: str = PrivateAttr()

    async def guard(self) -> None:
        self._resolved = self.sandboxed(self.path)

    async def run(self) -> ToolResult:
        root = Path(self._resolved)
        if not root.is_dir():
            return self.error(f"Not a directory: {self.path}")

        try:
            regex = re.compile(self.pattern, re.IGNORECASE if self.case_insensitive else 0)
        except re.error as e:
            return self.error(f"Invalid regular expression {self.pattern!r}: {e}")

        try:
            files = sorted(iter_files(root, self.glob, self._context.workdir))
        except (ValueError, NotImplementedError) as e:
            return self.error(f"Invalid glob pattern {self.glob!r}: {e}")

        counts: dict[str, int] = {}
        content_lines: list[str] = []
        num_matches = 0
        for path in files:
            try:
                lines = path.read_text(encoding="utf-8").split("\n")
            except (OSError, UnicodeDecodeError):
                continue

            rel = str(path.relative_to(root))
            for i, line in enumerate(lines):
                if not regex.search(line):
                    continue
                counts[rel] = counts.get(rel, 0) + 1
                if self.output_mode == GrepOutputMode.CONTENT and num_matches < self.max_results:
                    num_matches += 1
                    content_lines.append(f"{rel}:{i + 1}")
                    start = max(0, i - self.context_lines)
                    for ctx in lines[start:i]:
                        content_lines.append(f"  {ctx}")
                    content_lines.append(f"> {line}")
                    for ctx in lines[i + 1 : i + 1 + self.context_lines]:
                        content_lines.append(f"  {ctx}")

            if self.output_mode == GrepOutputMode.CONTENT and num_matches >= self.max_results:
                break

        if not counts:
            return self.result(f'No matches for "{self.pattern}"')

        match self.output_mode:
            case GrepOutputMode.FILES_WITH_MATCHES:
                return self.result(f"Found {len(counts)} files with matches:\n\n" + "\n".join(counts))
            case GrepOutputMode.COUNT:
                return self.result("Match counts:\n\n" + "\n".join(f"{n}:{f}" for f, n in counts.items()))
            case _:
                header = f"Found {num_matches} matches"
                if num_matches >= self.max_results:
                    header += f" (stopped at the maximum of {self.max_results})"
                return self.result(f"{header}:\n\n" + "\n".join(content_lines))
