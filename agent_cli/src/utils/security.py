# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""
Security gate applied by the tool dispatcher before any filesystem or shell
tool runs.

The command checks are advisory heuristics over the raw command string, not a
sandbox: encodings, variable expansion and command chaining (`ls; rm x`) can
get past them.
"""

import os
import re
import logging

from ..types.errors import (
    PathEscapeError,
    DangerousCommandError,
    RestrictedCommandError,
)

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

DANGEROUS_PATTERNS: list[re.Pattern] = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"rm\s+-rf\s+[/~]",
        r"rm\s+-rf\s+\*",
        r">\s*/dev/sd[a-z]",
        r"mkfs\.",
        r"dd\s+if=",
        r":\s*\(\s*\)\s*\{.*\}\s*;\s*:",  # fork bomb
        r"chmod\s+-R\s+777\s+/",
        r"curl.*\|\s*(ba)?sh",
        r"wget.*\|\s*(ba)?sh",
        r"(^|[;&|]\s*)sudo\b",
        r"(^|[;&|]\s*)(shutdown|reboot|halt|poweroff)\b",
    )
]

READ_ONLY_COMMANDS: frozenset[str] = frozenset(
    {
        "ls", "cat", "head", "tail", "less", "more", "grep", "find", "wc",
        "diff", "file", "stat", "du", "df", "pwd", "echo", "which", "whereis",
        "type", "tree", "env", "printenv",
        "git log", "git diff", "git status", "git show", "git branch", "git remote",
    }
)

TRUNCATION_NOTICE = "\n\n... [output truncated: {omitted} bytes omitted]"


def resolve_sandboxed_path(root: str, path: str) -> str:
    """Resolve `path` against `root` and make sure it stays inside it.

    Absolute paths are accepted only if they already lie under the root.

    Raises:
        PathEscapeError: if the normalised path is outside the root.
    """
    normalized_root = os.path.normpath(os.path.abspath(root))
    resolved = os.path.normpath(os.path.join(normalized_root, path))

    if resolved != normalized_root and not resolved.startswith(
        normalized_root.rstrip(os.sep) + os.sep
    ):
        raise PathEscapeError(f"Path escapes the working directory: {path}")
    return resolved


def check_command_safety(command: str) -> None:
    """Raises DangerousCommandError for commands on the deny-list."""
    for pattern in DANGEROUS_PATTERNS:
        if pattern.search(command):
            logger.warning(f"Blocked dangerous command: {command!r}")
            raise DangerousCommandError(f"Dangerous command blocked: {command}")


def check_read_only_command(command: str) -> None:
    """Raises RestrictedCommandError unless the command starts with an allowed
    read-only program (or multi-word prefix such as `git log`)."""
    stripped = command.strip()
    tokens = stripped.split()
    if not tokens:
        raise RestrictedCommandError("Empty command")

    if tokens[0] in READ_ONLY_COMMANDS:
        return

    for allowed in READ_ONLY_COMMANDS:
        if " " in allowed and (stripped == allowed or stripped.startswith(allowed + " ")):
            return

    raise RestrictedCommandError(
        f"Only read-only commands are allowed for this agent, got: {tokens[0]}"
    )


def truncate(output: str, max_bytes: int) -> str:
    """Bound `output` to `max_bytes` UTF-8 bytes.

    Output within the bound is returned unchanged. Otherwise the head is kept
    and a notice with the omitted byte count is appended; the result itself
    always fits the bound, so applying truncate twice is a no-op.
    """
    if max_bytes <= 0:
        return ""

    encoded = output.encode("utf-8")
    if len(encoded) <= max_bytes:
        return output

    # The omitted count can never exceed the input length, so reserving room
    # for that many digits keeps head + notice inside the bound.
    notice_budget = len(TRUNCATION_NOTICE.format(omitted=len(encoded)).encode("utf-8"))
    if notice_budget >= max_bytes:
        return encoded[:max_bytes].decode("utf-8", errors="ignore")

    head = encoded[: max_bytes - notice_budget].decode("utf-8", errors="ignore")
    omitted = len(encoded) - len(head.encode("utf-8"))
    return head + TRUNCATION_NOTICE.format(omitted=omitted)
