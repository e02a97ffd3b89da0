# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Per-project memory file added to the system prompt."""

import logging

from pathlib import Path

logger = logging.getLogger(__name__)

PROJECT_FILE = ".ai-agent/project.md"


def load_project_context(workdir: str | Path) -> str | None:
    """Returns the project memory file contents, if there is one."""
    path = Path(workdir) / PROJECT_FILE
    if not path.is_file():
        return None
    try:
        content = path.read_text().strip()
    except OSError as e:
        logger.warning(f"Could not read {path}: {e}")
        return None
    return content or None
