# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Plan mode: explore and write a plan file before changing any code."""

import time
import logging

from pathlib import Path

from ..types.tool_types import ERROR_PREFIX

logger = logging.getLogger(__name__)

PLAN_FILE_NAME = ".ai-agent-plan.md"

PLAN_TEMPLATE = """# Implementation plan

## Task
{task_description}

## Analysis
(record your analysis here...)

## Steps
1. (step 1)
2. (step 2)
...

## Risks
- (risk 1)
- (risk 2)
"""


class PlanMode:
    """Tracks whether the main agent is currently planning."""

    def __init__(self, workdir: str | Path):
        self.workdir = Path(workdir)
        self.plan_file: Path | None = None
        self.task_description: str | None = None
        self._start_time: float | None = None

    @property
    def active(self) -> bool:
        return self.plan_file is not None

    def enter(self, task_description: str) -> str:
        if self.active:
            return f"{ERROR_PREFIX} already in plan mode"

        plan_file = self.workdir / PLAN_FILE_NAME
        plan_file.write_text(PLAN_TEMPLATE.format(task_description=task_description))

        self.plan_file = plan_file
        self.task_description = task_description
        self._start_time = time.time()
        logger.info(f"Entered plan mode, plan file at {plan_file}")

        return f"""Entered plan mode.

**Plan file**: {plan_file}

**You can now**:
- explore the codebase with read_file, Glob, Grep and read-only bash commands
- record your analysis and plan in the plan file with write_file or edit_file
- call ExitPlanMode to submit the plan when you are done

**Note**: do not modify any code while in plan mode; only explore and plan."""

    def exit(self) -> str:
        if not self.active:
            return f"{ERROR_PREFIX} not in plan mode"

        assert self.plan_file is not None and self._start_time is not None
        if not self.plan_file.exists():
            return f"{ERROR_PREFIX} plan file {self.plan_file} does not exist"
        try:
            plan = self.plan_file.read_text()
        except OSError as e:
            return f"{ERROR_PREFIX} could not read plan file: {e}"

        elapsed = time.time() - self._start_time
        self.reset()

        return f"""Planning finished ({elapsed:.1f}s)

{plan}

---

Please review the plan above. Once approved, I will start implementing it."""

    def reset(self) -> None:
        self.plan_file = None
        self.task_description = None
        self._start_time = None
