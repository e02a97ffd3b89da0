# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
import os
import signal
import asyncio
import logging

from typing import ClassVar
from pydantic import Field, PrivateAttr

from .base_tool import BaseTool
from ..config import settings
from ..utils.security import check_command_safety, check_read_only_command
from ..types.agent_types import AgentType
from ..types.tool_types import ToolResult

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

STOP_GRACE_SECONDS = 2.0


class ExecuteCommand(BaseTool):
    """Tool for executing shell commands that are guaranteed to return."""

    # Class variables required by BaseTool
    TOOL_NAME: ClassVar[str] = "bash"
    TOOL_DESCRIPTION: ClassVar[
        str
    ] = """
Execute a bash command in the working directory and return its combined stdout and stderr.

Commands are killed once they exceed the timeout, so do not start servers or other
processes that never return. Destructive commands (recursive deletes of / or ~,
disk formatting, piping downloads into a shell, sudo, reboot...) are refused.

Example usage:
- running tests or builds
- git commands
- inspecting the environment
"""

    command: str = Field(
        ...,
        description="The bash command to run.",
        min_length=1,
    )
    timeout: float | None = Field(
        default=None,
        description="Optional timeout in seconds; defaults to the configured shell timeout.",
        gt=0,
        le=600,
    )

    # Private attributes for internal state
    _process: asyncio.subprocess.Process | None = PrivateAttr(default=None)

    async def guard(self) -> None:
        check_command_safety(self.command)
        if self._context.agent_type == AgentType.EXPLORE:
            check_read_only_command(self.command)

    async def _stop(self) -> None:
        """Signal the command's whole process group, escalating to SIGKILL.

        The command runs in its own session, so background jobs it started
        share its process group and are stopped with it; otherwise they would
        keep the output pipe open and outlive the timeout.
        """
        pid = self._process.pid
        for sig in (signal.SIGTERM, signal.SIGKILL):
            try:
                os.killpg(pid, sig)
            except ProcessLookupError:
                logger.debug(f"Process group {pid} already exited")
                return
            try:
                await asyncio.wait_for(self._process.wait(), timeout=STOP_GRACE_SECONDS)
                return
            except asyncio.TimeoutError:
                logger.debug(f"Process group {pid} still running after signal {sig.name}")
        logger.warning(f"Process group {pid} did not exit after SIGKILL")

    async def run(self) -> ToolResult:
        """Execute the command, enforcing the wall-clock timeout."""
        timeout = self.timeout or settings.BASH_TIMEOUT
        try:
            self._process = await asyncio.create_subprocess_exec(
                "bash",
                "-c",
                self.command,
                cwd=self._context.workdir,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                start_new_session=True,
            )

            try:
                stdout, _ = await asyncio.wait_for(
                    self._process.communicate(), timeout=timeout
                )
            except asyncio.TimeoutError:
                await self._stop()
                return self.error(f"Command timed out after {timeout:g} seconds")

            output = stdout.decode("utf-8", errors="replace").rstrip()
            if self._process.returncode != 0:
                output = f"{output}\n\nExit code: {self._process.returncode}".lstrip()
            return self.result(output or "(no output)")

        except Exception as e:
            return self.error(f"Error executing command: {str(e)}")
