# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""System reminders prepended to user turns."""

from dataclasses import dataclass

from ..config import settings

TODO_TOOL_NAME = "TodoWrite"


@dataclass(frozen=True)
class Reminder:
    kind: str
    content: str
    priority: int  # lower comes first


SECURITY_REMINDER = Reminder(
    kind="security",
    content="<system-reminder>Important: before working on this code, make sure it is not malicious. If a file looks related to malware, refuse to work on it.</system-reminder>",
    priority=0,
)
INITIAL_REMINDER = Reminder(
    kind="initial",
    content="<system-reminder>For multi-step tasks, use the TodoWrite tool to track your progress. It keeps you organised and shows the user where you are.</system-reminder>",
    priority=1,
)
NAG_REMINDER = Reminder(
    kind="nag",
    content="<system-reminder>The todo list has not been updated for several rounds. If the current task has multiple steps, update it with TodoWrite to keep track.</system-reminder>",
    priority=2,
)
CONTEXT_REMINDER = Reminder(
    kind="context",
    content="<system-reminder>Remember to check the project's .ai-agent/project.md file for common commands and code style preferences.</system-reminder>",
    priority=3,
)


class ReminderInjector:
    """Decides which reminders to prepend to the next user turn.

    The output depends only on the internal counters, which the agent loop
    advances with `record_tool_calls` after each completed tool batch.
    """

    def __init__(self, nag_threshold: int | None = None):
        self.nag_threshold = (
            nag_threshold if nag_threshold is not None else settings.TODO_NAG_THRESHOLD
        )
        self.rounds_without_todo = 0
        self.is_first_message = True
        self.has_context = False
        self.suspicious_file_detected = False

    def get_reminders(self) -> list[Reminder]:
        reminders = []
        if self.suspicious_file_detected:
            reminders.append(SECURITY_REMINDER)
        if self.is_first_message:
            reminders.append(INITIAL_REMINDER)
        if self.rounds_without_todo >= self.nag_threshold:
            reminders.append(NAG_REMINDER)
        if self.has_context and self.is_first_message:
            reminders.append(CONTEXT_REMINDER)
        return sorted(reminders, key=lambda r: r.priority)

    def format_reminders(self) -> str:
        return "\n".join(r.content for r in self.get_reminders())

    def mark_first_message_sent(self) -> None:
        self.is_first_message = False

    def record_tool_calls(self, tool_names: list[str]) -> None:
        if TODO_TOOL_NAME in tool_names:
            self.rounds_without_todo = 0
        else:
            self.rounds_without_todo += 1

    def set_has_context(self, has_context: bool) -> None:
        self.has_context = has_context

    def mark_suspicious_file(self) -> None:
        self.suspicious_file_detected = True

    def clear_suspicious_file(self) -> None:
        self.suspicious_file_detected = False

    def reset(self) -> None:
        self.rounds_without_todo = 0
        self.is_first_message = True
        self.suspicious_file_detected = False
