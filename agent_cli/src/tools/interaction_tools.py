# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
import asyncio
import logging

from pydantic import BaseModel, Field

from .base_tool import BaseTool
from .context import UserChannel
from ..types.tool_types import ToolResult

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

INVALID_CHOICE = "(invalid choice)"


class QuestionOption(BaseModel):
    label: str = Field(..., description="The short text of the choice", min_length=1)
    description: str = Field(default="", description="What picking this choice means")


class Question(BaseModel):
    question: str = Field(..., description="The full question to ask", min_length=1)
    header: str = Field(..., description="A very short label for the question, e.g. 'Database'", min_length=1)
    options: list[QuestionOption] = Field(..., description="The choices to offer", min_length=2, max_length=4)
    multi_select: bool = Field(default=False, description="Allow the user to pick several choices")


class UserInputClosed(Exception):
    pass


async def _read_line(channel: UserChannel, prompt: str) -> str:
    channel.output.write(prompt)
    channel.output.flush()
    line = await asyncio.to_thread(channel.input.readline)
    if not line:
        raise UserInputClosed("the user's input was closed")
    return line.strip()


async def _ask(channel: UserChannel, question: Question) -> str:
    other = len(question.options) + 1
    rule = "=" * 60
    lines = [f"\n{rule}", question.header, rule, "", question.question, ""]
    for i, option in enumerate(question.options, 1):
        lines.append(f"  {i}. {option.label}")
        if option.description:
            lines.append(f"     {option.description}")
    lines.append(f"  {other}. Other (type your own answer)\n")
    channel.output.write("\n".join(lines) + "\n")

    if question.multi_select:
        prompt = "Choose one or more, separated by commas (e.g. 1,3): "
    else:
        prompt = f"Choose (1-{other}): "
    answer = await _read_line(channel, prompt)

    chosen = []
    for selection in answer.split(",") if question.multi_select else [answer]:
        try:
            index = int(selection.strip())
        except ValueError:
            continue
        if 1 <= index <= len(question.options):
            chosen.append(question.options[index - 1].label)
        elif index == other:
            chosen.append(await _read_line(channel, "Your answer: "))

    return ", ".join(chosen) if chosen else INVALID_CHOICE


class AskUserQuestion(BaseTool):
    TOOL_NAME = "AskUserQuestion"
    TOOL_DESCRIPTION = """Ask the user one to four multiple-choice questions and wait for the answers.

Every question automatically gets an extra "Other" choice for a free-form answer.
Use this when you need a decision, a clarification of the requirements or a
confirmation of your approach. Do not overuse it; only ask when you genuinely
need the user's input.
"""

    questions: list[Question] = Field(..., description="The questions to ask, in order", min_length=1, max_length=4)

    async def run(self) -> ToolResult:
        channel = self._context.user
        if channel is None:
            return self.error(f"There is no user to ask in the {self._context.agent_label} agent")

        answers = []
        try:
            async with channel.lock:
                for question in self.questions:
                    answers.append((question.header, await _ask(channel, question)))
        except (UserInputClosed, OSError) as e:
            return self.error(f"Could not ask the user: {e}")

        lines = ["The user answered:", ""]
        lines.extend(f"{header}: {answer}" for header, answer in answers)
        return self.result("\n".join(lines))
