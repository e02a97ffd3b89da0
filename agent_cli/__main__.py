# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""
Main entrypoint when running the agent with `python -m agent_cli`, or through
the `agent-cli` console script.
"""

import os
import sys
import logging
import asyncio
import argparse

from pathlib import Path

from .agent import Agent
from .src.config import settings, API_KEY_VARS
from .src.llm import create_provider
from .src.tools import validate_tool_registry
from .src.types.errors import AgentError
from .src.types.llm_types import Provider

logger = logging.getLogger(__name__)

HELP_TEXT = """Commands:
  /help    show this help
  /clear   clear the conversation history, todos and reminders
  /todos   show the current todo list
  /exit    quit (also: exit, quit)"""


def setup_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent-cli", description="An LLM coding assistant for your terminal"
    )
    parser.add_argument(
        "--prompt",
        "-p",
        type=str,
        default=None,
        help="Run a single prompt non-interactively and exit",
    )
    parser.add_argument(
        "--workdir",
        type=str,
        default=None,
        help="Working directory the tools are sandboxed to (default: the current directory)",
    )
    parser.add_argument(
        "--provider",
        type=str,
        choices=[p.value for p in Provider],
        default=None,
        help="LLM provider (default: $AGENT_PROVIDER or anthropic)",
    )
    parser.add_argument("--model", type=str, default=None, help="Model name for the provider")
    parser.add_argument("--max-turns", type=int, default=None, help="Maximum model calls per user message")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: $AGENT_LOG_LEVEL or WARNING)",
    )
    return parser


def apply_args(args: argparse.Namespace) -> None:
    """Command line flags override the environment."""
    if args.provider and Provider(args.provider) != settings.PROVIDER:
        settings.PROVIDER = Provider(args.provider)
        # The key read at import time belongs to the previous provider
        settings.API_KEY = os.getenv(API_KEY_VARS[settings.PROVIDER]) or None
    if args.model:
        settings.MODEL = args.model
    if args.max_turns:
        settings.MAX_TURNS = args.max_turns
    if args.log_level:
        settings.LOG_LEVEL = args.log_level


def print_new_messages(agent: Agent, previous_length: int) -> None:
    for message in agent.history[previous_length:]:
        if message.role == "assistant" and message.text.strip():
            print(f"\n{message.text.strip()}\n")


async def run_prompt(agent: Agent, prompt: str) -> None:
    previous_length = len(agent.history)
    await agent.send(prompt)
    print_new_messages(agent, previous_length + 1)


async def repl(agent: Agent) -> None:
    print(f"agent-cli ({settings.PROVIDER.value}: {settings.model_name}) in {agent.workdir}")
    print("Type /help for commands.\n")

    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            break
        line = line.strip()
        if not line:
            continue

        command = line.lower()
        if command in ("/exit", "/quit", "exit", "quit"):
            break
        if command == "/help":
            print(HELP_TEXT)
            continue
        if command == "/clear":
            agent.clear()
            print("Conversation cleared.\n")
            continue
        if command == "/todos":
            print(agent.todos.render() + "\n")
            continue

        try:
            await run_prompt(agent, line)
        except AgentError as e:
            print(f"Error: {e}\n", file=sys.stderr)
        except Exception as e:
            logger.debug("Turn failed", exc_info=True)
            print(f"Error: request failed: {e}\n", file=sys.stderr)

    print(f"Goodbye. Tokens used: {agent.usage}")


async def main(argv: list[str] | None = None) -> int:
    parser = setup_parser()
    args = parser.parse_args(argv)
    apply_args(args)

    logging.captureWarnings(True)
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(levelname)s - %(filename)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        validate_tool_registry()
        provider = create_provider(
            settings.PROVIDER, settings.require_api_key(), settings.model_name, settings.BASE_URL
        )
    except AgentError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    agent = Agent(provider, workdir=Path(args.workdir) if args.workdir else None, max_turns=settings.MAX_TURNS)

    if args.prompt:
        try:
            await run_prompt(agent, args.prompt)
        except Exception as e:
            logger.debug("Prompt failed", exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            return 1
        return 0

    await repl(agent)
    return 0


def cli() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(130)


if __name__ == "__main__":
    cli()
