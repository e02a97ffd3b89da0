# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""
Process-wide configuration.

Values come from the environment (and a .env file in the working directory,
loaded with python-dotenv). Command line flags override them in __main__.
"""

import os
import logging

from typing import Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .types.errors import ConfigurationError
from .types.llm_types import Provider

logger = logging.getLogger(__name__)

DEFAULT_MODELS = {
    Provider.ANTHROPIC: "claude-sonnet-4-5",
    Provider.OPENAI: "gpt-4o",
    Provider.GEMINI: "gemini-2.5-flash",
}

API_KEY_VARS = {
    Provider.ANTHROPIC: "ANTHROPIC_API_KEY",
    Provider.OPENAI: "OPENAI_API_KEY",
    Provider.GEMINI: "GEMINI_API_KEY",
}


class Settings(BaseModel):
    """Runtime configuration for the agent."""

    PROVIDER: Provider = Provider.ANTHROPIC
    MODEL: Optional[str] = None
    API_KEY: Optional[str] = Field(default=None, repr=False)
    BASE_URL: Optional[str] = None
    LOG_LEVEL: str = "WARNING"

    # Budgets
    MAX_TOKENS: int = 8192
    MAX_TURNS: int = 50
    MAX_PARALLEL_TOOLS: int = 8

    # Auxiliary state
    TODO_NAG_THRESHOLD: int = 10
    MAX_TODOS: int = 20

    # Tools
    BASH_TIMEOUT: float = 60.0
    WEB_FETCH_TIMEOUT: float = 30.0
    MAX_OUTPUT_BYTES: int = 100_000
    SKILLS_DIR: str = "skills"

    @property
    def model_name(self) -> str:
        return self.MODEL or DEFAULT_MODELS[self.PROVIDER]

    def require_api_key(self) -> str:
        if not self.API_KEY:
            raise ConfigurationError(
                f"No API key configured for {self.PROVIDER.value}; "
                f"set {API_KEY_VARS[self.PROVIDER]} in the environment or a .env file"
            )
        return self.API_KEY

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> "Settings":
        if load_dotenv_file:
            load_dotenv()

        try:
            provider = Provider(os.getenv("AGENT_PROVIDER", Provider.ANTHROPIC.value).lower())
        except ValueError as e:
            raise ConfigurationError(f"Unknown AGENT_PROVIDER: {os.getenv('AGENT_PROVIDER')}") from e

        values = dict(
            PROVIDER=provider,
            MODEL=os.getenv("AGENT_MODEL") or None,
            API_KEY=os.getenv(API_KEY_VARS[provider]) or None,
            BASE_URL=os.getenv("AGENT_BASE_URL") or None,
            LOG_LEVEL=os.getenv("AGENT_LOG_LEVEL", "WARNING").upper(),
        )
        for name in ("MAX_TOKENS", "MAX_TURNS", "BASH_TIMEOUT", "MAX_OUTPUT_BYTES"):
            raw = os.getenv(f"AGENT_{name}")
            if raw:
                values[name] = raw
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in the environment: {e}") from e


# Global settings instance
settings = Settings.from_env()
