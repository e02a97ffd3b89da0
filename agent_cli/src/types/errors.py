# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Exception hierarchy for the orchestration core."""


class AgentError(Exception):
    """Base class for all errors raised by the agent core."""


class ValidationError(AgentError):
    """A payload broke a model invariant (tool-result pairing, todo list rules)."""


class ConfigurationError(AgentError):
    """The process was started with an inconsistent configuration."""


class SecurityError(AgentError):
    """Raised by the security gate; always rendered back to the model."""


class PathEscapeError(SecurityError):
    """A path resolved outside of the sandbox root."""


class DangerousCommandError(SecurityError):
    """A shell command matched the destructive command deny-list."""


class RestrictedCommandError(SecurityError):
    """A shell command is not on the read-only allow-list."""
