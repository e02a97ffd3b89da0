# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
from abc import ABC, abstractmethod
from typing import Any, ClassVar
from pydantic import BaseModel, ConfigDict

# Every failed tool result starts with this marker; the agent loop uses it to
# set is_error on the result block.
ERROR_PREFIX = "Error:"


class ToolResult(BaseModel):
    """Represents the result of a tool execution."""

    tool_name: str
    success: bool
    duration: float = 0.0  # on tool error paths, duration is often 0
    output: str | None = None
    warnings: str | None = None
    errors: str | None = None

    def __str__(self):
        if not self.success:
            message = self.errors or self.output or "tool failed"
            return f"{ERROR_PREFIX} {message}"

        parts = [self.output if self.output is not None else "(no output)"]
        if self.warnings:
            parts.append(f"Warnings: {self.warnings}")
        return "\n\n".join(parts)


class ToolInterface(BaseModel, ABC):
    """Abstract interface for all tools"""

    # Class variables
    TOOL_NAME: ClassVar[str]
    TOOL_DESCRIPTION: ClassVar[str]

    model_config = ConfigDict(extra="forbid")

    async def guard(self) -> None:
        """Security checks run by the dispatcher before `run`.

        Raises a SecurityError to refuse the call. Tools with no filesystem or
        shell side effects keep this no-op.
        """

    @abstractmethod
    async def run(self) -> ToolResult:
        """Execute the tool's functionality"""
        pass

    @classmethod
    def input_schema(cls) -> dict[str, Any]:
        """The tool's arguments as a plain JSON object schema.

        References to nested models are inlined and pydantic titles dropped, so
        the same schema can be handed to every provider.
        """
        schema = cls.model_json_schema()
        defs = schema.get("$defs", {})
        result: dict[str, Any] = {
            "type": "object",
            "properties": {
                name: _inline_refs(prop, defs)
                for name, prop in schema.get("properties", {}).items()
            },
        }
        if schema.get("required"):
            result["required"] = list(schema["required"])
        return result


def _inline_refs(node: Any, defs: dict[str, Any]) -> Any:
    if isinstance(node, list):
        return [_inline_refs(n, defs) for n in node]
    if not isinstance(node, dict):
        return node

    # pydantic wraps a described reference as {"allOf": [{"$ref": ...}], ...}
    all_of = node.get("allOf")
    if isinstance(all_of, list) and len(all_of) == 1 and isinstance(all_of[0], dict) and "$ref" in all_of[0]:
        node = {**{k: v for k, v in node.items() if k != "allOf"}, **all_of[0]}

    siblings = {
        k: _inline_refs(v, defs)
        for k, v in node.items()
        if k != "$ref" and not (k == "title" and isinstance(v, str))
    }
    if "$ref" not in node:
        return siblings

    ref_name = node["$ref"].split("/")[-1]
    if ref_name not in defs:
        raise ValueError(f"Schema reference {ref_name} not found")
    # Keys set beside the reference, such as description or default, win.
    return {**_inline_refs(defs[ref_name], defs), **siblings}
