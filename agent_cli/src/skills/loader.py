# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""
Loads markdown skills from a directory.

A skill is either `<skills_dir>/<name>/SKILL.md` or `<skills_dir>/<name>.md`,
optionally starting with a YAML front matter block:

    ---
    name: commit
    description: Write a commit message for the staged changes
    when_to_use: the user asks to commit
    aliases: [ci]
    ---
    Body of the prompt. $ARGUMENTS is replaced with the call arguments.
"""

import logging

from pathlib import Path
from pydantic import BaseModel, Field

import yaml

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

ARGUMENTS_PLACEHOLDER = "$ARGUMENTS"


class Skill(BaseModel):
    name: str
    description: str = ""
    when_to_use: str | None = None
    aliases: list[str] = Field(default_factory=list)
    body: str
    path: Path | None = None

    def render(self, arguments: str = "") -> str:
        """The skill prompt with its arguments substituted in."""
        prompt = f"# Skill: {self.name}\n\n{self.body}"
        arguments = arguments.strip()
        if ARGUMENTS_PLACEHOLDER in prompt:
            prompt = prompt.replace(ARGUMENTS_PLACEHOLDER, arguments)
        elif arguments:
            prompt = f"{prompt}\n\nARGUMENTS: {arguments}"
        return prompt


def parse_front_matter(raw: str) -> tuple[dict, str]:
    """Split a markdown document into its YAML front matter and body."""
    if not raw.startswith("---"):
        return {}, raw

    parts = raw.split("---", 2)
    if len(parts) < 3:
        return {}, raw

    try:
        data = yaml.safe_load(parts[1]) or {}
    except yaml.YAMLError as e:
        logger.warning(f"Invalid skill front matter: {e}")
        return {}, raw
    if not isinstance(data, dict):
        return {}, raw
    return data, parts[2].lstrip("\n")


class SkillLoader:
    """Reads every skill under `skills_dir` once, on construction or `reload`."""

    def __init__(self, skills_dir: str | Path):
        self.skills_dir = Path(skills_dir)
        self._skills: dict[str, Skill] = {}
        self.reload()

    def reload(self) -> None:
        self._skills.clear()
        if not self.skills_dir.is_dir():
            return

        candidates = sorted(self.skills_dir.glob("*/SKILL.md")) + sorted(
            self.skills_dir.glob("*.md")
        )
        for path in candidates:
            try:
                skill = self._load(path)
            except (OSError, ValueError) as e:
                logger.warning(f"Skipping skill {path}: {e}")
                continue
            self._skills[skill.name] = skill
        logger.info(f"Loaded {len(self._skills)} skills from {self.skills_dir}")

    def _load(self, path: Path) -> Skill:
        front_matter, body = parse_front_matter(path.read_text())
        default_name = path.parent.name if path.name == "SKILL.md" else path.stem
        aliases = front_matter.get("aliases") or []
        return Skill(
            name=str(front_matter.get("name") or default_name),
            description=str(front_matter.get("description") or ""),
            when_to_use=front_matter.get("when_to_use"),
            aliases=[str(a) for a in aliases] if isinstance(aliases, list) else [str(aliases)],
            body=body.strip(),
            path=path,
        )

    @property
    def names(self) -> list[str]:
        return sorted(self._skills)

    def get(self, name: str) -> Skill | None:
        name = name.removeprefix("/")
        if name in self._skills:
            return self._skills[name]
        for skill in self._skills.values():
            if name in skill.aliases:
                return skill
        return None

    def get_descriptions(self) -> str:
        if not self._skills:
            return "(no skills available)"
        lines = []
        for name in self.names:
            skill = self._skills[name]
            when = f" | use when: {skill.when_to_use}" if skill.when_to_use else ""
            lines.append(f"- {name}: {skill.description}{when}")
        return "\n".join(lines)
