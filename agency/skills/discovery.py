"""
Ledgerline - Skill Discovery

A skill is a directory holding a SKILL.md file with YAML frontmatter:

    ---
    name: dcf-valuation
    description: Step-by-step discounted cash flow valuation
    ---
    1. Pull the last four annual cash flow statements...

The frontmatter is listed to the model; the body is returned when the
model invokes the skill tool.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

import config
from agency.tools.errors import ToolError, ToolErrorType, ToolFailure
from core.logger import log_warning

SKILL_FILENAME = "SKILL.md"
REQUIRED_FRONTMATTER_FIELDS = ("name", "description")


class SkillNotFoundError(ToolFailure):
    """No discovered skill has the requested name."""

    def __init__(self, name: str, available: List[str]):
        listing = ", ".join(available) if available else "none"
        super().__init__(ToolError(
            ToolErrorType.NOT_FOUND,
            f"Unknown skill: {name}. Available skills: {listing}",
        ))


@dataclass
class SkillMetadata:
    """Frontmatter of one discovered skill."""
    name: str
    description: str
    path: Path


def parse_frontmatter(content: str) -> Tuple[Dict[str, Any], str]:
    """
    Split YAML frontmatter from markdown content.

    Returns:
        (frontmatter dict, body). Missing or invalid frontmatter yields ({}, content).
    """
    if not content.startswith("---"):
        return {}, content

    lines = content.split("\n")
    end_index = -1
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            end_index = i
            break

    if end_index == -1:
        return {}, content

    yaml_content = "\n".join(lines[1:end_index])
    body = "\n".join(lines[end_index + 1:])

    try:
        parsed = yaml.safe_load(yaml_content) or {}
    except yaml.YAMLError as e:
        log_warning(f"Failed to parse skill frontmatter: {e}")
        return {}, content

    if not isinstance(parsed, dict):
        return {}, content
    return parsed, body


def _read_skill(skill_file: Path) -> Optional[SkillMetadata]:
    try:
        content = skill_file.read_text(encoding="utf-8")
    except OSError as e:
        log_warning(f"Cannot read {skill_file}: {e}")
        return None

    frontmatter, _ = parse_frontmatter(content)
    missing = [field for field in REQUIRED_FRONTMATTER_FIELDS if not frontmatter.get(field)]
    if missing:
        log_warning(f"Skipping skill {skill_file.parent.name}: missing {', '.join(missing)}")
        return None

    return SkillMetadata(
        name=str(frontmatter["name"]).strip(),
        description=str(frontmatter["description"]).strip(),
        path=skill_file,
    )


def discover_skills(dirs: Optional[Iterable[Path]] = None) -> List[SkillMetadata]:
    """
    Find skills in the configured skill directories.

    Args:
        dirs: Directories to scan (defaults to config.SKILL_DIRS).
              Earlier directories win on name collisions.

    Returns:
        Skills sorted by name
    """
    found: Dict[str, SkillMetadata] = {}
    for skills_dir in (config.SKILL_DIRS if dirs is None else dirs):
        skills_dir = Path(skills_dir)
        if not skills_dir.is_dir():
            continue
        for skill_file in sorted(skills_dir.glob(f"*/{SKILL_FILENAME}")):
            skill = _read_skill(skill_file)
            if skill is not None and skill.name not in found:
                found[skill.name] = skill
    return sorted(found.values(), key=lambda s: s.name)


def load_skill(name: str, dirs: Optional[Iterable[Path]] = None) -> Tuple[SkillMetadata, str]:
    """
    Load a skill's instructions by name.

    Returns:
        (metadata, body text)

    Raises:
        SkillNotFoundError: If no discovered skill has that name
    """
    skills = discover_skills(dirs)
    for skill in skills:
        if skill.name == name:
            _, body = parse_frontmatter(skill.path.read_text(encoding="utf-8"))
            return skill, body.strip()
    raise SkillNotFoundError(name, [s.name for s in skills])
