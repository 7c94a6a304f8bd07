"""
Ledgerline - Skill Tool
Lets the model pull in a skill's full instructions by name.
"""

from typing import Any, Dict, List

from agency.skills.discovery import SkillMetadata, load_skill
from agency.tools.errors import ToolFailure

SKILL_TOOL: Dict[str, Any] = {
    "name": "skill",
    "description": "Load the step-by-step instructions of a named skill.",
    "input_schema": {
        "type": "object",
        "properties": {
            "name": {
                "type": "string",
                "description": "Skill name as listed in the skill tool description"
            }
        },
        "required": ["name"]
    }
}


def build_skill_description(skills: List[SkillMetadata]) -> str:
    """Rich description listing the available skills."""
    lines = [
        "Load a packaged workflow (skill) and follow its instructions.",
        "",
        "## Available Skills",
        "",
    ]
    for skill in skills:
        lines.append(f"- **{skill.name}** - {skill.description}")
    lines.extend([
        "",
        "## Usage Notes",
        "",
        "- Invoke a skill when the task matches its description",
        "- Follow the returned instructions step by step",
    ])
    return "\n".join(lines)


def run_skill(tool_input: Dict[str, Any]) -> Dict[str, Any]:
    """Return the instructions of the requested skill."""
    name = str(tool_input.get("name") or "").strip()
    if not name:
        raise ToolFailure.missing("name is required", example='"name": "dcf-valuation"')

    skill, instructions = load_skill(name)
    return {
        "skill": skill.name,
        "description": skill.description,
        "instructions": instructions,
    }
