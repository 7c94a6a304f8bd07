"""
Ledgerline - Tool Registry
Tool schemas and rich descriptions for the model.

Each tool's schema (name, description, input_schema) is sent with the API
call; the rich descriptions are assembled into the system prompt.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from agency.skills.discovery import SkillMetadata, discover_skills
from agency.skills.tool import SKILL_TOOL, build_skill_description
from agency.tools.browser.tools import BROWSER_DESCRIPTION, BROWSER_TOOL
from agency.tools.filesystem.tools import (
    EDIT_FILE_DESCRIPTION,
    EDIT_FILE_TOOL,
    READ_FILE_DESCRIPTION,
    READ_FILE_TOOL,
    WRITE_FILE_DESCRIPTION,
    WRITE_FILE_TOOL,
)
from agency.tools.finance.tools import (
    COMPANY_NEWS_TOOL,
    FINANCE_DESCRIPTION,
    SEGMENTED_REVENUES_TOOL,
)


@dataclass
class RegisteredTool:
    """
    A registered tool with its rich description for system prompt injection.

    Attributes:
        name: Tool name (matches definition["name"])
        definition: Schema dict for the Anthropic API
        description: Rich description (when to use, when not to use, etc.)
    """
    name: str
    definition: Dict[str, Any]
    description: str


def get_tool_registry(skills: Optional[List[SkillMetadata]] = None) -> List[RegisteredTool]:
    """
    Get all registered tools with their descriptions.

    Args:
        skills: Discovered skills (discovered from config.SKILL_DIRS if omitted).
                The skill tool is only registered when at least one exists.

    Returns:
        List of registered tools
    """
    tools = [
        RegisteredTool("get_company_news", COMPANY_NEWS_TOOL, FINANCE_DESCRIPTION),
        RegisteredTool("get_segmented_revenues", SEGMENTED_REVENUES_TOOL, FINANCE_DESCRIPTION),
        RegisteredTool("browser", BROWSER_TOOL, BROWSER_DESCRIPTION),
        RegisteredTool("read_file", READ_FILE_TOOL, READ_FILE_DESCRIPTION),
        RegisteredTool("write_file", WRITE_FILE_TOOL, WRITE_FILE_DESCRIPTION),
        RegisteredTool("edit_file", EDIT_FILE_TOOL, EDIT_FILE_DESCRIPTION),
    ]

    if skills is None:
        skills = discover_skills()
    if skills:
        tools.append(RegisteredTool("skill", SKILL_TOOL, build_skill_description(skills)))

    return tools


def get_tool_definitions(skills: Optional[List[SkillMetadata]] = None) -> List[Dict[str, Any]]:
    """
    Get just the tool schemas for the API call.

    Returns:
        List of tool definition dicts for the Anthropic API
    """
    return [tool.definition for tool in get_tool_registry(skills)]


def build_tool_descriptions(skills: Optional[List[SkillMetadata]] = None) -> str:
    """
    Build the tool descriptions section for the system prompt.

    Tools sharing one description (the finance tools) are listed once.

    Returns:
        "### <name>" blocks separated by blank lines
    """
    blocks = []
    seen_descriptions = set()
    for tool in get_tool_registry(skills):
        if tool.description in seen_descriptions:
            continue
        seen_descriptions.add(tool.description)
        blocks.append(f"### {tool.name}\n\n{tool.description}")
    return "\n\n".join(blocks)
