"""
Ledgerline - Skills
Discovery of SKILL.md instruction bundles and the tool that loads them.
"""

from agency.skills.discovery import (
    SkillMetadata,
    SkillNotFoundError,
    discover_skills,
    load_skill,
)

__all__ = [
    'SkillMetadata',
    'SkillNotFoundError',
    'discover_skills',
    'load_skill',
]
