"""Render registry content for a host's system prompt."""

from typing import Iterable
from xml.sax.saxutils import escape, quoteattr

from skillshelf.core.registry import SkillRegistry


def render_skill_index(registry: SkillRegistry) -> str:
    """
    Build the always-resident metadata block listing every skill.

    Returns:
        ``<skills>`` XML with one element per skill, or "" if the registry
        is empty
    """
    if not len(registry):
        return ""

    skills_xml = "<skills>\n"
    for meta in registry.list_metadata():
        skills_xml += (
            f"  <skill id={quoteattr(meta.id)} name={quoteattr(meta.name)}>"
            f"{escape(meta.description)}</skill>\n"
        )
    skills_xml += "</skills>"
    return skills_xml


def render_skills(registry: SkillRegistry, skill_ids: Iterable[str]) -> str:
    """
    Load and join the bodies of the given skills.

    Raises:
        NotFoundError: If any id is not registered
    """
    parts = []
    for skill_id in skill_ids:
        skill = registry.require(skill_id)
        parts.append(f"## Skill: {skill.name}\n\n{skill.load_body()}")
    return "\n\n".join(parts)
