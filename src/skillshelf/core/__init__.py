"""Core skill discovery, selection and loading."""

from .exceptions import (
    DiscoveryError,
    DiscoveryErrorKind,
    NotFoundError,
    NotFoundErrorKind,
    SkillError,
    SkillLoadError,
)
from .prompt import render_skill_index, render_skills
from .registry import SkillRegistry
from .selection import SelectionContext, keyword_matcher, select_skills
from .skill_def import SkillDefinition, SkillMetadata, SkillState
from .skill_loader import SkillLoader, load_registry

__all__ = [
    "DiscoveryError",
    "DiscoveryErrorKind",
    "NotFoundError",
    "NotFoundErrorKind",
    "SelectionContext",
    "SkillDefinition",
    "SkillError",
    "SkillLoadError",
    "SkillLoader",
    "SkillMetadata",
    "SkillRegistry",
    "SkillState",
    "keyword_matcher",
    "load_registry",
    "render_skill_index",
    "render_skills",
    "select_skills",
]
