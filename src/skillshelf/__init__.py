"""Skillshelf: progressive-disclosure loading of skill definitions."""

from skillshelf.core import (
    DiscoveryError,
    DiscoveryErrorKind,
    NotFoundError,
    NotFoundErrorKind,
    SelectionContext,
    SkillDefinition,
    SkillError,
    SkillLoadError,
    SkillLoader,
    SkillMetadata,
    SkillRegistry,
    SkillState,
    keyword_matcher,
    load_registry,
    select_skills,
)

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
    "select_skills",
]
