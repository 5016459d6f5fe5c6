"""Skill selection for a request context."""

import re
from typing import TYPE_CHECKING, Callable

from pydantic import BaseModel, ConfigDict, Field

from skillshelf.core.skill_def import SkillMetadata

if TYPE_CHECKING:
    from skillshelf.core.registry import SkillRegistry

DEFAULT_MIN_SCORE = 0.3

_TOKEN_RE = re.compile(r"[a-z0-9]+")

STOP_WORDS = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "by", "can", "do", "for",
        "from", "how", "i", "in", "is", "it", "me", "my", "of", "on", "or",
        "please", "should", "that", "the", "this", "to", "use", "using",
        "want", "we", "what", "when", "with", "you", "your",
    }
)


class SelectionContext(BaseModel):
    """Per-request input to skill selection."""

    model_config = ConfigDict(frozen=True)

    task_text: str
    loaded_ids: frozenset[str] = Field(default_factory=frozenset)


Matcher = Callable[[SkillMetadata, SelectionContext], float]


def tokenize(text: str) -> set[str]:
    """Lowercase alphanumeric words of ``text`` minus stop words."""
    return {t for t in _TOKEN_RE.findall(text.lower()) if t not in STOP_WORDS}


def keyword_matcher(metadata: SkillMetadata, context: SelectionContext) -> float:
    """
    Score a skill by keyword overlap with the task text.

    Returns:
        Fraction of task keywords that appear in the skill's name or
        description, in [0, 1]
    """
    task_tokens = tokenize(context.task_text)
    if not task_tokens:
        return 0.0

    skill_tokens = tokenize(metadata.description) | tokenize(metadata.name)
    return len(task_tokens & skill_tokens) / len(task_tokens)


def select_skills(
    registry: "SkillRegistry",
    context: SelectionContext,
    matcher: Matcher | None = None,
    min_score: float | None = None,
) -> list[str]:
    """
    Pick the skills relevant to a request.

    Only metadata is consulted, so selecting never reads a skill body or
    reference from disk.

    Args:
        registry: Registry to select from
        context: Task text and ids already loaded this session
        matcher: Relevance function; defaults to keyword_matcher
        min_score: Lowest score counted as a match

    Returns:
        Skill ids: always-apply skills first, then matching skills not yet
        loaded, each group in registry scan order
    """
    matcher = matcher or keyword_matcher
    threshold = DEFAULT_MIN_SCORE if min_score is None else min_score

    foundational: list[str] = []
    matched: list[str] = []
    for metadata in registry.list_metadata():
        if metadata.always_apply:
            foundational.append(metadata.id)
            continue

        if metadata.id in context.loaded_ids:
            continue

        score = matcher(metadata, context)
        if score > 0 and score >= threshold:
            matched.append(metadata.id)

    return foundational + matched
