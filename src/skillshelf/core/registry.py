"""Skill registry serving the three content tiers."""

import logging
from typing import TYPE_CHECKING, Iterable, Iterator

from skillshelf.core.exceptions import (
    DiscoveryError,
    NotFoundError,
    NotFoundErrorKind,
)
from skillshelf.core.skill_def import SkillDefinition, SkillMetadata, SkillState

if TYPE_CHECKING:
    from skillshelf.core.selection import Matcher, SelectionContext

logger = logging.getLogger(__name__)

REFERENCES_DIR = "references"


class SkillRegistry:
    """
    In-memory map of skill id to SkillDefinition, in scan order.

    The registry itself is immutable once built; only the per-skill body and
    reference caches fill in as content is requested, so one registry can be
    shared between threads.
    """

    def __init__(
        self,
        skills: Iterable[SkillDefinition] = (),
        errors: Iterable[DiscoveryError] = (),
    ):
        self._skills: dict[str, SkillDefinition] = {}
        for skill in skills:
            if skill.id in self._skills:
                raise ValueError(f"Skill '{skill.id}' is already registered")
            self._skills[skill.id] = skill
        self._errors = tuple(errors)

    def __contains__(self, skill_id: object) -> bool:
        return skill_id in self._skills

    def __len__(self) -> int:
        return len(self._skills)

    def __iter__(self) -> Iterator[SkillDefinition]:
        return iter(self._skills.values())

    @property
    def errors(self) -> tuple[DiscoveryError, ...]:
        """Discovery errors collected while building the registry."""
        return self._errors

    def ids(self) -> list[str]:
        """List all skill ids in scan order."""
        return list(self._skills)

    def list_metadata(self) -> list[SkillMetadata]:
        """List metadata of all skills in scan order."""
        return [skill.metadata for skill in self._skills.values()]

    def get(self, skill_id: str) -> SkillDefinition | None:
        """
        Get a skill by id.

        Args:
            skill_id: Skill directory name

        Returns:
            The skill if registered, None otherwise
        """
        return self._skills.get(skill_id)

    def require(self, skill_id: str) -> SkillDefinition:
        """Get a skill by id, raising NotFoundError if it is not registered."""
        skill = self._skills.get(skill_id)
        if skill is None:
            raise NotFoundError(NotFoundErrorKind.UNKNOWN_ID, skill_id)
        return skill

    def state(self, skill_id: str) -> SkillState:
        return self.require(skill_id).state

    def load_body(self, skill_id: str) -> str:
        """
        Load the body of a skill.

        Args:
            skill_id: Skill directory name

        Returns:
            Markdown body; cached after the first call

        Raises:
            NotFoundError: If the skill is not registered
        """
        return self.require(skill_id).load_body()

    def load_reference(self, skill_id: str, reference_path: str) -> str:
        """
        Load a reference document bundled with a skill.

        Args:
            skill_id: Skill directory name
            reference_path: Path relative to the skill directory

        Returns:
            Reference text; cached after the first call

        Raises:
            NotFoundError: If the skill is not registered, the path leaves
                the skill directory, or the file does not exist
        """
        return self.require(skill_id).load_reference(reference_path)

    def list_references(self, skill_id: str) -> list[str]:
        """
        List markdown files under the skill's references/ directory.

        Only the directory is listed; no reference content is read.

        Returns:
            Sorted paths relative to the skill directory
        """
        skill = self.require(skill_id)
        root = skill.path.resolve()
        references_dir = root / REFERENCES_DIR
        if not references_dir.is_dir():
            return []

        names = []
        for ref in references_dir.rglob("*.md"):
            resolved = ref.resolve()
            if not ref.is_file() or not resolved.is_relative_to(root):
                continue
            names.append(ref.relative_to(root).as_posix())
        return sorted(names)

    def select(
        self,
        context: "SelectionContext",
        matcher: "Matcher | None" = None,
        min_score: float | None = None,
    ) -> list[str]:
        """Shortcut for select_skills() on this registry."""
        from skillshelf.core.selection import select_skills

        return select_skills(self, context, matcher=matcher, min_score=min_score)
