"""Skill loader for discovering skills and building a registry."""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

from pydantic import ValidationError

from skillshelf.core.exceptions import DiscoveryError, DiscoveryErrorKind
from skillshelf.core.registry import SkillRegistry
from skillshelf.core.skill_def import SkillDefinition, SkillMetadata
from skillshelf.utils.def_loader import (
    InvalidDefError,
    discover_definitions,
    read_frontmatter,
)

if TYPE_CHECKING:
    from skillshelf.utils.config import Config

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "description")


class SkillLoader:
    """Discover skill definitions under one or more root directories."""

    @staticmethod
    def from_config(config: "Config") -> "SkillLoader":
        """Create SkillLoader from config."""
        return SkillLoader(
            config.skill_paths,
            entry_filename=config.entry_filename,
            strict=config.strict,
            max_description_length=config.max_description_length,
        )

    def __init__(
        self,
        skill_paths: Iterable[Path],
        entry_filename: str = "SKILL.md",
        strict: bool = False,
        max_description_length: int = 1024,
    ):
        self.skill_paths = [Path(p) for p in skill_paths]
        self.entry_filename = entry_filename
        self.strict = strict
        self.max_description_length = max_description_length

    def load(self) -> SkillRegistry:
        """
        Scan all roots and build a registry holding metadata only.

        Errors are collected per skill directory and the remaining skills
        still load. In strict mode the scan still completes, then the first
        error is raised.

        Returns:
            SkillRegistry in scan order, with ``errors`` populated

        Raises:
            DiscoveryError: In strict mode, if any skill failed to register
        """
        skills: dict[str, SkillDefinition] = {}
        # Every scanned directory, including ones that failed to parse
        seen: dict[str, Path] = {}
        errors: list[DiscoveryError] = []

        for root in self.skill_paths:
            for skill_dir in discover_definitions(root, self.entry_filename):
                skill_id = skill_dir.name

                first_path = seen.get(skill_id)
                if first_path is not None:
                    errors.append(
                        DiscoveryError(
                            DiscoveryErrorKind.DUPLICATE_ID,
                            skill_dir,
                            f"Duplicate skill id '{skill_id}'",
                            other_path=first_path,
                        )
                    )
                    continue

                seen[skill_id] = skill_dir

                try:
                    metadata = self.parse_metadata(skill_id, skill_dir)
                except DiscoveryError as e:
                    errors.append(e)
                    continue

                skills[skill_id] = SkillDefinition(metadata)

        for error in errors:
            logger.warning(f"Skipping skill: {error}")

        logger.info(
            f"Discovered {len(skills)} skill(s) under {len(self.skill_paths)} root(s)"
        )

        if errors and self.strict:
            raise errors[0]

        return SkillRegistry(skills.values(), errors)

    def parse_metadata(self, skill_id: str, skill_dir: Path) -> SkillMetadata:
        """
        Read and validate the frontmatter of one skill directory.

        Raises:
            DiscoveryError: INVALID_METADATA naming the entry file
        """
        entry_file = skill_dir / self.entry_filename

        try:
            frontmatter = read_frontmatter(entry_file, skill_id)
        except InvalidDefError as e:
            raise self._invalid(entry_file, e.reason)
        except (OSError, UnicodeDecodeError) as e:
            raise self._invalid(entry_file, f"unreadable: {e}")

        missing = [key for key in REQUIRED_FIELDS if key not in frontmatter]
        if missing:
            raise self._invalid(
                entry_file, f"missing required fields: {', '.join(missing)}"
            )

        description = frontmatter["description"]
        if (
            isinstance(description, str)
            and len(description) > self.max_description_length
        ):
            raise self._invalid(
                entry_file,
                f"description longer than {self.max_description_length} characters",
            )

        try:
            return SkillMetadata(
                id=skill_id,
                name=frontmatter["name"],
                description=description,
                always_apply=self._always_apply(frontmatter),
                path=skill_dir,
                entry_file=entry_file,
            )
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
            raise self._invalid(entry_file, f"invalid fields: {fields}")

    @staticmethod
    def _always_apply(frontmatter: dict[str, Any]) -> Any:
        if "alwaysApply" in frontmatter:
            return frontmatter["alwaysApply"]
        return frontmatter.get("always_apply", False)

    @staticmethod
    def _invalid(entry_file: Path, reason: str) -> DiscoveryError:
        return DiscoveryError(
            DiscoveryErrorKind.INVALID_METADATA,
            entry_file,
            f"Invalid skill metadata ({reason})",
        )


def load_registry(
    root_paths: Iterable[Path | str],
    *,
    entry_filename: str = "SKILL.md",
    strict: bool = False,
    max_description_length: int = 1024,
) -> SkillRegistry:
    """
    Discover skills under the given roots.

    Args:
        root_paths: Directories to scan, in precedence order
        entry_filename: File marking a skill directory
        strict: Raise the first discovery error instead of skipping
        max_description_length: Upper bound on description length

    Returns:
        SkillRegistry with metadata populated and bodies not yet read
    """
    loader = SkillLoader(
        [Path(p) for p in root_paths],
        entry_filename=entry_filename,
        strict=strict,
        max_description_length=max_description_length,
    )
    return loader.load()
