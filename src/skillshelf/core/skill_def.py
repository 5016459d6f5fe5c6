"""Skill definition models."""

import logging
import threading
from enum import Enum
from pathlib import Path, PurePosixPath

from pydantic import BaseModel, ConfigDict, field_validator

from skillshelf.core.exceptions import NotFoundError, NotFoundErrorKind, SkillLoadError
from skillshelf.utils.def_loader import (
    InvalidDefError,
    parse_definition,
    read_text,
    substitute_template,
)

logger = logging.getLogger(__name__)


class SkillState(str, Enum):
    """Progressive disclosure tier reached by a skill."""

    DISCOVERED = "discovered"
    BODY_LOADED = "body_loaded"
    REFERENCES_LOADED = "references_loaded"


class SkillMetadata(BaseModel):
    """Lightweight skill info, resident from discovery on."""

    model_config = ConfigDict(extra="forbid", frozen=True, strict=True)

    id: str
    name: str
    description: str
    always_apply: bool = False
    path: Path
    entry_file: Path

    @field_validator("name", "description")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v


class SkillDefinition:
    """
    A discovered skill with lazily loaded body and references.

    Metadata never changes after construction. The body and reference
    caches are write-once: the first load wins and later calls return the
    cached string without touching the disk.
    """

    metadata: SkillMetadata

    def __init__(self, metadata: SkillMetadata):
        self.metadata = metadata
        self._body: str | None = None
        self._references: dict[str, str] = {}
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"SkillDefinition(id={self.id!r}, state={self.state.value!r})"

    @property
    def id(self) -> str:
        return self.metadata.id

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def description(self) -> str:
        return self.metadata.description

    @property
    def always_apply(self) -> bool:
        return self.metadata.always_apply

    @property
    def path(self) -> Path:
        return self.metadata.path

    @property
    def body(self) -> str | None:
        """Cached body, or None if it has not been loaded yet."""
        return self._body

    @property
    def references(self) -> dict[str, str]:
        """Snapshot of the references loaded so far, in load order."""
        return dict(self._references)

    @property
    def state(self) -> SkillState:
        if self._references:
            return SkillState.REFERENCES_LOADED
        if self._body is not None:
            return SkillState.BODY_LOADED
        return SkillState.DISCOVERED

    def load_body(self) -> str:
        """
        Return the markdown body, reading it from disk on first use.

        Returns:
            Body with frontmatter removed, whitespace stripped and
            {{skill_dir}} / {{skill_id}} placeholders substituted

        Raises:
            SkillLoadError: If the entry file can no longer be read or its
                frontmatter has become malformed since discovery
        """
        body = self._body
        if body is not None:
            return body

        with self._lock:
            if self._body is None:
                entry_file = self.metadata.entry_file
                try:
                    content = read_text(entry_file)
                    raw_body = parse_definition(
                        content, self.id, lambda _id, _fm, body: body
                    )
                except InvalidDefError as e:
                    raise SkillLoadError(self.id, entry_file, e.reason) from e
                except (OSError, UnicodeDecodeError) as e:
                    raise SkillLoadError(self.id, entry_file, str(e)) from e
                self._body = substitute_template(
                    raw_body.strip(),
                    {"skill_dir": str(self.path), "skill_id": self.id},
                )
                logger.debug(f"Loaded body for skill '{self.id}'")
            return self._body

    def resolve_reference(self, reference_path: str) -> tuple[str, Path]:
        """
        Validate a reference path against the skill directory.

        Args:
            reference_path: Path relative to the skill directory

        Returns:
            (cache key, resolved file path)

        Raises:
            NotFoundError: PATH_ESCAPE if the path is absolute, contains a
                ".." segment or resolves outside the skill directory;
                UNKNOWN_REFERENCE if no such file exists
        """
        normalized = reference_path.replace("\\", "/")
        relative = PurePosixPath(normalized)

        if (
            not normalized.strip()
            or relative.is_absolute()
            or Path(reference_path).is_absolute()
            or ".." in relative.parts
        ):
            raise NotFoundError(NotFoundErrorKind.PATH_ESCAPE, self.id, reference_path)

        root = self.path.resolve()
        resolved = (root / relative).resolve()
        if resolved == root or not resolved.is_relative_to(root):
            raise NotFoundError(NotFoundErrorKind.PATH_ESCAPE, self.id, reference_path)

        if not resolved.is_file():
            raise NotFoundError(
                NotFoundErrorKind.UNKNOWN_REFERENCE, self.id, reference_path
            )

        return resolved.relative_to(root).as_posix(), resolved

    def load_reference(self, reference_path: str) -> str:
        """
        Return a reference document, loading the body first if needed.

        Args:
            reference_path: Path relative to the skill directory,
                e.g. "references/api.md"

        Returns:
            Raw reference text
        """
        key, resolved = self.resolve_reference(reference_path)

        cached = self._references.get(key)
        if cached is not None:
            return cached

        # References are only served once the owning body is resident
        self.load_body()

        with self._lock:
            if key not in self._references:
                try:
                    self._references[key] = read_text(resolved)
                except (OSError, UnicodeDecodeError) as e:
                    raise SkillLoadError(self.id, resolved, str(e)) from e
                logger.debug(f"Loaded reference '{key}' for skill '{self.id}'")
            return self._references[key]
