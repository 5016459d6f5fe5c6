"""Custom exceptions for skillshelf."""

from enum import Enum
from pathlib import Path


class SkillError(Exception):
    """Base class for all skillshelf errors."""


class DiscoveryErrorKind(str, Enum):
    DUPLICATE_ID = "duplicate_id"
    INVALID_METADATA = "invalid_metadata"


class NotFoundErrorKind(str, Enum):
    UNKNOWN_ID = "unknown_id"
    PATH_ESCAPE = "path_escape"
    UNKNOWN_REFERENCE = "unknown_reference"


class DiscoveryError(SkillError):
    """A skill directory could not be registered."""

    def __init__(
        self,
        kind: DiscoveryErrorKind,
        path: Path,
        detail: str,
        other_path: Path | None = None,
    ):
        if other_path is not None:
            message = f"{detail}: {other_path} and {path}"
        else:
            message = f"{detail}: {path}"
        super().__init__(message)
        self.kind = kind
        self.path = path
        self.other_path = other_path
        self.detail = detail


class NotFoundError(SkillError):
    """Requested skill or reference is not available."""

    def __init__(
        self, kind: NotFoundErrorKind, skill_id: str, detail: str | None = None
    ):
        if kind is NotFoundErrorKind.UNKNOWN_ID:
            message = f"Skill not found: {skill_id}"
        elif kind is NotFoundErrorKind.PATH_ESCAPE:
            message = f"Reference path escapes skill '{skill_id}': {detail}"
        else:
            message = f"Reference not found in skill '{skill_id}': {detail}"
        super().__init__(message)
        self.kind = kind
        self.skill_id = skill_id
        self.detail = detail


class SkillLoadError(SkillError):
    """A registered skill's body or reference could not be read."""

    def __init__(self, skill_id: str, path: Path, reason: str):
        super().__init__(f"Failed to load skill '{skill_id}' from {path}: {reason}")
        self.skill_id = skill_id
        self.path = path
        self.reason = reason
