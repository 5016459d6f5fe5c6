"""Configuration management for skillshelf."""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

CONFIG_FILENAME = "config.yaml"


class Config(BaseModel):
    """
    Main configuration for skillshelf.

    Configuration is loaded from <workspace>/config.yaml when present, with
    any overrides (e.g. from CLI flags) merged on top. Pydantic defaults are
    used for fields not specified anywhere.
    """

    workspace: Path
    skill_paths: list[Path] = Field(default_factory=lambda: [Path("skills")])
    entry_filename: str = "SKILL.md"
    strict: bool = False
    max_description_length: int = Field(default=1024, gt=0)
    min_score: float = Field(default=0.3, ge=0.0, le=1.0)
    logging_path: Path = Field(default=Path(".logs"))
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("entry_filename")
    @classmethod
    def entry_filename_must_be_plain(cls, v: str) -> str:
        if not v or "/" in v or "\\" in v:
            raise ValueError("entry_filename must be a plain file name")
        return v

    @model_validator(mode="after")
    def resolve_paths(self) -> "Config":
        """Resolve relative paths against the workspace."""
        self.skill_paths = [
            path if path.is_absolute() else self.workspace / path
            for path in self.skill_paths
        ]
        if not self.logging_path.is_absolute():
            self.logging_path = self.workspace / self.logging_path
        return self

    @classmethod
    def load(
        cls, workspace_dir: Path, overrides: dict[str, Any] | None = None
    ) -> "Config":
        """
        Load configuration for a workspace.

        Args:
            workspace_dir: Directory holding config.yaml and, by default,
                the skills/ tree
            overrides: Values taking precedence over the file

        Returns:
            Config instance with all settings loaded and validated

        Raises:
            ValidationError: If configuration is invalid
        """
        config_data: dict[str, Any] = {"workspace": workspace_dir}

        config_file = workspace_dir / CONFIG_FILENAME
        if config_file.exists():
            with open(config_file) as f:
                file_data = yaml.safe_load(f) or {}
            if not isinstance(file_data, dict):
                raise ValueError(f"{config_file} must contain a mapping")
            config_data = cls._deep_merge(config_data, file_data)

        if overrides:
            config_data = cls._deep_merge(config_data, overrides)

        return cls.model_validate(config_data)

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """
        Deep merge override dict into base dict.

        Args:
            base: Base dictionary
            override: Override dictionary (takes precedence)

        Returns:
            Merged dictionary
        """
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = Config._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
