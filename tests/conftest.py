"""Shared test fixtures for skillshelf test suite."""

from pathlib import Path
from typing import Callable

import pytest

from skillshelf.utils.config import Config

MakeSkill = Callable[..., Path]


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Config with workspace pointing to tmp_path."""
    return Config(workspace=tmp_path)


@pytest.fixture
def skills_dir(tmp_path: Path) -> Path:
    """Temporary skills root."""
    path = tmp_path / "skills"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def make_skill(skills_dir: Path) -> MakeSkill:
    """Factory writing <root>/<skill_id>/SKILL.md with frontmatter and body."""

    def _make(
        skill_id: str,
        name: str = "Test Skill",
        description: str = "A test skill",
        body: str = "# Test Skill\n\nThis is the skill content.",
        root: Path | None = None,
        extra: str = "",
        references: dict[str, str] | None = None,
    ) -> Path:
        skill_dir = (root or skills_dir) / skill_id
        skill_dir.mkdir(parents=True, exist_ok=True)
        (skill_dir / "SKILL.md").write_text(
            f"---\nname: {name}\ndescription: {description}\n{extra}---\n\n{body}\n"
        )
        for rel_path, text in (references or {}).items():
            ref_file = skill_dir / rel_path
            ref_file.parent.mkdir(parents=True, exist_ok=True)
            ref_file.write_text(text)
        return skill_dir

    return _make
