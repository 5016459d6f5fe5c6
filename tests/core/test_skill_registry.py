"""Tests for SkillRegistry body and reference loading."""

import os
import threading
from unittest.mock import patch

import pytest

from skillshelf.core.exceptions import (
    NotFoundError,
    NotFoundErrorKind,
    SkillError,
    SkillLoadError,
)
from skillshelf.core.registry import SkillRegistry
from skillshelf.core.skill_def import SkillState
from skillshelf.core.skill_loader import load_registry
from skillshelf.utils.def_loader import read_text


@pytest.fixture
def registry(skills_dir, make_skill) -> SkillRegistry:
    make_skill(
        "a",
        name="Alpha",
        description="desc A",
        body="# Alpha\n\nBundled files live in {{skill_dir}} for {{skill_id}}.",
        references={
            "references/api.md": "# API reference",
            "references/deep/guide.md": "# Guide",
            "references/notes.txt": "not markdown",
            "scripts/setup.md": "# Setup",
        },
    )
    make_skill("b", name="Beta", description="desc B")
    return load_registry([skills_dir])


class TestRegistryAccess:
    def test_container_protocol(self, registry):
        assert "a" in registry
        assert "missing" not in registry
        assert len(registry) == 2
        assert [skill.id for skill in registry] == ["a", "b"]

    def test_get_unknown_returns_none(self, registry):
        assert registry.get("missing") is None

    def test_require_unknown_raises(self, registry):
        with pytest.raises(NotFoundError) as exc:
            registry.require("missing")

        assert exc.value.kind == NotFoundErrorKind.UNKNOWN_ID
        assert exc.value.skill_id == "missing"

    def test_rejects_duplicate_definitions(self, registry):
        skill = registry.get("a")

        with pytest.raises(ValueError, match="already registered"):
            SkillRegistry([skill, skill])


class TestLoadBody:
    def test_returns_body_without_frontmatter(self, registry, skills_dir):
        body = registry.load_body("a")

        assert body.startswith("# Alpha")
        assert "name: Alpha" not in body
        assert str(skills_dir / "a") in body
        assert "for a." in body

    def test_body_is_cached(self, registry):
        """Second call returns the same object without reading the disk again."""
        with patch(
            "skillshelf.core.skill_def.read_text", wraps=read_text
        ) as mock_read:
            first = registry.load_body("a")
            second = registry.load_body("a")

        assert first is second
        assert mock_read.call_count == 1

    def test_state_moves_to_body_loaded(self, registry):
        assert registry.state("a") == SkillState.DISCOVERED

        registry.load_body("a")

        assert registry.state("a") == SkillState.BODY_LOADED
        assert registry.state("b") == SkillState.DISCOVERED

    def test_unknown_id(self, registry):
        with pytest.raises(NotFoundError) as exc:
            registry.load_body("missing")

        assert exc.value.kind == NotFoundErrorKind.UNKNOWN_ID

    def test_metadata_is_not_refreshed_from_disk(self, registry, skills_dir):
        (skills_dir / "b" / "SKILL.md").write_text(
            "---\nname: Renamed\ndescription: new\n---\nNew body\n"
        )

        assert registry.load_body("b") == "New body"
        assert registry.get("b").name == "Beta"

    def test_concurrent_loads_read_once(self, registry):
        results = []
        with patch(
            "skillshelf.core.skill_def.read_text", wraps=read_text
        ) as mock_read:
            threads = [
                threading.Thread(target=lambda: results.append(registry.load_body("a")))
                for _ in range(8)
            ]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

        assert mock_read.call_count == 1
        assert all(r is results[0] for r in results)

    def test_entry_file_removed_after_discovery(self, registry, skills_dir):
        (skills_dir / "b" / "SKILL.md").unlink()

        with pytest.raises(SkillLoadError) as exc:
            registry.load_body("b")

        assert isinstance(exc.value, SkillError)
        assert exc.value.skill_id == "b"
        assert exc.value.path == skills_dir / "b" / "SKILL.md"
        assert registry.state("b") == SkillState.DISCOVERED

    def test_frontmatter_broken_after_discovery(self, registry, skills_dir):
        (skills_dir / "b" / "SKILL.md").write_text("---\nname: [broken\n---\nBody\n")

        with pytest.raises(SkillLoadError) as exc:
            registry.load_body("b")

        assert "not valid YAML" in exc.value.reason
        assert registry.get("b").body is None


class TestLoadReference:
    def test_loads_reference_and_body_first(self, registry):
        """Reading a reference also loads the owning body."""
        content = registry.load_reference("a", "references/api.md")

        assert content == "# API reference"
        skill = registry.get("a")
        assert skill.body is not None
        assert skill.state == SkillState.REFERENCES_LOADED
        assert skill.references == {"references/api.md": "# API reference"}

    def test_reference_is_cached(self, registry):
        registry.load_body("a")
        with patch(
            "skillshelf.core.skill_def.read_text", wraps=read_text
        ) as mock_read:
            first = registry.load_reference("a", "references/api.md")
            second = registry.load_reference("a", "./references/api.md")

        assert first is second
        assert mock_read.call_count == 1

    def test_files_outside_references_dir_are_allowed(self, registry):
        assert registry.load_reference("a", "scripts/setup.md") == "# Setup"

    def test_windows_separators(self, registry):
        assert registry.load_reference("a", "references\\deep\\guide.md") == "# Guide"

    @pytest.mark.parametrize(
        "reference_path",
        [
            "../../etc/passwd",
            "../b/SKILL.md",
            "references/../../b/SKILL.md",
            "references/..",
            "..\\b\\SKILL.md",
            "/etc/passwd",
            "",
            ".",
        ],
    )
    def test_rejects_path_escape(self, registry, reference_path):
        with pytest.raises(NotFoundError) as exc:
            registry.load_reference("a", reference_path)

        assert exc.value.kind == NotFoundErrorKind.PATH_ESCAPE
        assert registry.get("a").references == {}

    def test_rejects_symlink_escape(self, registry, tmp_path, skills_dir):
        secret = tmp_path / "secret.md"
        secret.write_text("secret")
        os.symlink(secret, skills_dir / "a" / "references" / "link.md")

        with pytest.raises(NotFoundError) as exc:
            registry.load_reference("a", "references/link.md")

        assert exc.value.kind == NotFoundErrorKind.PATH_ESCAPE

    def test_unreadable_reference(self, registry):
        registry.load_body("a")

        with patch(
            "skillshelf.core.skill_def.read_text",
            side_effect=PermissionError("denied"),
        ):
            with pytest.raises(SkillLoadError) as exc:
                registry.load_reference("a", "references/api.md")

        assert "denied" in str(exc.value)
        assert registry.get("a").references == {}

    def test_missing_reference(self, registry):
        with pytest.raises(NotFoundError) as exc:
            registry.load_reference("a", "references/missing.md")

        assert exc.value.kind == NotFoundErrorKind.UNKNOWN_REFERENCE
        assert "references/missing.md" in str(exc.value)

    def test_directory_is_not_a_reference(self, registry):
        with pytest.raises(NotFoundError) as exc:
            registry.load_reference("a", "references")

        assert exc.value.kind == NotFoundErrorKind.UNKNOWN_REFERENCE

    def test_unknown_id(self, registry):
        with pytest.raises(NotFoundError) as exc:
            registry.load_reference("missing", "references/api.md")

        assert exc.value.kind == NotFoundErrorKind.UNKNOWN_ID


class TestListReferences:
    def test_lists_markdown_references(self, registry):
        assert registry.list_references("a") == [
            "references/api.md",
            "references/deep/guide.md",
        ]

    def test_listing_reads_no_content(self, registry):
        with patch("skillshelf.core.skill_def.read_text") as mock_read:
            registry.list_references("a")

        mock_read.assert_not_called()
        assert registry.state("a") == SkillState.DISCOVERED

    def test_no_references_dir(self, registry):
        assert registry.list_references("b") == []
