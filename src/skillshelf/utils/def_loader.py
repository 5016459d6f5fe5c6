"""Shared utilities for reading definition files (YAML frontmatter + markdown)."""

import logging
from pathlib import Path
from typing import Any, Callable, Iterator, TypeVar

import yaml

logger = logging.getLogger(__name__)

FRONTMATTER_DELIMITER = "---"

T = TypeVar("T")


class InvalidDefError(Exception):
    """Definition file is malformed."""

    def __init__(self, kind: str, def_id: str, reason: str):
        super().__init__(f"Invalid {kind} '{def_id}': {reason}")
        self.kind = kind
        self.def_id = def_id
        self.reason = reason


def read_text(path: Path) -> str:
    """Read a whole definition or reference file."""
    return path.read_text(encoding="utf-8")


def substitute_template(body: str, variables: dict[str, str]) -> str:
    """
    Replace {{variable}} placeholders in template body.

    Args:
        body: Template string with {{variable}} placeholders
        variables: Dict of variable names to values

    Returns:
        Body with all matching placeholders replaced
    """
    result = body
    # Longer names first so {{path_extra}} is not clobbered by {{path}}
    for key in sorted(variables.keys(), key=len, reverse=True):
        result = result.replace(f"{{{{{key}}}}}", variables[key])
    return result


def _load_frontmatter_yaml(text: str, def_id: str, kind: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise InvalidDefError(kind, def_id, f"frontmatter is not valid YAML: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidDefError(kind, def_id, "frontmatter must be a mapping")
    return data


def parse_definition(
    content: str,
    def_id: str,
    parse_fn: Callable[[str, dict[str, Any], str], T],
    kind: str = "skill",
) -> T:
    """
    Parse YAML frontmatter + markdown body with type conversion.

    Args:
        content: Raw file content
        def_id: Definition ID (passed to parse_fn for context)
        parse_fn: Callback(def_id, frontmatter, body) -> typed object
        kind: Definition kind, used in error messages

    Returns:
        The typed object returned by parse_fn

    Raises:
        InvalidDefError: If the frontmatter block is not valid YAML
    """
    content = content.replace("\r\n", "\n")
    opening = FRONTMATTER_DELIMITER + "\n"
    if not content.startswith(opening):
        return parse_fn(def_id, {}, content)

    end_delimiter = content.find(f"\n{FRONTMATTER_DELIMITER}\n", len(opening) - 1)
    if end_delimiter != -1:
        frontmatter_text = content[len(opening) : end_delimiter]
        body = content[end_delimiter + len(FRONTMATTER_DELIMITER) + 2 :]
    elif content.endswith(f"\n{FRONTMATTER_DELIMITER}"):
        frontmatter_text = content[len(opening) : -len(FRONTMATTER_DELIMITER) - 1]
        body = ""
    else:
        return parse_fn(def_id, {}, content)

    raw_dict = _load_frontmatter_yaml(frontmatter_text, def_id, kind)
    return parse_fn(def_id, raw_dict, body)


def read_frontmatter(path: Path, def_id: str, kind: str = "skill") -> dict[str, Any]:
    """
    Read only the frontmatter block of a definition file.

    The file is streamed line by line and closed as soon as the closing
    delimiter is seen, so the markdown body is never loaded.

    Args:
        path: Definition file
        def_id: Definition ID, used in error messages
        kind: Definition kind, used in error messages

    Returns:
        Parsed frontmatter mapping

    Raises:
        InvalidDefError: If the file has no complete frontmatter block
    """
    lines: list[str] = []
    with open(path, encoding="utf-8") as f:
        first = f.readline()
        if first.rstrip("\r\n") != FRONTMATTER_DELIMITER:
            raise InvalidDefError(kind, def_id, "no valid frontmatter")

        for line in f:
            if line.rstrip("\r\n") == FRONTMATTER_DELIMITER:
                break
            lines.append(line)
        else:
            raise InvalidDefError(kind, def_id, "unterminated frontmatter")

    return _load_frontmatter_yaml("".join(lines), def_id, kind)


def discover_definitions(path: Path, filename: str) -> Iterator[Path]:
    """
    Walk a directory tree for definition folders.

    A folder holding ``filename`` is a definition folder; its own subtree is
    not searched further. Folders are visited depth-first in sorted order so
    the scan order is stable across runs.

    Args:
        path: Root directory to search
        filename: File marking a definition folder (e.g., "SKILL.md")

    Yields:
        Definition folders, in scan order
    """
    if not path.exists():
        logger.warning(f"Definitions directory not found: {path}")
        return

    if not path.is_dir():
        logger.warning(f"Definitions path is not a directory: {path}")
        return

    for def_dir in sorted(p for p in path.iterdir() if p.is_dir()):
        if def_dir.name.startswith("."):
            continue

        if (def_dir / filename).is_file():
            yield def_dir
        else:
            yield from discover_definitions(def_dir, filename)
