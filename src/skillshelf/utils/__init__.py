"""Utilities package."""

from skillshelf.utils.def_loader import (
    InvalidDefError,
    discover_definitions,
    parse_definition,
    read_frontmatter,
)
from skillshelf.utils.logging import setup_logging

__all__ = [
    "InvalidDefError",
    "discover_definitions",
    "parse_definition",
    "read_frontmatter",
    "setup_logging",
]
