"""Configuration types for path resolution."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from wpbundler.file_resolver.defaults import COMMENT_MARKER


@dataclass(frozen=True)
class ResolverConfig:
    """
    Configuration for path resolution.

    `root` is the directory relative paths are resolved from when no explicit
    base path is given. Pattern lines starting with `comment_marker` are ignored.
    """

    root: str | Path
    comment_marker: str = COMMENT_MARKER

    def is_ignored_pattern(self, pattern: str) -> bool:
        """True for blank patterns and comments."""
        stripped = pattern.strip()
        return not stripped or stripped.startswith(self.comment_marker)
