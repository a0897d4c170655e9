"""
PathResolver: turns a literal path or glob pattern into `relative -> absolute`
entries under a base directory.

Directories are returned as a single entry and never walked, so that callers
can copy them as one unit.
"""

from __future__ import annotations

import glob
import os
import posixpath
import re
from collections.abc import Iterable
from pathlib import Path

from wpbundler.errors import NotFoundError
from wpbundler.file_resolver.types import ResolverConfig

# Marker file identifying a project root.
PROJECT_MARKER = "composer.json"

_DRIVE_RE = re.compile(r"^[A-Za-z]:/")


def normalize(path: str | os.PathLike[str]) -> str:
    """
    Canonicalize a path string: forward slashes, no `.` or `..` segments and
    no trailing slash.
    """
    text = os.fspath(path).replace("\\", "/")
    if not text:
        return ""
    normalized = posixpath.normpath(text)
    # normpath keeps a leading double slash (POSIX allows it to be special)
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def is_absolute(path: str | os.PathLike[str]) -> bool:
    text = os.fspath(path).replace("\\", "/")
    return text.startswith("/") or bool(_DRIVE_RE.match(text))


def make_absolute(path: str | os.PathLike[str], basepath: str | os.PathLike[str]) -> str:
    """Make `path` absolute against `basepath` unless it already is."""
    if is_absolute(path):
        return normalize(path)
    return normalize(posixpath.join(normalize(basepath), normalize(path)))


def make_relative(path: str | os.PathLike[str], basepath: str | os.PathLike[str]) -> str:
    """Express `path` relative to `basepath`, using forward slashes."""
    return posixpath.relpath(normalize(path), normalize(basepath))


def is_sub_path(path: str | os.PathLike[str], ancestor: str | os.PathLike[str]) -> bool:
    """
    True iff `path` lies strictly inside `ancestor`. A path is not a sub path
    of itself, and `/foo2` is not inside `/foo`.
    """
    child = normalize(path)
    parent = normalize(ancestor)
    if not child or not parent or child == parent:
        return False
    prefix = parent if parent.endswith("/") else parent + "/"
    return child.startswith(prefix)


def find_project_root(start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for a directory holding `composer.json`.
    Returns that directory, or `None`.
    """
    current = start_dir.resolve()
    while True:
        if (current / PROJECT_MARKER).is_file():
            return current
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


class PathResolver:
    """
    Resolves patterns against a base directory (the configured root unless
    another base is given).

    A pattern naming an existing file or directory yields that single entry.
    Anything else is expanded as a shell glob (`**` matches across
    directories); each match is one entry, directories included as a whole.
    Keys are paths relative to the base, values are absolute `Path`s.
    """

    def __init__(self, config: ResolverConfig) -> None:
        self.config: ResolverConfig = config
        self.root: str = normalize(os.path.abspath(config.root))

    def base(self, basepath: str | os.PathLike[str] | None = None) -> str:
        if basepath is None:
            return self.root
        return make_absolute(basepath, self.root)

    def make_absolute(
        self, path: str | os.PathLike[str], basepath: str | os.PathLike[str] | None = None
    ) -> str:
        return make_absolute(path, self.base(basepath))

    def make_relative(
        self, path: str | os.PathLike[str], basepath: str | os.PathLike[str] | None = None
    ) -> str:
        return make_relative(path, self.base(basepath))

    def resolve(
        self, pattern: str, basepath: str | os.PathLike[str] | None = None
    ) -> dict[str, Path]:
        """
        Resolve one pattern. Blank patterns, comments and patterns matching
        nothing give an empty mapping. The base directory itself is never an
        entry. Raises `NotFoundError` if the base directory does not exist.
        """
        if self.config.is_ignored_pattern(pattern):
            return {}

        base = self.base(basepath)
        if not os.path.isdir(base):
            raise NotFoundError(f"Base directory not found: {base}")

        pattern = pattern.strip()
        absolute = make_absolute(pattern, base)
        if absolute == base:
            return {}
        if os.path.isfile(absolute) or os.path.isdir(absolute):
            return {make_relative(absolute, base): Path(absolute)}

        result: dict[str, Path] = {}
        for match in self._expand_glob(pattern, base):
            # `**` also matches the base directory, with a trailing slash
            found = normalize(match)
            if found == base:
                continue
            result.setdefault(make_relative(found, base), Path(found))
        return result

    def resolve_many(
        self, patterns: Iterable[str], basepath: str | os.PathLike[str] | None = None
    ) -> dict[str, Path]:
        """Union of `resolve` over all patterns; the first entry for a key wins."""
        result: dict[str, Path] = {}
        for pattern in patterns:
            for relative, absolute in self.resolve(pattern, basepath).items():
                result.setdefault(relative, absolute)
        return result

    def _expand_glob(self, pattern: str, base: str) -> list[str]:
        """Expand a glob, escaping the literal base so only the pattern is matched."""
        if is_absolute(pattern):
            expression = normalize(pattern)
        else:
            expression = posixpath.join(glob.escape(base), normalize(pattern))
        return sorted(glob.glob(expression, recursive=True))
