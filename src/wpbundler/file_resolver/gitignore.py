"""Gitignore and tool-specific ignore file handling using pathspec."""

from __future__ import annotations

import os
from pathlib import Path

import pathspec

from wpbundler.file_resolver.defaults import COMMENT_MARKER, NEVER_WALK


def _read_ignore_file(path: Path) -> list[str] | None:
    """Return the pattern lines of an ignore file, or `None` if it can't be read."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    return [
        line
        for line in text.splitlines()
        if line.strip() and not line.strip().startswith(COMMENT_MARKER)
    ]


def load_ignore_spec(path: Path) -> pathspec.GitIgnoreSpec | None:
    """
    Read an ignore file (`.gitignore`, `.wpignore`) and return a compiled spec,
    or `None` if the file is missing, unreadable or holds no pattern.
    """
    if not path.is_file():
        return None
    lines = _read_ignore_file(path)
    if not lines:
        return None
    return pathspec.GitIgnoreSpec.from_lines(lines)


def find_ignored(root: Path, spec: pathspec.PathSpec) -> list[str]:
    """
    Walk `root` and return the relative paths (forward slashes) matched by
    `spec`. A matched directory is reported once and not entered.
    """
    ignored: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        prefix = "" if rel_dir == "." else rel_dir + "/"

        kept: list[str] = []
        for dirname in sorted(dirnames):
            if dirname in NEVER_WALK:
                continue
            rel = prefix + dirname
            if spec.match_file(rel + "/"):
                ignored.append(rel)
            else:
                kept.append(dirname)
        # Prune matched directories in-place (prevents descent)
        dirnames[:] = kept

        for filename in sorted(filenames):
            rel = prefix + filename
            if spec.match_file(rel):
                ignored.append(rel)
    return ignored
