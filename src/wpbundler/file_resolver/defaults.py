"""
Default patterns and file names for entry resolution.

Pattern list files hold one pattern per line. Ignore files use gitignore syntax.
"""

from __future__ import annotations

COMMENT_MARKER = "#"

DEFAULT_INCLUDES: list[str] = ["*"]

INCLUDE_FILE = ".wpinclude"
EXCLUDE_FILE = ".wpexclude"
TOOL_IGNORE_FILE = ".wpignore"
GITIGNORE_FILE = ".gitignore"

# Directories never entered when matching ignore files.
NEVER_WALK: frozenset[str] = frozenset({".git", ".hg", ".svn"})
