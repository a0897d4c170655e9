"""
Entry resolution: which files and directories of a project go into a bundle.

Usage::

    from wpbundler.file_resolver import Finder

    finder = Finder("/path/to/project")
    finder.include("*")
    finder.exclude("src/Config.php")
    finder.entries()                    # {"src": Path(...), "README.md": Path(...)}
    finder.entries_to_remove("/dist")   # [Path("/dist/src/Config.php")]
"""

from wpbundler.file_resolver.defaults import DEFAULT_INCLUDES
from wpbundler.file_resolver.finder import Finder
from wpbundler.file_resolver.gitignore import find_ignored, load_ignore_spec
from wpbundler.file_resolver.resolver import (
    PathResolver,
    find_project_root,
    is_sub_path,
    make_absolute,
    make_relative,
    normalize,
)
from wpbundler.file_resolver.types import ResolverConfig

__all__ = [
    "DEFAULT_INCLUDES",
    "Finder",
    "PathResolver",
    "ResolverConfig",
    "find_ignored",
    "find_project_root",
    "is_sub_path",
    "load_ignore_spec",
    "make_absolute",
    "make_relative",
    "normalize",
]
