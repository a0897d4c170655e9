"""
Finder: include/exclude bookkeeping for one base directory.

Included directories are copied as a whole, so excluding something nested in
an included directory cannot simply drop it from the inclusion set. Such paths
go on a removal list instead, and are deleted from the destination after the
copy. An exactly excluded path can never be included again, but a path nested
in an excluded directory can still be included on its own.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path

from wpbundler.errors import EmptyInputError, NotFoundError
from wpbundler.file_resolver.resolver import PathResolver, is_sub_path, make_absolute
from wpbundler.file_resolver.types import ResolverConfig

logger = logging.getLogger(__name__)


class Finder:
    """
    Collects the entries to bundle from a sequence of include and exclude
    patterns, applied in call order.
    """

    def __init__(self, basepath: str | os.PathLike[str], resolver: PathResolver | None = None) -> None:
        self._resolver: PathResolver = resolver or PathResolver(ResolverConfig(root=basepath))
        self.basepath: str = self._resolver.base(basepath)
        self._include: dict[str, Path] = {}
        self._exclude: dict[str, Path] = {}
        self._remove: list[str] = []

    def include(self, pattern: str) -> None:
        """Add the entries matched by `pattern`, unless already included or excluded."""
        resolved = self._resolver.resolve(pattern, self.basepath)
        added = 0
        for relative, absolute in resolved.items():
            if relative in self._include or relative in self._exclude:
                continue
            self._include[relative] = absolute
            added += 1
        logger.debug("Include %r: %d matched, %d added", pattern, len(resolved), added)

    def exclude(self, pattern: str) -> None:
        """
        Exclude the entries matched by `pattern`. An included entry is dropped;
        an entry nested in an included directory is scheduled for removal after
        the copy.
        """
        resolved = self._resolver.resolve(pattern, self.basepath)
        for relative, absolute in resolved.items():
            if relative in self._exclude:
                continue
            if relative in self._include:
                del self._include[relative]
            elif relative not in self._remove and any(
                is_sub_path(absolute, included) for included in self._include.values()
            ):
                self._remove.append(relative)
            self._exclude[relative] = absolute
        logger.debug("Exclude %r: %d matched", pattern, len(resolved))

    def include_many(self, patterns: Sequence[str]) -> None:
        """Include each pattern in order. Raises `EmptyInputError` if there are none."""
        if not patterns:
            raise EmptyInputError("No patterns to process in collection")
        for pattern in patterns:
            self.include(pattern)

    def exclude_many(self, patterns: Sequence[str]) -> None:
        """Exclude each pattern in order. Raises `EmptyInputError` if there are none."""
        if not patterns:
            raise EmptyInputError("No patterns to process in collection")
        for pattern in patterns:
            self.exclude(pattern)

    def include_from_file(self, path: str | os.PathLike[str]) -> None:
        """Include the patterns listed in a file, one per line."""
        self.include_many(self._read_patterns(path))

    def exclude_from_file(self, path: str | os.PathLike[str]) -> None:
        """Exclude the patterns listed in a file, one per line."""
        self.exclude_many(self._read_patterns(path))

    def entries(self) -> dict[str, Path]:
        """Entries to copy, keyed by path relative to the base directory."""
        return dict(self._include)

    def excluded(self) -> dict[str, Path]:
        return dict(self._exclude)

    def removals(self) -> list[str]:
        return list(self._remove)

    def entries_to_remove(self, output_basepath: str | os.PathLike[str]) -> list[Path]:
        """
        Destination paths to delete once included directories have been copied
        under `output_basepath`.
        """
        base = self._resolver.base(output_basepath)
        return [Path(make_absolute(relative, base)) for relative in self._remove]

    def _read_patterns(self, path: str | os.PathLike[str]) -> list[str]:
        """
        Read non-blank, non-comment lines from a pattern file. Raises
        `NotFoundError` if the file is missing and `EmptyInputError` if no
        pattern remains.
        """
        file_path = Path(self._resolver.make_absolute(path, self.basepath))
        if not file_path.is_file():
            raise NotFoundError(f"Unable to access pattern file at {file_path}")
        patterns = _filter_patterns(file_path.read_text(encoding="utf-8").splitlines(), self._resolver)
        if not patterns:
            raise EmptyInputError(f"Pattern file is empty: {file_path}")
        return patterns


def _filter_patterns(lines: Iterable[str], resolver: PathResolver) -> list[str]:
    return [line.strip() for line in lines if not resolver.config.is_ignored_pattern(line)]
