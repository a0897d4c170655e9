"""Tests for the include/exclude Finder."""

from __future__ import annotations

from pathlib import Path

import pytest

from wpbundler.errors import EmptyInputError, NotFoundError
from wpbundler.file_resolver import Finder


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / "README.MD").write_text("# Readme")
    (tmp_path / "plugin.php").write_text("<?php")
    src = tmp_path / "src"
    src.mkdir()
    (src / "Config.php").write_text("<?php")
    (src / "Finder.php").write_text("<?php")
    return tmp_path


def test_include(project: Path) -> None:
    finder = Finder(project)
    finder.include("README.MD")
    assert finder.entries() == {"README.MD": project / "README.MD"}


def test_include_is_idempotent(project: Path) -> None:
    once = Finder(project)
    once.include("*")
    twice = Finder(project)
    twice.include("*")
    twice.include("*")
    assert once.entries() == twice.entries()
    assert list(twice.entries()) == ["README.MD", "plugin.php", "src"]


def test_exclude(project: Path) -> None:
    finder = Finder(project)
    finder.include("*")
    finder.exclude("README.MD")
    assert "README.MD" not in finder.entries()
    assert finder.removals() == []


def test_excluded_key_cannot_be_included_again(project: Path) -> None:
    finder = Finder(project)
    finder.include("*")
    finder.exclude("README.MD")
    finder.include("README.MD")
    finder.include("*.MD")
    assert "README.MD" not in finder.entries()


def test_include_parent_exclude_child(project: Path) -> None:
    finder = Finder(project)
    dist = project / "dist"
    finder.include("*")
    finder.exclude("src/Config.php")
    assert "src" in finder.entries()
    assert "src/Config.php" not in finder.entries()
    assert finder.entries_to_remove(dist) == [dist / "src" / "Config.php"]


def test_exclude_child_twice_removes_once(project: Path) -> None:
    finder = Finder(project)
    finder.include("*")
    finder.exclude("src/Config.php")
    finder.exclude("src/*.php")
    assert finder.removals() == ["src/Config.php", "src/Finder.php"]


def test_exclude_outside_included_dirs_is_not_removed(project: Path) -> None:
    finder = Finder(project)
    finder.include("plugin.php")
    finder.exclude("src/Config.php")
    assert finder.removals() == []
    assert "src/Config.php" in finder.excluded()


def test_exclude_parent_include_child(project: Path) -> None:
    finder = Finder(project)
    finder.include("*")
    finder.exclude("src")
    finder.include("src/Config.php")
    entries = finder.entries()
    assert "src" not in entries
    assert entries["src/Config.php"] == project / "src" / "Config.php"


def test_child_reinclusion_keeps_removal_of_sibling(project: Path) -> None:
    finder = Finder(project)
    finder.include("*")
    finder.exclude("src/Config.php")
    finder.include("src/Finder.php")
    assert "src/Finder.php" in finder.entries()
    assert finder.removals() == ["src/Config.php"]


def test_entries_returns_copy(project: Path) -> None:
    finder = Finder(project)
    finder.include("*")
    finder.entries().clear()
    assert len(finder.entries()) == 3


def test_entries_to_remove_relative_output(project: Path) -> None:
    finder = Finder(project)
    finder.include("*")
    finder.exclude("src/Config.php")
    assert finder.entries_to_remove("dist") == [project / "dist" / "src" / "Config.php"]


def test_from_file(project: Path) -> None:
    include = project / ".wpinclude"
    include.write_text("plugin.php\nREADME.MD\n")
    exclude = project / ".wpexclude"
    exclude.write_text("# keep the plugin\n\nREADME.MD\n")
    finder = Finder(project)

    finder.include_from_file(include)
    assert len(finder.entries()) == 2

    finder.exclude_from_file(exclude)
    assert list(finder.entries()) == ["plugin.php"]


def test_from_file_relative_to_base(project: Path) -> None:
    (project / ".wpinclude").write_text("src\n")
    finder = Finder(project)
    finder.include_from_file(".wpinclude")
    assert list(finder.entries()) == ["src"]


def test_from_file_skips_comments_and_blanks(project: Path) -> None:
    patterns = project / "patterns.txt"
    patterns.write_text("#comment\n\nREADME.MD\n")
    finder = Finder(project)
    finder.include_from_file(patterns)
    assert finder.entries() == {"README.MD": project / "README.MD"}


def test_from_file_missing(project: Path) -> None:
    finder = Finder(project)
    with pytest.raises(NotFoundError):
        finder.include_from_file(project / ".wpinclude")
    with pytest.raises(NotFoundError):
        finder.exclude_from_file(project / ".wpexclude")


def test_from_file_only_comments(project: Path) -> None:
    patterns = project / ".wpexclude"
    patterns.write_text("# nothing\n\n   \n")
    finder = Finder(project)
    with pytest.raises(EmptyInputError):
        finder.exclude_from_file(patterns)
    with pytest.raises(EmptyInputError):
        finder.include_from_file(patterns)


def test_many_rejects_empty(project: Path) -> None:
    finder = Finder(project)
    with pytest.raises(EmptyInputError):
        finder.include_many([])
    with pytest.raises(EmptyInputError):
        finder.exclude_many([])


def test_many_applies_in_order(project: Path) -> None:
    finder = Finder(project)
    finder.include_many(["*", "src/Config.php"])
    finder.exclude_many(["src", "plugin.php"])
    assert list(finder.entries()) == ["README.MD", "src/Config.php"]
