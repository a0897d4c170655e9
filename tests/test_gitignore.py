"""Tests for ignore file matching."""

from __future__ import annotations

import os
import stat
from pathlib import Path

from wpbundler.file_resolver import Finder, find_ignored, load_ignore_spec
from wpbundler.file_resolver.gitignore import (
    _read_ignore_file,  # pyright: ignore[reportPrivateUsage]
)


def test_load_ignore_spec_missing(tmp_path: Path):
    assert load_ignore_spec(tmp_path / ".gitignore") is None


def test_load_ignore_spec_only_comments(tmp_path: Path):
    ignore = tmp_path / ".wpignore"
    ignore.write_text("# nothing here\n\n")
    assert load_ignore_spec(ignore) is None


def test_read_ignore_file_non_utf8(tmp_path: Path):
    ignore_file = tmp_path / ".gitignore"
    ignore_file.write_bytes(b"\x80\x81\x82\xff\xfe")
    assert _read_ignore_file(ignore_file) is None


def test_read_ignore_file_unreadable(tmp_path: Path):
    if os.getuid() == 0:
        # Root can read any file regardless of permissions
        assert _read_ignore_file(tmp_path / "nonexistent_ignore") is None
        return
    ignore_file = tmp_path / ".gitignore"
    ignore_file.write_text("*.log\n")
    ignore_file.chmod(0o000)
    try:
        assert _read_ignore_file(ignore_file) is None
    finally:
        ignore_file.chmod(stat.S_IRUSR | stat.S_IWUSR)


def test_find_ignored_files_and_dirs(tmp_path: Path):
    (tmp_path / ".gitignore").write_text("*.log\nnode_modules/\n")
    (tmp_path / "app.php").write_text("<?php")
    (tmp_path / "debug.log").write_text("log")
    nm = tmp_path / "node_modules" / "pkg"
    nm.mkdir(parents=True)
    (nm / "index.js").write_text("js")
    sub = tmp_path / "src"
    sub.mkdir()
    (sub / "trace.log").write_text("log")
    (sub / "Main.php").write_text("<?php")

    spec = load_ignore_spec(tmp_path / ".gitignore")
    assert spec is not None
    ignored = find_ignored(tmp_path, spec)
    # node_modules is reported once, its content is not walked
    assert sorted(ignored) == ["debug.log", "node_modules", "src/trace.log"]


def test_find_ignored_skips_vcs_dirs(tmp_path: Path):
    git = tmp_path / ".git"
    git.mkdir()
    (git / "debug.log").write_text("log")
    (tmp_path / ".gitignore").write_text("*.log\n")
    spec = load_ignore_spec(tmp_path / ".gitignore")
    assert spec is not None
    assert find_ignored(tmp_path, spec) == []


def test_ignored_paths_inside_included_dirs_are_removed(tmp_path: Path):
    (tmp_path / ".wpignore").write_text("*.log\n")
    sub = tmp_path / "src"
    sub.mkdir()
    (sub / "trace.log").write_text("log")
    (sub / "Main.php").write_text("<?php")

    spec = load_ignore_spec(tmp_path / ".wpignore")
    assert spec is not None
    finder = Finder(tmp_path)
    finder.include("*")
    for relative in find_ignored(tmp_path, spec):
        finder.exclude(relative)
    assert "src" in finder.entries()
    assert finder.removals() == ["src/trace.log"]
