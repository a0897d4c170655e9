"""Tests for the command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from wpbundler.cli import _split_config_arg, format_entries, main  # pyright: ignore[reportPrivateUsage]
from wpbundler.defaults import FALLBACKS, RESULT_ZIP_FAILED


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path / "plugin"
    root.mkdir()
    (root / "composer.json").write_text(
        json.dumps(
            {
                "name": "acme/plugin",
                "extra": {"bundler": {"composer": {"install": False}, "zip": "plugin"}},
            }
        )
    )
    (root / "plugin.php").write_text("<?php")
    (root / "assets").mkdir()
    (root / "assets" / "index.css").write_text("body {}")
    (root / "inc").mkdir()
    (root / "inc" / "class-test.php").write_text("<?php")
    monkeypatch.chdir(root)
    return root


def _render_help(capsys: pytest.CaptureFixture[str]) -> str:
    with pytest.raises(SystemExit) as exc:
        main(["--help"])
    assert exc.value.code == 0
    return capsys.readouterr().out


def test_help(capsys: pytest.CaptureFixture[str]) -> None:
    out = _render_help(capsys)
    assert "wpbundler: Build production bundles of a project tree" in out
    assert "Common usage:" in out
    assert "wpbundler bundle --show-entries-only" in out
    assert "bundle" in out
    assert "init" in out


def test_no_command(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 1
    assert "No command specified" in capsys.readouterr().err


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("bundler.json", ("bundler.json", None)),
        ("bundler.json:wp", ("bundler.json", "wp")),
        ("config/app.yaml:extra.bundler", ("config/app.yaml", "extra.bundler")),
        ("C:\\config.json", ("C:\\config.json", None)),
        ("bundler.json:", ("bundler.json:", None)),
    ],
)
def test_split_config_arg(value: str, expected: tuple[str, str | None]) -> None:
    assert _split_config_arg(value) == expected


def test_format_entries(tmp_path: Path) -> None:
    (tmp_path / "assets").mkdir()
    (tmp_path / "inc").mkdir()
    (tmp_path / "inc" / "a.php").write_text("<?php")
    (tmp_path / "plugin.php").write_text("<?php")
    entries = {
        "plugin.php": tmp_path / "plugin.php",
        "inc/a.php": tmp_path / "inc" / "a.php",
        "assets": tmp_path / "assets",
    }
    assert format_entries(tmp_path, entries) == [
        f"{tmp_path.as_posix()}/",
        "  assets/**/*",
        "  inc/",
        "    a.php",
        "  plugin.php",
    ]


def test_show_entries_only(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["bundle", "--log", "0", "--show-entries-only"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        f"{project.resolve().as_posix()}/",
        "  assets/**/*",
        "  composer.json",
        "  inc/**/*",
        "  plugin.php",
    ]
    assert not (project / "dist").exists()


def test_extra_config_file(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (project / "bundler.json").write_text(json.dumps({"wp": {"include": ["plugin.php"]}}))
    assert main(["bundle", "-l", "0", "-c", "bundler.json:wp", "--show-entries-only"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[1:] == ["  plugin.php"]


def test_bundle(project: Path) -> None:
    assert main(["bundle", "--log", "0"]) == 0
    assert (project / "dist" / "plugin.zip").is_file()


def test_bundle_dry(project: Path) -> None:
    assert main(["bundle", "--log", "0", "--dry"]) == 0
    assert not (project / "dist").exists()


def test_bundle_error(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (project / "composer.json").write_text(json.dumps({"extra": {"bundler": {"output": "."}}}))
    assert main(["bundle", "--log", "0"]) == 1
    assert "Error:" in capsys.readouterr().err


def test_init_composer(project: Path) -> None:
    assert main(["init"]) == 0
    data = json.loads((project / "composer.json").read_text())
    assert data["name"] == "acme/plugin"
    assert data["extra"]["bundler"] == FALLBACKS


def test_init_target(project: Path) -> None:
    assert main(["init", "--target", "bundler.yaml", "--key", "wp"]) == 0
    data = yaml.safe_load((project / "bundler.yaml").read_text())
    assert data == {"wp": FALLBACKS}


def test_bundle_dry_after_failed_zip(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(*args: object, **kwargs: object) -> None:
        raise OSError("disk full")

    monkeypatch.setattr("wpbundler.bundler.zipfile.ZipFile", fail)
    assert main(["bundle", "--log", "0", "--dry"]) == RESULT_ZIP_FAILED
    assert not (project / "dist").exists()
