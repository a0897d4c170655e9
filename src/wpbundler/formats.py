"""
Reading and writing structured configuration files.

The format is inferred from the file suffix: `.toml` and `.yaml`/`.yml` are
recognized, anything else is treated as JSON (the default `composer.json`).
TOML is read-only.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, cast

import yaml
from strif import atomic_output_file

from wpbundler.dotted import Tree
from wpbundler.errors import ConfigParseError, ConfigReadError, UnsupportedFormatError

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]

_YAML_SUFFIXES = {".yaml", ".yml"}


def file_format(path: Path) -> str:
    """Return `json`, `toml` or `yaml` for a config file path."""
    suffix = path.suffix.lower()
    if suffix == ".toml":
        return "toml"
    if suffix in _YAML_SUFFIXES:
        return "yaml"
    return "json"


def read_structured(path: Path) -> Tree:
    """
    Read a structured file into a dict. Raises `ConfigReadError` if the file is
    missing or unreadable and `ConfigParseError` if the content is malformed or
    its top level is not a table.
    """
    if not path.is_file():
        raise ConfigReadError(f"Configuration file does not exist: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigReadError(f"Unable to read configuration file {path}: {e}") from e

    fmt = file_format(path)
    try:
        if fmt == "toml":
            data: Any = tomllib.loads(text)
        elif fmt == "yaml":
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(f"Malformed configuration file {path}: {e}") from e

    if data is None and fmt == "yaml":
        return {}
    if not isinstance(data, dict):
        raise ConfigParseError(f"Configuration file {path} does not contain a table")
    return cast(Tree, data)


def dump_structured(data: Tree, fmt: str) -> str:
    """Serialize a tree deterministically, preserving key order."""
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
    if fmt == "json":
        return json.dumps(data, indent=4, ensure_ascii=False) + "\n"
    raise UnsupportedFormatError(f"Writing {fmt} configuration files is not supported")


def write_structured(path: Path, data: Tree) -> Path:
    """Write a tree to `path` atomically, creating parent directories."""
    content = dump_structured(data, file_format(path))
    with atomic_output_file(path, make_parents=True) as temp_path:
        Path(temp_path).write_text(content, encoding="utf-8")
    return path
