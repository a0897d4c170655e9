"""
Three-layer configuration store.

Values are looked up in priority order: overrides > defaults > fallbacks. Each
registry is a nested dict addressed with dotted keys (`composer.install`).
The effective configuration is built by overlaying defaults and then overrides
onto the fallbacks, where a non-empty list replaces the list below it and an
empty list means "not provided".
"""

from __future__ import annotations

import copy
import logging
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar, cast

from wpbundler.dotted import Tree, delete_key, get_key, has_key, merge_trees, set_key
from wpbundler.errors import (
    ConfigError,
    ConfigKeyError,
    ConfigParseError,
    MissingKeyError,
    TypeMismatchError,
)
from wpbundler.formats import read_structured, write_structured

logger = logging.getLogger(__name__)

COMPOSER_FILE = "composer.json"


class Registry(str, Enum):
    """Configuration layers. `CONFIG` addresses all of them at once."""

    FALLBACKS = "fallbacks"
    DEFAULTS = "defaults"
    OVERRIDES = "overrides"
    CONFIG = "config"


# Lookup order, highest priority first.
_PRIORITY = (Registry.OVERRIDES, Registry.DEFAULTS, Registry.FALLBACKS)


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

_T = TypeVar("_T")

_TYPE_NAMES = {bool: "a boolean", str: "a string", int: "an integer", list: "an array"}


class LayeredConfig:
    """
    Configuration made of three registries (fallbacks, defaults, overrides).

    A file path and optional subkey can be bound to each registry by `load`, so
    that a later `save` writes back to the same place.
    """

    def __init__(
        self,
        defaults: Tree | None = None,
        overrides: Tree | None = None,
        fallbacks: Tree | None = None,
        separator: str = ".",
    ) -> None:
        self.separator: str = separator
        self._trees: dict[Registry, Tree] = {
            Registry.FALLBACKS: copy.deepcopy(fallbacks or {}),
            Registry.DEFAULTS: copy.deepcopy(defaults or {}),
            Registry.OVERRIDES: copy.deepcopy(overrides or {}),
        }
        self._bindings: dict[Registry, tuple[Path, str | None]] = {}

    def _tree(self, registry: Registry) -> Tree:
        registry = Registry(registry)
        if registry is Registry.CONFIG:
            raise ValueError("The config pseudo-registry cannot be used here")
        return self._trees[registry]

    def registry(self, registry: Registry) -> Tree:
        """Return a copy of one registry, or of the merged view for `CONFIG`."""
        registry = Registry(registry)
        if registry is Registry.CONFIG:
            return self.merged()
        return copy.deepcopy(self._tree(registry))

    def replace(self, registry: Registry, tree: Tree) -> None:
        """Replace the whole content of one registry."""
        self._tree(registry)
        self._trees[Registry(registry)] = copy.deepcopy(tree)

    def merged(self) -> Tree:
        """The effective configuration: fallbacks < defaults < overrides."""
        result = self._trees[Registry.FALLBACKS]
        for registry in (Registry.DEFAULTS, Registry.OVERRIDES):
            result = merge_trees(result, self._trees[registry])
        return copy.deepcopy(result)

    def has(self, key: str) -> bool:
        return any(has_key(self._trees[r], key, self.separator) for r in _PRIORITY)

    def get(self, key: str | None = None, default: Any = MISSING) -> Any:
        """
        Return the value of `key` from the highest registry holding it. A key
        holding `None` still counts as present. Without a key, returns the
        merged configuration.

        Raises `MissingKeyError` if no registry holds the key and no `default`
        was supplied.
        """
        if key is None:
            return self.merged()
        for registry in _PRIORITY:
            tree = self._trees[registry]
            if has_key(tree, key, self.separator):
                return copy.deepcopy(get_key(tree, key, self.separator))
        if default is not MISSING:
            return default
        raise MissingKeyError(f"Missing key {key!r} in configuration")

    def get_typed(self, key: str, kind: type[_T], default: Any = MISSING) -> _T:
        """
        As `get`, but raises `TypeMismatchError` unless the value is of `kind`
        (`bool`, `str`, `int` or `list`). A supplied `default` is returned as
        is when the key is missing.
        """
        sentinel = object()
        value = self.get(key, sentinel)
        if value is sentinel:
            if default is MISSING:
                raise MissingKeyError(f"Missing key {key!r} in configuration")
            return cast(_T, default)
        # bool is a subclass of int but never a valid integer setting
        if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
            expected = _TYPE_NAMES.get(kind, kind.__name__)
            raise TypeMismatchError(
                f"Wrong configuration for key {key!r}: expecting {expected}, "
                f"got {type(value).__name__}"
            )
        return value

    def get_bool(self, key: str, default: Any = MISSING) -> bool:
        return self.get_typed(key, bool, default)

    def get_str(self, key: str, default: Any = MISSING) -> str:
        return self.get_typed(key, str, default)

    def get_int(self, key: str, default: Any = MISSING) -> int:
        return self.get_typed(key, int, default)

    def get_list(self, key: str, default: Any = MISSING) -> list[Any]:
        return self.get_typed(key, list, default)

    def set(self, key: str, value: Any, registry: Registry = Registry.DEFAULTS) -> None:
        """Set a value in one registry, creating nested levels as needed."""
        set_key(self._tree(registry), key, copy.deepcopy(value), self.separator)

    def delete(self, key: str, registry: Registry = Registry.DEFAULTS) -> None:
        """Remove a key from one registry, or from all of them with `CONFIG`."""
        registry = Registry(registry)
        targets = _PRIORITY if registry is Registry.CONFIG else (registry,)
        for target in targets:
            delete_key(self._trees[target], key, self.separator)

    def merge(self, tree: Tree, registry: Registry = Registry.DEFAULTS) -> None:
        """Overlay a tree onto one registry using the list-replace rule."""
        self._trees[Registry(registry)] = merge_trees(self._tree(registry), tree)

    def binding(self, registry: Registry) -> tuple[Path, str | None] | None:
        """The `(path, key)` bound to a registry by `load`, if any."""
        return self._bindings.get(Registry(registry))

    def load(
        self,
        path: str | Path,
        key: str | None = None,
        registry: Registry = Registry.DEFAULTS,
    ) -> None:
        """
        Read a configuration file (a directory means its `composer.json`),
        optionally select a subkey, merge it into `registry` and bind the
        file to that registry for later saves.

        Raises `ConfigReadError`/`ConfigParseError` for unreadable or malformed
        files and `ConfigKeyError` if the subkey is absent.
        """
        registry = Registry(registry)
        self._tree(registry)
        file_path = Path(path)
        if file_path.is_dir():
            file_path = file_path / COMPOSER_FILE

        data = read_structured(file_path)
        if key is not None:
            if not has_key(data, key, self.separator):
                raise ConfigKeyError(f"Unable to locate key {key!r} in {file_path}")
            data = get_key(data, key, self.separator)
            if not isinstance(data, dict):
                raise ConfigParseError(f"Key {key!r} in {file_path} is not a table")

        self.merge(cast(Tree, data), registry)
        self._bindings[registry] = (file_path, key)
        logger.debug("Loaded %s registry from %s (key %s)", registry.value, file_path, key)

    def save(
        self,
        registry: Registry = Registry.DEFAULTS,
        path: str | Path | None = None,
        key: str | None = None,
        merge: bool = False,
    ) -> Path:
        """
        Write one registry (or the merged view for `CONFIG`) to a file.

        `path` and `key` default to the registry's binding. When a key is
        given, the rest of the target document is kept. With `merge`, the
        payload is overlaid onto the existing content instead of replacing it.
        """
        registry = Registry(registry)
        payload = self.registry(registry)
        bound = self._bindings.get(registry)
        if path is None:
            if bound is None:
                raise ConfigError(f"No configuration file bound to the {registry.value} registry")
            file_path, key = bound[0], key if key is not None else bound[1]
        else:
            file_path = Path(path)
            if file_path.is_dir():
                file_path = file_path / COMPOSER_FILE

        existing: Tree = {}
        if (key is not None or merge) and file_path.is_file():
            existing = read_structured(file_path)

        if key is not None:
            document = existing
            if merge and has_key(document, key, self.separator):
                current = get_key(document, key, self.separator)
                if isinstance(current, dict):
                    payload = merge_trees(cast(Tree, current), payload)
            set_key(document, key, payload, self.separator)
        else:
            document = merge_trees(existing, payload) if merge else payload

        write_structured(file_path, document)
        logger.debug("Saved %s registry to %s (key %s)", registry.value, file_path, key)
        return file_path
