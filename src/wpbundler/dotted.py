"""
Helpers for nested dict trees addressed by separated keys (`composer.install`).

Lists are leaves: keys never index into them.
"""

from __future__ import annotations

import copy
from typing import Any, cast

Tree = dict[str, Any]


def split_key(key: str, separator: str = ".") -> list[str]:
    """Split a dotted key into its segments, rejecting empty segments."""
    segments = key.split(separator)
    if not key or any(not s for s in segments):
        raise ValueError(f"Invalid configuration key: {key!r}")
    return segments


def _walk(tree: Tree, segments: list[str]) -> tuple[bool, Any]:
    node: Any = tree
    for segment in segments:
        if not isinstance(node, dict) or segment not in node:
            return False, None
        node = cast(Tree, node)[segment]
    return True, node


def has_key(tree: Tree, key: str, separator: str = ".") -> bool:
    """True if the key exists in the tree, even when its value is `None`."""
    found, _ = _walk(tree, split_key(key, separator))
    return found


def get_key(tree: Tree, key: str, separator: str = ".") -> Any:
    """Return the value at `key`; raises `KeyError` if absent."""
    found, value = _walk(tree, split_key(key, separator))
    if not found:
        raise KeyError(key)
    return value


def set_key(tree: Tree, key: str, value: Any, separator: str = ".") -> None:
    """Set `key` to `value`, creating (or replacing non-dict) intermediate levels."""
    *parents, leaf = split_key(key, separator)
    node = tree
    for segment in parents:
        child = node.get(segment)
        if not isinstance(child, dict):
            child = {}
            node[segment] = child
        node = cast(Tree, child)
    node[leaf] = value


def delete_key(tree: Tree, key: str, separator: str = ".") -> bool:
    """Remove `key` from the tree. Returns whether anything was removed."""
    *parents, leaf = split_key(key, separator)
    found, node = _walk(tree, parents)
    if not found or not isinstance(node, dict) or leaf not in node:
        return False
    del cast(Tree, node)[leaf]
    return True


def merge_trees(lower: Tree, higher: Tree) -> Tree:
    """
    Overlay `higher` onto `lower` and return a new tree.

    Nested dicts merge recursively and scalars are last-writer-wins. When both
    sides hold a list, the higher list replaces the lower one unless it is
    empty, in which case the lower list is kept.
    """
    result = copy.deepcopy(lower)
    for key, value in higher.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = merge_trees(cast(Tree, current), cast(Tree, value))
        elif isinstance(current, list) and isinstance(value, list) and not value:
            continue
        else:
            result[key] = copy.deepcopy(value)
    return result
