#!/usr/bin/env python3
"""
wpbundler: Build production bundles of a project tree

Common usage:
  wpbundler bundle
  wpbundler bundle --show-entries-only
  wpbundler bundle -c bundler.json --log 7
  wpbundler init
  wpbundler init --target bundler.json

Entries are selected with `include`/`exclude` settings (in composer.json under
`extra.bundler`) and with `.wpinclude`, `.wpexclude`, `.wpignore` and
`.gitignore` files at the project root.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path

from wpbundler.bundler import Bundler
from wpbundler.defaults import COMPOSER_CONFIG_KEY
from wpbundler.errors import BundlerError
from wpbundler.logs import setup_logging

logger = logging.getLogger(__name__)


@dataclass
class Options:
    """Command-line options for the wpbundler tool."""

    command: str | None
    version: bool = False
    # bundle
    config: list[str] = field(default_factory=list)
    log: int | None = None
    dry: bool = False
    show_entries_only: bool = False
    # init
    target: str | None = None
    key: str | None = None


def _parse_args(args: list[str] | None = None) -> Options:
    # Use the module's docstring as the description
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        prog="wpbundler",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    bundle = subparsers.add_parser("bundle", help="Create a new bundle")
    bundle.add_argument(
        "-c",
        "--config",
        action="append",
        default=[],
        metavar="FILE[:KEY]",
        help="Additional configuration file to load, optionally at a dotted key. Can be repeated",
    )
    bundle.add_argument(
        "-l",
        "--log",
        type=int,
        default=None,
        metavar="LEVEL",
        help="Log level, from 0 (silent) and 1 (critical only) to 7 (full debug)",
    )
    bundle.add_argument(
        "--dry",
        action="store_true",
        help="Perform a full bundle to check that everything works, then remove it",
    )
    bundle.add_argument(
        "--show-entries-only",
        action="store_true",
        dest="show_entries_only",
        help="Only list the entries that would be bundled",
    )

    init = subparsers.add_parser(
        "init",
        help="Write the default configuration to a file",
        description="Write the default configuration to a target file. Without a target, "
        f"it is stored in composer.json under `{COMPOSER_CONFIG_KEY}`.",
    )
    init.add_argument(
        "-t",
        "--target",
        type=str,
        default=None,
        help="Target file (.json or .yaml), relative to the project root",
    )
    init.add_argument(
        "-k",
        "--key",
        type=str,
        default=None,
        help="Dotted key of the target document to store the configuration in",
    )

    opts = parser.parse_args(args)
    return Options(
        command=opts.command,
        version=opts.version,
        config=getattr(opts, "config", []),
        log=getattr(opts, "log", None),
        dry=getattr(opts, "dry", False),
        show_entries_only=getattr(opts, "show_entries_only", False),
        target=getattr(opts, "target", None),
        key=getattr(opts, "key", None),
    )


def _split_config_arg(value: str) -> tuple[str, str | None]:
    """Split `FILE[:KEY]`. A colon followed by a path separator is part of the file name."""
    path, sep, key = value.rpartition(":")
    if not sep or not path or not key or "/" in key or "\\" in key:
        return value, None
    return path, key


def format_entries(base: Path, entries: dict[str, Path]) -> list[str]:
    """
    Render entries as an indented tree below `base`. Directories are shown as
    `name/**/*` since they are bundled whole.
    """
    lines = [f"{base.as_posix()}/"]
    printed: set[tuple[str, ...]] = set()
    for relative in sorted(entries):
        parts = tuple(relative.split("/"))
        for depth in range(1, len(parts)):
            parent = parts[:depth]
            if parent not in printed:
                printed.add(parent)
                lines.append("  " * depth + parent[-1] + "/")
        suffix = "/**/*" if entries[relative].is_dir() else ""
        lines.append("  " * len(parts) + parts[-1] + suffix)
    return lines


def _bundle(options: Options) -> int:
    overrides = {"loglevel": options.log} if options.log is not None else {}
    bundler = Bundler(overrides)
    setup_logging(bundler.config.get_int("loglevel", 5))

    configs = dict(_split_config_arg(value) for value in options.config)
    bundler.load_config(configs)

    if options.show_entries_only:
        for line in format_entries(bundler.base_path(), bundler.entries()):
            print(line)
        return 0

    bundler.bundle()
    if options.dry:
        output = bundler.base_path(bundler.config.get_str("output"))
        if output.is_dir():
            shutil.rmtree(output)
            logger.info("Dry run: removed %s", output)
    return bundler.result


def _init(options: Options) -> int:
    setup_logging(5)
    target, key = options.target, options.key
    if target is None:
        target, key = "composer.json", COMPOSER_CONFIG_KEY
    Bundler().save_config(target, key)
    return 0


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the wpbundler CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    options = _parse_args(args)

    if options.version:
        try:
            version = importlib.metadata.version("wpbundler")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    if options.command is None:
        print("Error: No command specified. Use --help for more options.", file=sys.stderr)
        return 1

    try:
        if options.command == "init":
            return _init(options)
        return _bundle(options)
    except BundlerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
