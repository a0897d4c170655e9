"""
Bundler: builds a deployable bundle of a project.

Steps, each driven by the layered configuration:

1. Resolve entries (`.wpinclude`, `include`, `.wpexclude`, `exclude`, then
   `.gitignore` / `.wpignore` matches).
2. Copy them to the output (or a temporary) directory, then delete the nested
   paths excluded from copied directories.
3. Optionally run `composer install`, scope dependencies with PHP-Scoper and
   zip the result.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
import zipfile
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

from wpbundler.config import COMPOSER_FILE, LayeredConfig, Registry
from wpbundler.defaults import (
    COMPOSER_CONFIG_KEY,
    FALLBACKS,
    RESULT_EXPORT_FAILED,
    RESULT_INSTALL_FAILED,
    RESULT_OK,
    RESULT_SCOPE_FAILED,
    RESULT_ZIP_FAILED,
)
from wpbundler.dotted import Tree, get_key, has_key
from wpbundler.errors import (
    BundleError,
    ConfigError,
    EmptyInputError,
    MissingKeyError,
    NotFoundError,
    TypeMismatchError,
)
from wpbundler.file_resolver import (
    Finder,
    PathResolver,
    ResolverConfig,
    find_ignored,
    find_project_root,
    is_sub_path,
    load_ignore_spec,
    make_absolute,
)
from wpbundler.file_resolver.defaults import (
    EXCLUDE_FILE,
    GITIGNORE_FILE,
    INCLUDE_FILE,
    TOOL_IGNORE_FILE,
)

logger = logging.getLogger(__name__)

# Errors meaning "this optional input is not there"
_OPTIONAL_INPUT_ERRORS = (NotFoundError, EmptyInputError, MissingKeyError, TypeMismatchError)

SCOPER_CONFIG_FILE = "scoper.inc.php"


class Bundler:
    """
    Project bundler. Runtime configuration goes to the overrides registry,
    `composer.json` (`extra.bundler`) and files listed under `config` to the
    defaults registry, and `FALLBACKS` to the fallbacks registry.
    """

    def __init__(
        self,
        config: Tree | LayeredConfig | None = None,
        *,
        root: str | os.PathLike[str] | None = None,
    ) -> None:
        if isinstance(config, LayeredConfig):
            self.config: LayeredConfig = config
            self.config.replace(Registry.FALLBACKS, FALLBACKS)
        else:
            self.config = LayeredConfig(overrides=config or {}, fallbacks=FALLBACKS)

        self.result: int = RESULT_OK
        self._start_dir: Path | None = Path(root) if root is not None else None
        self._root_path: Path | None = None
        self._base_path: Path | None = None

        self._load_config_file(COMPOSER_FILE, COMPOSER_CONFIG_KEY, Registry.DEFAULTS)
        # `rootpath` may come from composer.json itself
        self._root_path = None
        self.load_config(self.config.get("config", {}) or {}, Registry.DEFAULTS)

    def root_path(self, path: str | os.PathLike[str] | None = None) -> Path:
        """
        The project root, optionally joined with `path`. Taken from `rootpath`
        (relative to the discovered project root) when set, otherwise the
        closest directory holding `composer.json`, otherwise the start directory.
        A `rootpath` set in that `composer.json` applies to everything after it,
        including the files listed under `config`.
        """
        if self._root_path is None:
            start = self._start_dir or Path.cwd()
            discovered = find_project_root(start) or start.resolve()
            rootpath = self.config.get("rootpath", None)
            if isinstance(rootpath, str) and rootpath:
                self._root_path = Path(make_absolute(rootpath, discovered))
            else:
                self._root_path = Path(make_absolute(discovered, discovered))
        if path is None:
            return self._root_path
        return Path(make_absolute(path, self._root_path))

    def base_path(self, path: str | os.PathLike[str] | None = None) -> Path:
        """The directory entries are resolved from (`basepath`, default: the root)."""
        if self._base_path is None:
            basepath = self.config.get("basepath", None)
            if isinstance(basepath, str) and basepath:
                self._base_path = Path(make_absolute(basepath, self.root_path()))
            else:
                self._base_path = self.root_path()
        if path is None:
            return self._base_path
        return Path(make_absolute(path, self._base_path))

    def load_config(
        self,
        files: Mapping[str, str | None] | Sequence[str],
        registry: Registry = Registry.OVERRIDES,
    ) -> None:
        """
        Load configuration files into a registry. `files` maps paths to an
        optional key in each file, or is a plain list of paths. Relative paths
        are resolved from the root path.
        """
        items = files.items() if isinstance(files, Mapping) else ((f, None) for f in files)
        for path, key in items:
            self._load_config_file(path, key, registry)

    def finder(self) -> Finder:
        """Return a finder loaded with every configured include and exclude."""
        logger.info("Paths resolving starting")
        base = self.base_path()
        finder = Finder(base, PathResolver(ResolverConfig(root=base)))

        self._optional(
            f"No {INCLUDE_FILE} file at root path",
            lambda: finder.include_from_file(self.root_path(INCLUDE_FILE)),
        )
        self._optional(
            "No include directives in configuration",
            lambda: finder.include_many(self._pattern_list("include")),
        )
        self._optional(
            f"No {EXCLUDE_FILE} file at root path",
            lambda: finder.exclude_from_file(self.root_path(EXCLUDE_FILE)),
        )
        self._optional(
            "No exclude directives in configuration",
            lambda: finder.exclude_many(self._pattern_list("exclude")),
        )

        for flag, filename in (("gitignore", GITIGNORE_FILE), ("wpignore", TOOL_IGNORE_FILE)):
            if self.config.get_bool(flag, False):
                for relative in self.ignored(filename):
                    finder.exclude(relative)

        logger.info("Paths resolving done: %d entries found", len(finder.entries()))
        return finder

    def ignored(self, filename: str) -> list[str]:
        """Paths under the base path matched by an ignore file found there."""
        spec = load_ignore_spec(self.base_path(filename))
        if spec is None:
            logger.debug("No %s file at base path", filename)
            return []
        return find_ignored(self.base_path(), spec)

    def entries(self) -> dict[str, Path]:
        """Entries that `export` would copy."""
        return self._export_finder().entries()

    def _export_finder(self) -> Finder:
        finder = self.finder()
        # The output directory must never be bundled into itself
        output = self.config.get_str("output")
        finder.exclude(output)
        finder.exclude(f"{output}/**")
        return finder

    def bundle(self, overrides: Tree | None = None) -> Path:
        """
        Build the bundle and return the path to it: the output directory, or
        the zip archive when `zip` is set.
        """
        if overrides:
            self.config.merge(overrides, Registry.OVERRIDES)

        logger.info("Bundling starting")

        scoped = bool(self.config.get("composer.phpscoper", False))
        zip_name = self.config.get("zip", False)
        zipped = bool(zip_name)

        output = self._prepare_directory(
            self.base_path(self.config.get_str("output")), self.config.get_bool("clean")
        )
        export_dir = Path(tempfile.mkdtemp(prefix="__wpbundler_tmp_")) if scoped or zipped else None
        scoped_dir = Path(tempfile.mkdtemp(prefix="__wpbundler_scoped_")) if scoped and zipped else None

        try:
            target = self.export(export_dir or output)
            if scoped:
                target = self.scope(target, scoped_dir or output)
            if zipped:
                target = self.zip(target, output / f"{zip_name}.zip")
        finally:
            for temp_dir in (export_dir, scoped_dir):
                if temp_dir is not None:
                    shutil.rmtree(temp_dir, ignore_errors=True)

        logger.info("Bundle available at %s", target)
        return target

    def export(self, to: str | os.PathLike[str]) -> Path:
        """
        Copy the entries to `to`, delete nested excluded paths from the copy,
        then run `composer install` there if configured.
        """
        target_dir = Path(to)
        logger.info("Copying files to %s", target_dir)

        finder = self._export_finder()
        copied = 0
        for relative, source in finder.entries().items():
            target = target_dir / relative
            if source.is_dir():
                shutil.copytree(source, target, symlinks=True, dirs_exist_ok=True)
            elif source.is_file():
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, target)
            else:
                self.result = RESULT_EXPORT_FAILED
                logger.warning("Unable to locate file: %s", source)
                continue
            copied += 1
            logger.debug(" - %s", relative)

        # Only once every directory has been copied
        for path in finder.entries_to_remove(target_dir):
            _remove_path(path)
        logger.info("%d files and folders copied", copied)

        if not self.config.get_bool("composer.install"):
            logger.info("Skipping composer install as requested by configuration")
            return target_dir

        if not (target_dir / COMPOSER_FILE).is_file():
            logger.warning("Composer install is requested but no %s found in %s", COMPOSER_FILE, target_dir)
            return target_dir

        logger.info("Launching composer install")
        cmd = [
            "composer",
            "install",
            "--no-progress",
            f"--working-dir={target_dir}",
            "--classmap-authoritative",
            "--dev" if self.config.get_bool("composer.dev-dependencies") else "--no-dev",
        ]
        if not self.config.get_bool("debug"):
            cmd.append("--quiet")

        if self._exec(cmd) != 0:
            self._fail(RESULT_INSTALL_FAILED, "Unable to execute composer install")
        else:
            logger.info("Composer dependencies installation done")
        return target_dir

    def scope(self, source: str | os.PathLike[str], to: str | os.PathLike[str]) -> Path:
        """Prefix dependencies with PHP-Scoper. Returns `source` if scoping fails."""
        source_dir, target_dir = Path(source), Path(to)
        logger.info("Start dependencies scoping")

        scoper = shutil.which("php-scoper")
        if scoper is None:
            vendored = self.root_path("vendor/bin/php-scoper")
            scoper = str(vendored) if vendored.is_file() else None
        if scoper is None:
            self._fail(RESULT_SCOPE_FAILED, "Dependencies scoping is required but PHP-Scoper cannot be found")
            return source_dir

        cmd = [scoper, "add-prefix", str(source_dir), "-o", str(target_dir), "-f", "-q"]
        scoper_config = self.root_path(SCOPER_CONFIG_FILE)
        cmd += ["-c", str(scoper_config)] if scoper_config.is_file() else ["--no-config"]
        if self._exec(cmd) != 0:
            self._fail(RESULT_SCOPE_FAILED, "Unable to apply dependency scoping: PHP-Scoper reports a failure")
            return source_dir

        cmd = ["composer", "dump-autoload", f"--working-dir={target_dir}", "--classmap-authoritative"]
        if not self.config.get_bool("debug"):
            cmd.append("--quiet")
        if self._exec(cmd) != 0:
            self._fail(RESULT_SCOPE_FAILED, "Unable to dump composer autoload after scoping")
            return source_dir

        logger.info("Dependencies scoped and autoload dumped")
        return target_dir

    def zip(self, source: str | os.PathLike[str], to: str | os.PathLike[str]) -> Path:
        """Write the content of the `source` directory into the archive `to`."""
        source_dir, archive_path = Path(source), Path(to)
        logger.info("Zipping files started")
        try:
            archive_path.parent.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(
                archive_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9
            ) as archive:
                for path in sorted(source_dir.rglob("*")):
                    archive.write(path, path.relative_to(source_dir).as_posix())
        except (OSError, zipfile.BadZipFile) as e:
            self._fail(RESULT_ZIP_FAILED, f"Unable to create zip archive {archive_path}: {e}")
        else:
            logger.info("Zip bundle created")
        return archive_path

    def save_config(self, path: str | os.PathLike[str], key: str | None = None) -> Path:
        """Write the default bundler configuration to `path` (relative to the root)."""
        target = self.config.save(Registry.FALLBACKS, self.root_path(path), key)
        logger.info("Configuration written to %s", target)
        return target

    def _prepare_directory(self, directory: Path, clean: bool) -> Path:
        """Create `directory`, emptying it first when `clean` is set."""
        base = self.base_path()
        if directory == base or is_sub_path(base, directory):
            raise BundleError(f"Output directory {directory} would contain the project itself")
        if directory.is_dir() and clean:
            shutil.rmtree(directory)
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def _load_config_file(self, path: str | os.PathLike[str], key: str | None, registry: Registry) -> None:
        file_path = self.root_path(path)
        if not file_path.exists():
            logger.debug("No configuration file at %s", file_path)
            return
        try:
            self.config.load(file_path, key, registry)
        except ConfigError as e:
            logger.warning("%s", e)
            return
        logger.info("Configuration loaded from %s", file_path)

    def _pattern_list(self, key: str) -> list[Any]:
        """
        A pattern list from the merged configuration, where an empty list in a
        higher registry keeps the lower registry's patterns.
        """
        merged = self.config.merged()
        if not has_key(merged, key, self.config.separator):
            raise MissingKeyError(f"Missing key {key!r} in configuration")
        value = get_key(merged, key, self.config.separator)
        if not isinstance(value, list):
            raise TypeMismatchError(
                f"Wrong configuration for key {key!r}: expecting array, got {type(value).__name__}"
            )
        return value

    def _optional(self, message: str, action: Callable[[], Any]) -> None:
        try:
            action()
        except _OPTIONAL_INPUT_ERRORS as e:
            logger.debug("%s (%s)", message, e)

    def _exec(self, cmd: list[str]) -> int:
        """Run an external command and return its exit code (127 if it can't start)."""
        logger.debug("Running %s", " ".join(cmd))
        try:
            completed = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as e:
            logger.error("Unable to run %s: %s", cmd[0], e)
            return 127
        if completed.returncode != 0 and self.config.get_bool("debug"):
            for line in (completed.stdout + completed.stderr).splitlines():
                logger.debug(line)
        return completed.returncode

    def _fail(self, code: int, message: str) -> None:
        """Record a failed step. In debug mode, abort the run instead."""
        self.result = code
        logger.error(message)
        if self.config.get_bool("debug"):
            raise BundleError(message)


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()
