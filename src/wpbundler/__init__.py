"""
wpbundler: decides which files of a project go into a deployable bundle, then
copies, installs, scopes and zips them.
"""

from wpbundler.bundler import Bundler
from wpbundler.config import LayeredConfig, Registry
from wpbundler.errors import (
    BundleError,
    BundlerError,
    ConfigError,
    ConfigKeyError,
    ConfigParseError,
    ConfigReadError,
    EmptyInputError,
    MissingKeyError,
    NotFoundError,
    TypeMismatchError,
    UnsupportedFormatError,
)
from wpbundler.file_resolver import Finder, PathResolver, ResolverConfig

__all__ = [
    "BundleError",
    "Bundler",
    "BundlerError",
    "ConfigError",
    "ConfigKeyError",
    "ConfigParseError",
    "ConfigReadError",
    "EmptyInputError",
    "Finder",
    "LayeredConfig",
    "MissingKeyError",
    "NotFoundError",
    "PathResolver",
    "Registry",
    "ResolverConfig",
    "TypeMismatchError",
    "UnsupportedFormatError",
]
