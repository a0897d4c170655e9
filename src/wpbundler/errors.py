"""Exceptions raised by wpbundler."""

from __future__ import annotations


class BundlerError(Exception):
    """Base class for all wpbundler errors."""


class NotFoundError(BundlerError, FileNotFoundError):
    """A pattern list or configuration file does not exist."""


class EmptyInputError(BundlerError, ValueError):
    """A pattern collection exists but holds nothing to process."""


class ConfigError(BundlerError):
    """Base class for configuration errors."""


class ConfigReadError(ConfigError):
    """A configuration file is missing or cannot be read."""


class ConfigParseError(ConfigReadError):
    """A configuration file was read but its content is malformed."""


class UnsupportedFormatError(ConfigError):
    """A configuration file format cannot be handled for this operation."""


class ConfigKeyError(ConfigError, LookupError):
    """A requested subkey is absent from a configuration file."""


class MissingKeyError(ConfigError, LookupError):
    """A key is absent from every configuration registry."""


class TypeMismatchError(ConfigError, TypeError):
    """A configuration value does not have the expected type."""


class BundleError(BundlerError):
    """A bundling step failed while running in debug mode."""
