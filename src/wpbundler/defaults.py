"""
Bundler fallback configuration.

These values sit in the lowest configuration layer: anything set in
`composer.json` (`extra.bundler`), additional config files or at runtime
takes precedence.
"""

from __future__ import annotations

from typing import Any

from wpbundler.file_resolver.defaults import DEFAULT_INCLUDES

# Key of the bundler configuration inside composer.json
COMPOSER_CONFIG_KEY = "extra.bundler"

FALLBACKS: dict[str, Any] = {
    "loglevel": 5,
    "debug": False,
    "clean": True,
    "basepath": None,
    "rootpath": None,
    "config": {},
    "include": list(DEFAULT_INCLUDES),
    "exclude": [],
    "gitignore": True,
    "wpignore": True,
    "composer": {
        "install": True,
        "dev-dependencies": False,
        "phpscoper": False,
    },
    "output": "dist",
    "zip": "bundle",
}

# Result codes reported by `Bundler.result`
RESULT_OK = 0
RESULT_EXPORT_FAILED = 1
RESULT_INSTALL_FAILED = 2
RESULT_SCOPE_FAILED = 3
RESULT_ZIP_FAILED = 4
