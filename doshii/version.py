"""
Version information for the Doshii orders client.

Single source of truth: pyproject.toml
Runtime access via importlib.metadata with fallback.
"""

from __future__ import annotations

from functools import lru_cache

# Fallback version if package metadata unavailable (dev mode)
_FALLBACK_VERSION = "0.1.0"

PACKAGE_NAME = "doshii-orders-client"


@lru_cache
def get_version() -> str:
    """Get the package version from metadata or fallback."""
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version(PACKAGE_NAME)
    except PackageNotFoundError:
        return _FALLBACK_VERSION


__version__ = get_version()
