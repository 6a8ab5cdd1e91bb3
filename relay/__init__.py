"""Top-level package for Relay."""

from __future__ import annotations

from importlib import metadata


try:
    __version__: str = metadata.version("relay-workflow")
except metadata.PackageNotFoundError:  # pragma: no cover - runtime fallback during dev
    __version__ = "0.0.0.dev0"

__all__ = ["__version__"]
