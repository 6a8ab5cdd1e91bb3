"""Logging setup shared by the Relay CLI and library code.

Every module logs through ``get_logger(__name__)``, which places it under the
``relay`` logger. Records go to stderr so command output on stdout stays clean
for callers that pipe it; ``RELAY_LOG_FILE`` adds a persistent copy.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER = "relay"
DEFAULT_LEVEL = "WARNING"

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

_STREAM_HANDLER: Optional[logging.Handler] = None
_FILE_HANDLER: Optional[logging.FileHandler] = None


def _formatter() -> logging.Formatter:
    return logging.Formatter(_FORMAT, _DATEFMT)


def configure_logging(
    level: Union[str, int, None] = None, *, log_file: Optional[str] = None
) -> None:
    """Attach Relay's handlers once and apply the requested level.

    The first call falls back to ``RELAY_LOG_LEVEL`` (default ``WARNING``).
    Later calls only change the level when one is passed explicitly, so
    ``get_logger`` never undoes a ``--log-level`` chosen on the command line.
    """

    global _STREAM_HANDLER

    root = logging.getLogger(ROOT_LOGGER)
    if _STREAM_HANDLER is None:
        _STREAM_HANDLER = logging.StreamHandler(sys.stderr)
        _STREAM_HANDLER.setFormatter(_formatter())
        root.addHandler(_STREAM_HANDLER)
        root.setLevel(_as_level(level or os.getenv("RELAY_LOG_LEVEL") or DEFAULT_LEVEL))
    elif level:
        root.setLevel(_as_level(level))

    target = log_file or os.getenv("RELAY_LOG_FILE")
    if target:
        _attach_file_handler(root, Path(target))


def _attach_file_handler(root: logging.Logger, path: Path) -> None:
    global _FILE_HANDLER

    if _FILE_HANDLER is not None:
        if Path(_FILE_HANDLER.baseFilename) == path.resolve():
            return
        root.removeHandler(_FILE_HANDLER)
        _FILE_HANDLER.close()
        _FILE_HANDLER = None

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as exc:
        root.warning("Unable to open log file %s: %s", path, exc)
        return

    handler.setFormatter(_formatter())
    root.addHandler(handler)
    _FILE_HANDLER = handler


def get_logger(name: str) -> logging.Logger:
    """Return ``relay.<name>``, configuring defaults on first use."""

    configure_logging()
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def _as_level(value: Union[str, int]) -> int:
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    resolved = logging.getLevelName(text.upper())
    # Unknown names come back as "Level <name>" strings.
    return resolved if isinstance(resolved, int) else logging.WARNING
