"""Logging setup for the CLI and API entrypoints."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(level: str | int = "info") -> None:
    """Install a rich handler on the root logger (stderr, so JSON output stays clean)."""
    if isinstance(level, str):
        resolved = _LEVELS.get(level.strip().lower(), logging.INFO)
    else:
        resolved = level

    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root.addHandler(handler)
    root.setLevel(resolved)

    logging.getLogger("httpx").setLevel(
        logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING
    )


__all__ = ["configure_logging"]
