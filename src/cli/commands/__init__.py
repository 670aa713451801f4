"""CLI command groups."""

__all__ = [
    "config",
    "uploads",
    "workflow",
]

from . import config, uploads, workflow
