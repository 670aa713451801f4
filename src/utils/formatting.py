"""Human-readable formatting helpers."""

from __future__ import annotations

import math

_UNITS = ("B", "KB", "MB", "GB")


def format_bytes(size: int | float | None, decimals: int = 1) -> str:
    """Format a byte count with binary (1024) steps, e.g. ``1.5 KB``."""
    if not size or (isinstance(size, float) and math.isnan(size)) or size < 0:
        return "0 B"
    digits = max(decimals, 0)
    value = float(size)
    index = 0
    while value >= 1024 and index < len(_UNITS) - 1:
        value /= 1024
        index += 1
    return f"{value:.{digits}f} {_UNITS[index]}"


__all__ = ["format_bytes"]
