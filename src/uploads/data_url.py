"""Parser for inline ``data:<mime>;base64,<body>`` payloads."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

from core.errors import UnsupportedPayloadError

_DATA_URL_RE = re.compile(r"data:(?P<mime>[^;]+);base64,(?P<body>.+)", re.DOTALL)


@dataclass(frozen=True)
class ParsedDataUrl:
    mime: str
    body: str
    data: bytes


@dataclass(frozen=True)
class InvalidDataUrl:
    reason: str


def parse_data_url(value: str) -> ParsedDataUrl | InvalidDataUrl:
    """Split a data URL into mime and base64 body without raising."""
    match = _DATA_URL_RE.fullmatch(value or "")
    if match is None:
        return InvalidDataUrl("expected data:<mime>;base64,<payload>")
    mime = match.group("mime").strip()
    body = match.group("body").strip()
    if not mime:
        return InvalidDataUrl("empty media type")
    try:
        data = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError):
        return InvalidDataUrl("payload is not valid base64")
    if not data:
        return InvalidDataUrl("payload is empty")
    return ParsedDataUrl(mime=mime, body=body, data=data)


def decode_data_url(value: str) -> tuple[str, bytes]:
    parsed = parse_data_url(value)
    if isinstance(parsed, InvalidDataUrl):
        raise UnsupportedPayloadError("Unsupported data URL provided")
    return parsed.mime, parsed.data


def build_data_url(mime: str, encoded: str) -> str:
    """Join mime and base64 text; media type parameters cannot be parsed back."""
    if not mime or ";" in mime:
        raise UnsupportedPayloadError(f"Cannot encode media type {mime!r} as a data URL")
    return f"data:{mime};base64,{encoded}"


__all__ = [
    "InvalidDataUrl",
    "ParsedDataUrl",
    "build_data_url",
    "decode_data_url",
    "parse_data_url",
]
