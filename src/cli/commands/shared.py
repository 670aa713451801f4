"""Shared helpers for CLI subcommands."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, TypeVar

import typer

from core.config import get_settings
from core.errors import StudymarkError
from uploads.service import UploadService

T = TypeVar("T")


def emit_json(data: Any) -> None:
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))


def parse_value(value: str) -> Any:
    if value == "":
        return ""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def parse_key_values(items: list[str] | None, *, option: str) -> dict[str, Any]:
    parsed: dict[str, Any] = {}
    for item in items or []:
        if "=" not in item:
            raise typer.BadParameter(f"{option} requires key=value syntax.")
        key, raw_value = item.split("=", 1)
        key = key.strip()
        if not key:
            raise typer.BadParameter(f"{option} requires a non-empty key.")
        parsed[key] = parse_value(raw_value.strip())
    return parsed


def run_with_service(action: Callable[[UploadService], Awaitable[T]]) -> T:
    """Load the upload registry from its manifest and run one async action on it."""

    async def _runner() -> T:
        service = UploadService.from_settings(get_settings())
        await service.load()
        return await action(service)

    try:
        return asyncio.run(_runner())
    except (StudymarkError, ValueError) as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


__all__ = ["emit_json", "parse_key_values", "parse_value", "run_with_service"]
