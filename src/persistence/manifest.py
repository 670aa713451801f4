"""JSON manifest persisting the upload registry next to the managed directory."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Sequence
from uuid import uuid4

import aiofiles
import aiofiles.os
from pydantic import ValidationError

from core.errors import StorageIOError
from schemas.uploads import ManifestDocument, UploadRecord

logger = logging.getLogger(__name__)


class ManifestStore:
    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> ManifestDocument:
        """Return the stored manifest; a missing or corrupt file yields an empty one."""
        try:
            async with aiofiles.open(self._path, "r", encoding="utf-8") as handle:
                text = await handle.read()
        except FileNotFoundError:
            return ManifestDocument()
        except OSError as exc:
            raise StorageIOError(f"Failed to read manifest {self._path}: {exc}") from exc
        try:
            return ManifestDocument.model_validate(json.loads(text))
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Ignoring unreadable upload manifest %s: %s", self._path, exc)
            return ManifestDocument()

    async def save(self, order: Sequence[str], records: Sequence[UploadRecord]) -> None:
        """Write one snapshot; saves are serialized and each uses its own temp file."""
        document = ManifestDocument(order=list(order), records=list(records))
        text = json.dumps(
            document.model_dump(mode="json"), ensure_ascii=False, indent=2
        )
        tmp_path = self._path.with_name(f"{self._path.name}.{uuid4().hex}.tmp")
        async with self._lock:
            try:
                await aiofiles.os.makedirs(self._path.parent, exist_ok=True)
                async with aiofiles.open(tmp_path, "w", encoding="utf-8") as handle:
                    await handle.write(text)
                await aiofiles.os.replace(tmp_path, self._path)
            except OSError as exc:
                await _discard(tmp_path)
                raise StorageIOError(f"Failed to write manifest {self._path}: {exc}") from exc


async def _discard(path: Path) -> None:
    try:
        await aiofiles.os.remove(path)
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("Could not remove temporary manifest %s: %s", path, exc)


__all__ = ["ManifestStore"]
