"""Filesystem content store owning the managed upload directory."""

from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path

import aiofiles
import aiofiles.os

from core.errors import StorageIOError
from persistence.models import FileStat

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


class ContentStore:
    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    async def ensure_directory(self) -> Path:
        try:
            await aiofiles.os.makedirs(self._root, exist_ok=True)
        except OSError as exc:
            raise StorageIOError(f"Cannot create upload directory {self._root}: {exc}") from exc
        return self._root

    def path_for(self, name: str) -> Path:
        if not name or name in {".", ".."} or "/" in name or "\\" in name:
            raise StorageIOError(f"Invalid file name for upload directory: {name!r}")
        return self._root / name

    def contains(self, path: str | Path) -> bool:
        candidate = Path(path)
        return candidate.parent.resolve() == self._root.resolve()

    async def write_bytes(self, name: str, data: bytes) -> Path:
        path = self.path_for(name)
        try:
            async with aiofiles.open(path, "wb") as handle:
                await handle.write(data)
        except OSError as exc:
            raise StorageIOError(f"Failed to write {path}: {exc}") from exc
        return path

    async def write_base64(self, name: str, text: str) -> Path:
        try:
            data = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise StorageIOError(f"Invalid base64 content for {name}: {exc}") from exc
        return await self.write_bytes(name, data)

    async def copy_from(self, source: str | Path, name: str) -> Path:
        dest = self.path_for(name)
        try:
            async with aiofiles.open(source, "rb") as reader:
                async with aiofiles.open(dest, "wb") as writer:
                    while True:
                        chunk = await reader.read(_CHUNK_SIZE)
                        if not chunk:
                            break
                        await writer.write(chunk)
        except OSError as exc:
            raise StorageIOError(f"Failed to copy {source} to {dest}: {exc}") from exc
        return dest

    async def read_bytes(self, path: str | Path) -> bytes:
        try:
            async with aiofiles.open(path, "rb") as handle:
                return await handle.read()
        except OSError as exc:
            raise StorageIOError(f"Failed to read {path}: {exc}") from exc

    async def read_base64(self, path: str | Path) -> str:
        data = await self.read_bytes(path)
        return base64.b64encode(data).decode("ascii")

    async def stat(self, path: str | Path) -> FileStat:
        try:
            result = await aiofiles.os.stat(path)
        except FileNotFoundError:
            return FileStat(exists=False)
        except OSError as exc:
            raise StorageIOError(f"Failed to stat {path}: {exc}") from exc
        return FileStat(exists=True, size_bytes=result.st_size)

    async def delete(self, path: str | Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StorageIOError(f"Failed to delete {path}: {exc}") from exc

    async def list_files(self) -> list[Path]:
        try:
            names = await aiofiles.os.listdir(self._root)
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise StorageIOError(f"Failed to list {self._root}: {exc}") from exc
        return sorted(self._root / name for name in names)

    async def purge_all(self) -> int:
        """Delete every entry in the directory and leave it empty and writable."""
        removed = 0
        for path in await self.list_files():
            try:
                if await aiofiles.os.path.isdir(path):
                    await _remove_tree(path)
                else:
                    await aiofiles.os.remove(path)
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise StorageIOError(f"Failed to delete {path}: {exc}") from exc
            removed += 1
        await self.ensure_directory()
        logger.debug("Purged %d entries from %s", removed, self._root)
        return removed


async def _remove_tree(path: Path) -> None:
    for name in await aiofiles.os.listdir(path):
        child = path / name
        if await aiofiles.os.path.isdir(child):
            await _remove_tree(child)
        else:
            await aiofiles.os.remove(child)
    await aiofiles.os.rmdir(path)


__all__ = ["ContentStore"]
