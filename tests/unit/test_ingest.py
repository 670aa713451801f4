from pathlib import Path

import httpx
import pytest

from core.errors import (
    CacheWriteError,
    StorageIOError,
    UnsupportedPayloadError,
    UnsupportedSourceError,
)
from persistence.content_store import ContentStore
from persistence.naming import DEFAULT_MIME
from uploads.ingest import Ingestor
from uploads.sources import SourceReader, local_source_path


class RecordingReader(SourceReader):
    def __init__(self) -> None:
        super().__init__()
        self.calls: list[str] = []

    async def read_base64(self, uri: str) -> str:
        self.calls.append(uri)
        return await super().read_base64(uri)


def _http_reader(content: bytes, *, status_code: int = 200) -> SourceReader:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=content)

    return SourceReader(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.mark.asyncio
async def test_adopt_file_uri_without_name(store: ContentStore, png_file: Path, png_bytes: bytes) -> None:
    uri = png_file.as_uri()

    cached = await Ingestor(store).adopt_external(uri)

    assert cached.file_name.endswith(".png")
    assert cached.file_name.startswith(f"{cached.id}-")
    assert cached.mime_type == "image/png"
    assert cached.local_path.parent == store.root
    assert cached.local_path.stat().st_size > 0
    assert cached.local_path.read_bytes() == png_bytes


@pytest.mark.asyncio
async def test_adopt_bare_path_with_name_and_mime(store: ContentStore, png_file: Path) -> None:
    cached = await Ingestor(store).adopt_external(
        str(png_file), file_name="第1页 photo.PNG", mime_type="image/x-custom"
    )

    assert cached.file_name == f"{cached.id}-_1__photo.PNG"
    assert cached.mime_type == "image/x-custom"


@pytest.mark.asyncio
async def test_name_without_extension_falls_back_to_uri(store: ContentStore, png_file: Path) -> None:
    cached = await Ingestor(store).adopt_external(png_file.as_uri(), file_name="homework")

    assert cached.file_name == f"{cached.id}-homework"
    assert cached.mime_type == "image/png"


@pytest.mark.asyncio
async def test_unknown_extension_uses_generic_mime(store: ContentStore, tmp_path: Path) -> None:
    source = tmp_path / "scan.bin"
    source.write_bytes(b"data")

    cached = await Ingestor(store).adopt_external(str(source))

    assert cached.mime_type == DEFAULT_MIME


@pytest.mark.asyncio
async def test_identical_names_do_not_collide(store: ContentStore, png_file: Path) -> None:
    ingestor = Ingestor(store)

    first = await ingestor.adopt_external(png_file.as_uri(), file_name="page.png")
    second = await ingestor.adopt_external(png_file.as_uri(), file_name="page.png")

    assert first.id != second.id
    assert first.local_path != second.local_path
    assert first.local_path.exists()
    assert second.local_path.exists()


@pytest.mark.asyncio
async def test_http_source_uses_fallback_with_identical_bytes(
    store: ContentStore, png_file: Path, png_bytes: bytes
) -> None:
    direct = await Ingestor(store).adopt_external(png_file.as_uri())
    fallback = await Ingestor(store, _http_reader(png_bytes)).adopt_external(
        "https://cdn.example.com/a.png?sig=1"
    )

    assert fallback.mime_type == "image/png"
    assert fallback.file_name.endswith(".png")
    assert fallback.local_path.read_bytes() == direct.local_path.read_bytes()


@pytest.mark.asyncio
async def test_data_uri_source_uses_fallback(store: ContentStore, png_bytes: bytes) -> None:
    reader = RecordingReader()

    cached = await Ingestor(store, reader).adopt_external(
        "data:image/png;base64,iVBORw0KGgo=", file_name="inline.png"
    )

    assert reader.calls == ["data:image/png;base64,iVBORw0KGgo="]
    assert cached.local_path.read_bytes() == png_bytes


@pytest.mark.asyncio
async def test_missing_local_file_does_not_fall_back(store: ContentStore, tmp_path: Path) -> None:
    reader = RecordingReader()

    with pytest.raises(StorageIOError):
        await Ingestor(store, reader).adopt_external((tmp_path / "gone.png").as_uri())

    assert reader.calls == []


@pytest.mark.asyncio
async def test_unsupported_scheme_fails_after_fallback(store: ContentStore) -> None:
    reader = RecordingReader()

    with pytest.raises(UnsupportedSourceError):
        await Ingestor(store, reader).adopt_external("content://media/external/images/1")

    assert reader.calls == ["content://media/external/images/1"]


@pytest.mark.asyncio
async def test_http_error_is_typed_io_error(store: ContentStore) -> None:
    reader = _http_reader(b"nope", status_code=404)

    with pytest.raises(StorageIOError, match="HTTP 404"):
        await Ingestor(store, reader).adopt_external("https://cdn.example.com/a.png")


@pytest.mark.asyncio
async def test_empty_source_reports_cache_failure(store: ContentStore, tmp_path: Path) -> None:
    source = tmp_path / "empty.png"
    source.write_bytes(b"")
    uri = source.as_uri()

    with pytest.raises(CacheWriteError) as excinfo:
        await Ingestor(store).adopt_external(uri)

    assert uri in str(excinfo.value)
    assert list(store.root.iterdir()) == []


@pytest.mark.asyncio
async def test_adopt_inline_without_suggested_name(store: ContentStore, png_bytes: bytes) -> None:
    cached = await Ingestor(store).adopt_inline("data:image/png;base64,iVBORw0KGgo=")

    assert cached.mime_type == "image/png"
    assert cached.file_name == f"{cached.id}-{cached.id}.png"
    assert cached.local_path.read_bytes() == png_bytes


@pytest.mark.asyncio
async def test_adopt_inline_prefers_suggested_name_extension(store: ContentStore) -> None:
    cached = await Ingestor(store).adopt_inline(
        "data:image/jpeg;base64,/9j/4AAQ", suggested_name="scan.webp"
    )

    assert cached.file_name == f"{cached.id}-scan.webp"
    assert cached.mime_type == "image/jpeg"


@pytest.mark.asyncio
async def test_adopt_inline_rejects_malformed_payload(store: ContentStore) -> None:
    with pytest.raises(UnsupportedPayloadError):
        await Ingestor(store).adopt_inline("image/png;base64,iVBORw0KGgo=")

    assert not store.root.exists()


def test_local_source_path_accepts_file_uris_and_paths(tmp_path: Path) -> None:
    target = tmp_path / "dir with space" / "a.png"
    assert local_source_path(target.as_uri()) == target
    assert local_source_path(str(target)) == target
