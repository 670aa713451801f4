# tests/conftest.py
from __future__ import annotations

import base64
from pathlib import Path

import pytest

from core.config import Settings, get_settings
from persistence.content_store import ContentStore
from persistence.manifest import ManifestStore
from uploads.service import UploadService

# Smallest PNG header; enough bytes for size and extension checks.
PNG_BYTES = base64.b64decode("iVBORw0KGgo=")

_ENV_KEYS = (
    "DIFY_API_URL",
    "DIFY_API_KEY",
    "DIFY_WORKFLOW_ID",
    "DIFY_TIMEOUT",
    "EXPO_PUBLIC_DIFY_API_URL",
    "EXPO_PUBLIC_DIFY_API_KEY",
    "EXPO_PUBLIC_DIFY_WORKFLOW_ID",
    "STUDYMARK_DATA_DIR",
    "STUDYMARK_UPLOAD_DIR_NAME",
    "STUDYMARK_MANIFEST",
    "STUDYMARK_FETCH_TIMEOUT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _make_settings(tmp_path: Path, **overrides) -> Settings:
    values = {"STUDYMARK_DATA_DIR": str(tmp_path / "data")}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings_factory(tmp_path: Path):
    def factory(**overrides) -> Settings:
        return _make_settings(tmp_path, **overrides)

    return factory


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return _make_settings(tmp_path)


@pytest.fixture
def workflow_settings(tmp_path: Path) -> Settings:
    return _make_settings(
        tmp_path,
        DIFY_API_URL="https://dify.example.com/",
        DIFY_API_KEY="secret-key",
        DIFY_WORKFLOW_ID="wf-123",
    )


@pytest.fixture
def store(tmp_path: Path) -> ContentStore:
    return ContentStore(tmp_path / "uploads")


@pytest.fixture
def service(tmp_path: Path) -> UploadService:
    return UploadService(
        ContentStore(tmp_path / "uploads"),
        manifest=ManifestStore(tmp_path / "uploads_manifest.json"),
    )


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def png_file(tmp_path: Path) -> Path:
    path = tmp_path / "src" / "a.png"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(PNG_BYTES)
    return path
