"""Application configuration and .env loading."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import NamedTuple

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.errors import ConfigurationError


class WorkflowConfig(NamedTuple):
    api_url: str
    api_key: str
    workflow_id: str


class Settings(BaseSettings):
    """Centralized runtime configuration."""

    data_dir: str = Field(
        default="data/studymark", validation_alias="STUDYMARK_DATA_DIR"
    )
    upload_dir_name: str = Field(
        default="uploads", validation_alias="STUDYMARK_UPLOAD_DIR_NAME"
    )
    manifest_enabled: bool = Field(
        default=True, validation_alias="STUDYMARK_MANIFEST"
    )
    fetch_timeout: float = Field(
        default=30.0, validation_alias="STUDYMARK_FETCH_TIMEOUT"
    )

    dify_api_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DIFY_API_URL", "EXPO_PUBLIC_DIFY_API_URL"),
    )
    dify_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DIFY_API_KEY", "EXPO_PUBLIC_DIFY_API_KEY"),
    )
    dify_workflow_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "DIFY_WORKFLOW_ID", "EXPO_PUBLIC_DIFY_WORKFLOW_ID"
        ),
    )
    workflow_timeout: float = Field(default=60.0, validation_alias="DIFY_TIMEOUT")

    log_level: str = Field(default="info", validation_alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def upload_dir(self) -> Path:
        return Path(self.data_dir) / self.upload_dir_name

    @property
    def manifest_path(self) -> Path | None:
        if not self.manifest_enabled:
            return None
        return Path(self.data_dir) / f"{self.upload_dir_name}_manifest.json"

    def require_workflow(self) -> WorkflowConfig:
        """Return the workflow endpoint settings or fail before any network I/O."""
        required = (
            ("DIFY_API_URL", self.dify_api_url),
            ("DIFY_API_KEY", self.dify_api_key),
            ("DIFY_WORKFLOW_ID", self.dify_workflow_id),
        )
        for env_key, value in required:
            if not value or not value.strip():
                raise ConfigurationError(f"Missing {env_key}.")
        return WorkflowConfig(
            api_url=self.dify_api_url.rstrip("/"),
            api_key=self.dify_api_key,
            workflow_id=self.dify_workflow_id,
        )

    def redacted(self) -> dict[str, object]:
        payload = self.model_dump()
        if payload.get("dify_api_key"):
            payload["dify_api_key"] = "***"
        payload["upload_dir"] = str(self.upload_dir)
        manifest = self.manifest_path
        payload["manifest_path"] = str(manifest) if manifest else None
        return payload


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once from .env/environment."""
    return Settings()


__all__ = ["Settings", "WorkflowConfig", "get_settings"]
