"""HTTP client for the remote correction workflow."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from core.config import Settings, get_settings
from core.errors import WorkflowError
from schemas.workflow import WorkflowInput, WorkflowResult

logger = logging.getLogger(__name__)


class WorkflowClient:
    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client

    def _get_auth_header(self, api_key: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}

    async def run(self, workflow_input: WorkflowInput) -> WorkflowResult:
        """Submit images and context to the workflow and extract its result.

        Raises:
            ConfigurationError: If the endpoint, key or workflow id is missing.
            WorkflowError: On transport failure or a non-2xx response.
        """
        config = self._settings.require_workflow()
        url = f"{config.api_url}/v1/workflows/{config.workflow_id}/run"
        headers = {"Content-Type": "application/json"}
        headers.update(self._get_auth_header(config.api_key))
        body = workflow_input.to_request_body()

        logger.info(
            "Submitting %d images to workflow %s", len(workflow_input.images), config.workflow_id
        )
        try:
            if self._client is not None:
                response = await self._client.post(url, json=body, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._settings.workflow_timeout) as client:
                    response = await client.post(url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            raise WorkflowError(f"Workflow request failed: {exc}") from exc

        if not response.is_success:
            detail = response.text
            logger.error("Workflow failed with status %s", response.status_code)
            raise WorkflowError(
                f"Workflow failed: {response.status_code} {detail}",
                status_code=response.status_code,
                body=detail,
            )

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise WorkflowError(
                f"Workflow returned invalid JSON: {exc}",
                status_code=response.status_code,
                body=response.text,
            ) from exc
        try:
            return WorkflowResult.from_response(payload)
        except (TypeError, ValueError) as exc:
            raise WorkflowError(
                f"Workflow returned an unexpected result: {exc}",
                status_code=response.status_code,
                body=response.text,
            ) from exc


__all__ = ["WorkflowClient"]
