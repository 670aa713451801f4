from typing import Any

from fastapi import APIRouter, Request

router = APIRouter()

@router.get("/config", tags=["System"])
async def get_configuration(request: Request) -> dict[str, Any]:
    """Get current runtime configuration with secrets redacted."""
    return request.app.state.settings.redacted()
