"""
Health check endpoint.

GET /health: checks the provider store.
Rules:
- Redis configured and unreachable → "unhealthy" (503), captchas cannot be issued.
- In-memory provider directory → "degraded" (200). Counters
  are per-process and lost on restart.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from dependencies import get_provider_directory
from infrastructure.providers.memory_directory import InMemoryProviderDirectory
from infrastructure.providers.protocol import ProviderDirectory
from schemas.dto.responses.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse, "description": "Provider store unreachable"}},
)
async def health_check(
    request: Request,
    directory: ProviderDirectory = Depends(get_provider_directory),
) -> JSONResponse:
    checks: dict[str, str] = {}
    overall = "healthy"

    if isinstance(directory, InMemoryProviderDirectory):
        checks["provider_store"] = "in_memory"
        overall = "degraded"
    else:
        try:
            ok = await directory.ping()
        except Exception:
            ok = False
        checks["provider_store"] = "ok" if ok else "error"
        if not ok:
            overall = "unhealthy"

    sweeper = getattr(request.app.state, "sweeper", None)
    checks["sweeper"] = "running" if sweeper is not None and sweeper.running else "stopped"

    body = HealthResponse(status=overall, checks=checks)
    status_code = 503 if overall == "unhealthy" else 200
    return JSONResponse(status_code=status_code, content=body.model_dump())
