"""Health check endpoint.

Reports liveness plus which services the lifespan managed to initialize.
"""

from __future__ import annotations

from fastapi import APIRouter, Request

from src.crm.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request):
    """Basic liveness check; no external calls are made."""
    settings = get_settings()
    store = getattr(request.app.state, "deal_store", None)
    return {
        "status": "ok",
        "environment": settings.ENVIRONMENT.value,
        "checks": {
            "deal_store": "ok" if store is not None else "not_initialized",
            "hosted_backend": (
                "configured"
                if getattr(request.app.state, "task_service", None) is not None
                else "not_configured"
            ),
        },
        "deal_count": len(store) if store is not None else 0,
    }
