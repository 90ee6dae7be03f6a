"""FastAPI application factory.

Creates the app with logging middleware, CORS, lifespan events that build
the deal store and hosted backend services, and the v1 API router.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.crm.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.crm.api.v1.router import router as v1_router
from src.crm.config import get_settings
from src.crm.deals.seed import build_seed_deals
from src.crm.deals.store import DealStore
from src.crm.hosted import DiscountService, HostedBackendClient, TaskService

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: build the deal store and hosted services on startup."""
    settings = get_settings()
    configure_structlog()

    seed = build_seed_deals() if settings.DEAL_STORE_SEED else []
    app.state.deal_store = DealStore(seed, latency_scale=settings.DEAL_STORE_LATENCY_SCALE)
    log.info("deal_store.initialized", deal_count=len(seed))

    # Tasks and discounts need hosted backend credentials; without them the
    # endpoints answer 503 instead of failing at startup.
    if settings.hosted_backend_configured:
        client = HostedBackendClient(
            base_url=settings.HOSTED_BACKEND_URL,
            project_id=settings.HOSTED_PROJECT_ID,
            public_key=settings.HOSTED_PUBLIC_KEY,
            timeout=settings.HOSTED_TIMEOUT,
        )
        app.state.task_service = TaskService(client)
        app.state.discount_service = DiscountService(client)
        log.info("hosted_backend.initialized", base_url=settings.HOSTED_BACKEND_URL)
    else:
        app.state.task_service = None
        app.state.discount_service = None
        log.warning("hosted_backend.not_configured")

    yield

    log.info("app.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Deal Desk API",
        version="0.1.0",
        description="Deal pipeline, tasks and discounts for a small sales team",
        lifespan=lifespan,
    )

    # Middleware is added in reverse order (last added = outermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    app.include_router(v1_router, prefix="/api/v1")

    return app


# Module-level app for uvicorn
app = create_app()
