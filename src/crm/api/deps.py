"""FastAPI dependency injection for the services held on ``app.state``.

The lifespan in src.crm.main builds the deal store and the hosted backend
services once per process; these dependencies hand them to endpoints and
answer 503 when a service was not initialized.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from src.crm.core.errors import (
    CRMError,
    ExternalServiceError,
    RecordNotFoundError,
    RecordValidationError,
)
from src.crm.deals.store import DealStore
from src.crm.hosted.discounts import DiscountService
from src.crm.hosted.tasks import TaskService


def _from_state(request: Request, attr: str, label: str):
    service = getattr(request.app.state, attr, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} not initialized",
        )
    return service


async def get_deal_store(request: Request) -> DealStore:
    """Retrieve the DealStore from app.state, 503 if not available."""
    return _from_state(request, "deal_store", "Deal store")


async def get_task_service(request: Request) -> TaskService:
    """Retrieve the TaskService from app.state, 503 if the hosted backend is not configured."""
    return _from_state(request, "task_service", "Task service")


async def get_discount_service(request: Request) -> DiscountService:
    """Retrieve the DiscountService from app.state, 503 if the hosted backend is not configured."""
    return _from_state(request, "discount_service", "Discount service")


def http_error(exc: CRMError) -> HTTPException:
    """Translate a CRM domain error into the matching HTTPException."""
    if isinstance(exc, RecordValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(exc), "errors": exc.errors},
        )
    if isinstance(exc, RecordNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, ExternalServiceError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
