"""REST API endpoints for discounts stored in the hosted backend."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from src.crm.api.deps import get_discount_service, http_error
from src.crm.core.errors import CRMError
from src.crm.hosted.discounts import DiscountService
from src.crm.hosted.schemas import Discount

router = APIRouter(prefix="/discounts", tags=["discounts"])


@router.get("", response_model=list[Discount])
async def list_discounts(
    category: str | None = Query(default=None),
    service: DiscountService = Depends(get_discount_service),
) -> list[Discount]:
    """All discounts, or only those in one category."""
    try:
        if category:
            return await service.get_by_category(category)
        return await service.get_all()
    except CRMError as exc:
        raise http_error(exc) from exc


@router.get("/active", response_model=list[Discount])
async def active_discounts(service: DiscountService = Depends(get_discount_service)) -> list[Discount]:
    """Discounts that have not expired yet."""
    try:
        return await service.get_active()
    except CRMError as exc:
        raise http_error(exc) from exc


@router.get("/{discount_id}", response_model=Discount)
async def get_discount(
    discount_id: int,
    service: DiscountService = Depends(get_discount_service),
) -> Discount:
    try:
        return await service.get_by_id(discount_id)
    except CRMError as exc:
        raise http_error(exc) from exc
