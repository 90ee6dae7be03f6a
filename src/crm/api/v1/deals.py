"""REST API endpoints for the deal pipeline.

Provides CRUD, search, upcoming and statistics endpoints backed by the
shared DealStore, plus a list view endpoint that runs a DealListController
for one filter/query combination and returns the visible list together
with the statistics, filter tabs and empty-state text.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from src.crm.api.deps import get_deal_store, http_error
from src.crm.core.errors import CRMError
from src.crm.deals.controller import DealListController, EmptyState
from src.crm.deals.filters import FilterTab, filter_value
from src.crm.deals.schemas import (
    Deal,
    DealCreate,
    DealPatch,
    DealPriority,
    DealStats,
    DealStatus,
)
from src.crm.deals.store import DealStore

router = APIRouter(prefix="/deals", tags=["deals"])


# ── Response Schemas ─────────────────────────────────────────────────────────


class DealViewResponse(BaseModel):
    """One rendering of the deal list view."""

    filter: str = "all"
    query: str = ""
    deals: list[Deal] = Field(default_factory=list)
    stats: DealStats | None = None
    tabs: list[FilterTab] = Field(default_factory=list)
    empty_state: EmptyState | None = None


# ── Views and Queries ────────────────────────────────────────────────────────


@router.get("", response_model=list[Deal])
async def list_deals(store: DealStore = Depends(get_deal_store)) -> list[Deal]:
    """All deals in storage order."""
    return await store.list()


@router.get("/view", response_model=DealViewResponse)
async def deal_view(
    filter_: str = Query(
        default="all",
        alias="filter",
        description="Tab value: all, a status, a priority, high-value, closing-soon",
    ),
    q: str = Query(default="", description="Free-text search"),
    store: DealStore = Depends(get_deal_store),
) -> DealViewResponse:
    """Filtered, searched and sorted deal list with stats and tabs."""
    controller = DealListController(store)
    try:
        await controller.load()
        await controller.set_filter(filter_)
        if q.strip():
            await controller.search(q)
    except CRMError as exc:
        raise http_error(exc) from exc

    return DealViewResponse(
        filter=filter_value(controller.active_filter),
        query=controller.query,
        deals=controller.visible,
        stats=controller.stats,
        tabs=controller.tabs(),
        empty_state=controller.empty_state() if not controller.visible else None,
    )


@router.get("/stats", response_model=DealStats)
async def deal_stats(store: DealStore = Depends(get_deal_store)) -> DealStats:
    return await store.get_stats()


@router.get("/upcoming", response_model=list[Deal])
async def upcoming_deals(store: DealStore = Depends(get_deal_store)) -> list[Deal]:
    """Deals expected to close within the next 30 days."""
    return await store.get_upcoming()


@router.get("/search", response_model=list[Deal])
async def search_deals(
    q: str = Query(default=""),
    store: DealStore = Depends(get_deal_store),
) -> list[Deal]:
    return await store.search(q)


@router.get("/status/{deal_status}", response_model=list[Deal])
async def deals_by_status(
    deal_status: DealStatus,
    store: DealStore = Depends(get_deal_store),
) -> list[Deal]:
    return await store.get_by_status(deal_status)


@router.get("/priority/{priority}", response_model=list[Deal])
async def deals_by_priority(
    priority: DealPriority,
    store: DealStore = Depends(get_deal_store),
) -> list[Deal]:
    return await store.get_by_priority(priority)


# ── Single Deal ──────────────────────────────────────────────────────────────


@router.get("/{deal_id}", response_model=Deal)
async def get_deal(deal_id: int, store: DealStore = Depends(get_deal_store)) -> Deal:
    try:
        return await store.get(deal_id)
    except CRMError as exc:
        raise http_error(exc) from exc


@router.post("", response_model=Deal, status_code=201)
async def create_deal(body: DealCreate, store: DealStore = Depends(get_deal_store)) -> Deal:
    """Create a deal; name and phone are required."""
    try:
        return await store.create(body)
    except CRMError as exc:
        raise http_error(exc) from exc


@router.patch("/{deal_id}", response_model=Deal)
async def update_deal(
    deal_id: int,
    body: DealPatch,
    store: DealStore = Depends(get_deal_store),
) -> Deal:
    """Apply the supplied fields; omitted fields keep their values."""
    try:
        return await store.update(deal_id, body)
    except CRMError as exc:
        raise http_error(exc) from exc


@router.delete("/{deal_id}", response_model=Deal)
async def delete_deal(
    deal_id: int,
    confirm: bool = Query(default=False, description="Must be true to delete"),
    store: DealStore = Depends(get_deal_store),
) -> Deal:
    """Delete a deal. The caller has to confirm explicitly with ?confirm=true."""
    if not confirm:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Deleting a deal requires confirm=true",
        )
    try:
        return await store.delete(deal_id)
    except CRMError as exc:
        raise http_error(exc) from exc
