"""Deal list controller -- derives the visible, ordered deal list for a pipeline view.

Holds a local cache of deals plus the aggregate statistics, one active
filter and an optional free-text query. The visible list is always
recomputed from those after any change:

- no query: filter the cache, then sort by amount (highest first, stable)
- query: ask DealStore.search, re-apply the active filter, then sort

Mutations go through the store and are reconciled into the cache locally
(prepend on create, replace on update, remove on delete) instead of
reloading everything. A failed load, filter change, search or store
mutation propagates and leaves the controller state untouched. Once a
mutation has succeeded the cache always reflects it, even if the stats
refresh that follows fails.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from datetime import datetime, timezone

import structlog
from pydantic import BaseModel

from src.crm.deals.filters import (
    AllDeals,
    DealFilter,
    FilterTab,
    apply_filter,
    build_filter_tabs,
    filter_value,
    parse_filter,
    sort_by_amount,
)
from src.crm.deals.schemas import Deal, DealCreate, DealPatch, DealStats
from src.crm.deals.store import DealStore

logger = structlog.get_logger(__name__)


class EmptyState(BaseModel):
    """Message shown in place of the list when nothing is visible."""

    title: str
    description: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DealListController:
    """Presentation state for one deal list view.

    Args:
        store: The shared DealStore.
        clock: Returns the current aware datetime; drives the closing-soon window.
    """

    def __init__(self, store: DealStore, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._store = store
        self._clock = clock

        self.deals: list[Deal] = []
        self.stats: DealStats | None = None
        self.active_filter: DealFilter = AllDeals()
        self.query: str = ""
        self.visible: list[Deal] = []
        self.loading: bool = False
        self.error: str | None = None

    # ── View Derivation ───────────────────────────────────────────────────

    async def _compute_view(
        self, query: str, deal_filter: DealFilter, cache: Sequence[Deal]
    ) -> list[Deal]:
        if query.strip():
            source: Sequence[Deal] = await self._store.search(query)
        else:
            source = cache
        return sort_by_amount(apply_filter(source, deal_filter, self._clock().date()))

    async def _reconcile(self, deals: list[Deal]) -> None:
        """Commit the reconciled cache, then refresh stats and the visible list.

        The store has already applied the mutation, so the cache is committed
        first. If a refresh fails, the part that failed keeps its previous
        value, the other part is still applied, and the first failure is
        re-raised.
        """
        self.deals = deals
        stats, visible = await asyncio.gather(
            self._store.get_stats(),
            self._compute_view(self.query, self.active_filter, deals),
            return_exceptions=True,
        )
        if not isinstance(stats, BaseException):
            self.stats = stats
        if not isinstance(visible, BaseException):
            self.visible = visible

        failure = next((r for r in (stats, visible) if isinstance(r, BaseException)), None)
        if failure is not None:
            logger.error("deal_list.refresh_failed", error=str(failure))
            raise failure

    # ── Loading, Filtering, Searching ─────────────────────────────────────

    async def load(self) -> None:
        """Fetch all deals and statistics concurrently and rebuild the view."""
        self.loading = True
        self.error = None
        try:
            deals, stats = await asyncio.gather(self._store.list(), self._store.get_stats())
            visible = await self._compute_view(self.query, self.active_filter, deals)
        except Exception as exc:
            self.error = str(exc) or "Failed to load deals"
            logger.error("deal_list.load_failed", error=self.error)
            raise
        finally:
            self.loading = False

        self.deals = deals
        self.stats = stats
        self.visible = visible
        logger.debug("deal_list.loaded", count=len(deals))

    async def set_filter(self, deal_filter: DealFilter | str) -> None:
        """Switch the active filter (a DealFilter or a tab value) and rebuild the view."""
        if isinstance(deal_filter, str):
            deal_filter = parse_filter(deal_filter)
        visible = await self._compute_view(self.query, deal_filter, self.deals)
        self.active_filter = deal_filter
        self.visible = visible

    async def search(self, query: str) -> None:
        """Set the free-text query and rebuild the view."""
        try:
            visible = await self._compute_view(query, self.active_filter, self.deals)
        except Exception:
            logger.error("deal_list.search_failed", query=query)
            raise
        self.query = query
        self.visible = visible

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create(self, data: DealCreate) -> Deal:
        """Create through the store and prepend the new deal to the cache."""
        created = await self._store.create(data)
        await self._reconcile([created, *self.deals])
        return created

    async def update(self, deal_id: int, patch: DealPatch) -> Deal:
        """Update through the store and replace the matching cache entry."""
        updated = await self._store.update(deal_id, patch)
        await self._reconcile(
            [updated if deal.id == deal_id else deal for deal in self.deals]
        )
        return updated

    async def delete(self, deal_id: int, *, confirmed: bool = False) -> bool:
        """Delete through the store once the user has confirmed.

        Returns:
            False without touching anything when ``confirmed`` is not set,
            True after the deal was removed.
        """
        if not confirmed:
            logger.info("deal_list.delete_unconfirmed", deal_id=deal_id)
            return False

        await self._store.delete(deal_id)
        await self._reconcile([deal for deal in self.deals if deal.id != deal_id])
        return True

    # ── Presentation Helpers ──────────────────────────────────────────────

    def tabs(self) -> list[FilterTab]:
        return build_filter_tabs(self.deals, self.stats, self._clock().date())

    def empty_state(self) -> EmptyState:
        """Title and description for an empty visible list."""
        if self.query:
            return EmptyState(
                title="No deals found",
                description=f'No deals match "{self.query}". Try a different search term.',
            )
        if isinstance(self.active_filter, AllDeals):
            return EmptyState(
                title="No deals yet",
                description="Start by creating your first deal to track sales opportunities",
            )
        label = filter_value(self.active_filter).replace("-", " ")
        return EmptyState(
            title=f"No {label} deals",
            description=(
                "No deals found for the selected filter. "
                "Try a different filter or create a new deal."
            ),
        )
