"""In-memory deal store -- async CRUD, search, and aggregates over a process-local list.

Provides DealStore, the authoritative owner of the deal collection. Every
operation awaits a simulated backend latency before touching the list, so
callers see real suspension points even though nothing leaves the process.

Identifier allocation: the counter starts at one past the largest seeded id
and only ever moves forward. Deleting the highest id leaves a gap that is
never reused.

All reads return deep copies; callers can never mutate stored records.
Errors are logged and propagated (RecordValidationError, RecordNotFoundError).
"""

from __future__ import annotations

import asyncio
import itertools
from collections import Counter
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone

import structlog

from src.crm.core.errors import RecordNotFoundError, RecordValidationError
from src.crm.deals.schemas import (
    Deal,
    DealCreate,
    DealPatch,
    DealStats,
    DealPriority,
    DealStatus,
    collect_field_errors,
    merge_patch,
)

logger = structlog.get_logger(__name__)

UPCOMING_WINDOW_DAYS = 30

# Simulated backend latency per operation, in seconds.
DEFAULT_DELAYS: dict[str, float] = {
    "list": 0.3,
    "get": 0.2,
    "get_by_status": 0.25,
    "get_by_priority": 0.25,
    "create": 0.4,
    "update": 0.35,
    "delete": 0.3,
    "search": 0.2,
    "get_upcoming": 0.25,
    "get_stats": 0.2,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DealStore:
    """Owns the deal collection and all mutation logic.

    Constructed once per process and shared by reference. There is no
    locking: the store runs on a single event loop and every mutation
    completes without awaiting once it starts touching the list.

    Args:
        deals: Initial records (e.g. seed data), kept in the given order.
        latency_scale: Multiplier applied to DEFAULT_DELAYS; 0 disables the wait.
        clock: Returns the current aware datetime; injectable for tests.
    """

    def __init__(
        self,
        deals: Iterable[Deal] = (),
        *,
        latency_scale: float = 1.0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._deals: list[Deal] = [deal.model_copy(deep=True) for deal in deals]
        self._latency_scale = max(latency_scale, 0.0)
        self._clock = clock
        start = max((deal.id for deal in self._deals), default=0) + 1
        self._ids = itertools.count(start)

    async def _delay(self, operation: str) -> None:
        await asyncio.sleep(DEFAULT_DELAYS[operation] * self._latency_scale)

    def _index_of(self, deal_id: int) -> int:
        for index, deal in enumerate(self._deals):
            if deal.id == deal_id:
                return index
        raise RecordNotFoundError("deal", deal_id)

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list(self) -> list[Deal]:
        """Snapshot copy of every deal, in storage order."""
        await self._delay("list")
        return [deal.model_copy(deep=True) for deal in self._deals]

    async def get(self, deal_id: int) -> Deal:
        """Single deal by id.

        Raises:
            RecordNotFoundError: If no deal has this id.
        """
        await self._delay("get")
        try:
            index = self._index_of(deal_id)
        except RecordNotFoundError:
            logger.warning("deal_store.get_not_found", deal_id=deal_id)
            raise
        return self._deals[index].model_copy(deep=True)

    async def get_by_status(self, status: DealStatus | str) -> list[Deal]:
        """Deals whose status matches, ignoring case."""
        await self._delay("get_by_status")
        wanted = _enum_text(status)
        return [
            deal.model_copy(deep=True)
            for deal in self._deals
            if deal.status.value.lower() == wanted
        ]

    async def get_by_priority(self, priority: DealPriority | str) -> list[Deal]:
        """Deals whose priority matches, ignoring case."""
        await self._delay("get_by_priority")
        wanted = _enum_text(priority)
        return [
            deal.model_copy(deep=True)
            for deal in self._deals
            if deal.priority.value.lower() == wanted
        ]

    async def search(self, query: str | None) -> list[Deal]:
        """Substring search across the text fields of every deal.

        A blank query returns all deals. Otherwise the lowercased query must
        appear in the lowercased name, company, contact person, email,
        description or tags, or verbatim in the phone number.
        """
        await self._delay("search")
        if not query or not query.strip():
            return [deal.model_copy(deep=True) for deal in self._deals]

        term = query.strip().lower()
        return [deal.model_copy(deep=True) for deal in self._deals if _matches(deal, term)]

    async def get_upcoming(self) -> list[Deal]:
        """Deals expected to close between today and 30 days from now, inclusive."""
        await self._delay("get_upcoming")
        today = self._clock().date()
        horizon = today + timedelta(days=UPCOMING_WINDOW_DAYS)
        return [
            deal.model_copy(deep=True)
            for deal in self._deals
            if deal.expected_close_date is not None
            and today <= deal.expected_close_date <= horizon
        ]

    async def get_stats(self) -> DealStats:
        """Aggregate statistics recomputed from the current collection."""
        await self._delay("get_stats")
        total_deals = len(self._deals)
        total_value = sum(deal.amount or 0 for deal in self._deals)
        status_counts = Counter(deal.status.value for deal in self._deals)
        priority_counts = Counter(deal.priority.value for deal in self._deals)

        return DealStats(
            total_deals=total_deals,
            total_value=total_value,
            average_value=total_value / total_deals if total_deals > 0 else 0.0,
            status_counts=dict(status_counts),
            priority_counts=dict(priority_counts),
        )

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create(self, data: DealCreate) -> Deal:
        """Validate, assign the next id, apply defaults, append.

        Raises:
            RecordValidationError: If name or phone is missing, a field is malformed,
                or the expected close date is before today.
        """
        await self._delay("create")

        errors = collect_field_errors(
            data.model_dump(), require_identity=True, today=self._clock().date()
        )
        if errors:
            logger.warning("deal_store.create_rejected", errors=errors)
            raise RecordValidationError(errors)

        deal = Deal(
            id=next(self._ids),
            name=data.name,
            phone=data.phone,
            amount=data.amount or 0.0,
            status=data.status or DealStatus.QUALIFIED,
            priority=data.priority or DealPriority.MEDIUM,
            company=data.company or "",
            contact_person=data.contact_person or "",
            email=data.email or "",
            expected_close_date=data.expected_close_date,
            description=data.description or "",
            tags=(data.tags or "").strip(),
            created_at=self._clock(),
        )
        self._deals.append(deal)

        logger.info("deal_store.created", deal_id=deal.id, amount=deal.amount)
        return deal.model_copy(deep=True)

    async def update(self, deal_id: int, patch: DealPatch) -> Deal:
        """Merge the patch's supplied fields over an existing deal.

        Raises:
            RecordNotFoundError: If no deal has this id.
            RecordValidationError: If a supplied field is malformed.
        """
        await self._delay("update")

        try:
            index = self._index_of(deal_id)
        except RecordNotFoundError:
            logger.warning("deal_store.update_not_found", deal_id=deal_id)
            raise

        supplied = patch.supplied()
        errors = collect_field_errors(supplied, require_identity=False)
        if errors:
            logger.warning("deal_store.update_rejected", deal_id=deal_id, errors=errors)
            raise RecordValidationError(errors)

        updated = merge_patch(self._deals[index], patch)
        self._deals[index] = updated

        logger.info("deal_store.updated", deal_id=deal_id, fields=sorted(supplied))
        return updated.model_copy(deep=True)

    async def delete(self, deal_id: int) -> Deal:
        """Remove a deal and return what was removed.

        Raises:
            RecordNotFoundError: If no deal has this id.
        """
        await self._delay("delete")

        try:
            index = self._index_of(deal_id)
        except RecordNotFoundError:
            logger.warning("deal_store.delete_not_found", deal_id=deal_id)
            raise

        removed = self._deals.pop(index)
        logger.info("deal_store.deleted", deal_id=deal_id)
        return removed.model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._deals)


# ── Helpers ─────────────────────────────────────────────────────────────────


def _enum_text(value: DealStatus | DealPriority | str) -> str:
    raw = value.value if hasattr(value, "value") else str(value)
    return raw.lower()


def _matches(deal: Deal, term: str) -> bool:
    return (
        term in deal.name.lower()
        or term in deal.company.lower()
        or term in deal.contact_person.lower()
        or term in deal.phone
        or term in deal.email.lower()
        or term in deal.description.lower()
        or term in deal.tags.lower()
    )
