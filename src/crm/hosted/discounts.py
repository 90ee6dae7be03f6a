"""Discount service -- read access to the ``app_discount`` table of the hosted backend."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from src.crm.core.errors import RecordNotFoundError
from src.crm.hosted.client import HostedBackendClient
from src.crm.hosted.schemas import Discount, field_list, where_clause

DISCOUNT_TABLE = "app_discount"
DISCOUNT_FIELDS = [
    "Name",
    "title",
    "description",
    "code",
    "discount",
    "expiry_date",
    "category",
    "url",
]


class DiscountService:
    """Discount queries on top of a HostedBackendClient."""

    def __init__(self, client: HostedBackendClient) -> None:
        self._client = client

    async def _query(self, where: list[dict[str, Any]] | None = None) -> list[Discount]:
        params: dict[str, Any] = {"fields": field_list(DISCOUNT_FIELDS)}
        if where:
            params["where"] = where
        envelope = await self._client.fetch_records(DISCOUNT_TABLE, params)
        return [Discount.model_validate(row) for row in envelope.data or []]

    async def get_all(self) -> list[Discount]:
        return await self._query()

    async def get_by_id(self, discount_id: int) -> Discount:
        envelope = await self._client.get_record_by_id(
            DISCOUNT_TABLE, discount_id, {"fields": field_list(DISCOUNT_FIELDS)}
        )
        if not envelope.data:
            raise RecordNotFoundError("discount", discount_id)
        return Discount.model_validate(envelope.data)

    async def get_by_category(self, category: str) -> list[Discount]:
        return await self._query([where_clause("category", "EqualTo", category)])

    async def get_active(self, today: date | None = None) -> list[Discount]:
        """Discounts whose expiry date is strictly after ``today`` (UTC date by default)."""
        today = today or datetime.now(timezone.utc).date()
        return await self._query([where_clause("expiry_date", "GreaterThan", today.isoformat())])
