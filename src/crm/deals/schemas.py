"""Pydantic schemas for the deal pipeline -- records, payloads, and statistics.

Defines all structured types for the deal lifecycle:
- Enums: DealStatus, DealPriority
- Records: Deal (what the store holds and hands out as copies)
- Payloads: DealCreate (store validates required fields), DealPatch (all optional)
- Aggregates: DealStats
- Field rules: PHONE_PATTERN, EMAIL_PATTERN, collect_field_errors()
- Merge: merge_patch() copies supplied patch fields only, never the identifier
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, Field

# ── Enums ───────────────────────────────────────────────────────────────────


class DealStatus(str, Enum):
    """Pipeline position of a deal."""

    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    CLOSED_WON = "closed-won"
    CLOSED_LOST = "closed-lost"


class DealPriority(str, Enum):
    """How urgently a deal needs attention."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ── Field Rules ─────────────────────────────────────────────────────────────

PHONE_PATTERN = re.compile(r"^\+?[\d\s\-().]+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

Amount = Annotated[float, Field(ge=0, allow_inf_nan=False)]


def collect_field_errors(
    values: Mapping[str, Any],
    *,
    require_identity: bool,
    today: date | None = None,
) -> dict[str, str]:
    """Check deal field values and return a field -> problem map.

    Name and phone are checked whenever they are present in ``values``;
    with ``require_identity`` they must also be present and non-empty.
    Email is only checked when non-empty. When ``today`` is given, a close
    date before it is rejected. Amount bounds are enforced by the ``Amount``
    type itself.
    """
    errors: dict[str, str] = {}

    if require_identity or "name" in values:
        name = values.get("name") or ""
        if not name.strip():
            errors["name"] = "Deal name is required"

    if require_identity or "phone" in values:
        phone = values.get("phone") or ""
        if not phone.strip():
            errors["phone"] = "Phone number is required"
        elif not PHONE_PATTERN.match(phone):
            errors["phone"] = "Please enter a valid phone number"

    email = values.get("email") or ""
    if email.strip() and not EMAIL_PATTERN.match(email):
        errors["email"] = "Please enter a valid email address"

    close_date = values.get("expected_close_date")
    if today is not None and close_date is not None and close_date < today:
        errors["expected_close_date"] = "Expected close date should be in the future"

    return errors


# ── Records ─────────────────────────────────────────────────────────────────


class Deal(BaseModel):
    """A deal as stored by DealStore."""

    id: int = Field(gt=0)
    name: str
    phone: str
    amount: Amount = 0.0
    status: DealStatus = DealStatus.QUALIFIED
    priority: DealPriority = DealPriority.MEDIUM
    company: str = ""
    contact_person: str = ""
    email: str = ""
    expected_close_date: date | None = None
    description: str = ""
    tags: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def tag_list(self) -> list[str]:
        """Tags split on commas, stripped, empties dropped."""
        return [tag.strip() for tag in self.tags.split(",") if tag.strip()]


class DealCreate(BaseModel):
    """Payload for creating a deal.

    Name and phone default to empty so that DealStore.create owns the
    required-field check and reports it as a RecordValidationError.
    """

    name: str = ""
    phone: str = ""
    amount: Amount | None = None
    status: DealStatus | None = None
    priority: DealPriority | None = None
    company: str | None = None
    contact_person: str | None = None
    email: str | None = None
    expected_close_date: date | None = None
    description: str | None = None
    tags: str | None = None


class DealPatch(BaseModel):
    """Partial update for a deal. Only fields the caller set are applied."""

    name: str | None = None
    phone: str | None = None
    amount: Amount | None = None
    status: DealStatus | None = None
    priority: DealPriority | None = None
    company: str | None = None
    contact_person: str | None = None
    email: str | None = None
    expected_close_date: date | None = None
    description: str | None = None
    tags: str | None = None

    def supplied(self) -> dict[str, Any]:
        """Fields explicitly present in the patch.

        ``None`` is only meaningful for ``expected_close_date`` (clears it);
        for every other field an explicit ``None`` is treated as absent.
        """
        data = self.model_dump(exclude_unset=True)
        return {
            key: value
            for key, value in data.items()
            if value is not None or key == "expected_close_date"
        }


def merge_patch(deal: Deal, patch: DealPatch) -> Deal:
    """Return a copy of ``deal`` with the patch's supplied fields replaced."""
    updated = deal.model_copy(update=patch.supplied(), deep=True)
    # DealPatch has no id field; keep this explicit regardless.
    updated.id = deal.id
    return updated


# ── Aggregates ──────────────────────────────────────────────────────────────


class DealStats(BaseModel):
    """Aggregate statistics derived from the current collection."""

    total_deals: int = 0
    total_value: float = 0.0
    average_value: float = 0.0
    status_counts: dict[str, int] = Field(default_factory=dict)
    priority_counts: dict[str, int] = Field(default_factory=dict)
