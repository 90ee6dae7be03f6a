"""List filters for the deal pipeline view.

A filter is an explicit tagged union rather than a bare string, so adding a
status or priority value later can never make a filter ambiguous:

- AllDeals: no filtering
- ByStatus / ByPriority: exact enum match
- ByAmountThreshold: amount >= minimum (the "high-value" tab)
- ByCloseDateWindow: has a close date no later than today + days (the
  "closing-soon" tab). There is no lower bound here, unlike
  DealStore.get_upcoming which also excludes past dates.

parse_filter() maps the tab vocabulary used by clients onto the union.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from src.crm.core.errors import RecordValidationError
from src.crm.deals.schemas import Deal, DealPriority, DealStats, DealStatus

HIGH_VALUE_THRESHOLD = 50000.0
CLOSING_SOON_DAYS = 30


class AllDeals(BaseModel):
    kind: Literal["all"] = "all"

    def matches(self, deal: Deal, today: date) -> bool:
        return True


class ByStatus(BaseModel):
    kind: Literal["status"] = "status"
    status: DealStatus

    def matches(self, deal: Deal, today: date) -> bool:
        return deal.status == self.status


class ByPriority(BaseModel):
    kind: Literal["priority"] = "priority"
    priority: DealPriority

    def matches(self, deal: Deal, today: date) -> bool:
        return deal.priority == self.priority


class ByAmountThreshold(BaseModel):
    kind: Literal["amount_threshold"] = "amount_threshold"
    minimum: float = HIGH_VALUE_THRESHOLD

    def matches(self, deal: Deal, today: date) -> bool:
        return (deal.amount or 0) >= self.minimum


class ByCloseDateWindow(BaseModel):
    kind: Literal["close_date_window"] = "close_date_window"
    days: int = Field(default=CLOSING_SOON_DAYS, ge=0)

    def matches(self, deal: Deal, today: date) -> bool:
        if deal.expected_close_date is None:
            return False
        return deal.expected_close_date <= today + timedelta(days=self.days)


DealFilter = Annotated[
    Union[AllDeals, ByStatus, ByPriority, ByAmountThreshold, ByCloseDateWindow],
    Field(discriminator="kind"),
]


def parse_filter(value: str | None) -> DealFilter:
    """Translate a tab value ("all", "high-value", "closing-soon", a status
    or a priority) into a DealFilter.

    Raises:
        RecordValidationError: If the value names no known filter.
    """
    if value is None or value == "" or value == "all":
        return AllDeals()
    if value == "high-value":
        return ByAmountThreshold()
    if value == "closing-soon":
        return ByCloseDateWindow()
    try:
        return ByStatus(status=DealStatus(value))
    except ValueError:
        pass
    try:
        return ByPriority(priority=DealPriority(value))
    except ValueError:
        raise RecordValidationError({"filter": f"Unknown filter: {value}"}) from None


def filter_value(deal_filter: DealFilter) -> str:
    """Inverse of parse_filter for the tab vocabulary."""
    if isinstance(deal_filter, ByStatus):
        return deal_filter.status.value
    if isinstance(deal_filter, ByPriority):
        return deal_filter.priority.value
    if isinstance(deal_filter, ByAmountThreshold):
        return "high-value"
    if isinstance(deal_filter, ByCloseDateWindow):
        return "closing-soon"
    return "all"


def apply_filter(deals: Iterable[Deal], deal_filter: DealFilter, today: date) -> list[Deal]:
    """Keep the deals the filter matches, preserving input order."""
    return [deal for deal in deals if deal_filter.matches(deal, today)]


def sort_by_amount(deals: Iterable[Deal]) -> list[Deal]:
    """Highest amount first; equal amounts keep their relative order."""
    return sorted(deals, key=lambda deal: deal.amount or 0, reverse=True)


# ── Filter Tabs ─────────────────────────────────────────────────────────────


class FilterTab(BaseModel):
    """One entry of the filter tab strip shown above the deal list."""

    value: str
    label: str
    icon: str
    count: int = 0


def build_filter_tabs(deals: list[Deal], stats: DealStats | None, today: date) -> list[FilterTab]:
    """Tab strip with counts.

    Status and priority counts come from the aggregate statistics; the
    high-value and closing-soon counts are computed from ``deals``.
    """
    status_counts = stats.status_counts if stats else {}
    priority_counts = stats.priority_counts if stats else {}

    return [
        FilterTab(value="all", label="All Deals", icon="Briefcase", count=len(deals)),
        FilterTab(
            value=DealStatus.QUALIFIED.value,
            label="Qualified",
            icon="CheckCircle",
            count=status_counts.get(DealStatus.QUALIFIED.value, 0),
        ),
        FilterTab(
            value=DealStatus.PROPOSAL.value,
            label="Proposal",
            icon="FileText",
            count=status_counts.get(DealStatus.PROPOSAL.value, 0),
        ),
        FilterTab(
            value=DealStatus.NEGOTIATION.value,
            label="Negotiation",
            icon="MessageSquare",
            count=status_counts.get(DealStatus.NEGOTIATION.value, 0),
        ),
        FilterTab(
            value=DealPriority.HIGH.value,
            label="High Priority",
            icon="AlertTriangle",
            count=priority_counts.get(DealPriority.HIGH.value, 0),
        ),
        FilterTab(
            value="high-value",
            label="High Value ($50K+)",
            icon="DollarSign",
            count=len(apply_filter(deals, ByAmountThreshold(), today)),
        ),
        FilterTab(
            value="closing-soon",
            label="Closing Soon",
            icon="Clock",
            count=len(apply_filter(deals, ByCloseDateWindow(), today)),
        ),
    ]
