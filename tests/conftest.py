"""Shared fixtures for the deal store, list controller and API tests.

Provides:
- A fixed clock (2026-03-02 12:00 UTC) so date windows are deterministic
- make_deal() for building Deal records with sensible defaults
- A DealStore with three deals and simulated latency disabled
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any

import pytest

from src.crm.deals.schemas import Deal
from src.crm.deals.store import DealStore

FIXED_NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)
TODAY = FIXED_NOW.date()


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_deal(deal_id: int, **overrides: Any) -> Deal:
    """Create a test Deal with sensible defaults."""
    defaults: dict[str, Any] = {
        "id": deal_id,
        "name": f"Deal {deal_id}",
        "phone": f"555-010{deal_id % 10}",
        "amount": 1000.0 * deal_id,
        "status": "qualified",
        "priority": "medium",
        "company": "",
        "contact_person": "",
        "email": "",
        "description": "",
        "tags": "",
        "created_at": FIXED_NOW - timedelta(days=deal_id),
    }
    defaults.update(overrides)
    return Deal(**defaults)


def days_from_today(days: int) -> date:
    return TODAY + timedelta(days=days)


@pytest.fixture
def three_deals() -> list[Deal]:
    """Amounts 10000 / 60000 / 5000 across statuses and priorities."""
    return [
        make_deal(
            1,
            name="Website Redesign",
            amount=10000,
            status="proposal",
            priority="low",
            company="Acme Corp",
            contact_person="Jane Doe",
            email="jane@acme.com",
            expected_close_date=days_from_today(10),
            tags="web, design",
        ),
        make_deal(
            2,
            name="ERP Rollout",
            amount=60000,
            status="negotiation",
            priority="high",
            company="Globex",
            contact_person="Hank Scorpio",
            email="hank@globex.com",
            expected_close_date=days_from_today(45),
            description="Company-wide ERP migration",
            tags="erp, enterprise",
        ),
        make_deal(
            3,
            name="Support Contract",
            amount=5000,
            status="qualified",
            priority="medium",
            company="Initech",
            contact_person="Bill Lumbergh",
            phone="555-0199",
            expected_close_date=days_from_today(-5),
            tags="support",
        ),
    ]


@pytest.fixture
def store(three_deals) -> DealStore:
    """DealStore seeded with three_deals, no latency, fixed clock."""
    return DealStore(three_deals, latency_scale=0, clock=fixed_clock)
