"""Seed deals loaded into the DealStore at startup.

Close dates are stored as offsets from the day the store is built so the
"closing soon" and "upcoming" views stay populated whenever the service runs.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from src.crm.deals.schemas import Deal

SEED_DEALS: list[dict[str, Any]] = [
    {
        "id": 1,
        "name": "Enterprise Software License",
        "phone": "+1 (555) 123-4567",
        "amount": 125000,
        "status": "negotiation",
        "priority": "high",
        "company": "TechCorp Solutions",
        "contact_person": "Sarah Johnson",
        "email": "sarah.johnson@techcorp.com",
        "close_in_days": 14,
        "description": "Annual enterprise license renewal with expanded seat count",
        "tags": "enterprise, software, renewal",
        "created_days_ago": 45,
    },
    {
        "id": 2,
        "name": "Cloud Migration Project",
        "phone": "555-987-6543",
        "amount": 85000,
        "status": "proposal",
        "priority": "high",
        "company": "Global Retail Inc",
        "contact_person": "Michael Chen",
        "email": "m.chen@globalretail.com",
        "close_in_days": 28,
        "description": "Migration of on-premise inventory systems to the cloud",
        "tags": "cloud, migration, infrastructure",
        "created_days_ago": 30,
    },
    {
        "id": 3,
        "name": "Marketing Automation Setup",
        "phone": "(555) 246-8135",
        "amount": 24000,
        "status": "qualified",
        "priority": "medium",
        "company": "Bright Ideas Agency",
        "contact_person": "Emily Rodriguez",
        "email": "emily@brightideas.io",
        "close_in_days": 60,
        "description": "Email campaign tooling and CRM integration",
        "tags": "marketing, automation",
        "created_days_ago": 12,
    },
    {
        "id": 4,
        "name": "Security Audit Retainer",
        "phone": "+44 20 7946 0958",
        "amount": 56000,
        "status": "closed-won",
        "priority": "medium",
        "company": "Northwind Finance",
        "contact_person": "James Whitaker",
        "email": "j.whitaker@northwind.co.uk",
        "close_in_days": -10,
        "description": "Quarterly penetration testing and compliance review",
        "tags": "security, compliance, retainer",
        "created_days_ago": 90,
    },
    {
        "id": 5,
        "name": "Office Hardware Refresh",
        "phone": "555.321.0987",
        "amount": 18500,
        "status": "closed-lost",
        "priority": "low",
        "company": "Greenfield Logistics",
        "contact_person": "Priya Patel",
        "email": "priya.patel@greenfield.com",
        "close_in_days": None,
        "description": "Laptops and docking stations for the Denver office",
        "tags": "hardware",
        "created_days_ago": 60,
    },
    {
        "id": 6,
        "name": "Data Analytics Platform",
        "phone": "+1 555 864 2097",
        "amount": 210000,
        "status": "qualified",
        "priority": "high",
        "company": "Summit Healthcare",
        "contact_person": "David Kim",
        "email": "dkim@summithealth.org",
        "close_in_days": 75,
        "description": "Patient outcome dashboards and reporting warehouse",
        "tags": "analytics, healthcare, data",
        "created_days_ago": 8,
    },
    {
        "id": 7,
        "name": "Support Plan Upgrade",
        "phone": "555-0199",
        "amount": 9600,
        "status": "proposal",
        "priority": "low",
        "company": "Blue Harbor Cafe",
        "contact_person": "Lucas Moreau",
        "email": "",
        "close_in_days": 5,
        "description": "Move from standard to premium support tier",
        "tags": "support, upsell",
        "created_days_ago": 3,
    },
]


def build_seed_deals(today: date | None = None) -> list[Deal]:
    """Materialize SEED_DEALS relative to ``today`` (defaults to the UTC date)."""
    today = today or datetime.now(timezone.utc).date()
    deals: list[Deal] = []
    for entry in SEED_DEALS:
        fields = dict(entry)
        close_in_days = fields.pop("close_in_days")
        created_days_ago = fields.pop("created_days_ago")
        created_on = today - timedelta(days=created_days_ago)
        deals.append(
            Deal(
                **fields,
                expected_close_date=(
                    today + timedelta(days=close_in_days) if close_in_days is not None else None
                ),
                created_at=datetime.combine(created_on, time(9, 0), tzinfo=timezone.utc),
            )
        )
    return deals
