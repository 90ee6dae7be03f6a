#!/usr/bin/env python3
"""CLI script to print a pipeline report for the seeded deal store.

Usage:
    uv run python scripts/pipeline_report.py
    uv run python scripts/pipeline_report.py --filter high-value
    uv run python scripts/pipeline_report.py --filter negotiation --query cloud

Builds a DealStore from the seed data (no simulated latency), runs a
DealListController with the requested filter and query, and prints the
statistics, the filter tabs and the visible deals.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Ensure project root is on sys.path so we can import src.crm
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


async def report(filter_value: str, query: str) -> None:
    """Print stats, tabs and the visible deals for one filter/query."""
    from src.crm.deals.controller import DealListController
    from src.crm.deals.seed import build_seed_deals
    from src.crm.deals.store import DealStore

    store = DealStore(build_seed_deals(), latency_scale=0)
    controller = DealListController(store)
    await controller.load()
    await controller.set_filter(filter_value)
    if query:
        await controller.search(query)

    stats = controller.stats
    print("Pipeline summary:")
    print(f"  Deals:         {stats.total_deals}")
    print(f"  Total value:   ${stats.total_value:,.0f}")
    print(f"  Average value: ${round(stats.average_value):,}")
    print()

    print("Filters:")
    for tab in controller.tabs():
        marker = "*" if tab.value == filter_value else " "
        print(f" {marker} {tab.label:<20} {tab.count}")
    print()

    if not controller.visible:
        empty = controller.empty_state()
        print(empty.title)
        print(f"  {empty.description}")
        return

    print(f"Deals ({len(controller.visible)}):")
    for deal in controller.visible:
        close = deal.expected_close_date.isoformat() if deal.expected_close_date else "Not set"
        print(
            f"  #{deal.id:<3} {deal.name:<32} ${deal.amount:>11,.0f}  "
            f"{deal.status.value:<12} {deal.priority.value:<7} close: {close}"
        )


def main() -> None:
    parser = argparse.ArgumentParser(description="Print a deal pipeline report")
    parser.add_argument(
        "--filter",
        default="all",
        help="all, a status, a priority, high-value or closing-soon",
    )
    parser.add_argument("--query", default="", help="Free-text search")
    args = parser.parse_args()

    from src.crm.core.errors import RecordValidationError

    try:
        asyncio.run(report(args.filter, args.query))
    except RecordValidationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
