"""Tests for the deal list filters, tab parsing and amount ordering."""

from __future__ import annotations

import pytest

from src.crm.core.errors import RecordValidationError
from src.crm.deals.filters import (
    AllDeals,
    ByAmountThreshold,
    ByCloseDateWindow,
    ByPriority,
    ByStatus,
    apply_filter,
    build_filter_tabs,
    filter_value,
    parse_filter,
    sort_by_amount,
)
from src.crm.deals.schemas import DealPriority, DealStats, DealStatus
from tests.conftest import TODAY, days_from_today, make_deal


class TestParseFilter:
    @pytest.mark.parametrize("value", [None, "", "all"])
    def test_all(self, value):
        assert parse_filter(value) == AllDeals()

    def test_status(self):
        assert parse_filter("closed-won") == ByStatus(status=DealStatus.CLOSED_WON)

    def test_priority(self):
        assert parse_filter("high") == ByPriority(priority=DealPriority.HIGH)

    def test_high_value(self):
        parsed = parse_filter("high-value")
        assert isinstance(parsed, ByAmountThreshold)
        assert parsed.minimum == 50000

    def test_closing_soon(self):
        parsed = parse_filter("closing-soon")
        assert isinstance(parsed, ByCloseDateWindow)
        assert parsed.days == 30

    def test_unknown_value_rejected(self):
        with pytest.raises(RecordValidationError) as exc_info:
            parse_filter("urgent")
        assert "filter" in exc_info.value.errors

    @pytest.mark.parametrize(
        "value", ["all", "qualified", "negotiation", "low", "high", "high-value", "closing-soon"]
    )
    def test_filter_value_inverts_parse(self, value):
        assert filter_value(parse_filter(value)) == value


class TestApplyFilter:
    def test_amount_threshold_is_inclusive(self):
        deals = [
            make_deal(1, amount=49999.99),
            make_deal(2, amount=50000),
            make_deal(3, amount=120000),
        ]
        kept = apply_filter(deals, ByAmountThreshold(), TODAY)
        assert [d.id for d in kept] == [2, 3]

    def test_close_window_has_no_lower_bound(self):
        """Overdue deals still count as closing soon; undated deals never do."""
        deals = [
            make_deal(1, expected_close_date=days_from_today(-20)),
            make_deal(2, expected_close_date=days_from_today(0)),
            make_deal(3, expected_close_date=days_from_today(30)),
            make_deal(4, expected_close_date=days_from_today(31)),
            make_deal(5, expected_close_date=None),
        ]
        kept = apply_filter(deals, ByCloseDateWindow(), TODAY)
        assert [d.id for d in kept] == [1, 2, 3]

    def test_status_and_priority(self, three_deals):
        by_status = apply_filter(three_deals, ByStatus(status=DealStatus.PROPOSAL), TODAY)
        by_priority = apply_filter(three_deals, ByPriority(priority=DealPriority.HIGH), TODAY)

        assert [d.id for d in by_status] == [1]
        assert [d.id for d in by_priority] == [2]

    def test_all_keeps_input_order(self, three_deals):
        assert [d.id for d in apply_filter(three_deals, AllDeals(), TODAY)] == [1, 2, 3]


class TestSortByAmount:
    def test_descending(self, three_deals):
        assert [d.id for d in sort_by_amount(three_deals)] == [2, 1, 3]

    def test_ties_keep_relative_order(self):
        deals = [
            make_deal(1, amount=500),
            make_deal(2, amount=900),
            make_deal(3, amount=500),
            make_deal(4, amount=500),
        ]
        assert [d.id for d in sort_by_amount(deals)] == [2, 1, 3, 4]


class TestFilterTabs:
    def test_counts(self, three_deals):
        stats = DealStats(
            total_deals=3,
            total_value=75000,
            average_value=25000,
            status_counts={"proposal": 1, "negotiation": 1, "qualified": 1},
            priority_counts={"low": 1, "high": 1, "medium": 1},
        )

        tabs = {tab.value: tab for tab in build_filter_tabs(three_deals, stats, TODAY)}

        assert list(tabs) == [
            "all",
            "qualified",
            "proposal",
            "negotiation",
            "high",
            "high-value",
            "closing-soon",
        ]
        assert tabs["all"].count == 3
        assert tabs["qualified"].count == 1
        assert tabs["high"].count == 1
        assert tabs["high-value"].count == 1
        assert tabs["high-value"].label == "High Value ($50K+)"
        # Overdue Support Contract and Website Redesign (+10 days)
        assert tabs["closing-soon"].count == 2

    def test_missing_stats_gives_zero_counts(self):
        tabs = build_filter_tabs([], None, TODAY)
        assert all(tab.count == 0 for tab in tabs)
