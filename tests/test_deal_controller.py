"""Tests for DealListController -- loading, filtering, search, and local reconciliation."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from src.crm.core.errors import RecordNotFoundError, RecordValidationError
from src.crm.deals.controller import DealListController
from src.crm.deals.filters import AllDeals, ByPriority
from src.crm.deals.schemas import DealCreate, DealPatch, DealPriority
from src.crm.deals.store import DealStore
from tests.conftest import fixed_clock


@pytest.fixture
def controller(store) -> DealListController:
    return DealListController(store, clock=fixed_clock)


@pytest.fixture
async def loaded(controller) -> DealListController:
    await controller.load()
    return controller


# ── Loading ────────────────────────────────────────────────────────────────


class TestLoad:
    async def test_populates_cache_stats_and_sorted_view(self, controller):
        await controller.load()

        assert [d.id for d in controller.deals] == [1, 2, 3]
        assert controller.stats.total_deals == 3
        assert [d.id for d in controller.visible] == [2, 1, 3]
        assert controller.loading is False
        assert controller.error is None

    async def test_failure_sets_error_and_keeps_state(self, store, controller):
        with patch.object(store, "list", new=AsyncMock(side_effect=RuntimeError("backend down"))):
            with pytest.raises(RuntimeError):
                await controller.load()

        assert controller.error == "backend down"
        assert controller.loading is False
        assert controller.deals == []
        assert controller.stats is None

    async def test_reload_clears_previous_error(self, store, controller):
        with patch.object(store, "get_stats", new=AsyncMock(side_effect=RuntimeError("boom"))):
            with pytest.raises(RuntimeError):
                await controller.load()

        await controller.load()
        assert controller.error is None
        assert len(controller.visible) == 3


# ── Filtering ──────────────────────────────────────────────────────────────


class TestSetFilter:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("all", [2, 1, 3]),
            ("proposal", [1]),
            ("high", [2]),
            ("high-value", [2]),
            ("closing-soon", [1, 3]),
            ("closed-won", []),
        ],
    )
    async def test_tab_values(self, loaded, value, expected):
        await loaded.set_filter(value)
        assert [d.id for d in loaded.visible] == expected

    async def test_accepts_filter_model(self, loaded):
        await loaded.set_filter(ByPriority(priority=DealPriority.MEDIUM))
        assert [d.id for d in loaded.visible] == [3]

    async def test_unknown_value_leaves_state_untouched(self, loaded):
        with pytest.raises(RecordValidationError):
            await loaded.set_filter("urgent")

        assert loaded.active_filter == AllDeals()
        assert [d.id for d in loaded.visible] == [2, 1, 3]

    async def test_filter_change_reruns_active_search(self, store, loaded):
        await loaded.search("e")

        with patch.object(store, "search", wraps=store.search) as spy:
            await loaded.set_filter("high")

        spy.assert_called_once_with("e")
        assert [d.id for d in loaded.visible] == [2]


# ── Search ─────────────────────────────────────────────────────────────────


class TestSearch:
    async def test_query_narrows_view(self, loaded):
        await loaded.search("acme")

        assert loaded.query == "acme"
        assert [d.id for d in loaded.visible] == [1]

    async def test_query_combines_with_filter(self, loaded):
        await loaded.set_filter("high")
        await loaded.search("support")

        assert loaded.visible == []
        assert loaded.empty_state().title == "No deals found"

    async def test_blank_query_uses_cache(self, store, loaded):
        with patch.object(store, "search", wraps=store.search) as spy:
            await loaded.search("   ")

        spy.assert_not_called()
        assert len(loaded.visible) == 3

    async def test_search_results_sorted_by_amount(self, loaded):
        await loaded.search("555")
        assert [d.id for d in loaded.visible] == [2, 1, 3]

    async def test_failure_keeps_previous_query(self, store, loaded):
        await loaded.search("acme")

        with patch.object(store, "search", new=AsyncMock(side_effect=RuntimeError("down"))):
            with pytest.raises(RuntimeError):
                await loaded.search("globex")

        assert loaded.query == "acme"
        assert [d.id for d in loaded.visible] == [1]


# ── Mutations ──────────────────────────────────────────────────────────────


class TestMutations:
    async def test_create_prepends_and_refreshes_stats(self, loaded):
        created = await loaded.create(DealCreate(name="Cloud Migration", phone="555-3000", amount=80000))

        assert loaded.deals[0].id == created.id
        assert loaded.stats.total_deals == 4
        assert [d.id for d in loaded.visible][0] == created.id

    async def test_create_without_amount_sorts_last(self, loaded):
        created = await loaded.create(DealCreate(name="Unpriced", phone="555-3003"))

        assert created.amount == 0
        assert loaded.visible[-1].id == created.id

    async def test_create_respects_active_filter(self, loaded):
        await loaded.set_filter("high-value")
        await loaded.create(DealCreate(name="Small", phone="555-3001", amount=100))

        assert [d.id for d in loaded.visible] == [2]
        assert len(loaded.deals) == 4

    async def test_invalid_create_leaves_state_untouched(self, loaded):
        with pytest.raises(RecordValidationError):
            await loaded.create(DealCreate(name="", phone=""))

        assert len(loaded.deals) == 3
        assert loaded.stats.total_deals == 3

    async def test_update_replaces_cached_entry(self, loaded):
        await loaded.set_filter("proposal")
        await loaded.update(3, DealPatch(status="proposal"))

        assert [d.id for d in loaded.deals] == [1, 2, 3]
        assert [d.id for d in loaded.visible] == [1, 3]
        assert loaded.stats.status_counts.get("qualified", 0) == 0

    async def test_update_missing_propagates(self, loaded):
        with pytest.raises(RecordNotFoundError):
            await loaded.update(99, DealPatch(name="Ghost"))
        assert len(loaded.deals) == 3

    async def test_delete_requires_confirmation(self, store, loaded):
        with patch.object(store, "delete", wraps=store.delete) as spy:
            removed = await loaded.delete(1)

        assert removed is False
        spy.assert_not_called()
        assert len(store) == 3
        assert len(loaded.deals) == 3

    async def test_confirmed_delete_removes_from_cache(self, store, loaded):
        removed = await loaded.delete(1, confirmed=True)

        assert removed is True
        assert len(store) == 2
        assert [d.id for d in loaded.deals] == [2, 3]
        assert loaded.stats.total_deals == 2

    async def test_stats_failure_after_create_still_commits_cache(self, store, loaded):
        with patch.object(store, "get_stats", new=AsyncMock(side_effect=RuntimeError("down"))):
            with pytest.raises(RuntimeError):
                await loaded.create(DealCreate(name="Orphan", phone="555-3002", amount=1))

        assert len(store) == 4
        assert len(loaded.deals) == 4
        assert loaded.deals[0].name == "Orphan"
        assert [d.name for d in loaded.visible][-1] == "Orphan"
        assert loaded.stats.total_deals == 3

    async def test_stats_failure_after_delete_drops_deal_from_view(self, store, loaded):
        with patch.object(store, "get_stats", new=AsyncMock(side_effect=RuntimeError("down"))):
            with pytest.raises(RuntimeError):
                await loaded.delete(2, confirmed=True)

        assert [d.id for d in loaded.deals] == [1, 3]
        assert [d.id for d in loaded.visible] == [1, 3]
        assert loaded.stats.total_deals == 3

    async def test_failed_mutation_leaves_cache_untouched(self, loaded):
        with pytest.raises(RecordNotFoundError):
            await loaded.delete(99, confirmed=True)

        assert [d.id for d in loaded.deals] == [1, 2, 3]
        assert [d.id for d in loaded.visible] == [2, 1, 3]


# ── Presentation ───────────────────────────────────────────────────────────


class TestPresentation:
    async def test_empty_store_message(self):
        controller = DealListController(DealStore(latency_scale=0), clock=fixed_clock)
        await controller.load()

        empty = controller.empty_state()
        assert empty.title == "No deals yet"
        assert empty.description == "Start by creating your first deal to track sales opportunities"

    async def test_search_message_quotes_query(self, loaded):
        await loaded.search("zzz")
        assert loaded.empty_state().description == 'No deals match "zzz". Try a different search term.'

    @pytest.mark.parametrize(
        "value,title",
        [
            ("closed-won", "No closed won deals"),
            ("high-value", "No high value deals"),
        ],
    )
    async def test_filter_message(self, value, title):
        controller = DealListController(DealStore(latency_scale=0), clock=fixed_clock)
        await controller.load()
        await controller.set_filter(value)

        assert controller.empty_state().title == title

    async def test_tabs_follow_cache(self, loaded):
        await loaded.delete(2, confirmed=True)
        tabs = {tab.value: tab.count for tab in loaded.tabs()}

        assert tabs["all"] == 2
        assert tabs["high-value"] == 0
        assert tabs["high"] == 0
