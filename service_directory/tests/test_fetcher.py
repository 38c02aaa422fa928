"""
Unit tests for the Directory category fetcher.
"""

from unittest.mock import AsyncMock

import pytest

from service_directory.app.models import Category
from service_directory.app.refs.fetcher import CategoryFetcher
from service_directory.app.store import InMemoryStore, QueryFilter, StoreItem, StoreQuery, StoreResult
from shared.errors import StoreError
from shared.metrics import MetricsCollector


class TestCategoryFetcher:
    """Test cases for CategoryFetcher."""

    @pytest.fixture
    def store(self):
        """Mock store returning two city records."""
        store = AsyncMock()
        store.query.return_value = StoreResult(items=[
            StoreItem(data={"id": "c1", "name": "NYC"}),
            StoreItem(data={"id": "c2", "name": "Berlin"}),
        ])
        return store

    @pytest.fixture
    def fetcher(self, store):
        """Create CategoryFetcher instance."""
        return CategoryFetcher(store)

    @pytest.mark.asyncio
    async def test_fetch_all_returns_payloads_in_order(self, fetcher):
        """Record payloads are unwrapped in store order."""
        records = await fetcher.fetch_all(Category.CITY)

        assert records == [
            {"id": "c1", "name": "NYC"},
            {"id": "c2", "name": "Berlin"},
        ]

    @pytest.mark.asyncio
    async def test_fetch_all_sends_unfiltered_query(self, fetcher, store):
        """The whole category is requested with an empty filter."""
        await fetcher.fetch_all(Category.POSITION)

        query = store.query.await_args.args[0]
        assert query == StoreQuery(category=Category.POSITION)
        assert query.where == QueryFilter()
        assert query.where.is_empty()

    @pytest.mark.asyncio
    async def test_every_call_is_a_round_trip(self, fetcher, store):
        """The fetcher never caches."""
        await fetcher.fetch_all(Category.CITY)
        await fetcher.fetch_all(Category.CITY)

        assert store.query.await_count == 2

    @pytest.mark.asyncio
    async def test_store_error_propagates_unchanged(self, fetcher, store):
        """StoreError raised by the backend reaches the caller as-is."""
        error = StoreError("city", "Unexpected status 500")
        store.query.side_effect = error

        with pytest.raises(StoreError) as exc_info:
            await fetcher.fetch_all(Category.CITY)

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_store_error(self, fetcher, store):
        """Connectivity failures are reported as StoreError."""
        store.query.side_effect = ConnectionError("connection reset")

        with pytest.raises(StoreError) as exc_info:
            await fetcher.fetch_all(Category.CITY)

        assert exc_info.value.code == "STORE_ERROR"
        assert exc_info.value.category == "city"
        assert "connection reset" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_non_result_response_is_malformed(self, fetcher, store):
        """Anything other than a StoreResult is rejected."""
        store.query.return_value = {"items": "nope"}

        with pytest.raises(StoreError) as exc_info:
            await fetcher.fetch_all(Category.CITY)

        assert "Malformed response" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_fetch_duration_observed(self):
        """Fetch durations are recorded per category."""
        metrics = MetricsCollector("directory")
        store = InMemoryStore({"city": [{"id": "c1", "name": "NYC"}]})
        fetcher = CategoryFetcher(store, metrics=metrics)

        await fetcher.fetch_all(Category.CITY)

        assert metrics.get_sample_value(
            "store_fetch_duration_seconds_count", category="city"
        ) == 1.0

    @pytest.mark.asyncio
    async def test_failed_fetch_duration_observed(self, store):
        """Failed round trips are timed too."""
        metrics = MetricsCollector("directory")
        store.query.side_effect = ConnectionError("connection reset")
        fetcher = CategoryFetcher(store, metrics=metrics)

        with pytest.raises(StoreError):
            await fetcher.fetch_all(Category.DIVISION)

        assert metrics.get_sample_value(
            "store_fetch_duration_seconds_count", category="division"
        ) == 1.0
