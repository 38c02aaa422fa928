"""
Integration tests for the directory service over HTTP, including concurrent
requests against a cold reference cache.
"""

import asyncio
import json
from collections import Counter

import httpx
import pytest

from service_directory.app.main import DirectoryService
from service_directory.app.models import Category
from service_directory.app.store import HttpStoreClient, InMemoryStore
from shared.config import ServiceConfig


TABLES = {
    "city": [{"id": "c1", "name": "NYC"}],
    "position": [{"id": "p1", "name": "Engineer"}],
    "division": [{"id": "d1", "name": "Platform"}],
    "employee": [
        {"id": "e1", "name": "Ann", "city_id": "c1", "position_id": "p1", "division_id": "d1"},
        {"id": "e2", "name": "Bo", "city_id": "zz", "position_id": "p1", "division_id": "d9"},
    ],
}


class SlowCountingStore(InMemoryStore):
    """In-memory store with latency that counts queries per category."""

    def __init__(self, tables):
        super().__init__(tables, latency_seconds=0.02)
        self.queries = Counter()

    async def query(self, query):
        self.queries[query.category] += 1
        return await super().query(query)


class TestDirectoryFlow:
    """End-to-end directory flows against an in-process ASGI app."""

    @pytest.fixture
    def config(self):
        """Service configuration for tests."""
        return ServiceConfig("directory", 8020)

    @pytest.mark.asyncio
    async def test_concurrent_requests_coalesce_reference_fetch(self, config):
        """Many cold requests produce one city fetch and identical responses."""
        store = SlowCountingStore(TABLES)
        service = DirectoryService(config=config, store=store)
        transport = httpx.ASGITransport(app=service.app)

        async with httpx.AsyncClient(transport=transport, base_url="http://directory") as client:
            responses = await asyncio.gather(
                *(client.get("/employees/cities") for _ in range(8))
            )

        assert all(response.status_code == 200 for response in responses)
        assert all(response.json() == responses[0].json() for response in responses)
        assert responses[0].json() == [
            {"name": "Ann", "city": "NYC"},
            {"name": "Bo", "city": ""},
        ]
        assert store.queries[Category.CITY] == 1
        assert store.queries[Category.EMPLOYEE] == 8

    @pytest.mark.asyncio
    async def test_directory_over_http_store(self, config):
        """The service works end to end against an HTTP record store."""
        store_calls = Counter()

        def store_handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            store_calls[body["type"]] += 1
            items = [{"data": record} for record in TABLES.get(body["type"], [])]
            return httpx.Response(200, json={"items": items})

        store = HttpStoreClient(
            "http://store",
            client=httpx.AsyncClient(transport=httpx.MockTransport(store_handler)),
        )
        service = DirectoryService(config=config, store=store)
        transport = httpx.ASGITransport(app=service.app)

        async with httpx.AsyncClient(transport=transport, base_url="http://directory") as client:
            first = await client.get("/employees/positions")
            second = await client.get("/employees/positions")

        await store.close()

        assert first.json() == second.json() == [
            {"name": "Ann", "position": "Engineer", "division": "Platform"},
            {"name": "Bo", "position": "Engineer", "division": ""},
        ]
        assert store_calls == {"employee": 2, "position": 1, "division": 1}

    @pytest.mark.asyncio
    async def test_store_outage_then_recovery(self, config):
        """A store outage answers 502 and the next request rebuilds the cache."""
        outage = {"active": True}

        def store_handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            if outage["active"] and body["type"] == "city":
                return httpx.Response(503, text="maintenance")
            items = [{"data": record} for record in TABLES.get(body["type"], [])]
            return httpx.Response(200, json={"items": items})

        store = HttpStoreClient(
            "http://store",
            client=httpx.AsyncClient(transport=httpx.MockTransport(store_handler)),
        )
        service = DirectoryService(config=config, store=store)
        transport = httpx.ASGITransport(app=service.app)

        async with httpx.AsyncClient(transport=transport, base_url="http://directory") as client:
            failed = await client.get("/employees/cities")
            outage["active"] = False
            recovered = await client.get("/employees/cities")
            stats = await client.get("/refs/stats")

        await store.close()

        assert failed.status_code == 502
        assert failed.json()["details"]["status_code"] == 503
        assert recovered.status_code == 200
        assert recovered.json()[0] == {"name": "Ann", "city": "NYC"}
        city = stats.json()["categories"]["city"]
        assert city["failures"] == 1
        assert city["misses"] == 2
        assert city["state"] == "ready"
