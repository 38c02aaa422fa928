"""
In-memory store backend with seeded sample tables.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Mapping, Optional

from shared.logging import get_logger
from ..models import Category
from .models import StoreItem, StoreQuery, StoreResult


class InMemoryStore:
    """In-process store answering queries from plain record tables."""

    def __init__(
        self,
        tables: Optional[Mapping[Any, Iterable[Dict[str, Any]]]] = None,
        latency_seconds: float = 0.0,
    ):
        self.logger = get_logger("directory.store.memory")
        self.latency_seconds = latency_seconds
        self.tables: Dict[Category, List[Dict[str, Any]]] = {
            Category(category): [dict(record) for record in records]
            for category, records in (tables or {}).items()
        }

    @classmethod
    def with_sample_data(cls, latency_seconds: float = 0.0) -> "InMemoryStore":
        """Create a store seeded with a small sample organisation."""
        return cls(_sample_tables(), latency_seconds=latency_seconds)

    async def query(self, query: StoreQuery) -> StoreResult:
        """Return every record of the category that passes the filter."""
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)

        rows = self.tables.get(query.category, [])
        items = [
            StoreItem(data=dict(row))
            for row in rows
            if query.where.matches(row)
        ]

        self.logger.debug(
            "In-memory query served",
            category=query.category.value,
            filtered=not query.where.is_empty(),
            count=len(items)
        )
        return StoreResult(items=items)

    async def close(self) -> None:
        return None


def _sample_tables() -> Dict[Category, List[Dict[str, Any]]]:
    cities = [
        {"id": "city-nyc", "name": "New York"},
        {"id": "city-sfo", "name": "San Francisco"},
        {"id": "city-ber", "name": "Berlin"},
    ]
    positions = [
        {"id": "pos-eng", "name": "Engineer"},
        {"id": "pos-mgr", "name": "Manager"},
        {"id": "pos-ana", "name": "Analyst"},
    ]
    divisions = [
        {"id": "div-platform", "name": "Platform", "city_id": "city-nyc"},
        {"id": "div-sales", "name": "Sales", "city_id": "city-sfo"},
        {"id": "div-research", "name": "Research", "city_id": "city-ber"},
    ]
    employees = [
        {
            "id": "emp-001",
            "name": "Ann",
            "last_name": "Lee",
            "city_id": "city-nyc",
            "position_id": "pos-eng",
            "division_id": "div-platform",
        },
        {
            "id": "emp-002",
            "name": "Bo",
            "last_name": "Park",
            "city_id": "city-sfo",
            "position_id": "pos-mgr",
            "division_id": "div-sales",
        },
        {
            "id": "emp-003",
            "name": "Clara",
            "last_name": "Voss",
            "city_id": "city-ber",
            "position_id": "pos-ana",
            "division_id": "div-research",
        },
    ]
    return {
        Category.CITY: cities,
        Category.POSITION: positions,
        Category.DIVISION: divisions,
        Category.EMPLOYEE: employees,
    }
