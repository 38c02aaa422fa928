"""
Reference cache: per-category id -> display name mappings with request
coalescing.

Each reference category moves through three states:

    absent --(first resolve)--> building --(fetch ok)--> ready
                                building --(fetch failed)--> absent

While a category is building, every resolve() call awaits the same build
task, so N concurrent callers cost one store round trip. A ready mapping
is kept for the lifetime of the cache instance; there is no expiry and no
per-entry invalidation. Failures are never cached.

All state changes happen between awaits on the event loop thread, which
makes the check-and-register step atomic without a lock.

Builds have no timeout: a store call that never returns blocks every
waiter of that category.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import StoreError, ValidationError
from ..models import Category
from .fetcher import CategoryFetcher

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


ResolvedMapping = Mapping[str, str]


class EntryState(str, Enum):
    """Lifecycle state of one category's cache entry."""
    ABSENT = "absent"
    BUILDING = "building"
    READY = "ready"


@dataclass(frozen=True)
class Projection:
    """Which record fields become the mapping key and value."""
    key_field: str
    value_field: str

    def project(self, category: Category, records: Iterable[Dict[str, Any]]) -> ResolvedMapping:
        mapping: Dict[str, str] = {}
        for index, record in enumerate(records):
            try:
                key = record[self.key_field]
                value = record[self.value_field]
            except (KeyError, TypeError):
                key = None
            if key is None:
                raise StoreError(
                    category.value,
                    "Malformed record",
                    {"index": index, "expected": [self.key_field, self.value_field]}
                )
            mapping[str(key)] = "" if value is None else str(value)
        return MappingProxyType(mapping)


DEFAULT_PROJECTIONS: Dict[Category, Projection] = {
    Category.CITY: Projection("id", "name"),
    Category.POSITION: Projection("id", "name"),
    Category.DIVISION: Projection("id", "name"),
}


class ReferenceCache:
    """Memoized, coalescing resolver for reference categories."""

    def __init__(
        self,
        fetcher: CategoryFetcher,
        projections: Optional[Mapping[Category, Projection]] = None,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.fetcher = fetcher
        self.projections: Dict[Category, Projection] = dict(projections or DEFAULT_PROJECTIONS)
        self.metrics = metrics
        self.logger = get_logger("directory.refs.cache")

        self._ready: Dict[Category, ResolvedMapping] = {}
        self._building: Dict[Category, "asyncio.Task[ResolvedMapping]"] = {}
        self._counters: Dict[Category, Dict[str, int]] = {
            category: {"hits": 0, "misses": 0, "coalesced": 0, "failures": 0}
            for category in self.projections
        }

    async def resolve(self, category: Union[Category, str]) -> ResolvedMapping:
        """Return the id -> name mapping for a reference category."""
        category = self._reference_category(category)

        ready = self._ready.get(category)
        if ready is not None:
            self._record_request(category, "hit")
            return ready

        build = self._building.get(category)
        if build is None:
            self._record_request(category, "miss")
            build = asyncio.ensure_future(self._build(category))
            self._building[category] = build
            self.logger.debug("Reference build started", category=category.value)
        else:
            self._record_request(category, "coalesced")

        # A cancelled caller must not cancel the build other callers share
        return await asyncio.shield(build)

    async def city_map(self) -> ResolvedMapping:
        return await self.resolve(Category.CITY)

    async def position_map(self) -> ResolvedMapping:
        return await self.resolve(Category.POSITION)

    async def division_map(self) -> ResolvedMapping:
        return await self.resolve(Category.DIVISION)

    def state(self, category: Union[Category, str]) -> EntryState:
        """Current state of a category's entry."""
        category = self._reference_category(category)
        if category in self._ready:
            return EntryState.READY
        if category in self._building:
            return EntryState.BUILDING
        return EntryState.ABSENT

    async def warm(self, categories: Optional[Iterable[Union[Category, str]]] = None) -> Dict[str, str]:
        """
        Resolve several categories concurrently ahead of traffic.

        Returns a per-category summary of "ready" or "error: <message>".
        Failures are reported, never raised, and leave the entry absent.
        """
        targets: List[Category] = [
            self._reference_category(category)
            for category in (categories if categories is not None else self.projections)
        ]
        outcomes = await asyncio.gather(
            *(self.resolve(category) for category in targets),
            return_exceptions=True
        )

        summary: Dict[str, str] = {}
        for category, outcome in zip(targets, outcomes):
            if isinstance(outcome, BaseException):
                summary[category.value] = f"error: {outcome}"
                self.logger.warning(
                    "Reference warm failed",
                    category=category.value,
                    error=str(outcome)
                )
            else:
                summary[category.value] = "ready"

        self.logger.info("Reference cache warm completed", summary=summary)
        return summary

    def get_stats(self) -> Dict[str, Any]:
        """Per-category state, mapping size and request counters."""
        categories = {}
        for category in self.projections:
            ready = self._ready.get(category)
            categories[category.value] = {
                "state": self.state(category).value,
                "size": len(ready) if ready is not None else 0,
                **self._counters[category],
            }
        return {"categories": categories}

    async def _build(self, category: Category) -> ResolvedMapping:
        projection = self.projections[category]
        try:
            records = await self.fetcher.fetch_all(category)
            mapping = projection.project(category, records)
        except Exception as exc:
            self._building.pop(category, None)
            self._counters[category]["failures"] += 1
            self._record_build(category, "error")
            self.logger.error(
                "Reference build failed",
                category=category.value,
                error=str(exc)
            )
            raise

        # Publish and release the build slot in one step
        self._ready[category] = mapping
        self._building.pop(category, None)
        self._record_build(category, "success")
        self.logger.info(
            "Reference mapping published",
            category=category.value,
            size=len(mapping)
        )
        return mapping

    def _reference_category(self, category: Union[Category, str]) -> Category:
        try:
            category = Category(category)
        except ValueError:
            raise ValidationError(
                f"Unknown category: {category}",
                {"allowed": [c.value for c in self.projections]}
            )

        if category not in self.projections:
            raise ValidationError(
                f"Not a reference category: {category.value}",
                {"allowed": [c.value for c in self.projections]}
            )
        return category

    def _record_request(self, category: Category, outcome: str) -> None:
        key = {"hit": "hits", "miss": "misses", "coalesced": "coalesced"}[outcome]
        self._counters[category][key] += 1
        if self.metrics:
            self.metrics.increment_counter(
                "reference_cache_requests_total",
                category=category.value,
                outcome=outcome
            )

    def _record_build(self, category: Category, result: str) -> None:
        if self.metrics:
            self.metrics.increment_counter(
                "reference_cache_builds_total",
                category=category.value,
                result=result
            )
