"""
Category fetcher: one full-category round trip to the store per call.
"""

from contextlib import nullcontext
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import DirectoryException, StoreError
from ..models import Category
from ..store.models import StoreClient, StoreQuery, StoreResult

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class CategoryFetcher:
    """Fetch every record of a category from the store.

    No caching and no retries happen here.
    """

    def __init__(self, store: StoreClient, metrics: Optional["MetricsCollector"] = None):
        self.store = store
        self.metrics = metrics
        self.logger = get_logger("directory.refs.fetcher")

    async def fetch_all(self, category: Category) -> List[Dict[str, Any]]:
        """Return the record payloads of `category`, in store order."""
        query = StoreQuery(category=category)
        timer = (
            self.metrics.time_operation("store_fetch_duration_seconds", category=category.value)
            if self.metrics else nullcontext()
        )

        with timer:
            try:
                result = await self.store.query(query)
            except DirectoryException:
                raise
            except Exception as exc:
                self.logger.error("Store query raised", category=category.value, error=str(exc))
                raise StoreError(category.value, str(exc) or type(exc).__name__)

        if not isinstance(result, StoreResult):
            raise StoreError(
                category.value,
                "Malformed response",
                {"type": type(result).__name__}
            )

        records = [item.data for item in result.items]
        self.logger.debug("Fetched category", category=category.value, count=len(records))
        return records
