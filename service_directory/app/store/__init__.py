"""
Store package for the Directory Service.

Backends answering bulk `StoreQuery` requests. The directory only ever asks
for whole categories; filtering exists for completeness of the contract.
"""

from shared.config import BaseConfig
from .models import QueryFilter, StoreQuery, StoreItem, StoreResult, StoreClient
from .memory import InMemoryStore
from .http_client import HttpStoreClient


def create_store(config: BaseConfig) -> StoreClient:
    """Build the store backend selected by configuration."""
    if config.store_backend == "http":
        return HttpStoreClient(config.store_url, timeout=config.store_timeout_seconds)
    return InMemoryStore.with_sample_data(latency_seconds=config.store_latency_seconds)


__all__ = [
    "QueryFilter",
    "StoreQuery",
    "StoreItem",
    "StoreResult",
    "StoreClient",
    "InMemoryStore",
    "HttpStoreClient",
    "create_store",
]
