"""
Reference data package for the Directory Service.

Holds the category fetcher (one store round trip per call) and the
reference cache that memoizes id -> name mappings per category and
coalesces concurrent builds.
"""

from .fetcher import CategoryFetcher
from .cache import ReferenceCache, EntryState, Projection, DEFAULT_PROJECTIONS

__all__ = [
    "CategoryFetcher",
    "ReferenceCache",
    "EntryState",
    "Projection",
    "DEFAULT_PROJECTIONS",
]
