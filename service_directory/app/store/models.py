"""
Query and result shapes exchanged with the backing store.
"""

from typing import Any, Dict, List, Protocol

from pydantic import BaseModel, ConfigDict, Field

from ..models import Category


class QueryFilter(BaseModel):
    """Equality filter applied by the store. Empty means the whole category."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    equals: Dict[str, str] = Field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.equals

    def matches(self, record: Dict[str, Any]) -> bool:
        return all(
            field in record and str(record[field]) == value
            for field, value in self.equals.items()
        )


class StoreQuery(BaseModel):
    """A bulk query for one category."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    category: Category
    where: QueryFilter = Field(default_factory=QueryFilter)


class StoreItem(BaseModel):
    """One stored record; the payload is opaque to the store."""
    data: Dict[str, Any]


class StoreResult(BaseModel):
    """Response to a StoreQuery."""
    items: List[StoreItem] = Field(default_factory=list)


class StoreClient(Protocol):
    """Anything that can answer StoreQuery requests."""

    async def query(self, query: StoreQuery) -> StoreResult:
        ...

    async def close(self) -> None:
        ...
