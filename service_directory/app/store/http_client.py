"""
HTTP store client for the Directory Service.
"""

from typing import Optional

import httpx

from shared.logging import get_logger
from shared.errors import StoreError
from .models import StoreQuery, StoreResult


class HttpStoreClient:
    """Client for a record store exposing `POST /query`.

    Request body: ``{"type": <category>, "where": {...}}``.
    Response body: ``{"items": [{"data": {...}}, ...]}``.

    Failures surface as StoreError; retry policy belongs to the caller.
    """

    def __init__(
        self,
        store_url: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = store_url.rstrip('/')
        self.logger = get_logger("directory.store.http")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def query(self, query: StoreQuery) -> StoreResult:
        """Execute one bulk query against the store."""
        category = query.category.value
        url = f"{self.base_url}/query"
        payload = {
            "type": category,
            "where": query.where.model_dump(exclude_defaults=True),
        }

        try:
            response = await self._client.post(url, json=payload)
        except httpx.HTTPError as exc:
            self.logger.error("Store request failed", url=url, category=category, error=str(exc))
            raise StoreError(category, str(exc) or type(exc).__name__, {"url": url})

        if response.status_code != 200:
            self.logger.error(
                "Store query returned unexpected status",
                url=url,
                category=category,
                status_code=response.status_code,
                response=response.text
            )
            raise StoreError(
                category,
                f"Unexpected status {response.status_code}",
                {"status_code": response.status_code, "body": response.text}
            )

        try:
            result = StoreResult.model_validate(response.json())
        except ValueError as exc:
            self.logger.error("Malformed store response", url=url, category=category, error=str(exc))
            raise StoreError(category, "Malformed response", {"error": str(exc)})

        self.logger.debug("Store query completed", url=url, category=category, count=len(result.items))
        return result

    async def close(self) -> None:
        await self._client.aclose()
