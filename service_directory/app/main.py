"""
Directory service for the Employee Directory.
"""

from typing import List, Optional

from fastapi import Body

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.logging import set_operation

from .models import (
    REFERENCE_CATEGORIES,
    EmployeeWithCity,
    EmployeeWithPositionAndDivision,
    UpdateRequest,
)
from .store import StoreClient, create_store
from .refs import CategoryFetcher, ReferenceCache
from .employees import EmployeeDirectory


class DirectoryService(BaseService):
    """Directory service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None, store: Optional[StoreClient] = None):
        super().__init__("directory", 8020, config=config)

        # Initialize components; one reference cache per service instance
        self.store = store if store is not None else create_store(self.config)
        self.fetcher = CategoryFetcher(self.store, metrics=self.metrics)
        self.refs = ReferenceCache(self.fetcher, metrics=self.metrics)
        self.directory = EmployeeDirectory(self.fetcher, self.refs)

        self._setup_directory_routes()

    def _setup_directory_routes(self):
        """Set up directory-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "directory",
                "message": "Employee Directory - Directory Service",
                "version": "1.0.0",
                "capabilities": ["employee_listing", "reference_cache"]
            }

        @self.app.get("/employees/cities", response_model=List[EmployeeWithCity])
        async def employees_with_city():
            """List employees with their city name."""
            set_operation("list_employees_with_city_name")
            return await self.directory.list_employees_with_city_name()

        @self.app.get("/employees/positions", response_model=List[EmployeeWithPositionAndDivision])
        async def employees_with_position():
            """List employees with their position and division names."""
            set_operation("list_employees_with_position_and_division")
            return await self.directory.list_employees_with_position_and_division()

        @self.app.post("/update")
        async def update(request: UpdateRequest = Body(...)):
            """Write path; answers 501 until implemented."""
            set_operation("update")
            await self.directory.update(request.entity, request.data)

        @self.app.get("/refs/stats")
        async def reference_stats():
            """Reference cache state and counters."""
            return self.refs.get_stats()

    async def _check_dependencies(self):
        """Report reference cache state per category."""
        return {
            category.value: self.refs.state(category).value
            for category in REFERENCE_CATEGORIES
        }

    async def start(self):
        """Start directory service components."""
        if self.config.warm_reference_cache:
            await self.refs.warm()

        self.logger.info(
            "Directory service started",
            store_backend=self.config.store_backend,
            warm=self.config.warm_reference_cache
        )

    async def stop(self):
        """Stop directory service components."""
        await self.store.close()
        self.logger.info("Directory service stopped")


def create_app():
    """Create directory service application."""
    service = DirectoryService()
    return service.app


if __name__ == "__main__":
    service = DirectoryService()
    service.run()
