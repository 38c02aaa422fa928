"""
Employee directory: joins fresh employee lists with cached reference names.
"""

import asyncio
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from shared.logging import get_logger
from shared.errors import StoreError, UnimplementedError, ValidationError
from ..models import (
    Category,
    Employee,
    EmployeeWithCity,
    EmployeeWithPositionAndDivision,
)
from ..refs.cache import ReferenceCache
from ..refs.fetcher import CategoryFetcher


class EmployeeDirectory:
    """Read operations over employees with resolved reference names.

    Employees are fetched on every call; reference mappings come from the
    shared ReferenceCache. A foreign key missing from its mapping renders as
    an empty string. Output order always matches the store's employee order.
    """

    def __init__(self, fetcher: CategoryFetcher, refs: ReferenceCache):
        self.fetcher = fetcher
        self.refs = refs
        self.logger = get_logger("directory.employees")

    async def list_employees_with_city_name(self) -> List[EmployeeWithCity]:
        """Employees with their city name."""
        records, cities = await asyncio.gather(
            self.fetcher.fetch_all(Category.EMPLOYEE),
            self.refs.city_map(),
        )
        employees = self._parse_employees(records)

        return [
            EmployeeWithCity(
                name=employee.name,
                city=_lookup(cities, employee.city_id),
            )
            for employee in employees
        ]

    async def list_employees_with_position_and_division(self) -> List[EmployeeWithPositionAndDivision]:
        """Employees with their position and division names."""
        records, positions, divisions = await asyncio.gather(
            self.fetcher.fetch_all(Category.EMPLOYEE),
            self.refs.position_map(),
            self.refs.division_map(),
        )
        employees = self._parse_employees(records)

        return [
            EmployeeWithPositionAndDivision(
                name=employee.name,
                position=_lookup(positions, employee.position_id),
                division=_lookup(divisions, employee.division_id),
            )
            for employee in employees
        ]

    async def update(self, entity: str, data: Dict[str, Any]) -> None:
        """Write path. Not implemented; always raises UnimplementedError."""
        try:
            category = Category(entity)
        except ValueError:
            raise ValidationError(
                f"Unknown entity: {entity}",
                {"allowed": [c.value for c in Category]}
            )

        self.logger.warning("Update requested but write path is not implemented", entity=category.value)
        raise UnimplementedError("update", {"entity": category.value, "fields": sorted(data)})

    def _parse_employees(self, records: List[Dict[str, Any]]) -> List[Employee]:
        try:
            return [Employee.model_validate(record) for record in records]
        except PydanticValidationError as exc:
            raise StoreError(
                Category.EMPLOYEE.value,
                "Malformed record",
                {"errors": exc.errors(include_url=False)}
            )


def _lookup(mapping, key) -> str:
    if key is None:
        return ""
    return mapping.get(key, "")
