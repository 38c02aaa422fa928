"""
Data models for the Directory Service.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Category(str, Enum):
    """Record kinds held by the backing store."""
    EMPLOYEE = "employee"
    CITY = "city"
    POSITION = "position"
    DIVISION = "division"


REFERENCE_CATEGORIES = (Category.CITY, Category.POSITION, Category.DIVISION)


class Employee(BaseModel):
    """Employee record with foreign keys into the reference categories.

    Ids are compared against reference mapping keys, which are always
    strings, so scalar ids are coerced to str on the way in.
    """
    model_config = ConfigDict(extra="ignore")

    name: str
    id: Optional[str] = None
    last_name: Optional[str] = None
    city_id: Optional[str] = None
    position_id: Optional[str] = None
    division_id: Optional[str] = None

    @field_validator("id", "city_id", "position_id", "division_id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)


class EmployeeWithCity(BaseModel):
    """Employee display row with the resolved city name."""
    name: str = Field(..., description="Employee display name")
    city: str = Field("", description="City name, empty when unresolved")


class EmployeeWithPositionAndDivision(BaseModel):
    """Employee display row with resolved position and division names."""
    name: str = Field(..., description="Employee display name")
    position: str = Field("", description="Position name, empty when unresolved")
    division: str = Field("", description="Division name, empty when unresolved")


class UpdateRequest(BaseModel):
    """Request model for the write path."""
    entity: str = Field(..., description="Record kind to update")
    data: Dict[str, Any] = Field(default_factory=dict, description="Fields to write")
