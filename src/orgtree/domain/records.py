"""Record models for designations, departments, and staff.

Records mirror the resource API payloads: the wire uses camelCase keys and
Mongo-style ``_id`` identifiers, Python code uses snake_case attributes.
Validation happens once, where a store hands records to the core.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Entity(StrEnum):
    """Resource collections exposed by the store."""

    DESIGNATION = "designation"
    DEPARTMENT = "department"
    EMPLOYEE = "employee"


def _optional_ref(value: Any) -> Any:
    """Collapse blank strings to None and stringify numeric ids."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if isinstance(value, int):
        return str(value)
    return value


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict[str, Any]:
        """Serialize with wire aliases, dropping unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


# --- Designations ---


class DesignationInput(_Record):
    """Fields accepted when creating a designation."""

    title: str
    level: int = 1
    reports_to: str | None = Field(default=None, alias="reportsTo")
    department_id: str | None = Field(default=None, alias="departmentId")
    department_name: str | None = Field(default=None, alias="departmentName")
    organization_id: str | None = Field(default=None, alias="organizationId")

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "title must not be blank"
            raise ValueError(msg)
        return value

    @field_validator("reports_to", "department_id", "department_name", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        return _optional_ref(value)


class Designation(DesignationInput):
    """A ranked role definition. Level 1 is the most senior."""

    id: str = Field(alias="_id")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


# --- Departments ---


class DepartmentInput(_Record):
    """Fields accepted when creating a department."""

    name: str = ""
    organization_id: str | None = Field(default=None, alias="organizationId")
    designations: list[str] = Field(default_factory=list)

    @field_validator("designations", mode="before")
    @classmethod
    def _whitelist(cls, value: Any) -> Any:
        if value is None:
            return []
        return [str(v).strip() for v in value if v is not None and str(v).strip()]


class Department(DepartmentInput):
    """A department and its whitelist of sanctioned designation titles."""

    id: str = Field(alias="_id")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


# --- Staff ---


class StaffInput(_Record):
    """Fields accepted when creating a staff record."""

    name: str = Field(alias="employeeName")
    designation: str = ""
    reports_to: str | None = Field(default=None, alias="reportsTo")
    department_id: str | None = Field(default=None, alias="departmentId")
    department_name: str | None = Field(default=None, alias="department")
    added_by_department_id: str | None = Field(default=None, alias="addedByDepartmentId")
    organization_id: str | None = Field(default=None, alias="organizationId")
    email: str | None = None
    status: str = "Active"

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "name must not be blank"
            raise ValueError(msg)
        return value

    @field_validator("reports_to", mode="before")
    @classmethod
    def _manager_ref(cls, value: Any) -> Any:
        # Populated responses embed the manager document instead of its id.
        if isinstance(value, dict):
            value = value.get("_id", value.get("id"))
        return _optional_ref(value)

    @field_validator(
        "department_id", "department_name", "added_by_department_id", "email", mode="before"
    )
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        return _optional_ref(value)


class Staff(StaffInput):
    """A person record. ``designation`` binds to a Designation by title."""

    id: str = Field(alias="_id")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


RECORD_TYPES: dict[Entity, type[_Record]] = {
    Entity.DESIGNATION: Designation,
    Entity.DEPARTMENT: Department,
    Entity.EMPLOYEE: Staff,
}
