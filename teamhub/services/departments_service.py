"""Department service (plain CRUD)."""

from __future__ import annotations

from ..core.models import Department
from .base import EntityService
from .record_store import EntitySchema

DEPARTMENT_SCHEMA: EntitySchema[Department] = EntitySchema(
    label="Department",
    table="department_c",
    model=Department,
    columns={
        "name": "Name",
        "manager_id": "manager_id_c",
        "employee_count": "employee_count_c",
        "description": "description_c",
    },
    fixture="departments.json",
    lookup_fields=("manager_id",),
    write_defaults={"employee_count": 0},
)


class DepartmentService(EntityService[Department]):
    pass
