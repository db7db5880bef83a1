"""
Employee service: CRUD plus the directory reads (search, department/role
filters, most recent hires) against whichever record store is configured.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from ..core.models import Employee
from .base import EntityService
from .query import CONTAINS, EQUAL_TO, Condition, ConditionGroup, Query
from .record_store import EntitySchema


def _employee_name(data: Mapping[str, Any]) -> Optional[str]:
    # a partial write must not clobber the stored full name
    if "first_name" not in data or "last_name" not in data:
        return None
    return f"{data.get('first_name') or ''} {data.get('last_name') or ''}".strip()


EMPLOYEE_SCHEMA: EntitySchema[Employee] = EntitySchema(
    label="Employee",
    table="employee_c",
    model=Employee,
    columns={
        "first_name": "first_name_c",
        "last_name": "last_name_c",
        "email": "email_c",
        "phone": "phone_c",
        "photo": "photo_c",
        "role": "role_c",
        "department": "department_c",
        "start_date": "start_date_c",
        "status": "status_c",
        "manager": "manager_c",
        "location": "location_c",
    },
    fixture="employees.json",
    name_column=_employee_name,
    write_defaults={"status": "Active"},
)

SEARCH_FIELDS = ("first_name", "last_name", "email", "role", "department")


class EmployeeService(EntityService[Employee]):
    async def search(self, text: str) -> List[Employee]:
        """Case-insensitive substring over name, email, role and department."""
        if not text:
            return await self.get_all()
        group = ConditionGroup(
            operator="OR",
            conditions=[Condition(f, CONTAINS, [text]) for f in SEARCH_FIELDS],
        )
        return await self.query(Query(groups=[group]))

    async def filter_by_department(self, department: str) -> List[Employee]:
        if not department:
            return await self.get_all()
        return await self.query(Query(where=[Condition("department", EQUAL_TO, [department])]))

    async def filter_by_role(self, role: str) -> List[Employee]:
        if not role:
            return await self.get_all()
        return await self.query(Query(where=[Condition("role", EQUAL_TO, [role])]))

    async def recent(self, limit: int = 5) -> List[Employee]:
        return await self.query(Query(order_by="start_date", descending=True, limit=limit))
