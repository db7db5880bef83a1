"""Client-side filter state for the list views and the calendar."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from .core.models import Department, Employee, LeaveRequest


class ViewMode(str, Enum):
    GRID = "grid"
    TABLE = "table"


def _contains(needle: str, *haystack: Optional[str]) -> bool:
    return any(needle in (value or "").lower() for value in haystack)


@dataclass
class EmployeeFilters:
    """Free text + department + role, applied together."""

    query: str = ""
    department: str = ""
    role: str = ""

    @property
    def active(self) -> bool:
        return bool(self.query.strip() or self.department or self.role)

    def clear(self) -> None:
        self.query = ""
        self.department = ""
        self.role = ""

    def matches(self, employee: Employee) -> bool:
        needle = self.query.strip().lower()
        if needle and not _contains(
            needle,
            employee.first_name,
            employee.last_name,
            employee.email,
            employee.role,
            employee.department,
        ):
            return False
        if self.department and employee.department != self.department:
            return False
        if self.role and employee.role != self.role:
            return False
        return True

    def apply(self, employees: Iterable[Employee]) -> List[Employee]:
        return [e for e in employees if self.matches(e)]


@dataclass
class DepartmentFilters:
    query: str = ""

    @property
    def active(self) -> bool:
        return bool(self.query.strip())

    def clear(self) -> None:
        self.query = ""

    def apply(self, departments: Iterable[Department]) -> List[Department]:
        needle = self.query.strip().lower()
        return [d for d in departments if not needle or _contains(needle, d.name, d.description)]


@dataclass
class LeaveFilters:
    employee_id: Optional[int] = None
    status: str = ""

    @property
    def active(self) -> bool:
        return self.employee_id is not None or bool(self.status)

    def clear(self) -> None:
        self.employee_id = None
        self.status = ""

    def matches(self, leave: LeaveRequest) -> bool:
        if self.employee_id is not None and leave.employee_id != int(self.employee_id):
            return False
        if self.status and leave.status != self.status:
            return False
        return True

    def apply(self, leaves: Iterable[LeaveRequest]) -> List[LeaveRequest]:
        return [lv for lv in leaves if self.matches(lv)]
