"""Headline numbers for the dashboard page."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

from .core.models import Department, Employee, EmployeeStatus


@dataclass
class DashboardSummary:
    total_employees: int = 0
    total_departments: int = 0
    active_employees: int = 0
    new_this_month: int = 0
    recent_hires: List[Employee] = field(default_factory=list)


def summarize(
    employees: Iterable[Employee],
    departments: Iterable[Department],
    today: Optional[date] = None,
    recent_limit: int = 5,
) -> DashboardSummary:
    today = today or date.today()
    employees = list(employees)
    dated = [e for e in employees if e.start_date is not None]
    return DashboardSummary(
        total_employees=len(employees),
        total_departments=len(list(departments)),
        active_employees=sum(1 for e in employees if e.status == EmployeeStatus.ACTIVE.value),
        new_this_month=sum(
            1 for e in dated if e.start_date.year == today.year and e.start_date.month == today.month
        ),
        recent_hires=sorted(dated, key=lambda e: e.start_date, reverse=True)[:recent_limit],
    )


def employees_by_department(employees: Iterable[Employee]) -> Dict[str, List[Employee]]:
    """Group employees under their department name (unassigned ones under "")."""
    groups: Dict[str, List[Employee]] = {}
    for employee in employees:
        groups.setdefault(employee.department or "", []).append(employee)
    return groups
