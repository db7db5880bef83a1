"""
Read-only employee profile: the labelled rows and timeline entries the
detail view shows for one employee.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Tuple

from .core.models import Employee, EmployeeStatus

NOT_FOUND = "Employee not found"

Section = Tuple[str, List[Tuple[str, str]]]


def long_date(value: Optional[date]) -> str:
    # "March 5, 2024"
    if value is None:
        return ""
    return f"{value:%B} {value.day}, {value.year}"


def profile_sections(employee: Employee) -> List[Section]:
    return [
        (
            "Personal Information",
            [
                ("Full Name", employee.full_name),
                ("Email", employee.email),
                ("Phone", employee.phone or "Not provided"),
                ("Location", employee.location or "Not specified"),
            ],
        ),
        (
            "Job Information",
            [
                ("Role", employee.role),
                ("Department", employee.department),
                ("Manager", employee.manager or "Not assigned"),
                ("Start Date", long_date(employee.start_date)),
                ("Status", employee.status),
            ],
        ),
    ]


def timeline(employee: Employee) -> List[Tuple[str, str]]:
    """(headline, detail) pairs, oldest first."""
    entries = [("Joined the team", long_date(employee.start_date))]
    if employee.status == EmployeeStatus.ACTIVE.value:
        entries.append(("Currently active", "Employee is currently active and working"))
    elif employee.status == EmployeeStatus.ON_LEAVE.value:
        entries.append(("Currently on leave", "Employee is temporarily away"))
    return entries
