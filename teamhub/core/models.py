"""
Record shapes for employees, departments and leave requests.

Attributes are snake_case; aliases are the camelCase keys the UI and the
mock fixtures use (``Id``, ``firstName``, ``startDate`` ...), so
``model_dump(by_alias=True)`` gives back the fixture shape.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    MANAGER = "Manager"
    DEVELOPER = "Developer"
    DESIGNER = "Designer"
    HR = "HR"
    ANALYST = "Analyst"


class EmployeeStatus(str, Enum):
    ACTIVE = "Active"
    ON_LEAVE = "On Leave"
    INACTIVE = "Inactive"


class LeaveType(str, Enum):
    VACATION = "Vacation"
    SICK = "Sick Leave"
    PERSONAL = "Personal Leave"
    MATERNITY = "Maternity Leave"
    PATERNITY = "Paternity Leave"
    EMERGENCY = "Emergency Leave"


class LeaveStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


def enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


def parse_date(value: Any) -> Optional[date]:
    """Accept date, datetime, ISO date or ISO timestamp (``Z`` allowed)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return date.fromisoformat(text)
    except ValueError:
        return datetime.fromisoformat(text).date()


def parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _str_enum(value: Any) -> Any:
    # Enum members are stored by value so records compare equal to plain strings
    return value.value if isinstance(value, Enum) else value


class Record(BaseModel):
    """Common base: numeric, backend-assigned ``Id``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[int] = Field(default=None, alias="Id")

    def to_ui(self) -> dict:
        """UI/fixture shape (camelCase keys, ISO dates)."""
        return self.model_dump(mode="json", by_alias=True)


class Employee(Record):
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    email: str = ""
    phone: str = ""
    photo: str = ""
    role: str = ""
    department: str = ""
    start_date: Optional[date] = Field(default=None, alias="startDate")
    status: str = EmployeeStatus.ACTIVE.value
    manager: str = ""
    location: str = ""

    @field_validator("start_date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        return parse_date(value)

    @field_validator("role", "status", mode="before")
    @classmethod
    def _coerce_enum(cls, value: Any) -> Any:
        return _str_enum(value)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Department(Record):
    name: str = ""
    description: str = ""
    employee_count: int = Field(default=0, alias="employeeCount")
    manager_id: Optional[int] = Field(default=None, alias="managerId")

    @field_validator("manager_id", mode="before")
    @classmethod
    def _blank_manager(cls, value: Any) -> Any:
        if value in ("", 0):
            return None
        return value

    @field_validator("employee_count", mode="before")
    @classmethod
    def _blank_count(cls, value: Any) -> Any:
        return 0 if value in (None, "") else value


class LeaveRequest(Record):
    employee_id: Optional[int] = Field(default=None, alias="employeeId")
    start_date: Optional[date] = Field(default=None, alias="startDate")
    end_date: Optional[date] = Field(default=None, alias="endDate")
    type: str = ""
    status: str = LeaveStatus.PENDING.value
    reason: str = ""
    request_date: Optional[datetime] = Field(default=None, alias="requestDate")
    approved_by: Optional[str] = Field(default=None, alias="approvedBy")
    approved_date: Optional[datetime] = Field(default=None, alias="approvedDate")
    rejection_reason: Optional[str] = Field(default=None, alias="rejectionReason")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        return parse_date(value)

    @field_validator("request_date", "approved_date", mode="before")
    @classmethod
    def _coerce_stamp(cls, value: Any) -> Any:
        return parse_datetime(value)

    @field_validator("type", "status", mode="before")
    @classmethod
    def _coerce_enum(cls, value: Any) -> Any:
        return _str_enum(value)

    def covers(self, day: date) -> bool:
        """Closed-interval containment: start <= day <= end."""
        if self.start_date is None or self.end_date is None:
            return False
        return self.start_date <= day <= self.end_date
