"""
Form state for the employee, department and leave dialogs.

A draft is a plain dict keyed by record attribute, seeded from a record in
edit mode or from entity defaults in create mode. Validation runs on submit
only and returns ``{field: message}``; an empty map means the draft is
good. Payload builders turn a valid draft into what the stores accept.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any, Awaitable, Callable, Dict, Optional

from .core.errors import ValidationError
from .core.models import (
    Department,
    Employee,
    EmployeeStatus,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
    parse_date,
)

logger = logging.getLogger(__name__)

Draft = Dict[str, Any]
Errors = Dict[str, str]

EMAIL_RE = re.compile(r"\S+@\S+\.\S+")


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def _date_text(value: Any) -> str:
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else ""


def _to_date(value: Any) -> Optional[date]:
    try:
        return parse_date(value)
    except ValueError:
        return None


def _to_int(value: Any) -> Optional[int]:
    if _blank(value):
        return None
    return int(str(value).strip())


# -----------------------------
# Employee
# -----------------------------


def employee_draft(record: Optional[Employee] = None) -> Draft:
    if record is None:
        return {
            "first_name": "",
            "last_name": "",
            "email": "",
            "phone": "",
            "role": "",
            "department": "",
            "start_date": "",
            "status": EmployeeStatus.ACTIVE.value,
            "manager": "",
            "location": "",
            "photo": "",
        }
    return {
        "first_name": record.first_name,
        "last_name": record.last_name,
        "email": record.email,
        "phone": record.phone,
        "role": record.role,
        "department": record.department,
        "start_date": _date_text(record.start_date),
        "status": record.status or EmployeeStatus.ACTIVE.value,
        "manager": record.manager,
        "location": record.location,
        "photo": record.photo,
    }


def validate_employee(draft: Draft) -> Errors:
    errors: Errors = {}
    if _blank(draft.get("first_name")):
        errors["first_name"] = "First name is required"
    if _blank(draft.get("last_name")):
        errors["last_name"] = "Last name is required"
    email = _text(draft.get("email")).strip()
    if not email:
        errors["email"] = "Email is required"
    elif not EMAIL_RE.search(email):
        errors["email"] = "Email is invalid"
    if _blank(draft.get("role")):
        errors["role"] = "Role is required"
    if _blank(draft.get("department")):
        errors["department"] = "Department is required"
    if _blank(draft.get("start_date")):
        errors["start_date"] = "Start date is required"
    elif _to_date(draft.get("start_date")) is None:
        errors["start_date"] = "Start date is invalid"
    return errors


def employee_payload(draft: Draft) -> Dict[str, Any]:
    payload = {key: _text(draft.get(key)).strip() for key in employee_draft()}
    payload["start_date"] = _to_date(draft.get("start_date"))
    payload["status"] = payload["status"] or EmployeeStatus.ACTIVE.value
    return payload


# -----------------------------
# Department
# -----------------------------


def department_draft(record: Optional[Department] = None) -> Draft:
    if record is None:
        return {"name": "", "description": "", "employee_count": "", "manager_id": ""}
    return {
        "name": record.name,
        "description": record.description,
        "employee_count": str(record.employee_count),
        "manager_id": "" if record.manager_id is None else str(record.manager_id),
    }


def validate_department(draft: Draft) -> Errors:
    errors: Errors = {}
    if _blank(draft.get("name")):
        errors["name"] = "Department name is required"
    if _blank(draft.get("description")):
        errors["description"] = "Description is required"
    count = draft.get("employee_count")
    if not _blank(count):
        try:
            if _to_int(count) < 0:
                errors["employee_count"] = "Employee count must be 0 or more"
        except ValueError:
            errors["employee_count"] = "Employee count must be a whole number"
    manager = draft.get("manager_id")
    if not _blank(manager):
        try:
            _to_int(manager)
        except ValueError:
            errors["manager_id"] = "Manager must be an employee id"
    return errors


def department_payload(draft: Draft) -> Dict[str, Any]:
    return {
        "name": _text(draft.get("name")).strip(),
        "description": _text(draft.get("description")).strip(),
        "employee_count": _to_int(draft.get("employee_count")) or 0,
        "manager_id": _to_int(draft.get("manager_id")),
    }


# -----------------------------
# Leave request
# -----------------------------


def leave_draft(record: Optional[LeaveRequest] = None, selected_date: Optional[date] = None) -> Draft:
    if record is None:
        day = _date_text(selected_date)
        return {
            "employee_id": "",
            "start_date": day,
            "end_date": day,
            "type": LeaveType.VACATION.value,
            "reason": "",
            "status": LeaveStatus.PENDING.value,
        }
    return {
        "employee_id": "" if record.employee_id is None else str(record.employee_id),
        "start_date": _date_text(record.start_date),
        "end_date": _date_text(record.end_date),
        "type": record.type or LeaveType.VACATION.value,
        "reason": record.reason,
        "status": record.status or LeaveStatus.PENDING.value,
    }


def validate_leave(draft: Draft) -> Errors:
    errors: Errors = {}
    if _blank(draft.get("employee_id")):
        errors["employee_id"] = "Employee is required"
    start = end = None
    if _blank(draft.get("start_date")):
        errors["start_date"] = "Start date is required"
    else:
        start = _to_date(draft.get("start_date"))
        if start is None:
            errors["start_date"] = "Start date is invalid"
    if _blank(draft.get("end_date")):
        errors["end_date"] = "End date is required"
    else:
        end = _to_date(draft.get("end_date"))
        if end is None:
            errors["end_date"] = "End date is invalid"
    if start and end and start > end:
        errors["end_date"] = "End date must be after start date"
    return errors


def leave_payload(draft: Draft) -> Dict[str, Any]:
    return {
        "employee_id": _to_int(draft.get("employee_id")),
        "start_date": _to_date(draft.get("start_date")),
        "end_date": _to_date(draft.get("end_date")),
        "type": _text(draft.get("type")) or LeaveType.VACATION.value,
        "reason": _text(draft.get("reason")).strip(),
        "status": _text(draft.get("status")) or LeaveStatus.PENDING.value,
    }


# -----------------------------
# Controller
# -----------------------------


class FormController:
    """
    Draft + error map for one open form.

    ``on_save`` receives the storage-ready payload; it is the caller's job
    to run the store mutation and close the form.
    """

    def __init__(
        self,
        seed: Callable[..., Draft],
        validator: Callable[[Draft], Errors],
        to_payload: Callable[[Draft], Dict[str, Any]],
        on_save: Callable[[Dict[str, Any]], Awaitable[Any]],
    ) -> None:
        self._seed = seed
        self.validator = validator
        self.to_payload = to_payload
        self.on_save = on_save
        self.record = None
        self.draft: Draft = seed()
        self.errors: Errors = {}
        self.saving = False

    @property
    def editing(self) -> bool:
        return self.record is not None

    def open(self, record=None, **seed_kwargs) -> None:
        """Reset draft and errors for ``record`` (edit) or a new record."""
        self.record = record
        self.draft = self._seed(record, **seed_kwargs)
        self.errors = {}

    def set_field(self, name: str, value: Any) -> None:
        self.draft[name] = value
        self.errors.pop(name, None)

    def validate(self) -> bool:
        self.errors = self.validator(self.draft)
        return not self.errors

    async def submit(self) -> Any:
        """
        Validate, then hand the payload to ``on_save``.

        Raises ValidationError (nothing saved) when the draft is invalid.
        A failing save propagates and leaves the draft as typed.
        """
        if not self.validate():
            raise ValidationError(self.errors)
        payload = self.to_payload(self.draft)
        self.saving = True
        try:
            return await self.on_save(payload)
        except Exception:
            logger.exception("Saving form failed")
            raise
        finally:
            self.saving = False


def employee_form(on_save: Callable[[Dict[str, Any]], Awaitable[Any]]) -> FormController:
    return FormController(employee_draft, validate_employee, employee_payload, on_save)


def department_form(on_save: Callable[[Dict[str, Any]], Awaitable[Any]]) -> FormController:
    return FormController(department_draft, validate_department, department_payload, on_save)


def leave_form(on_save: Callable[[Dict[str, Any]], Awaitable[Any]]) -> FormController:
    return FormController(leave_draft, validate_leave, leave_payload, on_save)
