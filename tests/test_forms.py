"""Draft seeding, validation on submit and the form controller."""
from datetime import date
from typing import Any, Dict, List

import pytest

from teamhub.core.errors import StorageError, ValidationError
from teamhub.core.models import Department, Employee, LeaveRequest
from teamhub.forms import (
    department_draft,
    department_form,
    department_payload,
    employee_draft,
    employee_form,
    employee_payload,
    leave_draft,
    leave_form,
    leave_payload,
    validate_department,
    validate_employee,
    validate_leave,
)

VALID_EMPLOYEE = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@teamhub.io",
    "phone": "",
    "role": "Developer",
    "department": "Engineering",
    "start_date": "2024-01-15",
    "status": "Active",
    "manager": "",
    "location": "",
    "photo": "",
}


def test_valid_employee_has_no_errors() -> None:
    assert validate_employee(VALID_EMPLOYEE) == {}


@pytest.mark.parametrize("field", ["first_name", "last_name", "email", "role", "department", "start_date"])
def test_each_missing_required_employee_field_is_reported(field: str) -> None:
    errors = validate_employee({**VALID_EMPLOYEE, field: "  "})
    assert list(errors) == [field]


@pytest.mark.parametrize("email", ["ada", "ada@teamhub", "@.", "ada lovelace@x"])
def test_bad_email_is_rejected(email: str) -> None:
    assert "email" in validate_employee({**VALID_EMPLOYEE, "email": email})


def test_employee_draft_seeds_from_record_or_defaults() -> None:
    blank = employee_draft()
    assert blank["status"] == "Active"
    assert blank["first_name"] == ""

    record = Employee(Id=2, firstName="Michael", lastName="Chen", startDate="2020-07-01", role="Developer")
    seeded = employee_draft(record)
    assert seeded["first_name"] == "Michael"
    assert seeded["start_date"] == "2020-07-01"


def test_employee_payload_converts_dates() -> None:
    payload = employee_payload({**VALID_EMPLOYEE, "first_name": " Ada "})
    assert payload["first_name"] == "Ada"
    assert payload["start_date"] == date(2024, 1, 15)


def test_department_count_range() -> None:
    base = {"name": "Legal", "description": "Contracts", "employee_count": "", "manager_id": ""}
    assert validate_department(base) == {}
    assert "employee_count" in validate_department({**base, "employee_count": "-1"})
    assert "employee_count" in validate_department({**base, "employee_count": "two"})
    assert validate_department({**base, "employee_count": "0"}) == {}
    assert set(validate_department({**base, "name": "", "description": ""})) == {"name", "description"}


def test_department_payload_blank_values() -> None:
    payload = department_payload({"name": "Legal", "description": "Contracts", "employee_count": "", "manager_id": ""})
    assert payload["employee_count"] == 0
    assert payload["manager_id"] is None
    assert department_payload({**payload, "employee_count": "3", "manager_id": "7"})["manager_id"] == 7


def test_department_draft_from_record() -> None:
    draft = department_draft(Department(Id=1, name="Engineering", description="x", employeeCount=4, managerId=1))
    assert draft == {"name": "Engineering", "description": "x", "employee_count": "4", "manager_id": "1"}


def test_leave_end_before_start_is_rejected() -> None:
    draft = {**leave_draft(), "employee_id": "2", "start_date": "2024-03-12", "end_date": "2024-03-10"}
    assert "end_date" in validate_leave(draft)


def test_leave_same_day_is_valid() -> None:
    draft = leave_draft(selected_date=date(2024, 3, 11))
    draft["employee_id"] = "3"
    assert draft["start_date"] == draft["end_date"] == "2024-03-11"
    assert validate_leave(draft) == {}


def test_leave_required_fields() -> None:
    assert set(validate_leave(leave_draft())) == {"employee_id", "start_date", "end_date"}


def test_leave_payload_parses_ids_and_dates() -> None:
    payload = leave_payload({"employee_id": "6", "start_date": "2024-03-11", "end_date": "2024-03-15",
                             "type": "Personal Leave", "reason": " Moving ", "status": "Pending"})
    assert payload["employee_id"] == 6
    assert payload["start_date"] == date(2024, 3, 11)
    assert payload["reason"] == "Moving"


def test_leave_draft_from_record_keeps_status() -> None:
    record = LeaveRequest(Id=5, employeeId=7, startDate="2024-03-25", endDate="2024-03-29",
                          type="Vacation", status="Rejected")
    draft = leave_draft(record)
    assert draft["employee_id"] == "7"
    assert draft["status"] == "Rejected"


# ---- controller ----


class SaveSpy:
    def __init__(self, fail: bool = False) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.fail = fail

    async def __call__(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(payload)
        if self.fail:
            raise StorageError("Email: already taken")
        return payload


@pytest.mark.asyncio
async def test_invalid_submit_never_saves() -> None:
    save = SaveSpy()
    form = employee_form(save)
    form.open()

    with pytest.raises(ValidationError) as info:
        await form.submit()

    assert save.calls == []
    assert "first_name" in info.value.errors
    assert form.errors == info.value.errors


@pytest.mark.asyncio
async def test_leave_range_error_blocks_save() -> None:
    save = SaveSpy()
    form = leave_form(save)
    form.open(selected_date=date(2024, 3, 12))
    form.set_field("employee_id", "2")
    form.set_field("end_date", "2024-03-10")

    with pytest.raises(ValidationError):
        await form.submit()
    assert save.calls == []


@pytest.mark.asyncio
async def test_valid_submit_passes_payload() -> None:
    save = SaveSpy()
    form = employee_form(save)
    form.open()
    for name, value in VALID_EMPLOYEE.items():
        form.set_field(name, value)

    result = await form.submit()

    assert save.calls == [result]
    assert result["start_date"] == date(2024, 1, 15)
    assert form.saving is False


def test_set_field_clears_only_that_error() -> None:
    form = department_form(SaveSpy())
    form.open()
    assert form.validate() is False
    assert {"name", "description"} <= set(form.errors)

    form.set_field("name", "Legal")
    assert "name" not in form.errors
    assert "description" in form.errors


@pytest.mark.asyncio
async def test_failed_save_keeps_draft() -> None:
    save = SaveSpy(fail=True)
    form = employee_form(save)
    form.open(Employee(Id=1, firstName="Sarah", lastName="Johnson", email="sarah@teamhub.io",
                       role="Manager", department="Engineering", startDate="2019-03-15"))
    form.set_field("email", "taken@teamhub.io")

    with pytest.raises(StorageError):
        await form.submit()

    assert form.editing
    assert form.draft["email"] == "taken@teamhub.io"
    assert len(save.calls) == 1


def test_open_resets_draft_and_errors() -> None:
    form = leave_form(SaveSpy())
    form.open()
    form.validate()
    form.set_field("reason", "typed")

    form.open(selected_date=date(2024, 5, 1))

    assert form.errors == {}
    assert form.draft["reason"] == ""
    assert form.draft["start_date"] == "2024-05-01"
    assert not form.editing
