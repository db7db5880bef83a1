"""Mock backend: CRUD contract, id assignment and the entity queries."""
from datetime import date

import pytest

from teamhub.core.errors import NotFoundError
from teamhub.core.models import Employee
from teamhub.services.employees_service import EMPLOYEE_SCHEMA, EmployeeService
from teamhub.services.record_store import MockRecordStore


NEW_EMPLOYEE = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@teamhub.io",
    "role": "Developer",
    "department": "Engineering",
    "startDate": "2024-01-15",
}


@pytest.mark.asyncio
async def test_get_all_returns_seeded_fixture(employee_service: EmployeeService) -> None:
    employees = await employee_service.get_all()

    assert len(employees) == 8
    assert all(isinstance(e, Employee) for e in employees)
    assert employees[1].full_name == "Michael Chen"
    assert employees[1].start_date == date(2020, 7, 1)


@pytest.mark.asyncio
async def test_repeated_reads_are_equal(employee_service: EmployeeService) -> None:
    assert await employee_service.get_all() == await employee_service.get_all()


@pytest.mark.asyncio
async def test_create_assigns_next_id_and_grows_list_by_one(employee_service: EmployeeService) -> None:
    before = await employee_service.get_all()
    created = await employee_service.create(NEW_EMPLOYEE)
    after = await employee_service.get_all()

    assert len(after) == len(before) + 1
    assert created.id == max(e.id for e in before) + 1
    assert created in after
    assert created.first_name == "Ada"
    assert created.email == "ada@teamhub.io"
    assert created.start_date == date(2024, 1, 15)
    assert created.status == "Active"


@pytest.mark.asyncio
async def test_create_on_empty_store_starts_at_one() -> None:
    store = MockRecordStore(EMPLOYEE_SCHEMA, seed=[], latency=(0, 0))
    created = await store.create(NEW_EMPLOYEE)
    assert created.id == 1


@pytest.mark.asyncio
async def test_update_merges_changes(employee_service: EmployeeService) -> None:
    updated = await employee_service.update("2", {"role": "Manager", "location": "Remote"})

    assert updated.id == 2
    assert updated.role == "Manager"
    assert updated.location == "Remote"
    assert updated.first_name == "Michael"
    assert (await employee_service.get_by_id(2)).role == "Manager"


@pytest.mark.asyncio
async def test_update_missing_id_raises_not_found(employee_service: EmployeeService) -> None:
    with pytest.raises(NotFoundError, match="Employee not found"):
        await employee_service.update(999, {"role": "HR"})


@pytest.mark.asyncio
async def test_delete_removes_exactly_one(employee_service: EmployeeService) -> None:
    assert await employee_service.delete(3) is True

    remaining = await employee_service.get_all()
    assert len(remaining) == 7
    assert await employee_service.get_by_id(3) is None


@pytest.mark.asyncio
async def test_delete_missing_id_raises_not_found(employee_service: EmployeeService) -> None:
    with pytest.raises(NotFoundError):
        await employee_service.delete(42)
    assert len(await employee_service.get_all()) == 8


@pytest.mark.asyncio
async def test_returned_records_are_copies(employee_service: EmployeeService) -> None:
    first = await employee_service.get_by_id(1)
    first.first_name = "Changed"
    assert (await employee_service.get_by_id(1)).first_name == "Sarah"


@pytest.mark.asyncio
async def test_search_is_case_insensitive_across_fields(employee_service: EmployeeService) -> None:
    by_name = await employee_service.search("chen")
    by_department = await employee_service.search("ENGINEERING")

    assert [e.id for e in by_name] == [2]
    assert sorted(e.id for e in by_department) == [1, 2, 7, 8]
    assert len(await employee_service.search("")) == 8


@pytest.mark.asyncio
async def test_filter_by_department_and_role(employee_service: EmployeeService) -> None:
    design = await employee_service.filter_by_department("Design")
    analysts = await employee_service.filter_by_role("Analyst")

    assert sorted(e.id for e in design) == [3, 4]
    assert sorted(e.id for e in analysts) == [6, 8]


@pytest.mark.asyncio
async def test_recent_orders_by_start_date_desc(employee_service: EmployeeService) -> None:
    recent = await employee_service.recent()
    assert [e.id for e in recent] == [7, 6, 5, 8, 3]


@pytest.mark.asyncio
async def test_department_blank_manager_and_count(department_service) -> None:
    created = await department_service.create({"name": "Legal", "description": "Contracts", "managerId": ""})

    assert created.id == 5
    assert created.manager_id is None
    assert created.employee_count == 0
    finance = await department_service.get_by_id(4)
    assert finance.manager_id is None
