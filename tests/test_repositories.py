"""Repository state: load/error handling, list reconciliation and subscriber notification."""
from typing import List

import pytest

from teamhub.core.errors import NotFoundError, StorageError
from teamhub.repositories import (
    EmployeeRepository,
    Repositories,
    build_repositories,
    get_repositories,
    run_sync,
    set_repositories,
)
from teamhub.services.employees_service import EMPLOYEE_SCHEMA, EmployeeService
from teamhub.services.record_store import MockRecordStore, RemoteRecordStore


class FlakyStore(MockRecordStore):
    """Mock store whose reads fail until ``healthy`` is set."""

    healthy = False

    async def get_all(self):
        if not self.healthy:
            raise StorageError("Record API unavailable")
        return await super().get_all()


@pytest.mark.asyncio
async def test_load_fills_records_and_toggles_loading(repos: Repositories) -> None:
    seen: List[bool] = []
    repos.employees.subscribe(lambda repo: seen.append(repo.loading))

    records = await repos.employees.load()

    assert len(records) == 8
    assert repos.employees.records == records
    assert repos.employees.loading is False
    assert repos.employees.error is None
    assert seen == [True, False]


@pytest.mark.asyncio
async def test_load_failure_keeps_last_known_list() -> None:
    store = FlakyStore(EMPLOYEE_SCHEMA, latency=(0, 0))
    repo = EmployeeRepository(EmployeeService(store), "employees")

    await repo.load()
    assert repo.records == []
    assert repo.error == "Record API unavailable"

    store.healthy = True
    await repo.refetch()
    assert len(repo.records) == 8
    assert repo.error is None

    store.healthy = False
    await repo.refetch()
    assert len(repo.records) == 8
    assert repo.error == "Record API unavailable"
    assert repo.loading is False


@pytest.mark.asyncio
async def test_malformed_remote_row_sets_error(api_client, recorder) -> None:
    recorder.reply({"success": True, "data": [{"Id": 3, "first_name_c": "Bo", "start_date_c": "03/10/2024"}]})
    repo = EmployeeRepository(EmployeeService(RemoteRecordStore(EMPLOYEE_SCHEMA, client=api_client)), "employees")

    assert await repo.load() == []
    assert repo.error.startswith("Malformed employee record 3")
    assert repo.loading is False


@pytest.mark.asyncio
async def test_fetch_reads_one_record_and_refreshes_the_list(repos: Repositories) -> None:
    await repos.employees.load()
    await repos.employees.service.update(4, {"location": "Denver"})
    seen: List[str] = []
    repos.employees.subscribe(lambda repo: seen.append(repo.find(4).location))

    fetched = await repos.employees.fetch("4")

    assert fetched.location == "Denver"
    assert repos.employees.find(4) == fetched
    assert seen == ["Denver"]


@pytest.mark.asyncio
async def test_fetch_unknown_id_is_none(repos: Repositories) -> None:
    await repos.employees.load()

    assert await repos.employees.fetch(404) is None
    assert await repos.employees.fetch("abc") is None
    assert len(repos.employees.records) == 8


@pytest.mark.asyncio
async def test_create_appends(repos: Repositories) -> None:
    await repos.departments.load()
    created = await repos.departments.create({"name": "Legal", "description": "Contracts"})

    assert repos.departments.records[-1] == created
    assert len(repos.departments.records) == 5


@pytest.mark.asyncio
async def test_update_replaces_by_numeric_id(repos: Repositories) -> None:
    await repos.employees.load()
    updated = await repos.employees.update("4", {"location": "Denver"})

    assert repos.employees.find(4) == updated
    assert repos.employees.find("4").location == "Denver"
    assert repos.employees.find("abc") is None
    assert repos.employees.find(None) is None
    assert len(repos.employees.records) == 8


@pytest.mark.asyncio
async def test_delete_removes_by_id(repos: Repositories) -> None:
    await repos.employees.load()
    await repos.employees.delete("8")

    assert repos.employees.find(8) is None
    assert len(repos.employees.records) == 7


@pytest.mark.asyncio
async def test_failed_mutation_rethrows_and_leaves_records(repos: Repositories) -> None:
    await repos.employees.load()
    before = list(repos.employees.records)

    with pytest.raises(NotFoundError):
        await repos.employees.update(404, {"role": "HR"})
    with pytest.raises(NotFoundError):
        await repos.employees.delete(404)

    assert repos.employees.records == before


@pytest.mark.asyncio
async def test_unsubscribe_stops_notifications(repos: Repositories) -> None:
    calls: List[str] = []
    unsubscribe = repos.leaves.subscribe(lambda repo: calls.append(repo.label))

    await repos.leaves.load()
    unsubscribe()
    await repos.leaves.load()

    assert calls == ["leave requests", "leave requests"]


@pytest.mark.asyncio
async def test_leave_update_status_replaces_record(repos: Repositories) -> None:
    await repos.leaves.load()
    updated = await repos.leaves.update_status("3", "Approved", "Alice")

    assert repos.leaves.find(3) == updated
    assert updated.status == "Approved"
    assert updated.approved_by == "Alice"


@pytest.mark.asyncio
async def test_pass_through_reads_leave_records_alone(repos: Repositories) -> None:
    await repos.leaves.load()
    before = list(repos.leaves.records)

    mine = await repos.leaves.by_employee("2")
    found = await repos.employees.search("patel")

    assert [lv.id for lv in mine] == [1]
    assert [e.id for e in found] == [5]
    assert repos.leaves.records == before


@pytest.mark.asyncio
async def test_load_all_fills_every_repository(repos: Repositories) -> None:
    await repos.load_all()
    assert (len(repos.employees.records), len(repos.departments.records), len(repos.leaves.records)) == (8, 4, 6)


@pytest.mark.asyncio
async def test_aclose_releases_the_shared_client(remote_settings, api_client, recorder) -> None:
    recorder.reply({"success": True, "data": []})
    remote = build_repositories(remote_settings, api_client)
    await remote.employees.load()
    assert api_client._client is not None

    await remote.aclose()

    assert api_client._client is None
    await build_repositories(remote_settings.model_copy(update={"backend": "mock"})).aclose()


def test_build_repositories_picks_backend_once(mock_settings, remote_settings) -> None:
    mock = build_repositories(mock_settings)
    remote = build_repositories(remote_settings)

    assert isinstance(mock.employees.service.store, MockRecordStore)
    assert isinstance(remote.employees.service.store, RemoteRecordStore)
    assert remote.employees.service.store.client is remote.leaves.service.store.client
    assert remote.client is remote.leaves.service.store.client
    assert mock.client is None


def test_process_wide_repositories_are_shared(repos: Repositories) -> None:
    set_repositories(repos)
    try:
        assert get_repositories() is repos
        assert get_repositories().employees is repos.employees
    finally:
        set_repositories(None)


def test_run_sync_drives_coroutines(repos: Repositories) -> None:
    records = run_sync(repos.departments.load())
    assert [d.name for d in records][:2] == ["Engineering", "Design"]
    assert run_sync(repos.departments.refetch()) == records
