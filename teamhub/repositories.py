"""
Repositories – the shared, process-wide state holders the views bind to.

Each repository keeps ``records``, ``loading`` and ``error`` for one entity,
reconciles its list after every successful write and notifies subscribers
whenever that state changes. One ``Repositories`` container is built per
process (``get_repositories()``), so every page sees the same list.

Qt code calls the async API through ``run_sync``:

    repos = get_repositories()
    run_sync(repos.employees.load())
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar

from .core.config import Settings, get_settings
from .core.errors import StorageError
from .core.models import Department, Employee, LeaveRequest
from .services.api_client import RecordAPIClient
from .services.base import EntityService
from .services.departments_service import DEPARTMENT_SCHEMA, DepartmentService
from .services.employees_service import EMPLOYEE_SCHEMA, EmployeeService
from .services.leaves_service import LEAVE_SCHEMA, LeaveService
from .services.record_store import R, RecordData, build_store

logger = logging.getLogger(__name__)

T = TypeVar("T")
Subscriber = Callable[["Repository[Any]"], None]


class Repository(Generic[R]):
    """List + loading flag + error string for one entity, with CRUD that keeps the list in sync."""

    def __init__(self, service: EntityService[R], label: str) -> None:
        self.service = service
        self.label = label  # plural noun for messages, e.g. "employees"
        self.records: List[R] = []
        self.loading: bool = False
        self.error: Optional[str] = None
        self._subscribers: List[Subscriber] = []

    # ---------- observers ----------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback(repo)``; returns a function that unsubscribes it."""
        self._subscribers.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self)

    # ---------- reads ----------

    async def load(self) -> List[R]:
        """
        Fetch the full list.

        A failure is kept in ``error``; ``records`` keeps the last known list.
        """
        self.loading = True
        self.error = None
        self._notify()
        try:
            records = await self.service.get_all()
        except StorageError as exc:
            logger.error("Loading %s failed: %s", self.label, exc)
            self.error = str(exc) or f"Failed to load {self.label}"
        else:
            self.records = list(records)
        finally:
            self.loading = False
            self._notify()
        return self.records

    async def refetch(self) -> List[R]:
        return await self.load()

    def find(self, record_id: int | str | None) -> Optional[R]:
        try:
            rid = int(record_id)
        except (TypeError, ValueError):
            return None
        return next((r for r in self.records if r.id == rid), None)

    async def fetch(self, record_id: int | str) -> Optional[R]:
        """
        Read one record straight from the store.

        A record that is already in ``records`` is replaced with the fresh
        copy; None means the store has no such id. Store failures propagate.
        """
        try:
            rid = int(record_id)
        except (TypeError, ValueError):
            return None
        record = await self.service.get_by_id(rid)
        if record is None:
            return None
        for i, existing in enumerate(self.records):
            if existing.id == rid:
                if existing != record:
                    self.records[i] = record
                    self._notify()
                break
        return record

    # ---------- writes (failures propagate, list untouched) ----------

    async def create(self, data: RecordData) -> R:
        record = await self.service.create(data)
        self.records = [*self.records, record]
        self._notify()
        return record

    async def update(self, record_id: int | str, data: RecordData) -> R:
        rid = int(record_id)
        record = await self.service.update(rid, data)
        self._replace(rid, record)
        return record

    async def delete(self, record_id: int | str) -> None:
        rid = int(record_id)
        await self.service.delete(rid)
        self.records = [r for r in self.records if r.id != rid]
        self._notify()

    def _replace(self, rid: int, record: R) -> None:
        self.records = [record if r.id == rid else r for r in self.records]
        self._notify()


class EmployeeRepository(Repository[Employee]):
    service: EmployeeService

    async def search(self, text: str) -> List[Employee]:
        return await self.service.search(text)

    async def recent(self, limit: int = 5) -> List[Employee]:
        return await self.service.recent(limit)


class DepartmentRepository(Repository[Department]):
    service: DepartmentService


class LeaveRepository(Repository[LeaveRequest]):
    service: LeaveService

    async def update_status(
        self,
        record_id: int | str,
        status: str,
        approved_by: Optional[str] = None,
        rejection_reason: Optional[str] = None,
    ) -> LeaveRequest:
        rid = int(record_id)
        record = await self.service.update_status(rid, status, approved_by, rejection_reason)
        self._replace(rid, record)
        return record

    async def by_employee(self, employee_id: int | str) -> List[LeaveRequest]:
        return await self.service.by_employee(employee_id)

    async def by_date_range(self, start: date, end: date) -> List[LeaveRequest]:
        return await self.service.by_date_range(start, end)

    async def upcoming(self, days: int = 30, today: Optional[date] = None) -> List[LeaveRequest]:
        return await self.service.upcoming(days, today)


@dataclass
class Repositories:
    employees: EmployeeRepository
    departments: DepartmentRepository
    leaves: LeaveRepository
    client: Optional[RecordAPIClient] = None
    settings: Optional[Settings] = None

    async def load_all(self) -> None:
        await asyncio.gather(self.employees.load(), self.departments.load(), self.leaves.load())

    async def aclose(self) -> None:
        """Release the record API connection pool, if one was opened."""
        if self.client is not None:
            await self.client.close()


def build_repositories(settings: Optional[Settings] = None, client: Optional[RecordAPIClient] = None) -> Repositories:
    """Compose services and repositories over the configured backend."""
    settings = settings or get_settings()
    if settings.use_remote and client is None:
        client = RecordAPIClient(settings)
    return Repositories(
        employees=EmployeeRepository(EmployeeService(build_store(EMPLOYEE_SCHEMA, settings, client)), "employees"),
        departments=DepartmentRepository(
            DepartmentService(build_store(DEPARTMENT_SCHEMA, settings, client)), "departments"
        ),
        leaves=LeaveRepository(LeaveService(build_store(LEAVE_SCHEMA, settings, client)), "leave requests"),
        client=client,
        settings=settings,
    )


_REPOSITORIES: Optional[Repositories] = None


def get_repositories() -> Repositories:
    """Return the process-wide Repositories, building them on first use."""
    global _REPOSITORIES
    if _REPOSITORIES is None:
        _REPOSITORIES = build_repositories()
    return _REPOSITORIES


def set_repositories(repos: Optional[Repositories]) -> None:
    """Install (or with None, drop) the process-wide Repositories."""
    global _REPOSITORIES
    _REPOSITORIES = repos


# ---------- sync bridge for the Qt thread ----------

_LOOP: Optional[asyncio.AbstractEventLoop] = None


def run_sync(awaitable: Awaitable[T]) -> T:
    """
    Run a coroutine to completion from synchronous (Qt) code.

    One loop is kept for the process so the shared httpx client stays bound
    to the loop it was created on.
    """
    global _LOOP
    if _LOOP is None or _LOOP.is_closed():
        _LOOP = asyncio.new_event_loop()
    return _LOOP.run_until_complete(awaitable)
