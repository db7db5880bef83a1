"""Shared fixtures: zero-latency mock stores and a record API client over MockTransport."""
import json
from typing import Callable, List

import httpx
import pytest

from teamhub.core.config import Settings
from teamhub.repositories import Repositories, build_repositories
from teamhub.services.api_client import RecordAPIClient
from teamhub.services.departments_service import DEPARTMENT_SCHEMA, DepartmentService
from teamhub.services.employees_service import EMPLOYEE_SCHEMA, EmployeeService
from teamhub.services.leaves_service import LEAVE_SCHEMA, LeaveService
from teamhub.services.record_store import MockRecordStore


@pytest.fixture
def mock_settings() -> Settings:
    return Settings(backend="mock", mock_latency_min=0, mock_latency_max=0)


@pytest.fixture
def remote_settings() -> Settings:
    return Settings(
        api_base_url="http://records.test",
        project_id="proj-1",
        public_key="pk-test",
        backend="auto",
    )


@pytest.fixture
def employee_service() -> EmployeeService:
    return EmployeeService(MockRecordStore(EMPLOYEE_SCHEMA, latency=(0, 0)))


@pytest.fixture
def department_service() -> DepartmentService:
    return DepartmentService(MockRecordStore(DEPARTMENT_SCHEMA, latency=(0, 0)))


@pytest.fixture
def leave_service() -> LeaveService:
    return LeaveService(MockRecordStore(LEAVE_SCHEMA, latency=(0, 0)))


@pytest.fixture
def repos(mock_settings: Settings) -> Repositories:
    return build_repositories(mock_settings)


class RecordAPIRecorder:
    """Collects requests and answers each with the next queued response."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.responses: List[httpx.Response] = []

    def reply(self, body=None, status_code: int = 200) -> None:
        self.responses.append(httpx.Response(status_code, json=body))

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content or b"{}")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(500, json={"success": False, "message": "no response queued"})
        return self.responses.pop(0)


@pytest.fixture
def recorder() -> RecordAPIRecorder:
    return RecordAPIRecorder()


@pytest.fixture
def api_client(remote_settings: Settings, recorder: RecordAPIRecorder) -> RecordAPIClient:
    return RecordAPIClient(remote_settings, transport=httpx.MockTransport(recorder))


@pytest.fixture
def make_client(remote_settings: Settings) -> Callable[[Callable], RecordAPIClient]:
    def _make(handler: Callable) -> RecordAPIClient:
        return RecordAPIClient(remote_settings, transport=httpx.MockTransport(handler))
    return _make
