"""Record stores and the per-entity services built on them."""
from .departments_service import DEPARTMENT_SCHEMA, DepartmentService
from .employees_service import EMPLOYEE_SCHEMA, EmployeeService
from .leaves_service import LEAVE_SCHEMA, LeaveService
from .record_store import MockRecordStore, RecordStore, RemoteRecordStore, build_store

__all__ = [
    "DEPARTMENT_SCHEMA",
    "DepartmentService",
    "EMPLOYEE_SCHEMA",
    "EmployeeService",
    "LEAVE_SCHEMA",
    "LeaveService",
    "MockRecordStore",
    "RecordStore",
    "RemoteRecordStore",
    "build_store",
]
