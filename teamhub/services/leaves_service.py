"""
Leave request service.

Besides CRUD this owns the approval write: ``update_status`` stamps the
approver and date only for a decided status and keeps the rejection reason
only for a rejection.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any, List, Mapping, Optional

from ..core.errors import NotFoundError, ValidationError
from ..core.models import LeaveRequest, LeaveStatus, LeaveType, enum_values
from .base import EntityService
from .query import EQUAL_TO, GREATER_OR_EQUAL, LESS_OR_EQUAL, Condition, ConditionGroup, Query
from .record_store import EntitySchema, RecordData


def _leave_name(data: Mapping[str, Any]) -> Optional[str]:
    if "type" not in data:
        return None
    return f"Leave Request - {data.get('type') or LeaveType.VACATION.value}"


LEAVE_SCHEMA: EntitySchema[LeaveRequest] = EntitySchema(
    label="Leave request",
    table="leave_c",
    model=LeaveRequest,
    columns={
        "employee_id": "employee_id_c",
        "start_date": "start_date_c",
        "end_date": "end_date_c",
        "type": "type_c",
        "status": "status_c",
        "reason": "reason_c",
        "request_date": "request_date_c",
        "approved_by": "approved_by_c",
        "approved_date": "approved_date_c",
        "rejection_reason": "rejection_reason_c",
    },
    fixture="leaves.json",
    name_column=_leave_name,
    lookup_fields=("employee_id",),
    write_defaults={"type": LeaveType.VACATION.value, "status": LeaveStatus.PENDING.value},
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LeaveService(EntityService[LeaveRequest]):
    async def create(self, data: RecordData) -> LeaveRequest:
        values = self.store.schema.normalize(data)
        if not values.get("request_date"):
            values["request_date"] = _utcnow()
        return await super().create(values)

    async def update_status(
        self,
        record_id: int | str,
        status: str,
        approved_by: Optional[str] = None,
        rejection_reason: Optional[str] = None,
    ) -> LeaveRequest:
        status = getattr(status, "value", status)
        if status not in enum_values(LeaveStatus):
            raise ValidationError({"status": f"Unknown leave status: {status}"})

        current = await self.get_by_id(record_id)
        if current is None:
            raise NotFoundError("Leave request not found")

        decided = status != LeaveStatus.PENDING.value
        changes = {
            "status": status,
            "approved_by": approved_by if decided else None,
            "approved_date": _utcnow() if decided else None,
            "rejection_reason": rejection_reason if status == LeaveStatus.REJECTED.value else None,
        }
        return await self.update(record_id, changes)

    async def by_employee(self, employee_id: int | str) -> List[LeaveRequest]:
        return await self.query(Query(where=[Condition("employee_id", EQUAL_TO, [int(employee_id)])]))

    async def by_date_range(self, start: date, end: date) -> List[LeaveRequest]:
        """Leaves overlapping [start, end]."""
        group = ConditionGroup(
            operator="AND",
            conditions=[
                Condition("start_date", LESS_OR_EQUAL, [end]),
                Condition("end_date", GREATER_OR_EQUAL, [start]),
            ],
        )
        return await self.query(Query(groups=[group]))

    async def by_status(self, status: str) -> List[LeaveRequest]:
        if not status:
            return await self.get_all()
        return await self.query(Query(where=[Condition("status", EQUAL_TO, [getattr(status, "value", status)])]))

    async def upcoming(self, days: int = 30, today: Optional[date] = None) -> List[LeaveRequest]:
        """Approved leaves starting within the next ``days`` days."""
        today = today or date.today()
        group = ConditionGroup(
            operator="AND",
            conditions=[
                Condition("start_date", GREATER_OR_EQUAL, [today]),
                Condition("start_date", LESS_OR_EQUAL, [today + timedelta(days=days)]),
                Condition("status", EQUAL_TO, [LeaveStatus.APPROVED.value]),
            ],
        )
        return await self.query(Query(groups=[group]))
