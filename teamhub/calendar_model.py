"""
Month view model for the leave calendar.

Weeks start on Sunday. A grid always holds whole weeks, padded with the
trailing days of the previous month and the leading days of the next.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .core.models import LeaveRequest, LeaveStatus
from .filters import LeaveFilters

MAX_VISIBLE_LEAVES = 2

# Allowed status changes; decided requests are final
TRANSITIONS = {
    LeaveStatus.PENDING.value: {LeaveStatus.APPROVED.value, LeaveStatus.REJECTED.value},
    LeaveStatus.APPROVED.value: set(),
    LeaveStatus.REJECTED.value: set(),
}


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, set())


def _shift_month(anchor: date, months: int) -> date:
    index = anchor.year * 12 + (anchor.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(anchor.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


@dataclass
class CalendarState:
    current_date: date = field(default_factory=date.today)

    def next_month(self) -> date:
        self.current_date = _shift_month(self.current_date, 1)
        return self.current_date

    def previous_month(self) -> date:
        self.current_date = _shift_month(self.current_date, -1)
        return self.current_date

    def go_today(self, today: Optional[date] = None) -> date:
        self.current_date = today or date.today()
        return self.current_date

    @property
    def title(self) -> str:
        return self.current_date.strftime("%B %Y")


def month_grid(anchor: date) -> List[List[date]]:
    """Sunday-first weeks covering the month of ``anchor``."""
    first = anchor.replace(day=1)
    last = first.replace(day=calendar.monthrange(first.year, first.month)[1])
    # date.weekday(): Monday=0 .. Sunday=6
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    end = last + timedelta(days=(5 - last.weekday()) % 7)
    days = [start + timedelta(days=i) for i in range((end - start).days + 1)]
    return [days[i:i + 7] for i in range(0, len(days), 7)]


def leaves_on(day: date, leaves: Iterable[LeaveRequest]) -> List[LeaveRequest]:
    return [lv for lv in leaves if lv.covers(day)]


@dataclass
class DayCell:
    day: date
    in_month: bool
    is_today: bool
    leaves: List[LeaveRequest] = field(default_factory=list)

    @property
    def visible(self) -> List[LeaveRequest]:
        return self.leaves[:MAX_VISIBLE_LEAVES]

    @property
    def overflow(self) -> int:
        return max(0, len(self.leaves) - MAX_VISIBLE_LEAVES)


def build_month(
    anchor: date,
    leaves: Iterable[LeaveRequest],
    filters: Optional[LeaveFilters] = None,
    today: Optional[date] = None,
) -> List[List[DayCell]]:
    today = today or date.today()
    pool = filters.apply(leaves) if filters else list(leaves)
    return [
        [
            DayCell(
                day=day,
                in_month=day.month == anchor.month and day.year == anchor.year,
                is_today=day == today,
                leaves=leaves_on(day, pool),
            )
            for day in week
        ]
        for week in month_grid(anchor)
    ]


def resolve_day_click(cell: DayCell) -> Tuple[str, Union[LeaveRequest, date]]:
    """One leave on the day opens it for edit; otherwise start a new request there."""
    if len(cell.leaves) == 1:
        return "edit", cell.leaves[0]
    return "create", cell.day


def leave_label(leave: LeaveRequest, names: Mapping[Optional[int], str]) -> str:
    """Chip and picker text: who is away and why."""
    return f"{names.get(leave.employee_id, 'Unknown')} · {leave.type}"


def leave_summary(leaves: Iterable[LeaveRequest], filters: Optional[LeaveFilters] = None) -> Dict[str, int]:
    """Approved / Pending / Rejected counts over the filtered requests, all months."""
    pool = filters.apply(leaves) if filters else list(leaves)
    counts = {s: 0 for s in (LeaveStatus.APPROVED.value, LeaveStatus.PENDING.value, LeaveStatus.REJECTED.value)}
    for lv in pool:
        if lv.status in counts:
            counts[lv.status] += 1
    return counts
