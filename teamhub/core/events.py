"""Global application-wide signals.

Repositories notify plain-Python subscribers; this module re-emits those
notifications as Qt signals so pages living in separate modules (the
dashboard, the employee list, the calendar) refresh together without
knowing about each other.
"""

from __future__ import annotations

from PySide6.QtCore import QObject, Signal


class _RecordEvents(QObject):
    """Signals fired whenever a shared repository changes state."""

    employees_changed = Signal()
    departments_changed = Signal()
    leaves_changed = Signal()


# Single shared instance that other modules can import and connect to.
record_events = _RecordEvents()


def bind_repositories(repos) -> None:
    """Forward every repository notification to ``record_events``."""
    repos.employees.subscribe(lambda _repo: record_events.employees_changed.emit())
    repos.departments.subscribe(lambda _repo: record_events.departments_changed.emit())
    repos.leaves.subscribe(lambda _repo: record_events.leaves_changed.emit())
