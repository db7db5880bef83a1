from __future__ import annotations

from datetime import date

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QFrame, QGridLayout, QHBoxLayout, QLabel, QListWidget, QListWidgetItem, QVBoxLayout, QWidget
)

from ..core.events import record_events
from ..dashboard import summarize
from ..repositories import Repositories, run_sync
from .widgets import StateView, fmt_date


def _stat_card(title: str) -> tuple[QFrame, QLabel]:
    card = QFrame()
    card.setFrameShape(QFrame.StyledPanel)
    v = QVBoxLayout(card)
    t = QLabel(title)
    t.setStyleSheet("color: #6b7280;")
    n = QLabel("0")
    n.setStyleSheet("font-size: 26px; font-weight: 700;")
    v.addWidget(t)
    v.addWidget(n)
    return card, n


class DashboardPage(QWidget):
    def __init__(self, repos: Repositories, parent=None):
        super().__init__(parent)
        self.repos = repos

        body = QWidget()
        bv = QVBoxLayout(body)
        grid = QGridLayout()
        self.stat_labels = {}
        for i, (key, title) in enumerate([
            ("total_employees", "Total Employees"),
            ("total_departments", "Departments"),
            ("active_employees", "Active Employees"),
            ("new_this_month", "New This Month"),
        ]):
            card, lbl = _stat_card(title)
            self.stat_labels[key] = lbl
            grid.addWidget(card, 0, i)
        bv.addLayout(grid)

        heading = QLabel("Recent Employees")
        heading.setStyleSheet("font-size: 15px; font-weight: 600;")
        bv.addWidget(heading)
        self.recent_list = QListWidget()
        bv.addWidget(self.recent_list, 1)

        self.state = StateView(body, "No employees yet.")
        self.state.retry_requested.connect(self._retry)

        v = QVBoxLayout(self)
        title_row = QHBoxLayout()
        title = QLabel("Dashboard")
        title.setStyleSheet("font-size: 20px; font-weight: 700;")
        title_row.addWidget(title)
        title_row.addStretch(1)
        v.addLayout(title_row)
        v.addWidget(self.state, 1)

        record_events.employees_changed.connect(self.refresh)
        record_events.departments_changed.connect(self.refresh)

    def _retry(self):
        run_sync(self.repos.employees.refetch())
        run_sync(self.repos.departments.refetch())

    def refresh(self):
        emp_repo = self.repos.employees
        summary = summarize(emp_repo.records, self.repos.departments.records, date.today())
        error = emp_repo.error or self.repos.departments.error
        if error:
            self.state.show_error(error)
            return
        self.state.sync(emp_repo, summary.total_employees)

        for key, lbl in self.stat_labels.items():
            lbl.setText(str(getattr(summary, key)))

        self.recent_list.clear()
        for e in summary.recent_hires:
            item = QListWidgetItem(f"{e.full_name}  ·  {e.role}  ·  {e.department}  ·  started {fmt_date(e.start_date)}")
            item.setData(Qt.UserRole, e.id)
            self.recent_list.addItem(item)
