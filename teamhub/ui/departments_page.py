from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QFrame, QGridLayout, QHBoxLayout, QLabel, QLineEdit, QPushButton, QScrollArea, QVBoxLayout,
    QWidget
)

from ..core.events import record_events
from ..core.models import Department
from ..dashboard import employees_by_department
from ..filters import DepartmentFilters
from ..repositories import Repositories, run_sync
from .dialogs import DepartmentDialog
from .widgets import StateView

GRID_COLUMNS = 2
MEMBERS_SHOWN = 5


class DepartmentsPage(QWidget):
    def __init__(self, repos: Repositories, parent=None):
        super().__init__(parent)
        self.repos = repos
        self.filters = DepartmentFilters()

        v = QVBoxLayout(self)
        top = QHBoxLayout()
        title = QLabel("Departments")
        title.setStyleSheet("font-size: 20px; font-weight: 700;")
        self.search = QLineEdit()
        self.search.setPlaceholderText("Search departments…")
        self.search.textChanged.connect(self._on_query)
        btn_add = QPushButton("Add Department")
        btn_add.clicked.connect(lambda: DepartmentDialog(self.repos, parent=self).exec())
        top.addWidget(title)
        top.addStretch(1)
        top.addWidget(self.search)
        top.addWidget(btn_add)
        v.addLayout(top)

        self.grid_host = QWidget()
        self.grid = QGridLayout(self.grid_host)
        self.grid.setAlignment(Qt.AlignTop)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(self.grid_host)

        self.state = StateView(scroll, "No departments yet.")
        self.state.retry_requested.connect(lambda: run_sync(self.repos.departments.refetch()))
        v.addWidget(self.state, 1)

        record_events.departments_changed.connect(self.refresh)
        record_events.employees_changed.connect(self.refresh)

    def _on_query(self, text: str):
        self.filters.query = text
        self.refresh()

    def refresh(self):
        repo = self.repos.departments
        rows = self.filters.apply(repo.records)
        empty = "No departments match your search." if self.filters.active else "No departments yet."
        self.state.sync(repo, len(rows), empty)

        members = employees_by_department(self.repos.employees.records)
        while self.grid.count():
            item = self.grid.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
        for i, d in enumerate(rows):
            self.grid.addWidget(self._card(d, members.get(d.name, [])), i // GRID_COLUMNS, i % GRID_COLUMNS)

    def _card(self, d: Department, members) -> QFrame:
        card = QFrame()
        card.setFrameShape(QFrame.StyledPanel)
        cv = QVBoxLayout(card)
        head = QHBoxLayout()
        name = QLabel(f"<b>{d.name}</b>")
        name.setStyleSheet("font-size: 15px;")
        btn_edit = QPushButton("Edit")
        btn_edit.clicked.connect(lambda _=False, rec=d: DepartmentDialog(self.repos, rec, parent=self).exec())
        head.addWidget(name, 1)
        head.addWidget(btn_edit)
        cv.addLayout(head)

        desc = QLabel(d.description)
        desc.setWordWrap(True)
        cv.addWidget(desc)

        manager = self.repos.employees.find(d.manager_id)
        cv.addWidget(QLabel(f"Manager: {manager.full_name if manager else 'Unassigned'}"))
        cv.addWidget(QLabel(f"{d.employee_count} employees"))

        if members:
            names = ", ".join(e.full_name for e in members[:MEMBERS_SHOWN])
            extra = len(members) - MEMBERS_SHOWN
            if extra > 0:
                names += f" +{extra} more"
            lbl = QLabel(f"Members: {names}")
            lbl.setWordWrap(True)
            lbl.setStyleSheet("color: #6b7280;")
            cv.addWidget(lbl)
        return card
