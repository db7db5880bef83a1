from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QAbstractItemView, QButtonGroup, QComboBox, QFrame, QGridLayout, QHBoxLayout,
    QHeaderView, QLabel, QLineEdit, QMessageBox, QPushButton, QScrollArea, QStackedWidget,
    QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget
)

from ..actions import confirm_delete
from ..core.errors import StorageError
from ..core.events import record_events
from ..core.models import Employee, Role, enum_values
from ..filters import EmployeeFilters, ViewMode
from ..repositories import Repositories, run_sync
from .dialogs import EmployeeDialog
from .employee_detail import EmployeeDetailDialog
from .widgets import StateView, avatar_label, confirm_box, fmt_date

GRID_COLUMNS = 3
TABLE_HEADERS = ["Name", "Email", "Role", "Department", "Start Date", "Status"]


class EmployeesPage(QWidget):
    def __init__(self, repos: Repositories, parent=None):
        super().__init__(parent)
        self.repos = repos
        self.filters = EmployeeFilters()
        self.view_mode = ViewMode.GRID

        v = QVBoxLayout(self)

        # ---- title + add ----
        top = QHBoxLayout()
        title = QLabel("Employees")
        title.setStyleSheet("font-size: 20px; font-weight: 700;")
        btn_add = QPushButton("Add Employee")
        btn_add.clicked.connect(self._add_employee)
        top.addWidget(title)
        top.addStretch(1)
        top.addWidget(btn_add)
        v.addLayout(top)

        # ---- filter bar ----
        bar = QHBoxLayout()
        self.search = QLineEdit()
        self.search.setPlaceholderText("Search by name, email, role or department…")
        self.search.textChanged.connect(self._on_query)
        self.dept_filter = QComboBox()
        self.dept_filter.currentIndexChanged.connect(self._on_department)
        self.role_filter = QComboBox()
        self.role_filter.addItem("All Roles", "")
        for r in enum_values(Role):
            self.role_filter.addItem(r, r)
        self.role_filter.currentIndexChanged.connect(self._on_role)
        self.btn_clear = QPushButton("Clear Filters")
        self.btn_clear.clicked.connect(self._clear_filters)

        self.btn_grid = QPushButton("Grid")
        self.btn_table = QPushButton("Table")
        group = QButtonGroup(self)
        for b, mode in ((self.btn_grid, ViewMode.GRID), (self.btn_table, ViewMode.TABLE)):
            b.setCheckable(True)
            group.addButton(b)
            b.clicked.connect(lambda _=False, m=mode: self._set_mode(m))
        self.btn_grid.setChecked(True)

        bar.addWidget(self.search, 2)
        bar.addWidget(self.dept_filter)
        bar.addWidget(self.role_filter)
        bar.addWidget(self.btn_clear)
        bar.addStretch(1)
        bar.addWidget(self.btn_grid)
        bar.addWidget(self.btn_table)
        v.addLayout(bar)

        self.count_lbl = QLabel("")
        self.count_lbl.setStyleSheet("color: #6b7280;")
        v.addWidget(self.count_lbl)

        # ---- grid + table over the same result ----
        self.grid_host = QWidget()
        self.grid = QGridLayout(self.grid_host)
        self.grid.setAlignment(Qt.AlignTop)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(self.grid_host)

        self.table = QTableWidget(0, len(TABLE_HEADERS))
        self.table.setHorizontalHeaderLabels(TABLE_HEADERS)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.table.cellDoubleClicked.connect(self._view_row)

        self.layouts = QStackedWidget()
        self.layouts.addWidget(scroll)
        self.layouts.addWidget(self.table)

        self.state = StateView(self.layouts, "No employees found.")
        self.state.retry_requested.connect(lambda: run_sync(self.repos.employees.refetch()))
        v.addWidget(self.state, 1)

        record_events.employees_changed.connect(self.refresh)
        record_events.departments_changed.connect(self._reload_departments)
        self._reload_departments()

    # ---- filter state ----

    def _on_query(self, text: str):
        self.filters.query = text
        self.refresh()

    def _on_department(self, _idx: int):
        self.filters.department = self.dept_filter.currentData() or ""
        self.refresh()

    def _on_role(self, _idx: int):
        self.filters.role = self.role_filter.currentData() or ""
        self.refresh()

    def _clear_filters(self):
        self.filters.clear()
        for w in (self.search, self.dept_filter, self.role_filter):
            w.blockSignals(True)
        self.search.clear()
        self.dept_filter.setCurrentIndex(0)
        self.role_filter.setCurrentIndex(0)
        for w in (self.search, self.dept_filter, self.role_filter):
            w.blockSignals(False)
        self.refresh()

    def _set_mode(self, mode: ViewMode):
        self.view_mode = mode
        self.layouts.setCurrentIndex(0 if mode is ViewMode.GRID else 1)

    def _reload_departments(self):
        current = self.filters.department
        names = sorted({d.name for d in self.repos.departments.records if d.name})
        self.dept_filter.blockSignals(True)
        self.dept_filter.clear()
        self.dept_filter.addItem("All Departments", "")
        for n in names:
            self.dept_filter.addItem(n, n)
        idx = self.dept_filter.findData(current)
        self.dept_filter.setCurrentIndex(max(idx, 0))
        self.dept_filter.blockSignals(False)

    # ---- render ----

    def refresh(self):
        repo = self.repos.employees
        rows = self.filters.apply(repo.records)
        empty = "No employees match your filters." if self.filters.active else "No employees yet."
        self.state.sync(repo, len(rows), empty)
        self.btn_clear.setEnabled(self.filters.active)
        self.count_lbl.setText(f"Showing {len(rows)} of {len(repo.records)} employees")
        self._render_grid(rows)
        self._render_table(rows)

    def _render_grid(self, rows: list[Employee]):
        while self.grid.count():
            item = self.grid.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
        for i, e in enumerate(rows):
            self.grid.addWidget(self._card(e), i // GRID_COLUMNS, i % GRID_COLUMNS)

    def _card(self, e: Employee) -> QFrame:
        card = QFrame()
        card.setFrameShape(QFrame.StyledPanel)
        cv = QVBoxLayout(card)
        head = QHBoxLayout()
        head.addWidget(avatar_label(e.full_name, e.photo))
        name = QLabel(f"<b>{e.full_name}</b><br>{e.role}")
        head.addWidget(name, 1)
        status = QLabel(e.status)
        status.setStyleSheet("color: #059669;" if e.status == "Active" else "color: #d97706;")
        head.addWidget(status)
        cv.addLayout(head)
        for text in (e.department, e.email, e.phone, e.location):
            if text:
                cv.addWidget(QLabel(text))
        actions = QHBoxLayout()
        btn_view = QPushButton("View")
        btn_view.clicked.connect(lambda _=False, rec=e: self._view_employee(rec.id))
        btn_edit = QPushButton("Edit")
        btn_edit.clicked.connect(lambda _=False, rec=e: self._edit_employee(rec))
        btn_del = QPushButton("Delete")
        btn_del.clicked.connect(lambda _=False, rec=e: self._delete_employee(rec))
        actions.addStretch(1)
        actions.addWidget(btn_view)
        actions.addWidget(btn_edit)
        actions.addWidget(btn_del)
        cv.addLayout(actions)
        return card

    def _render_table(self, rows: list[Employee]):
        self.table.setRowCount(len(rows))
        for r, e in enumerate(rows):
            values = [e.full_name, e.email, e.role, e.department, fmt_date(e.start_date), e.status]
            for c, text in enumerate(values):
                item = QTableWidgetItem(text)
                item.setData(Qt.UserRole, e.id)
                self.table.setItem(r, c, item)

    # ---- actions ----

    def _add_employee(self):
        EmployeeDialog(self.repos, parent=self).exec()

    def _edit_employee(self, e: Employee):
        EmployeeDialog(self.repos, e, parent=self).exec()

    def _view_employee(self, employee_id: int):
        EmployeeDetailDialog(self.repos, employee_id, parent=self).exec()

    def _view_row(self, row: int, _col: int):
        item = self.table.item(row, 0)
        if item is not None:
            self._view_employee(item.data(Qt.UserRole))

    def _delete_employee(self, e: Employee):
        try:
            run_sync(confirm_delete(self.repos.employees, e.id, confirm_box(self, "Delete"), "employee"))
        except StorageError as ex:
            QMessageBox.critical(self, "Delete failed", str(ex))
