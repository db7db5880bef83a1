from __future__ import annotations

from datetime import date

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QCursor
from PySide6.QtWidgets import (
    QComboBox, QFrame, QGridLayout, QHBoxLayout, QLabel, QMenu, QPushButton, QVBoxLayout, QWidget
)

from ..calendar_model import CalendarState, DayCell, build_month, leave_label, leave_summary, resolve_day_click
from ..core.events import record_events
from ..core.models import LeaveStatus, enum_values
from ..filters import LeaveFilters
from ..repositories import Repositories, run_sync
from .dialogs import LeaveDialog
from .widgets import StateView

WEEKDAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
STATUS_COLOURS = {
    LeaveStatus.PENDING.value: "#fef3c7",
    LeaveStatus.APPROVED.value: "#d1fae5",
    LeaveStatus.REJECTED.value: "#fee2e2",
}


class LeaveChip(QLabel):
    """One leave in a day cell; clicking it opens that request."""

    clicked = Signal(object)

    def __init__(self, text: str, payload, parent=None):
        super().__init__(text, parent)
        self.payload = payload
        self.setCursor(Qt.PointingHandCursor)

    def mousePressEvent(self, ev):  # type: ignore[override]
        ev.accept()

    def mouseReleaseEvent(self, ev):  # type: ignore[override]
        # accepted here so the day cell underneath does not start a new request
        ev.accept()
        self.clicked.emit(self.payload)


class DayCellWidget(QFrame):
    clicked = Signal(object)
    leave_clicked = Signal(object)

    def __init__(self, cell: DayCell, names: dict, parent=None):
        super().__init__(parent)
        self.cell = cell
        self.names = names
        self.setFrameShape(QFrame.StyledPanel)
        self.setMinimumHeight(88)
        self.setCursor(Qt.PointingHandCursor)
        v = QVBoxLayout(self)
        v.setContentsMargins(4, 4, 4, 4)
        v.setSpacing(2)

        num = QLabel(str(cell.day.day))
        if cell.is_today:
            num.setStyleSheet("font-weight: 700; color: #4f46e5;")
        elif not cell.in_month:
            num.setStyleSheet("color: #9ca3af;")
        v.addWidget(num)

        for leave in cell.visible:
            chip = LeaveChip(leave_label(leave, names), leave)
            chip.setStyleSheet(
                f"background: {STATUS_COLOURS.get(leave.status, '#e5e7eb')}; border-radius: 3px; padding: 1px 3px;"
            )
            chip.clicked.connect(self.leave_clicked.emit)
            v.addWidget(chip)
        if cell.overflow:
            more = LeaveChip(f"+{cell.overflow} more", cell)
            more.setStyleSheet("color: #6b7280; font-size: 11px;")
            more.clicked.connect(self._pick_leave)
            v.addWidget(more)
        v.addStretch(1)

    def _pick_leave(self, cell: DayCell):
        menu = QMenu(self)
        for leave in cell.leaves:
            act = menu.addAction(f"{leave_label(leave, self.names)} ({leave.status})")
            act.setData(leave.id)
        chosen = menu.exec(QCursor.pos())
        if chosen is None:
            return
        picked = next((lv for lv in cell.leaves if lv.id == chosen.data()), None)
        if picked is not None:
            self.leave_clicked.emit(picked)

    def mouseReleaseEvent(self, ev):  # type: ignore[override]
        self.clicked.emit(self.cell)
        super().mouseReleaseEvent(ev)


class CalendarPage(QWidget):
    def __init__(self, repos: Repositories, parent=None):
        super().__init__(parent)
        self.repos = repos
        self.cal = CalendarState()
        self.filters = LeaveFilters()

        v = QVBoxLayout(self)
        top = QHBoxLayout()
        title = QLabel("Leave Calendar")
        title.setStyleSheet("font-size: 20px; font-weight: 700;")
        top.addWidget(title)
        top.addStretch(1)
        btn_new = QPushButton("Request Leave")
        btn_new.clicked.connect(lambda: self._open_leave(None, date.today()))
        top.addWidget(btn_new)
        v.addLayout(top)

        nav = QHBoxLayout()
        btn_prev = QPushButton("‹")
        btn_prev.clicked.connect(lambda: (self.cal.previous_month(), self.refresh()))
        btn_today = QPushButton("Today")
        btn_today.clicked.connect(lambda: (self.cal.go_today(), self.refresh()))
        btn_next = QPushButton("›")
        btn_next.clicked.connect(lambda: (self.cal.next_month(), self.refresh()))
        self.month_lbl = QLabel("")
        self.month_lbl.setStyleSheet("font-size: 16px; font-weight: 600;")
        self.emp_filter = QComboBox()
        self.emp_filter.currentIndexChanged.connect(self._on_employee)
        self.status_filter = QComboBox()
        self.status_filter.addItem("All Statuses", "")
        for s in enum_values(LeaveStatus):
            self.status_filter.addItem(s, s)
        self.status_filter.currentIndexChanged.connect(self._on_status)
        for w in (btn_prev, btn_today, btn_next, self.month_lbl):
            nav.addWidget(w)
        nav.addStretch(1)
        nav.addWidget(self.emp_filter)
        nav.addWidget(self.status_filter)
        v.addLayout(nav)

        grid_host = QWidget()
        self.grid = QGridLayout(grid_host)
        self.grid.setSpacing(2)
        self.state = StateView(grid_host)
        self.state.retry_requested.connect(lambda: run_sync(self.repos.leaves.refetch()))
        v.addWidget(self.state, 1)

        # ---- summary over the filtered requests ----
        self.summary_box = QFrame()
        self.summary_box.setFrameShape(QFrame.StyledPanel)
        sv = QVBoxLayout(self.summary_box)
        heading = QLabel("Leave Requests Summary")
        heading.setStyleSheet("font-size: 16px; font-weight: 600;")
        sv.addWidget(heading)
        counts = QHBoxLayout()
        self.summary_lbls = {}
        for status in (LeaveStatus.APPROVED.value, LeaveStatus.PENDING.value, LeaveStatus.REJECTED.value):
            lbl = QLabel("")
            lbl.setAlignment(Qt.AlignCenter)
            lbl.setStyleSheet(f"background: {STATUS_COLOURS[status]}; border-radius: 6px; padding: 8px;")
            self.summary_lbls[status] = lbl
            counts.addWidget(lbl)
        sv.addLayout(counts)
        v.addWidget(self.summary_box)

        record_events.leaves_changed.connect(self.refresh)
        record_events.employees_changed.connect(self._reload_employees)
        self._reload_employees()

    def _on_employee(self, _idx: int):
        data = self.emp_filter.currentData()
        self.filters.employee_id = int(data) if data else None
        self.refresh()

    def _on_status(self, _idx: int):
        self.filters.status = self.status_filter.currentData() or ""
        self.refresh()

    def _reload_employees(self):
        current = self.filters.employee_id
        self.emp_filter.blockSignals(True)
        self.emp_filter.clear()
        self.emp_filter.addItem("All Employees", "")
        for e in self.repos.employees.records:
            self.emp_filter.addItem(e.full_name, str(e.id))
        idx = self.emp_filter.findData(str(current)) if current is not None else 0
        self.emp_filter.setCurrentIndex(max(idx, 0))
        self.emp_filter.blockSignals(False)
        self.refresh()

    def refresh(self):
        repo = self.repos.leaves
        self.month_lbl.setText(self.cal.title)
        if repo.error:
            self.state.show_error(repo.error)
            return
        if repo.loading and not repo.records:
            self.state.show_loading()
            return
        self.state.show_content()
        self._refresh_summary()

        while self.grid.count():
            item = self.grid.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
        for c, name in enumerate(WEEKDAYS):
            hdr = QLabel(name)
            hdr.setAlignment(Qt.AlignCenter)
            hdr.setStyleSheet("font-weight: 600;")
            self.grid.addWidget(hdr, 0, c)

        names = {e.id: e.full_name for e in self.repos.employees.records}
        weeks = build_month(self.cal.current_date, repo.records, self.filters)
        for r, week in enumerate(weeks, start=1):
            for c, cell in enumerate(week):
                w = DayCellWidget(cell, names)
                w.clicked.connect(self._on_day_clicked)
                w.leave_clicked.connect(lambda leave: self._open_leave(leave, None))
                self.grid.addWidget(w, r, c)

    def _on_day_clicked(self, cell: DayCell):
        action, target = resolve_day_click(cell)
        if action == "edit":
            self._open_leave(target, None)
        else:
            self._open_leave(None, target)

    def _open_leave(self, leave, day):
        LeaveDialog(self.repos, leave, selected_date=day, parent=self).exec()

    def _refresh_summary(self):
        counts = leave_summary(self.repos.leaves.records, self.filters)
        for status, lbl in self.summary_lbls.items():
            lbl.setText(f"<b style='font-size: 18px'>{counts[status]}</b><br>{status}")
        self.summary_box.setVisible(sum(counts.values()) > 0)
