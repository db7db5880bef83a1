from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QDialog, QFormLayout, QFrame, QHBoxLayout, QLabel, QMessageBox, QPushButton, QVBoxLayout, QWidget
)

from ..actions import confirm_delete
from ..core.errors import StorageError
from ..core.models import Employee
from ..profile import NOT_FOUND, profile_sections, timeline
from ..repositories import Repositories, run_sync
from .dialogs import EmployeeDialog
from .widgets import StateView, avatar_label, confirm_box

logger = logging.getLogger(__name__)


class EmployeeDetailDialog(QDialog):
    """Read-only profile for one employee, loaded by id, with Edit and Delete."""

    def __init__(self, repos: Repositories, employee_id: int, parent=None):
        super().__init__(parent)
        self.repos = repos
        self.employee_id = employee_id
        self.employee: Optional[Employee] = None
        self.setWindowTitle("Employee Profile")
        self.setMinimumWidth(520)

        v = QVBoxLayout(self)
        self.body = QWidget()
        self.body_layout = QVBoxLayout(self.body)
        self.state = StateView(self.body)
        self.state.retry_requested.connect(self.load)
        v.addWidget(self.state, 1)

        footer = QHBoxLayout()
        self.btn_delete = QPushButton("Delete")
        self.btn_delete.setStyleSheet("color: #dc2626;")
        self.btn_delete.clicked.connect(self._delete)
        self.btn_edit = QPushButton("Edit")
        self.btn_edit.clicked.connect(self._edit)
        btn_close = QPushButton("Close")
        btn_close.clicked.connect(self.reject)
        footer.addWidget(self.btn_delete)
        footer.addStretch(1)
        footer.addWidget(self.btn_edit)
        footer.addWidget(btn_close)
        v.addLayout(footer)

        self.load()

    def load(self):
        self.state.show_loading()
        try:
            self.employee = run_sync(self.repos.employees.fetch(self.employee_id))
        except StorageError as ex:
            logger.error("Loading employee %s failed: %s", self.employee_id, ex)
            self.employee = None
            self._show_missing(str(ex) or "Failed to load employee")
            return
        if self.employee is None:
            self._show_missing(NOT_FOUND)
            return
        self._render(self.employee)
        self.btn_edit.setEnabled(True)
        self.btn_delete.setEnabled(True)
        self.state.show_content()

    def _show_missing(self, message: str):
        self.btn_edit.setEnabled(False)
        self.btn_delete.setEnabled(False)
        self.state.show_error(message)

    def _render(self, e: Employee):
        while self.body_layout.count():
            item = self.body_layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()

        header = QWidget()
        head = QHBoxLayout(header)
        head.addWidget(avatar_label(e.full_name, e.photo, size=72))
        title = QLabel(f"<span style='font-size: 20px; font-weight: 700'>{e.full_name}</span><br>"
                       f"{e.email}<br>{e.role} · {e.status}")
        title.setTextFormat(Qt.RichText)
        head.addWidget(title, 1)
        self.body_layout.addWidget(header)

        for heading, rows in profile_sections(e):
            box = QFrame()
            box.setFrameShape(QFrame.StyledPanel)
            form = QFormLayout(box)
            caption = QLabel(heading)
            caption.setStyleSheet("font-size: 15px; font-weight: 600;")
            form.addRow(caption)
            for label, value in rows:
                form.addRow(f"{label}:", QLabel(value))
            self.body_layout.addWidget(box)

        history = QFrame()
        history.setFrameShape(QFrame.StyledPanel)
        hv = QVBoxLayout(history)
        caption = QLabel("Employment Timeline")
        caption.setStyleSheet("font-size: 15px; font-weight: 600;")
        hv.addWidget(caption)
        for headline, detail in timeline(e):
            hv.addWidget(QLabel(f"<b>{headline}</b><br><span style='color: #6b7280'>{detail}</span>"))
        self.body_layout.addWidget(history)
        self.body_layout.addStretch(1)

    def _edit(self):
        if self.employee is None:
            return
        if EmployeeDialog(self.repos, self.employee, parent=self).exec():
            self.load()

    def _delete(self):
        if self.employee is None:
            return
        try:
            done = run_sync(confirm_delete(
                self.repos.employees, self.employee.id, confirm_box(self, "Delete"), "employee", permanent=True
            ))
        except StorageError as ex:
            QMessageBox.critical(self, "Delete failed", str(ex))
            return
        if done:
            self.accept()
