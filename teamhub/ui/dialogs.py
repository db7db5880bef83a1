"""
Create/edit dialogs for employees, departments and leave requests.

Each dialog drives a FormController: widgets write into the draft, OK runs
``submit()``; field errors are shown under the inputs and a failed save
keeps the dialog open with everything the user typed.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Iterable, Optional, Tuple

from PySide6.QtCore import QDate, QDateTime, Qt
from PySide6.QtWidgets import (
    QComboBox, QDateEdit, QDateTimeEdit, QDialog, QDialogButtonBox, QFormLayout, QHBoxLayout,
    QLabel, QLineEdit, QMessageBox, QPlainTextEdit, QPushButton, QVBoxLayout, QWidget
)

from ..actions import confirm_delete, transition_leave
from ..core.config import get_settings
from ..core.errors import StorageError, ValidationError
from ..core.models import EmployeeStatus, LeaveStatus, LeaveType, Role, enum_values
from ..forms import department_form, employee_form, leave_form
from ..repositories import Repositories, Repository, run_sync
from .widgets import confirm_box, from_qdate, reason_box, to_qdate

logger = logging.getLogger(__name__)


class DateField(QDateEdit):
    """Blank until set; Delete/Backspace/Esc clears it."""

    def __init__(self, *a, **kw):
        self._blank = True
        super().__init__(*a, **kw)
        self.setCalendarPopup(True)
        self.setMinimumDate(QDate(1900, 1, 1))
        self.setSpecialValueText(" ")
        super().setDate(self.minimumDate())
        self.setDisplayFormat("yyyy-MM-dd")
        self.dateChanged.connect(self._unblank_on_change)

    def textFromDateTime(self, dt: QDateTime):  # type: ignore[override]
        if self._blank:
            return ""
        return QDateTimeEdit.textFromDateTime(self, dt)

    def _unblank_on_change(self, _):
        self._blank = self.date() == self.minimumDate()

    def clear(self):
        self._blank = True
        super().setDate(self.minimumDate())

    def set_value(self, value: Optional[date]):
        if value:
            self._blank = False
            super().setDate(to_qdate(value))
        else:
            self.clear()

    def value(self) -> Optional[date]:
        return None if self._blank else from_qdate(self.date())

    def keyPressEvent(self, ev):  # type: ignore[override]
        if ev.key() in (Qt.Key_Delete, Qt.Key_Backspace, Qt.Key_Escape):
            self.clear()
            ev.accept()
            return
        super().keyPressEvent(ev)


class RecordDialog(QDialog):
    """Form dialog bound to one repository; subclasses add the fields."""

    form_factory = None
    noun = "record"

    def __init__(self, repo: Repository, record=None, parent=None, **seed):
        super().__init__(parent)
        self.repo = repo
        self.controller = type(self).form_factory(self._save)
        self.controller.open(record, **seed)
        self.setWindowTitle(f"{'Edit' if record is not None else 'Add'} {self.noun.title()}")
        self.setMinimumWidth(440)

        self._inputs: Dict[str, QWidget] = {}
        self._errors: Dict[str, QLabel] = {}

        v = QVBoxLayout(self)
        self.form = QFormLayout()
        v.addLayout(self.form)
        self.footer = QHBoxLayout()
        v.addLayout(self.footer)
        self.buttons = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel, parent=self)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)
        self.footer.addStretch(1)
        self.footer.addWidget(self.buttons)

    async def _save(self, payload: Dict[str, Any]):
        if self.controller.editing:
            return await self.repo.update(self.controller.record.id, payload)
        return await self.repo.create(payload)

    # ---- field builders ----

    def _row(self, name: str, label: str, widget: QWidget):
        host = QWidget(self)
        hv = QVBoxLayout(host)
        hv.setContentsMargins(0, 0, 0, 0)
        hv.setSpacing(2)
        err = QLabel("", host)
        err.setStyleSheet("color: #dc2626; font-size: 11px;")
        err.hide()
        hv.addWidget(widget)
        hv.addWidget(err)
        self.form.addRow(label, host)
        self._inputs[name] = widget
        self._errors[name] = err

    def add_line(self, name: str, label: str, placeholder: str = ""):
        w = QLineEdit(self)
        w.setPlaceholderText(placeholder)
        w.setText(str(self.controller.draft.get(name) or ""))
        self._row(name, label, w)

    def add_text(self, name: str, label: str, placeholder: str = ""):
        w = QPlainTextEdit(self)
        w.setPlaceholderText(placeholder)
        w.setFixedHeight(72)
        w.setPlainText(str(self.controller.draft.get(name) or ""))
        self._row(name, label, w)

    def add_combo(self, name: str, label: str, choices: Iterable[Tuple[str, str]], blank: str = ""):
        w = QComboBox(self)
        if blank:
            w.addItem(blank, "")
        for text, value in choices:
            w.addItem(text, value)
        current = str(self.controller.draft.get(name) or "")
        idx = w.findData(current)
        if idx < 0 and current:
            w.addItem(current, current)
            idx = w.count() - 1
        w.setCurrentIndex(max(idx, 0))
        self._row(name, label, w)

    def add_date(self, name: str, label: str):
        w = DateField(self)
        w.set_value(date.fromisoformat(self.controller.draft[name]) if self.controller.draft.get(name) else None)
        self._row(name, label, w)

    # ---- draft sync ----

    def _read_inputs(self):
        for name, w in self._inputs.items():
            if isinstance(w, QLineEdit):
                value = w.text()
            elif isinstance(w, QPlainTextEdit):
                value = w.toPlainText()
            elif isinstance(w, QComboBox):
                value = w.currentData() or ""
            elif isinstance(w, DateField):
                d = w.value()
                value = d.isoformat() if d else ""
            else:
                continue
            if value != self.controller.draft.get(name):
                self.controller.set_field(name, value)

    def _show_errors(self):
        for name, lbl in self._errors.items():
            msg = self.controller.errors.get(name, "")
            lbl.setText(msg)
            lbl.setVisible(bool(msg))

    def accept(self):
        self._read_inputs()
        try:
            run_sync(self.controller.submit())
        except ValidationError:
            self._show_errors()
            return
        except StorageError as ex:
            self._show_errors()
            QMessageBox.critical(self, "Save failed", str(ex))
            return
        super().accept()

    # ---- delete from inside the dialog ----

    def add_delete_button(self):
        if not self.controller.editing:
            return
        btn = QPushButton("Delete", self)
        btn.setStyleSheet("color: #dc2626;")
        btn.clicked.connect(self._delete)
        self.footer.insertWidget(0, btn)

    def _delete(self):
        try:
            done = run_sync(confirm_delete(
                self.repo, self.controller.record.id, confirm_box(self, "Delete"), self.noun
            ))
        except StorageError as ex:
            QMessageBox.critical(self, "Delete failed", str(ex))
            return
        if done:
            super().accept()


def _choices(enum_cls):
    return [(v, v) for v in enum_values(enum_cls)]


def _employee_choices(repos: Repositories):
    return [(e.full_name, str(e.id)) for e in repos.employees.records]


class EmployeeDialog(RecordDialog):
    form_factory = staticmethod(employee_form)
    noun = "employee"

    def __init__(self, repos: Repositories, record=None, parent=None):
        super().__init__(repos.employees, record, parent)
        self.add_line("first_name", "First Name *")
        self.add_line("last_name", "Last Name *")
        self.add_line("email", "Email *", "name@company.com")
        self.add_line("phone", "Phone")
        self.add_combo("role", "Role *", _choices(Role), blank="Select role")
        depts = sorted({d.name for d in repos.departments.records if d.name})
        self.add_combo("department", "Department *", [(n, n) for n in depts], blank="Select department")
        self.add_date("start_date", "Start Date *")
        self.add_combo("status", "Status", _choices(EmployeeStatus))
        self.add_line("manager", "Manager")
        self.add_line("location", "Location")
        self.add_line("photo", "Photo URL", "https://…")
        self.add_delete_button()


class DepartmentDialog(RecordDialog):
    form_factory = staticmethod(department_form)
    noun = "department"

    def __init__(self, repos: Repositories, record=None, parent=None):
        super().__init__(repos.departments, record, parent)
        self.add_line("name", "Name *")
        self.add_text("description", "Description *")
        self.add_line("employee_count", "Employee Count", "0")
        self.add_combo("manager_id", "Manager", _employee_choices(repos), blank="No manager")
        self.add_delete_button()


class LeaveDialog(RecordDialog):
    form_factory = staticmethod(leave_form)
    noun = "leave request"

    def __init__(self, repos: Repositories, record=None, selected_date: Optional[date] = None, parent=None):
        super().__init__(repos.leaves, record, parent, selected_date=selected_date)
        self.approver = (repos.settings or get_settings()).current_user
        self.add_combo("employee_id", "Employee *", _employee_choices(repos), blank="Select employee")
        self.add_date("start_date", "Start Date *")
        self.add_date("end_date", "End Date *")
        self.add_combo("type", "Leave Type", _choices(LeaveType))
        self.add_text("reason", "Reason", "Optional")
        self.add_delete_button()

        if record is not None:
            status = QLabel(f"Status: {record.status}", self)
            if record.approved_by:
                status.setText(f"Status: {record.status} by {record.approved_by}")
            self.form.addRow(status)
            if record.rejection_reason:
                self.form.addRow(QLabel(f"Reason for rejection: {record.rejection_reason}", self))
            if record.status == LeaveStatus.PENDING.value:
                approve = QPushButton("Approve", self)
                approve.clicked.connect(lambda: self._transition(LeaveStatus.APPROVED.value))
                reject = QPushButton("Reject", self)
                reject.clicked.connect(lambda: self._transition(LeaveStatus.REJECTED.value))
                self.footer.insertWidget(1, approve)
                self.footer.insertWidget(2, reject)

    def _transition(self, target: str):
        try:
            updated = run_sync(transition_leave(
                self.repo,
                self.controller.record,
                target,
                confirm_box(self, "Leave Request"),
                ask_reason=reason_box(self, "Reject Leave"),
                approver=self.approver,
            ))
        except (StorageError, ValidationError) as ex:
            QMessageBox.critical(self, "Update failed", str(ex))
            return
        if updated is not None:
            QDialog.accept(self)
