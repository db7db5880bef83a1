"""Edit dialogs, the employee profile and calendar day cells, built offscreen."""
import os
from datetime import date

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
QtWidgets = pytest.importorskip("PySide6.QtWidgets")

from teamhub.calendar_model import build_month  # noqa: E402
from teamhub.core.config import Settings  # noqa: E402
from teamhub.profile import NOT_FOUND  # noqa: E402
from teamhub.repositories import Repositories, build_repositories, run_sync  # noqa: E402
from teamhub.ui.calendar_page import DayCellWidget, LeaveChip  # noqa: E402
from teamhub.ui.dialogs import EmployeeDialog, LeaveDialog  # noqa: E402
from teamhub.ui.employee_detail import EmployeeDetailDialog  # noqa: E402


@pytest.fixture(scope="module")
def qapp():
    return QtWidgets.QApplication.instance() or QtWidgets.QApplication([])


@pytest.fixture
def loaded(qapp) -> Repositories:
    repos = build_repositories(
        Settings(backend="mock", current_user="Dana Ops", mock_latency_min=0, mock_latency_max=0)
    )
    run_sync(repos.load_all())
    return repos


def _button_texts(widget) -> list:
    return [b.text() for b in widget.findChildren(QtWidgets.QPushButton)]


def test_employee_edit_dialog_can_delete(loaded: Repositories) -> None:
    assert "Delete" in _button_texts(EmployeeDialog(loaded, loaded.employees.find(1)))
    assert "Delete" not in _button_texts(EmployeeDialog(loaded))


def test_leave_dialog_approves_as_app_user(loaded: Repositories) -> None:
    dialog = LeaveDialog(loaded, loaded.leaves.find(3))

    assert dialog.approver == "Dana Ops"
    assert {"Approve", "Reject", "Delete"} <= set(_button_texts(dialog))


def test_profile_loads_by_id(loaded: Repositories) -> None:
    dialog = EmployeeDetailDialog(loaded, 5)

    assert dialog.employee.full_name == "Priya Patel"
    assert dialog.state.currentWidget() is dialog.body
    assert dialog.btn_edit.isEnabled()


def test_profile_for_unknown_id_offers_retry(loaded: Repositories) -> None:
    dialog = EmployeeDetailDialog(loaded, 404)

    assert dialog.employee is None
    assert dialog.state.error_lbl.text() == NOT_FOUND
    assert not dialog.btn_edit.isEnabled()
    assert not dialog.btn_delete.isEnabled()


def test_busy_day_cell_has_a_chip_per_visible_leave_and_a_picker(loaded: Repositories) -> None:
    weeks = build_month(date(2024, 3, 1), loaded.leaves.records, today=date(2024, 3, 1))
    busy = next(cell for week in weeks for cell in week if cell.day == date(2024, 3, 11))

    widget = DayCellWidget(busy, {e.id: e.full_name for e in loaded.employees.records})
    chips = widget.findChildren(LeaveChip)

    assert [c.payload for c in chips[:2]] == busy.visible
    assert chips[2].text() == "+1 more"
    assert chips[2].payload is busy
