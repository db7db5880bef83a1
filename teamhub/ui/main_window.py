from __future__ import annotations

from PySide6.QtWidgets import (
    QHBoxLayout, QLabel, QListWidget, QMainWindow, QStackedWidget, QStatusBar, QVBoxLayout, QWidget
)

from ..core.config import Settings
from ..repositories import Repositories, run_sync
from .calendar_page import CalendarPage
from .dashboard_page import DashboardPage
from .departments_page import DepartmentsPage
from .employees_page import EmployeesPage

NAV_ITEMS = ["Dashboard", "Employees", "Departments", "Calendar"]


class MainWindow(QMainWindow):
    def __init__(self, repos: Repositories, settings: Settings):
        super().__init__()
        self.repos = repos
        self.setWindowTitle("TeamHub HR")
        self.resize(1280, 820)

        # ---------- Header ----------
        header = QWidget(self)
        header.setObjectName("TopHeader")
        hv = QHBoxLayout(header)
        hv.setContentsMargins(12, 8, 12, 8)
        brand = QLabel("TeamHub HR", header)
        brand.setStyleSheet("font-size: 18px; font-weight: 700;")
        self.user_lbl = QLabel(settings.current_user, header)
        hv.addWidget(brand)
        hv.addStretch(1)
        hv.addWidget(self.user_lbl)
        self.setMenuWidget(header)

        # ---------- Sidebar + pages ----------
        host = QWidget(self)
        row = QHBoxLayout(host)
        row.setContentsMargins(0, 0, 0, 0)

        self.nav = QListWidget(host)
        self.nav.setObjectName("NavPanel")
        self.nav.setFixedWidth(180)
        self.nav.addItems(NAV_ITEMS)

        self.pages = QStackedWidget(host)
        self.dashboard_page = DashboardPage(repos)
        self.employees_page = EmployeesPage(repos)
        self.departments_page = DepartmentsPage(repos)
        self.calendar_page = CalendarPage(repos)
        for page in (self.dashboard_page, self.employees_page, self.departments_page, self.calendar_page):
            self.pages.addWidget(page)

        self.nav.currentRowChanged.connect(self.pages.setCurrentIndex)
        self.nav.setCurrentRow(0)

        content = QWidget(host)
        cv = QVBoxLayout(content)
        cv.addWidget(self.pages)
        row.addWidget(self.nav)
        row.addWidget(content, 1)
        self.setCentralWidget(host)

        # ---------- Status bar ----------
        sb = QStatusBar(self)
        backend = "Remote record API" if settings.use_remote else "Mock data"
        sb.addPermanentWidget(QLabel(backend))
        self.setStatusBar(sb)

    def load(self):
        """Initial fetch of every repository; pages redraw through record_events."""
        run_sync(self.repos.load_all())
        for page in (self.dashboard_page, self.employees_page, self.departments_page, self.calendar_page):
            page.refresh()
