# teamhub/app.py
import logging
import sys
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication

from .core.config import Settings, get_settings
from .core.events import bind_repositories
from .repositories import build_repositories, run_sync, set_repositories
from .services.photos import get_photo_cache
from .ui.main_window import MainWindow

logger = logging.getLogger(__name__)


def run_app(settings: Optional[Settings] = None) -> int:
    settings = settings or get_settings()

    # High-DPI normalization
    QGuiApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("TeamHub HR")
    app.setOrganizationName("TeamHub")

    repos = build_repositories(settings)
    set_repositories(repos)
    bind_repositories(repos)

    win = MainWindow(repos, settings)
    win.showMaximized()
    win.load()
    logger.info("TeamHub started (%s backend)", "remote" if settings.use_remote else "mock")
    try:
        return app.exec()
    finally:
        get_photo_cache().shutdown()
        run_sync(repos.aclose())
