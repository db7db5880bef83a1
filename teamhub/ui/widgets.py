"""Small shared widgets: page state host, avatars, prompts, date helpers."""

from __future__ import annotations

from datetime import date
from typing import Optional

from PySide6.QtCore import QDate, QObject, Qt, Signal
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QInputDialog, QLabel, QMessageBox, QPushButton, QStackedWidget, QVBoxLayout, QWidget
)

from ..services.photos import get_photo_cache

AVATAR_SIZE = 40


# ---- date helpers ----

def to_qdate(value: Optional[date]) -> QDate:
    if not value:
        return QDate()
    return QDate(value.year, value.month, value.day)


def from_qdate(qd: QDate) -> Optional[date]:
    if not qd or not qd.isValid():
        return None
    return date(qd.year(), qd.month(), qd.day())


def fmt_date(value: Optional[date]) -> str:
    return value.strftime("%b %d, %Y") if value else ""


# ---- prompts (injected into teamhub.actions) ----

def confirm_box(parent: QWidget, title: str):
    def _confirm(message: str) -> bool:
        return QMessageBox.question(parent, title, message) == QMessageBox.Yes
    return _confirm


def reason_box(parent: QWidget, title: str):
    def _ask(message: str) -> Optional[str]:
        text, ok = QInputDialog.getText(parent, title, message)
        return text if ok else None
    return _ask


# ---- avatars ----

class _PhotoRelay(QObject):
    """Carries finished downloads from the photo workers to the GUI thread."""

    loaded = Signal(str, object)


_RELAY: Optional[_PhotoRelay] = None


def _relay() -> _PhotoRelay:
    global _RELAY
    if _RELAY is None:
        _RELAY = _PhotoRelay()
    return _RELAY


class AvatarLabel(QLabel):
    """Initials right away; the photo replaces them once it has downloaded."""

    def __init__(self, name: str, photo_url: str = "", size: int = AVATAR_SIZE, parent=None):
        super().__init__(parent)
        self.photo_url = photo_url
        self.avatar_size = size
        self.setFixedSize(size, size)
        self.setAlignment(Qt.AlignCenter)
        initials = "".join(part[:1] for part in name.split()[:2]).upper() or "?"
        self.setText(initials)
        self.setStyleSheet(
            f"border-radius: {size // 2}px; background: #6366f1; color: white; font-weight: 600;"
        )
        if not photo_url:
            return
        cache = get_photo_cache()
        data = cache.cached(photo_url)
        if data is not None:
            self._show_photo(photo_url, data)
            return
        relay = _relay()
        relay.loaded.connect(self._show_photo)
        # runs on a worker thread; the queued signal delivers it on the GUI thread
        cache.request(photo_url, lambda blob, url=photo_url: relay.loaded.emit(url, blob))

    def _show_photo(self, url: str, data: Optional[bytes]):
        if url != self.photo_url or not data:
            return
        pm = QPixmap()
        if pm.loadFromData(data):
            size = self.avatar_size
            self.setStyleSheet("")
            self.setPixmap(pm.scaled(size, size, Qt.KeepAspectRatioByExpanding, Qt.SmoothTransformation))


def avatar_label(name: str, photo_url: str = "", size: int = AVATAR_SIZE, parent=None) -> QLabel:
    return AvatarLabel(name, photo_url, size, parent)


# ---- page state host ----

class StateView(QStackedWidget):
    """
    Loading / error-with-retry / empty / content, one at a time.

    ``retry_requested`` fires when the error page's button is clicked.
    """

    retry_requested = Signal()

    def __init__(self, content: QWidget, empty_text: str = "Nothing here yet.", parent=None):
        super().__init__(parent)

        self.loading_lbl = QLabel("Loading…")
        self.loading_lbl.setAlignment(Qt.AlignCenter)

        err_host = QWidget()
        ev = QVBoxLayout(err_host)
        ev.addStretch(1)
        self.error_lbl = QLabel("")
        self.error_lbl.setAlignment(Qt.AlignCenter)
        self.error_lbl.setWordWrap(True)
        self.error_lbl.setStyleSheet("color: #b91c1c;")
        retry = QPushButton("Try Again")
        retry.clicked.connect(self.retry_requested.emit)
        ev.addWidget(self.error_lbl)
        ev.addWidget(retry, 0, Qt.AlignCenter)
        ev.addStretch(1)

        self.empty_lbl = QLabel(empty_text)
        self.empty_lbl.setAlignment(Qt.AlignCenter)

        self.content = content
        for w in (self.loading_lbl, err_host, self.empty_lbl, content):
            self.addWidget(w)
        self._err_host = err_host

    def show_loading(self):
        self.setCurrentWidget(self.loading_lbl)

    def show_error(self, message: str):
        self.error_lbl.setText(message or "Something went wrong.")
        self.setCurrentWidget(self._err_host)

    def show_empty(self, text: Optional[str] = None):
        if text:
            self.empty_lbl.setText(text)
        self.setCurrentWidget(self.empty_lbl)

    def show_content(self):
        self.setCurrentWidget(self.content)

    def sync(self, repo, count: int, empty_text: Optional[str] = None):
        """Pick the page for a repository's state and a filtered result size."""
        if repo.loading and not repo.records:
            self.show_loading()
        elif repo.error:
            self.show_error(repo.error)
        elif count == 0:
            self.show_empty(empty_text)
        else:
            self.show_content()
