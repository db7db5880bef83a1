"""
Avatar photo downloads, off the UI thread.

``PhotoCache.request(url, callback)`` answers from memory when it can and
otherwise fetches on a small worker pool; ``callback(data)`` then runs on
the worker thread, so Qt callers must hop back to the GUI thread themselves
(see ``teamhub.ui.widgets``). A failed download is cached as None, so each
broken URL is tried once per run.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

PHOTO_TIMEOUT = 5  # seconds

PhotoCallback = Callable[[Optional[bytes]], None]


def fetch_photo(url: str) -> Optional[bytes]:
    try:
        resp = requests.get(url, timeout=PHOTO_TIMEOUT)
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Could not fetch photo %s: %s", url, exc)
        return None
    return resp.content


class PhotoCache:
    def __init__(self, fetch: Callable[[str], Optional[bytes]] = fetch_photo, workers: int = 4) -> None:
        self._fetch = fetch
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="photo")
        self._lock = threading.Lock()
        self._done: Dict[str, Optional[bytes]] = {}
        self._waiting: Dict[str, List[PhotoCallback]] = {}

    def cached(self, url: str) -> Optional[bytes]:
        with self._lock:
            return self._done.get(url)

    def request(self, url: str, callback: PhotoCallback) -> None:
        with self._lock:
            if url in self._done:
                data = self._done[url]
            elif url in self._waiting:
                self._waiting[url].append(callback)
                return
            else:
                self._waiting[url] = [callback]
                self._executor.submit(self._download, url)
                return
        callback(data)

    def _download(self, url: str) -> None:
        data = self._fetch(url)
        with self._lock:
            self._done[url] = data
            callbacks = self._waiting.pop(url, [])
        for callback in callbacks:
            callback(data)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)


_PHOTO_CACHE: Optional[PhotoCache] = None


def get_photo_cache() -> PhotoCache:
    global _PHOTO_CACHE
    if _PHOTO_CACHE is None:
        _PHOTO_CACHE = PhotoCache()
    return _PHOTO_CACHE
