"""
HTTP client for the hosted record API.

Usage pattern:

    from teamhub.services.api_client import RecordAPIClient

    client = RecordAPIClient.get()
    envelope = await client.fetch_records("employee_c", {"fields": [...]})

Every call returns the response envelope
``{"success": bool, "message"?: str, "data"?: ..., "results"?: [...]}``
or raises StorageError. Interpreting ``data``/``results`` is the record
store's job.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..core.config import Settings, get_settings
from ..core.errors import NotFoundError, StorageError

logger = logging.getLogger(__name__)


class RecordAPIClient:
    """
    Reusable async HTTP client addressing one project of the record API.

    Use RecordAPIClient.get() to obtain the process-wide instance.
    """

    _instance: Optional["RecordAPIClient"] = None

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = settings or get_settings()
        self.base_url: str = settings.api_base_url.rstrip("/")
        self.project_id: str = settings.project_id
        self.public_key: str = settings.public_key
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ---------- Singleton helper ----------

    @classmethod
    def get(cls) -> "RecordAPIClient":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    # ---------- Internal helpers ----------

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            # No explicit timeout: the transport default applies
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                transport=self._transport,
            )
        return self._client

    def _headers(self) -> Dict[str, str]:
        if not self.project_id or not self.public_key:
            raise StorageError(
                "Record API is not configured. Set TEAMHUB_PROJECT_ID and "
                "TEAMHUB_PUBLIC_KEY (or project_id/public_key in teamhub/config.json)."
            )
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {self.public_key}",
            "X-Project-Id": self.project_id,
        }

    def _table_path(self, table: str, action: str) -> str:
        return f"/projects/{self.project_id}/tables/{table}/{action}"

    async def _send(self, method: str, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        client = await self._ensure_client()
        headers = self._headers()
        try:
            resp = await client.request(method, path, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise StorageError(f"Unable to reach record API: {exc}") from exc

        if resp.status_code == 404:
            raise NotFoundError(f"{path} not found")
        if resp.status_code in (401, 403):
            raise StorageError(
                f"{resp.status_code} calling {path}: the record API rejected the "
                "project id / public key."
            )
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("%s %s returned %s", method, path, resp.status_code)
            raise StorageError(f"{method} {path} failed: {exc.response.text}") from exc

        try:
            envelope = resp.json()
        except ValueError as exc:
            raise StorageError(f"{method} {path} returned a non-JSON body") from exc
        if not isinstance(envelope, dict):
            raise StorageError(f"Unexpected payload from {path}: {envelope!r}")

        if not envelope.get("success", False):
            message = envelope.get("message") or f"{method} {path} was not successful"
            logger.error("%s %s: %s", method, path, message)
            raise StorageError(message)
        return envelope

    # ---------- Public methods ----------

    async def close(self) -> None:
        """Close underlying HTTP connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_records(self, table: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Read with a field projection plus optional where/whereGroups/orderBy/pagingInfo."""
        return await self._send("POST", self._table_path(table, "fetch"), params)

    async def get_record_by_id(self, table: str, record_id: int, params: Dict[str, Any]) -> Dict[str, Any]:
        return await self._send("POST", self._table_path(table, f"records/{int(record_id)}"), params)

    async def create_record(self, table: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """params: ``{"records": [row, ...]}``"""
        return await self._send("POST", self._table_path(table, "create"), params)

    async def update_record(self, table: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """params: ``{"records": [{"Id": n, ...}, ...]}``"""
        return await self._send("PUT", self._table_path(table, "update"), params)

    async def delete_record(self, table: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """params: ``{"RecordIds": [n, ...]}``"""
        return await self._send("DELETE", self._table_path(table, "delete"), params)
