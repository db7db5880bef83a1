"""
Record stores: one contract, two interchangeable backends.

``RemoteRecordStore`` talks to the hosted record API and translates between
record attributes and the ``_c`` storage columns. ``MockRecordStore`` keeps
an in-memory list seeded from a JSON fixture. Both return the same record
models, so callers never need to know which one they hold. The backend is
picked once when the stores are built (see ``build_store``).
"""

from __future__ import annotations

import abc
import asyncio
import copy
import json
import logging
import random
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError as ModelError

from ..core.config import Settings
from ..core.errors import NotFoundError, StorageError
from ..core.models import Record
from .api_client import RecordAPIClient
from .query import Query, apply_query

logger = logging.getLogger(__name__)

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"

R = TypeVar("R", bound=Record)
RecordData = Union[Mapping[str, Any], BaseModel]


# -----------------------------
# Field translation
# -----------------------------


def to_timestamp(value: Any) -> Any:
    """Dates go to storage as ISO timestamps; everything else is untouched."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.isoformat() + "Z"
        return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
    if isinstance(value, date):
        return f"{value.isoformat()}T00:00:00Z"
    return value


@dataclass
class EntitySchema(Generic[R]):
    """Everything the stores need to know about one entity."""

    label: str  # "Employee", used in messages
    table: str
    model: Type[R]
    columns: Dict[str, str]  # attribute -> storage column
    fixture: str
    # Computed "Name" column written alongside the record (None = skip)
    name_column: Optional[Callable[[Mapping[str, Any]], Optional[str]]] = None
    lookup_fields: tuple = ()
    write_defaults: Dict[str, Any] = field(default_factory=dict)

    # ---- attribute normalisation ----

    def normalize(self, data: RecordData) -> Dict[str, Any]:
        """Accept a model or a dict keyed by attribute names or UI aliases."""
        if isinstance(data, BaseModel):
            raw = data.model_dump()
        else:
            raw = dict(data)
        by_alias = {
            (info.alias or name): name for name, info in self.model.model_fields.items()
        }
        out: Dict[str, Any] = {}
        for key, value in raw.items():
            name = key if key in self.model.model_fields else by_alias.get(key)
            if name is None or name == "id":
                continue
            out[name] = value.value if isinstance(value, Enum) else value
        return out

    # ---- storage row <-> record ----

    def to_row(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        row: Dict[str, Any] = {}
        for attr, value in data.items():
            column = self.columns.get(attr)
            if column is None:
                continue
            row[column] = to_timestamp(value)
        if self.name_column is not None and "Name" not in row:
            name = self.name_column(data)
            if name is not None:
                row["Name"] = name
        return row

    def from_row(self, row: Mapping[str, Any]) -> R:
        values: Dict[str, Any] = {"id": row.get("Id")}
        for attr, column in self.columns.items():
            value = row.get(column)
            if attr in self.lookup_fields and isinstance(value, Mapping):
                value = value.get("Id")
            if value is None or value == "":
                # model default applies (e.g. status -> Active / Pending)
                continue
            values[attr] = value
        try:
            return self.model.model_validate(values)
        except ModelError as exc:
            logger.error("Malformed %s row %s: %s", self.label.lower(), row.get("Id"), exc)
            raise StorageError(
                f"Malformed {self.label.lower()} record {row.get('Id')}: {exc.error_count()} invalid field(s)"
            ) from exc

    def column_for(self, attr: str) -> str:
        try:
            return self.columns[attr]
        except KeyError:
            raise StorageError(f"{self.label} has no field {attr!r}") from None

    def read_params(self, query: Optional[Query] = None) -> Dict[str, Any]:
        """Build the field-projection request for a read."""
        columns = ["Name"] + [c for c in self.columns.values() if c != "Name"]
        params: Dict[str, Any] = {"fields": [{"field": {"Name": c}} for c in columns]}
        if query is None:
            return params
        if query.where:
            params["where"] = [
                {
                    "FieldName": self.column_for(c.field),
                    "Operator": c.operator,
                    "Values": [to_timestamp(v) for v in c.values],
                }
                for c in query.where
            ]
        if query.groups:
            params["whereGroups"] = [
                {
                    "operator": g.operator,
                    "subGroups": [
                        {
                            "conditions": [
                                {
                                    "fieldName": self.column_for(c.field),
                                    "operator": c.operator,
                                    "values": [to_timestamp(v) for v in c.values],
                                }
                            ]
                        }
                        for c in g.conditions
                    ],
                }
                for g in query.groups
            ]
        if query.order_by:
            params["orderBy"] = [
                {
                    "fieldName": self.column_for(query.order_by),
                    "sorttype": "DESC" if query.descending else "ASC",
                }
            ]
        if query.limit is not None:
            params["pagingInfo"] = {"limit": query.limit, "offset": query.offset}
        return params


def unwrap_results(envelope: Mapping[str, Any], label: str, action: str) -> Dict[str, Any]:
    """
    Return the first successful result of a batch write.

    Any failed entry raises with the first failure's message; a batch with no
    success at all is a failure too.
    """
    results = envelope.get("results")
    if results is None:
        data = envelope.get("data")
        if isinstance(data, list):
            data = data[0] if data else None
        return {"success": True, "data": data}

    failed = [r for r in results if not r.get("success")]
    if failed:
        logger.error("Failed to %s %s %d records: %s", action, label.lower(), len(failed), json.dumps(failed, default=str))
        first = failed[0]
        errors = first.get("errors") or []
        if errors:
            err = errors[0]
            raise StorageError(f"{err.get('fieldLabel', '')}: {err.get('message', '')}")
        raise StorageError(first.get("message") or f"Failed to {action} {label.lower()}")

    succeeded = [r for r in results if r.get("success")]
    if not succeeded:
        raise StorageError(f"Failed to {action} {label.lower()}")
    return succeeded[0]


# -----------------------------
# Store contract
# -----------------------------


class RecordStore(abc.ABC, Generic[R]):
    """get_all / get_by_id / create / update / delete (+ query) for one entity."""

    def __init__(self, schema: EntitySchema[R]) -> None:
        self.schema = schema

    @abc.abstractmethod
    async def get_all(self) -> List[R]: ...

    @abc.abstractmethod
    async def get_by_id(self, record_id: int | str) -> Optional[R]: ...

    @abc.abstractmethod
    async def create(self, data: RecordData) -> R: ...

    @abc.abstractmethod
    async def update(self, record_id: int | str, data: RecordData) -> R: ...

    @abc.abstractmethod
    async def delete(self, record_id: int | str) -> bool: ...

    @abc.abstractmethod
    async def query(self, query: Query) -> List[R]: ...


class RemoteRecordStore(RecordStore[R]):
    def __init__(self, schema: EntitySchema[R], client: Optional[RecordAPIClient] = None) -> None:
        super().__init__(schema)
        self.client = client or RecordAPIClient.get()

    async def get_all(self) -> List[R]:
        return await self.query(Query())

    async def query(self, query: Query) -> List[R]:
        envelope = await self.client.fetch_records(self.schema.table, self.schema.read_params(query))
        rows = envelope.get("data") or []
        return [self.schema.from_row(row) for row in rows]

    async def get_by_id(self, record_id: int | str) -> Optional[R]:
        try:
            envelope = await self.client.get_record_by_id(
                self.schema.table, int(record_id), self.schema.read_params()
            )
        except NotFoundError:
            return None
        row = envelope.get("data")
        if not row:
            return None
        return self.schema.from_row(row)

    async def create(self, data: RecordData) -> R:
        values = {**self.schema.write_defaults, **self.schema.normalize(data)}
        row = self.schema.to_row(values)
        envelope = await self.client.create_record(self.schema.table, {"records": [row]})
        result = unwrap_results(envelope, self.schema.label, "create")
        return self._record_from(result, "create")

    async def update(self, record_id: int | str, data: RecordData) -> R:
        row = {"Id": int(record_id), **self.schema.to_row(self.schema.normalize(data))}
        envelope = await self.client.update_record(self.schema.table, {"records": [row]})
        result = unwrap_results(envelope, self.schema.label, "update")
        return self._record_from(result, "update")

    def _record_from(self, result: Mapping[str, Any], action: str) -> R:
        row = result.get("data")
        if not row:
            raise StorageError(f"The record API returned no {self.schema.label.lower()} after {action}")
        return self.schema.from_row(row)

    async def delete(self, record_id: int | str) -> bool:
        envelope = await self.client.delete_record(self.schema.table, {"RecordIds": [int(record_id)]})
        unwrap_results(envelope, self.schema.label, "delete")
        return True


class MockRecordStore(RecordStore[R]):
    """In-memory store seeded from a fixture; every call waits a simulated latency."""

    def __init__(
        self,
        schema: EntitySchema[R],
        seed: Optional[List[Mapping[str, Any]]] = None,
        latency: tuple[float, float] = (0.2, 0.4),
    ) -> None:
        super().__init__(schema)
        if seed is None:
            seed = load_fixture(schema.fixture)
        self._records: List[R] = [schema.model.model_validate(copy.deepcopy(dict(r))) for r in seed]
        self.latency = latency

    async def _delay(self) -> None:
        low, high = self.latency
        if high > 0:
            await asyncio.sleep(random.uniform(low, max(low, high)))

    def _find(self, record_id: int | str) -> Optional[R]:
        rid = int(record_id)
        for rec in self._records:
            if rec.id == rid:
                return rec
        return None

    async def get_all(self) -> List[R]:
        await self._delay()
        return [rec.model_copy(deep=True) for rec in self._records]

    async def query(self, query: Query) -> List[R]:
        await self._delay()
        by_id = {rec.id: rec for rec in self._records}
        rows = apply_query([rec.model_dump() for rec in self._records], query)
        return [by_id[row["id"]].model_copy(deep=True) for row in rows]

    async def get_by_id(self, record_id: int | str) -> Optional[R]:
        await self._delay()
        rec = self._find(record_id)
        return rec.model_copy(deep=True) if rec else None

    async def create(self, data: RecordData) -> R:
        await self._delay()
        values = {**self.schema.write_defaults, **self.schema.normalize(data)}
        new_id = max((rec.id or 0 for rec in self._records), default=0) + 1
        rec = self.schema.model.model_validate({**values, "id": new_id})
        self._records.append(rec)
        return rec.model_copy(deep=True)

    async def update(self, record_id: int | str, data: RecordData) -> R:
        await self._delay()
        current = self._find(record_id)
        if current is None:
            raise NotFoundError(f"{self.schema.label} not found")
        merged = {**current.model_dump(), **self.schema.normalize(data), "id": current.id}
        rec = self.schema.model.model_validate(merged)
        self._records[self._records.index(current)] = rec
        return rec.model_copy(deep=True)

    async def delete(self, record_id: int | str) -> bool:
        await self._delay()
        current = self._find(record_id)
        if current is None:
            raise NotFoundError(f"{self.schema.label} not found")
        self._records.remove(current)
        return True


def load_fixture(filename: str) -> List[Dict[str, Any]]:
    path = FIXTURES_DIR / filename
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise StorageError(f"Fixture {filename} must hold a list of records")
    return data


def build_store(schema: EntitySchema[R], settings: Settings, client: Optional[RecordAPIClient] = None) -> RecordStore[R]:
    """Pick the backend for ``schema`` once, at composition time."""
    if settings.use_remote:
        logger.info("Using remote record API for %s", schema.table)
        return RemoteRecordStore(schema, client=client or RecordAPIClient.get())
    logger.info("Using mock store for %s", schema.table)
    return MockRecordStore(schema, latency=(settings.mock_latency_min, settings.mock_latency_max))
