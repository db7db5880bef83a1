"""Shared CRUD surface for the per-entity services."""

from __future__ import annotations

from typing import Generic, List, Optional

from .query import Query
from .record_store import R, RecordData, RecordStore


class EntityService(Generic[R]):
    """Delegates the five store operations; subclasses add entity queries."""

    def __init__(self, store: RecordStore[R]) -> None:
        self.store = store

    @property
    def label(self) -> str:
        return self.store.schema.label

    async def get_all(self) -> List[R]:
        return await self.store.get_all()

    async def get_by_id(self, record_id: int | str) -> Optional[R]:
        return await self.store.get_by_id(record_id)

    async def create(self, data: RecordData) -> R:
        return await self.store.create(data)

    async def update(self, record_id: int | str, data: RecordData) -> R:
        return await self.store.update(record_id, data)

    async def delete(self, record_id: int | str) -> bool:
        return await self.store.delete(record_id)

    async def query(self, query: Query) -> List[R]:
        return await self.store.query(query)
