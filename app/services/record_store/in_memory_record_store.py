"""
In-Memory Record Store Module

Dict-backed RecordStore used for local development (RECORD_STORE_BACKEND=memory)
and tests. Records are copied on the way in and out so callers never share
mutable state with the store.
"""

import copy
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4
from loguru import logger
from app.errors.exceptions import RecordStoreError
from app.services.record_store.record_store import Filters, Record, RecordStore


class InMemoryRecordStore(RecordStore):

    def __init__(self):
        self._collections: Dict[str, Dict[str, Record]] = defaultdict(dict)

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def _with_id(record_id: str, data: Record, id_field: str) -> Record:
        return {id_field: record_id, **copy.deepcopy(data)}

    async def list(self, collection: str, filters: Optional[Filters] = None, id_field: str = "id") -> List[Record]:
        filters = filters or {}
        return [
            self._with_id(record_id, data, id_field)
            for record_id, data in self._collections[collection].items()
            if all(data.get(field) == value for field, value in filters.items())
        ]

    async def get(self, collection: str, record_id: str, id_field: str = "id") -> Optional[Record]:
        data = self._collections[collection].get(record_id)
        if data is None:
            return None
        return self._with_id(record_id, data, id_field)

    async def create(self, collection: str, fields: Record) -> str:
        record_id = uuid4().hex
        now = self._now()
        self._collections[collection][record_id] = {
            **copy.deepcopy(fields),
            "created_at": now,
            "updated_at": now,
        }
        logger.debug(f"Created {collection}/{record_id}")
        return record_id

    async def update(self, collection: str, record_id: str, fields: Record) -> None:
        data = self._collections[collection].get(record_id)
        if data is None:
            raise RecordStoreError(f"No document to update: {collection}/{record_id}")
        data.update(copy.deepcopy(fields))
        data["updated_at"] = self._now()

    async def delete(self, collection: str, record_id: str) -> None:
        self._collections[collection].pop(record_id, None)
