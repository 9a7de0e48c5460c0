"""
Record Store Interface Module

This module defines the contract every document store backend implements.
Records live in named collections and are addressed by string ids. Reads
return plain dicts that include the document id under the ``id_field``
requested by the caller.

Dependencies:
- abc: For the abstract base class.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]
Filters = Dict[str, Any]


class RecordStore(ABC):
    """
    Collection-oriented document store.

    Every create stamps ``created_at`` and ``updated_at``; every update stamps
    ``updated_at``. Filters are equality predicates combined with AND.
    """

    @abstractmethod
    async def list(self, collection: str, filters: Optional[Filters] = None, id_field: str = "id") -> List[Record]:
        """List records in a collection matching all equality filters."""

    @abstractmethod
    async def get(self, collection: str, record_id: str, id_field: str = "id") -> Optional[Record]:
        """Get a record by id, or None if it does not exist."""

    @abstractmethod
    async def create(self, collection: str, fields: Record) -> str:
        """Create a record and return its generated id."""

    @abstractmethod
    async def update(self, collection: str, record_id: str, fields: Record) -> None:
        """Merge fields into an existing record.

        Raises:
            RecordStoreError: If the record does not exist or the write fails.
        """

    @abstractmethod
    async def delete(self, collection: str, record_id: str) -> None:
        """Delete a record. Deleting a missing record is not an error."""

    async def close(self) -> None:
        """Release backend resources."""
        return None
