"""
Record Store Module

Document collection stores used by the data-access layer: the abstract
contract, a Firestore backend and an in-memory backend.
"""

from .record_store import RecordStore
from .in_memory_record_store import InMemoryRecordStore
from .firestore_record_store import FirestoreRecordStore

__all__ = ["RecordStore", "InMemoryRecordStore", "FirestoreRecordStore"]
