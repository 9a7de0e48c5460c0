"""
Firestore Record Store Module

This module implements the RecordStore contract on Cloud Firestore through the
Firebase Admin SDK. The SDK client is synchronous, so every call is moved off
the event loop with asyncio.to_thread.

Dependencies:
- firebase_admin: For the Firestore client and server timestamps.
- google.api_core: For the SDK's exception types.
- loguru: For logging operations.
"""

import asyncio
from typing import Any, List, Optional
from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter
from loguru import logger
from app.errors.exceptions import RecordStoreError
from app.services.record_store.record_store import Filters, Record, RecordStore


class FirestoreRecordStore(RecordStore):
    """
    RecordStore backed by a Firestore client.

    Args:
        client: A google.cloud.firestore.Client, usually obtained from
            firebase_admin.firestore.client(app).
    """

    def __init__(self, client: Any):
        self.client = client

    async def list(self, collection: str, filters: Optional[Filters] = None, id_field: str = "id") -> List[Record]:
        def _list():
            query = self.client.collection(collection)
            for field, value in (filters or {}).items():
                query = query.where(filter=FieldFilter(field, "==", value))
            return [{id_field: doc.id, **doc.to_dict()} for doc in query.stream()]

        try:
            return await asyncio.to_thread(_list)
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"Error listing {collection}: {e}")
            raise RecordStoreError(f"Failed to list {collection}") from e

    async def get(self, collection: str, record_id: str, id_field: str = "id") -> Optional[Record]:
        def _get():
            snapshot = self.client.collection(collection).document(record_id).get()
            if not snapshot.exists:
                return None
            return {id_field: snapshot.id, **snapshot.to_dict()}

        try:
            return await asyncio.to_thread(_get)
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"Error getting {collection}/{record_id}: {e}")
            raise RecordStoreError(f"Failed to get {collection}/{record_id}") from e

    async def create(self, collection: str, fields: Record) -> str:
        def _create():
            _, doc_ref = self.client.collection(collection).add({
                **fields,
                "created_at": firestore.SERVER_TIMESTAMP,
                "updated_at": firestore.SERVER_TIMESTAMP,
            })
            return doc_ref.id

        try:
            record_id = await asyncio.to_thread(_create)
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"Error creating document in {collection}: {e}")
            raise RecordStoreError(f"Failed to create document in {collection}") from e
        logger.debug(f"Created {collection}/{record_id}")
        return record_id

    async def update(self, collection: str, record_id: str, fields: Record) -> None:
        def _update():
            self.client.collection(collection).document(record_id).update({
                **fields,
                "updated_at": firestore.SERVER_TIMESTAMP,
            })

        try:
            await asyncio.to_thread(_update)
        except google_exceptions.NotFound as e:
            raise RecordStoreError(f"No document to update: {collection}/{record_id}") from e
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"Error updating {collection}/{record_id}: {e}")
            raise RecordStoreError(f"Failed to update {collection}/{record_id}") from e

    async def delete(self, collection: str, record_id: str) -> None:
        try:
            await asyncio.to_thread(self.client.collection(collection).document(record_id).delete)
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"Error deleting {collection}/{record_id}: {e}")
            raise RecordStoreError(f"Failed to delete {collection}/{record_id}") from e

    async def close(self) -> None:
        await asyncio.to_thread(self.client.close)
