"""Record Store Configuration and Connection Management Module

This module builds the record store the application talks to. With the
Firestore backend it initialises a dedicated Firebase Admin app from the
service account credentials file and wraps its Firestore client; with the
memory backend it returns an empty in-memory store for local development.

The store is created once by the application lifespan and shared through
FastAPI dependencies, never as a module-level global.

Dependencies:
- firebase_admin: For Firebase app initialisation and the Firestore client.
- loguru: For logging operations.
- app.core.service_config: For the selected backend and credentials path.
- app.services.record_store: For the store implementations.
"""

import os
import firebase_admin
from firebase_admin import credentials, firestore
from loguru import logger
from app.core.service_config import RecordStoreBackend, ServiceConfig
from app.services.record_store import FirestoreRecordStore, InMemoryRecordStore, RecordStore

FIREBASE_APP_NAME = "interview-practice-service"


def _initialize_firebase_app(credentials_path: str) -> firebase_admin.App:
    """Initialise (or reuse) the named Firebase app.

    Raises:
        FileNotFoundError: If the credentials file does not exist
    """
    if not os.path.exists(credentials_path):
        logger.error(f"Firebase credentials file not found at {credentials_path}")
        raise FileNotFoundError(f"Firebase credentials file not found at {credentials_path}")
    try:
        return firebase_admin.get_app(FIREBASE_APP_NAME)
    except ValueError:
        cred = credentials.Certificate(credentials_path)
        return firebase_admin.initialize_app(cred, name=FIREBASE_APP_NAME)


def create_record_store(config: ServiceConfig) -> RecordStore:
    """Create the record store for the configured backend.

    Args:
        config (ServiceConfig): Service configuration

    Returns:
        RecordStore: Firestore-backed or in-memory store

    Raises:
        FileNotFoundError: If Firestore is selected and the credentials file is missing
    """
    if config.record_store_backend == RecordStoreBackend.MEMORY:
        logger.warning("Using in-memory record store - data is lost on restart")
        return InMemoryRecordStore()

    try:
        app = _initialize_firebase_app(config.firebase_credentials_path)
        store = FirestoreRecordStore(firestore.client(app))
        logger.info("Firestore record store initialized successfully")
        return store
    except Exception as e:
        logger.error(f"Error initializing Firestore record store: {e}")
        raise


async def close_record_store(store: RecordStore) -> None:
    """Close the store and release the Firebase app if one was created."""
    try:
        await store.close()
    finally:
        if isinstance(store, FirestoreRecordStore):
            try:
                firebase_admin.delete_app(firebase_admin.get_app(FIREBASE_APP_NAME))
            except ValueError:
                logger.warning("Firebase app already released")
