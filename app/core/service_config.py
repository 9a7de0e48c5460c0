"""
Service Configuration Module

Description:
Loads the service configuration from environment variables (and a local .env
file) into a validated ServiceConfig model. The configuration is built once in
the application lifespan and handed to the components that need it.

Dependencies:
- dotenv: For environment variable loading.
- pydantic: For validating and typing the configuration values.
- loguru: For logging configuration problems.
"""

import os
from enum import Enum
from typing import List, Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from loguru import logger

load_dotenv()

DEFAULT_ASSISTANT_ID = "a1218d48-1102-4890-a0a6-d0ed2d207410"
DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:8080",
]


class RecordStoreBackend(str, Enum):
    FIRESTORE = "firestore"
    MEMORY = "memory"


class TranscriptMode(str, Enum):
    """How transcript events from the voice provider are applied."""
    REPLACE = "replace"  # each event carries the full text so far
    ACCUMULATE = "accumulate"  # each event carries only the new fragment


class ServiceConfig(BaseModel):
    """Validated runtime configuration."""
    record_store_backend: RecordStoreBackend = RecordStoreBackend.FIRESTORE
    firebase_credentials_path: Optional[str] = None
    vapi_api_key: str = ""
    vapi_base_url: str = "https://api.vapi.ai"
    vapi_assistant_id: str = DEFAULT_ASSISTANT_ID
    vapi_concurrency_limit: int = Field(default=10, gt=0)
    interview_max_duration_seconds: int = Field(default=900, gt=0)
    interview_warning_threshold_seconds: int = Field(default=120, ge=0)
    warning_auto_dismiss_seconds: int = Field(default=5, gt=0)
    transcript_mode: TranscriptMode = TranscriptMode.REPLACE
    concurrency_refresh_seconds: float = Field(default=300, gt=0)
    cors_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))


def _split_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def load_config() -> ServiceConfig:
    """Build the service configuration from the environment.

    Returns:
        ServiceConfig: The validated configuration.

    Raises:
        ValueError: If a variable required by the selected backend is missing.
    """
    values = {
        "record_store_backend": os.getenv("RECORD_STORE_BACKEND", RecordStoreBackend.FIRESTORE.value),
        "firebase_credentials_path": os.getenv("FIREBASE_CREDENTIALS_PATH"),
        "vapi_api_key": os.getenv("VAPI_API_KEY", ""),
        "vapi_base_url": os.getenv("VAPI_BASE_URL", "https://api.vapi.ai"),
        "vapi_assistant_id": os.getenv("VAPI_ASSISTANT_ID", DEFAULT_ASSISTANT_ID),
        "vapi_concurrency_limit": os.getenv("VAPI_CONCURRENCY_LIMIT", "10"),
        "interview_max_duration_seconds": os.getenv("INTERVIEW_MAX_DURATION_SECONDS", "900"),
        "interview_warning_threshold_seconds": os.getenv("INTERVIEW_WARNING_THRESHOLD_SECONDS", "120"),
        "transcript_mode": os.getenv("TRANSCRIPT_MODE", TranscriptMode.REPLACE.value),
        "concurrency_refresh_seconds": os.getenv("CONCURRENCY_REFRESH_SECONDS", "300"),
        "cors_origins": _split_origins(os.getenv("CORS_ORIGINS")),
    }
    config = ServiceConfig(**values)

    # Validate required configuration for the selected backend
    required_vars = {}
    if config.record_store_backend == RecordStoreBackend.FIRESTORE:
        required_vars["FIREBASE_CREDENTIALS_PATH"] = config.firebase_credentials_path
    missing_vars = [var for var, value in required_vars.items() if not value]
    if missing_vars:
        raise ValueError(f"Missing required environment variables: {', '.join(missing_vars)}")

    if not config.vapi_api_key:
        logger.warning("VAPI_API_KEY not set - conversation transcripts cannot be fetched for reports")

    return config
