"""
API Dependencies

Provides dependency injection for API endpoints. The components are built once
by the application lifespan and kept on app.state; these functions hand them
to route handlers so tests can swap them with app.dependency_overrides.
"""

from fastapi import Request
from starlette.requests import HTTPConnection
from app.core.service_config import ServiceConfig
from app.services.concurrency import ConcurrencyAdvisor, SessionUsageTracker
from app.services.record_store import RecordStore
from app.services.report_generation import ReportGenerator


def get_service_config(connection: HTTPConnection) -> ServiceConfig:
    return connection.app.state.config


def get_record_store(connection: HTTPConnection) -> RecordStore:
    return connection.app.state.record_store


def get_report_generator(connection: HTTPConnection) -> ReportGenerator:
    return connection.app.state.report_generator


def get_concurrency_advisor(request: Request) -> ConcurrencyAdvisor:
    return request.app.state.concurrency_advisor


def get_usage_tracker(connection: HTTPConnection) -> SessionUsageTracker:
    return connection.app.state.usage_tracker
