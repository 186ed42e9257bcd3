"""
Pytest configuration and fixtures for test suite.
"""
import os
from datetime import date
from pathlib import Path
from unittest.mock import Mock

import pytest

ROOT = Path(__file__).resolve().parent.parent
SEED_FILE = ROOT / "config" / "seed_records.yaml"

os.environ.setdefault("API_CONFIG", str(ROOT / "config" / "api_config.yaml"))
os.environ.setdefault("TRACKER_CONFIG", str(ROOT / "config" / "tracker_config.yaml"))

from fastapi.testclient import TestClient
from app import app
from compliance_tracker.api.routes import get_record_store, get_scanner, get_session_registry
from compliance_tracker.notifications.markers import InMemoryMarkerStore
from compliance_tracker.notifications.scanner import ExpiryNotificationScanner, SessionRegistry
from compliance_tracker.storage.record_store import InMemoryRecordStore, create_record_store


@pytest.fixture
def today():
    """Fixed reference day used by scenario tests."""
    return date(2024, 6, 1)


@pytest.fixture
def seeded_store():
    """Record store loaded with the sample records."""
    return create_record_store(SEED_FILE)


@pytest.fixture
def empty_store():
    return InMemoryRecordStore()


@pytest.fixture
def mock_sender():
    """Notification sender double; send succeeds."""
    sender = Mock()
    sender.send = Mock(return_value=True)
    return sender


@pytest.fixture
def scanner(mock_sender):
    """Scanner with an in-memory marker store and a mocked sender."""
    return ExpiryNotificationScanner(
        marker_store=InMemoryMarkerStore(),
        sender=mock_sender,
        recipient="admin@example.com",
    )


@pytest.fixture
def client(empty_store, scanner):
    """
    Fixture that provides a TestClient instance for the FastAPI app with
    isolated store, scanner and session registry.
    """
    registry = SessionRegistry()
    app.dependency_overrides[get_record_store] = lambda: empty_store
    app.dependency_overrides[get_scanner] = lambda: scanner
    app.dependency_overrides[get_session_registry] = lambda: registry
    yield TestClient(app)
    app.dependency_overrides.clear()
