"""Shared fixtures: a fresh in-memory store and an app built around it."""

import pytest
from fastapi.testclient import TestClient

from action_tracker.database import ActionStore
from action_tracker.main import create_app


@pytest.fixture(name="store")
def store_fixture():
    """Create a fresh in-memory database for each test."""
    store = ActionStore("sqlite://")
    store.initialize()
    yield store
    store.close()


@pytest.fixture(name="client")
def client_fixture(store: ActionStore):
    """Create a test client for an app that owns the in-memory store."""
    with TestClient(create_app(store)) as client:
        yield client
