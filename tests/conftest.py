"""Pytest configuration and shared fixtures."""

import os

# Config.from_env requires a URI; pymongo does not connect until first use
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")

import pytest
from fastapi.testclient import TestClient

from jobtracker.config import Config, MongoConfig
from jobtracker.services.application_service import ApplicationService
from jobtracker.services.broadcast_hub import BroadcastHub
from tests.helpers import FakeCollection


@pytest.fixture
def config() -> Config:
    return Config(mongo=MongoConfig(uri="mongodb://localhost:27017"))


@pytest.fixture
def store() -> FakeCollection:
    return FakeCollection()


@pytest.fixture
def service(config, store) -> ApplicationService:
    return ApplicationService(config, col=store)


@pytest.fixture
def acme_payload() -> dict:
    return {"company": "Acme", "position": "Engineer"}


@pytest.fixture
def client(monkeypatch, service):
    """TestClient wired to an in-memory store and a fresh broadcast hub."""
    from jobtracker.api.main import app
    from jobtracker.services import container

    async def snapshot():
        return service.list_applications()

    monkeypatch.setattr(container, "application_service", service)
    monkeypatch.setattr(container, "broadcast_hub", BroadcastHub(snapshot, send_timeout=1.0))

    with TestClient(app) as test_client:
        yield test_client
