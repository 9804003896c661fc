"""pytest configuration for Mobile WiFi Server tests."""

import pytest
from fastapi.testclient import TestClient

from wifi_server.main import create_app
from wifi_server.media import MediaStore
from wifi_server.store import RegistryCoordinator


@pytest.fixture()
def coordinator():
    return RegistryCoordinator()


@pytest.fixture()
def media_store(tmp_path):
    return MediaStore(tmp_path / "uploads")


@pytest.fixture()
def app(coordinator, media_store):
    return create_app(coordinator=coordinator, media_store=media_store)


@pytest.fixture()
def client(app):
    # Entering the client runs the lifespan, which creates the upload dirs
    with TestClient(app) as client:
        yield client
