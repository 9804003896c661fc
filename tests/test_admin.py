"""
Tests for admin routes
"""

import logging

from fastapi.testclient import TestClient

from wifi_server.main import create_app
from wifi_server.media import MediaStore


def test_list_devices_empty(client):
    response = client.get("/admin/devices")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "success"
    assert data["total_devices"] == 0
    assert data["devices"] == []


def test_list_devices(client):
    """Test the joined device listing."""
    client.post("/register_device", json={"device_id": "dev1"})
    client.post("/register_device", json={"device_id": "dev2"})
    client.post("/admin/send_command", json={"device_id": "dev1", "command": "REBOOT"})
    client.post(
        "/update_status",
        json={"device_id": "dev2", "status": "recording", "screen_recording": True},
    )

    data = client.get("/admin/devices").json()
    assert data["total_devices"] == 2

    devices = {d["device_id"]: d for d in data["devices"]}
    assert set(devices) == {"dev1", "dev2"}

    assert devices["dev1"]["status"] == "unknown"
    assert devices["dev1"]["pending_commands"] == 1
    assert devices["dev1"]["ip"] == "testclient"
    assert devices["dev1"]["registered_at"]
    assert devices["dev1"]["last_seen"]

    assert devices["dev2"]["status"] == "recording"
    assert devices["dev2"]["recording"] is False
    assert devices["dev2"]["screen_recording"] is True
    assert devices["dev2"]["pending_commands"] == 0


def test_list_devices_twice_is_stable(client):
    for device_id in ("a", "b", "c"):
        client.post("/register_device", json={"device_id": device_id})

    def snapshot():
        return {
            (d["device_id"], d["last_seen"], d["pending_commands"])
            for d in client.get("/admin/devices").json()["devices"]
        }

    assert snapshot() == snapshot()


def test_send_command(client):
    client.post("/register_device", json={"device_id": "dev1"})
    response = client.post(
        "/admin/send_command", json={"device_id": "dev1", "command": "TAKE_PHOTO"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "success"
    assert data["device_id"] == "dev1"
    assert data["command"] == "TAKE_PHOTO"
    assert data["pending_commands"] == 1

    response = client.post(
        "/admin/send_command", json={"device_id": "dev1", "command": "TAKE_PHOTO"}
    )
    assert response.json()["pending_commands"] == 2


def test_send_command_unregistered(client):
    response = client.post("/admin/send_command", json={"device_id": "ghost", "command": "X"})
    assert response.status_code == 404


def test_send_command_missing_fields(client):
    client.post("/register_device", json={"device_id": "dev1"})
    assert client.post("/admin/send_command", json={"device_id": "dev1"}).status_code == 400
    assert client.post("/admin/send_command", json={"command": "X"}).status_code == 400
    response = client.post("/admin/send_command", json={"device_id": "dev1", "command": ""})
    assert response.status_code == 400


def test_clear_commands(client):
    client.post("/register_device", json={"device_id": "dev1"})
    client.post("/admin/send_command", json={"device_id": "dev1", "command": "A"})
    client.post("/admin/send_command", json={"device_id": "dev1", "command": "B"})

    response = client.delete("/admin/clear_commands/dev1")
    assert response.status_code == 200
    assert response.json()["status"] == "success"

    assert client.get("/get_commands/dev1").json()["commands"] == []


def test_clear_commands_unknown_device(client, caplog):
    with caplog.at_level(logging.WARNING, logger="wifi_server.routers.admin"):
        response = client.delete("/admin/clear_commands/ghost")
    assert response.status_code == 404
    assert "ghost" in caplog.text


def test_unexpected_error_returns_500(app, coordinator, monkeypatch):
    """Unexpected failures surface as a generic internal error."""

    def broken():
        raise RuntimeError("boom")

    monkeypatch.setattr(coordinator, "list_devices", broken)
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/admin/devices")
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_send_command_without_body(client):
    assert client.post("/admin/send_command").status_code == 400


def test_send_command_form_body(client):
    client.post("/register_device", data={"device_id": "dev1"})
    response = client.post(
        "/admin/send_command", data={"device_id": "dev1", "command": "REBOOT"}
    )
    assert response.status_code == 200
    assert response.json()["pending_commands"] == 1
    assert client.get("/get_commands/dev1").json()["commands"] == ["REBOOT"]


def test_cors_preflight(client):
    """Browser admin pages on another origin may call the API."""
    response = client.options(
        "/admin/devices",
        headers={
            "Origin": "http://admin.example",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in ("*", "http://admin.example")

    response = client.get("/admin/devices", headers={"Origin": "http://admin.example"})
    assert "access-control-allow-origin" in response.headers


def test_upload_dirs_created_at_startup(tmp_path):
    """Building the app touches no disk; starting it creates the upload dirs."""
    root = tmp_path / "uploads"
    app = create_app(media_store=MediaStore(root))
    assert not root.exists()

    with TestClient(app):
        assert (root / "photos").is_dir()
        assert (root / "screen_recordings").is_dir()
