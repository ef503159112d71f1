"""
Tests for application startup.
"""

from fastapi.testclient import TestClient

from rolegate.core.config import AuthSettings, DatabaseSettings
from rolegate.main import create_app


def test_default_settings_seed_an_in_memory_database():
    assert DatabaseSettings().url == "sqlite+aiosqlite:///:memory:"
    assert AuthSettings().seed_defaults is True


def test_startup_serves_the_seeded_roles():
    with TestClient(create_app()) as client:
        health = client.get("/health")
        guest = client.get("/api/users")
        admin = client.get("/api/users", params={"role": "admin"})

    assert health.json()["roles"] == ["admin", "guest"]
    assert guest.status_code == 200
    assert guest.json() == [{"email": "user@example.org"}]
    assert admin.status_code == 200
    assert set(admin.json()[0]) == {"id", "email"}
