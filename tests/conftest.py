from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

import eduxchange.data.db as app_db
from eduxchange.api.main import app
from eduxchange.data.db import init_db


@pytest.fixture
def api_db(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Use a temporary SQLite DB and local object store for API tests."""
    db_path = tmp_path / "api.db"
    monkeypatch.setenv("DB_URL", f"sqlite:///{db_path.as_posix()}")
    storage_root = tmp_path / "storage"
    monkeypatch.setenv("EDUXCHANGE_STORAGE_BACKEND", "local")
    monkeypatch.setenv("EDUXCHANGE_STORAGE_DIR", storage_root.as_posix())
    monkeypatch.delenv("EDUXCHANGE_PUBLIC_BASE_URL", raising=False)
    app_db._engine = None
    app_db._SessionLocal = None
    init_db()
    yield
    # Dispose engine to release connections
    if app_db._engine is not None:
        app_db._engine.dispose()
        app_db._engine = None
        app_db._SessionLocal = None


@pytest.fixture
def client(api_db: None) -> TestClient:
    """Create a test client backed by the temporary database."""
    return TestClient(app)


@pytest.fixture
def make_user(api_db: None, client: TestClient) -> Callable[..., dict[str, str]]:
    """Return a factory that signs up a user and returns bearer auth headers."""

    def _make_user(
        email: str = "student@example.com",
        password: str = "secret123",
        full_name: str = "Test Student",
    ) -> dict[str, str]:
        response = client.post(
            "/api/auth/signup",
            json={"email": email, "password": password, "full_name": full_name},
        )
        assert response.status_code == 201, response.text
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        token = response.json()["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _make_user

