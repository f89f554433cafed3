"""Environment-driven configuration.

Every accessor re-reads the environment so tests can override values with
``monkeypatch.setenv`` without reloading modules.
"""

from __future__ import annotations

import os
from pathlib import Path

from sqlalchemy.engine import URL

STORAGE_BACKEND_LOCAL = "local"
STORAGE_BACKEND_SUPABASE = "supabase"
SESSION_COOKIE_NAME = "eduxchange_session"


def get_project_root() -> Path:
    """Return the repository root (two levels above the package)."""
    return Path(__file__).resolve().parents[2]


def get_database_url() -> str:
    """Return the database URL, allowing overrides via environment variable."""
    env_url = os.getenv("DB_URL")
    if env_url:
        return env_url

    db_path = get_project_root() / "eduxchange.db"
    return URL.create("sqlite", database=str(db_path)).render_as_string(hide_password=False)


def get_storage_backend() -> str:
    """Return the configured object store backend name."""
    return os.getenv("EDUXCHANGE_STORAGE_BACKEND", STORAGE_BACKEND_LOCAL).strip().lower()


def get_storage_root() -> Path:
    """Return the root directory used by the local object store."""
    env_root = os.getenv("EDUXCHANGE_STORAGE_DIR")
    if env_root:
        return Path(env_root).expanduser().resolve()
    return get_project_root() / ".eduxchange_storage"


def get_public_base_url() -> str:
    """Return the prefix for public URLs of locally stored files (may be empty)."""
    return os.getenv("EDUXCHANGE_PUBLIC_BASE_URL", "").rstrip("/")


def get_supabase_credentials() -> tuple[str, str] | None:
    """Return ``(url, key)`` for Supabase Storage, or None when unset."""
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_KEY")
    if not url or not key:
        return None
    return url, key


def get_log_level() -> str:
    return os.getenv("EDUXCHANGE_LOG_LEVEL", "INFO").upper()
