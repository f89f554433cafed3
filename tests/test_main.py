from __future__ import annotations

import pytest
from sqlalchemy import inspect

import eduxchange.data.db as db_module
from eduxchange import main
from eduxchange.cli import build_parser
from eduxchange.cli import main as cli_main


def test_main_return_type() -> None:
    """Test that main returns an integer (exit code)."""
    assert callable(main)
    assert main.__annotations__.get("return") is int


def test_serve_defaults() -> None:
    args = build_parser().parse_args(["serve"])
    assert (args.host, args.port, args.reload) == ("127.0.0.1", 8000, False)


def test_command_is_required() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_init_db_creates_tables(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("DB_URL", f"sqlite:///{(tmp_path / 'cli.db').as_posix()}")
    monkeypatch.setattr(db_module, "_engine", None)
    monkeypatch.setattr(db_module, "_SessionLocal", None)

    assert cli_main(["init-db"]) == 0

    tables = set(inspect(db_module._engine).get_table_names())
    assert {"users", "auth_sessions", "profiles", "resources"} <= tables
    db_module.dispose_engine()


def test_serve_runs_uvicorn(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append((app, kwargs)))

    assert cli_main(["serve", "--port", "9000", "--reload"]) == 0
    assert calls == [
        ("eduxchange.api.main:app", {"host": "127.0.0.1", "port": 9000, "reload": True})
    ]
