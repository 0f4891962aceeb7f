# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from tasksphere.core.state import AppState
from tasksphere.projects.project_store import ProjectStore
from tasksphere.storage.kv_store import SqliteKeyValueStore
from tasksphere.tasks.task_store import TaskStore
from tasksphere.team.team_store import TeamStore


@pytest.fixture()
def now() -> datetime:
    """Fixed clock for date-dependent assertions."""
    return datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="TaskSphere-test",
        log_level="DEBUG",
        console_enabled=False,
        data_dir=tmp_path,
        db_path=tmp_path / "tasksphere.sqlite3",
        log_dir=tmp_path,
        upcoming_days=7,
    )


@pytest.fixture()
def kv(settings: SimpleNamespace) -> SqliteKeyValueStore:
    return SqliteKeyValueStore(settings.db_path)


@pytest.fixture()
def state(settings: SimpleNamespace, kv: SqliteKeyValueStore) -> AppState:
    """
    AppState wired with real SQLite-backed stores.

    Persistence is part of what we want to test, so nothing is faked here.
    """
    return AppState(
        settings=settings,
        kv=kv,
        task_store=TaskStore(kv),
        project_store=ProjectStore(kv),
        team_store=TeamStore(kv),
    )
