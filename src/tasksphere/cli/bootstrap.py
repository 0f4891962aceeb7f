# src/tasksphere/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the key-value store and the three collection stores into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..projects.project_store import ProjectStore
from ..storage.kv_store import SqliteKeyValueStore
from ..tasks.task_store import TaskStore
from ..team.team_store import TeamStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    kv = SqliteKeyValueStore(settings.db_path)
    state = AppState(
        settings=settings,
        kv=kv,
        task_store=TaskStore(kv),
        project_store=ProjectStore(kv),
        team_store=TeamStore(kv),
    )
    logger.info(
        "State ready tasks=%d projects=%d members=%d",
        state.task_store.count(),
        state.project_store.count(),
        state.team_store.count(),
    )
    return state
