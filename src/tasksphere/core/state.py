# src/tasksphere/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..core.ports import KeyValueStore
from ..projects.project_store import ProjectStore
from ..tasks.task_store import TaskStore
from ..team.team_store import TeamStore


@dataclass
class AppState:
    """
    Explicit application container.

    Every service/query takes the state (or a single store) as an argument;
    nothing reaches for a module-level singleton.
    """

    # Store Settings on the state for easy access in other modules later.
    settings: Any

    kv: KeyValueStore
    task_store: TaskStore
    project_store: ProjectStore
    team_store: TeamStore

    # Serializes multi-store operations (cascading deletes, progress recompute).
    lock: threading.RLock = field(default_factory=threading.RLock)
