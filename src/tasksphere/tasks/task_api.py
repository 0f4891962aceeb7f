# src/tasksphere/tasks/task_api.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime
from uuid import UUID

from ..core.integrity import CascadeReport, EntityKind, cascade_delete
from ..core.state import AppState
from ..core.timeutil import resolve_now
from .task_models import Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)


def create_task(
    state: AppState,
    *,
    title: str,
    description: str = "",
    priority: TaskPriority = TaskPriority.MEDIUM,
    due_date: datetime | None = None,
    project_id: UUID | None = None,
    tags: Iterable[str] = (),
) -> Task:
    if not title or not title.strip():
        raise ValueError("title is required")

    task = Task(
        title=title.strip(),
        description=description.strip(),
        priority=priority,
        due_date=due_date,
        project_id=project_id,
        tags=[t for t in tags if t],
    )
    state.task_store.add(task)
    logger.debug("Task created id=%s priority=%s project=%s", task.id, priority.title, project_id)
    return task


def update_task_status(
    state: AppState, task: Task, status: TaskStatus, *, now: datetime | None = None
) -> Task | None:
    """
    Move a task to a new status.

    completed_date is stamped when the task becomes completed and cleared when
    it leaves that status, so it is set exactly when status is COMPLETED.
    The stored record is re-read first; returns None when the task is gone.
    """
    with state.lock:
        current = state.task_store.get(task.id)
        if current is None:
            logger.debug("Task status skipped: unknown id=%s", task.id)
            return None

        if status == TaskStatus.COMPLETED:
            completed_date = current.completed_date if current.is_completed else resolve_now(now)
        else:
            completed_date = None

        updated = replace(current, status=status, completed_date=completed_date)
        state.task_store.update(updated)
    return updated


def assign_task(state: AppState, task: Task, member_ids: Iterable[UUID]) -> Task | None:
    # keep order, drop duplicates
    ids = list(dict.fromkeys(member_ids))
    with state.lock:
        current = state.task_store.get(task.id)
        if current is None:
            logger.debug("Task assign skipped: unknown id=%s", task.id)
            return None
        updated = replace(current, assigned_team_member_ids=ids)
        state.task_store.update(updated)
    return updated


def delete_task(state: AppState, task: Task) -> CascadeReport:
    return cascade_delete(state, EntityKind.TASK, task.id)
