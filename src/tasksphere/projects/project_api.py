# src/tasksphere/projects/project_api.py

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from ..analytics.queries import project_progress
from ..core.integrity import CascadeReport, EntityKind, cascade_delete
from ..core.state import AppState
from ..core.timeutil import utc_now
from .project_models import DEFAULT_PROJECT_COLOR, Project, ProjectMilestone

logger = logging.getLogger(__name__)


def create_project(
    state: AppState,
    *,
    name: str,
    description: str = "",
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    color: str = DEFAULT_PROJECT_COLOR,
) -> Project:
    if not name or not name.strip():
        raise ValueError("name is required")

    project = Project(
        name=name.strip(),
        description=description.strip(),
        start_date=start_date or utc_now(),
        end_date=end_date,
        color=color or DEFAULT_PROJECT_COLOR,
    )
    state.project_store.add(project)
    logger.debug("Project created id=%s name=%s", project.id, project.name)
    return project


def recompute_project_progress(state: AppState, project: Project) -> Project | None:
    """
    Recompute progress from the task store and write it back.

    Progress is never kept in sync automatically: call this after any task
    change that can move it. Works on the stored record, so fields changed
    since the caller's copy was taken are kept. Returns None when the
    project is gone.
    """
    with state.lock:
        current = state.project_store.get(project.id)
        if current is None:
            logger.debug("Project progress skipped: unknown id=%s", project.id)
            return None
        progress = project_progress(state.task_store.all(), current.id)
        updated = replace(current, progress=progress)
        state.project_store.update(updated)
    logger.debug("Project progress id=%s progress=%.3f", project.id, progress)
    return updated


def add_milestone(state: AppState, project: Project, *, title: str, due_date: datetime) -> ProjectMilestone:
    if not title or not title.strip():
        raise ValueError("title is required")
    milestone = ProjectMilestone(title=title.strip(), due_date=due_date)
    state.project_store.add_milestone(project.id, milestone)
    return milestone


def toggle_milestone_completion(
    state: AppState, project: Project, milestone: ProjectMilestone
) -> ProjectMilestone | None:
    with state.lock:
        current = state.project_store.get(project.id)
        stored = None if current is None else next(
            (m for m in current.milestones if m.id == milestone.id), None
        )
        if stored is None:
            logger.debug("Milestone toggle skipped: unknown id=%s project=%s", milestone.id, project.id)
            return None
        updated = replace(stored, is_completed=not stored.is_completed)
        state.project_store.update_milestone(project.id, updated)
    return updated


def delete_project(state: AppState, project: Project) -> CascadeReport:
    """Delete the project together with every task that belongs to it."""
    return cascade_delete(state, EntityKind.PROJECT, project.id)
