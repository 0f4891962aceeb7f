# src/tasksphere/core/integrity.py

from __future__ import annotations

"""
Referential consistency across the three stores.

Cross-references are plain ids (task.project_id, task.assigned_team_member_ids,
project.team_member_ids). Raw store deletes never touch other stores; every
cascading delete goes through cascade_delete() here:

- project: its tasks are deleted, then the project;
- team member: the id is removed from task assignee lists and project member
  lists, then the member is deleted;
- task: nothing references tasks, so only the task is deleted.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import StrEnum
from uuid import UUID

from .state import AppState

logger = logging.getLogger(__name__)


class EntityKind(StrEnum):
    TASK = "task"
    PROJECT = "project"
    MEMBER = "member"


@dataclass(frozen=True, slots=True)
class CascadeReport:
    kind: EntityKind
    entity_id: UUID
    deleted: bool
    tasks_deleted: int = 0
    tasks_detached: int = 0
    projects_detached: int = 0


@dataclass(slots=True)
class DanglingReport:
    # (task_id, missing project_id)
    task_projects: list[tuple[UUID, UUID]] = field(default_factory=list)
    # (task_id, missing member_id)
    task_assignees: list[tuple[UUID, UUID]] = field(default_factory=list)
    # (project_id, missing member_id)
    project_members: list[tuple[UUID, UUID]] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.task_projects or self.task_assignees or self.project_members)


def cascade_delete(state: AppState, kind: EntityKind, entity_id: UUID) -> CascadeReport:
    with state.lock:
        if kind == EntityKind.PROJECT:
            task_ids = [t.id for t in state.task_store.tasks_for_project(entity_id)]
            tasks_deleted = state.task_store.delete_many(task_ids)
            deleted = state.project_store.delete_by_id(entity_id)
            report = CascadeReport(kind, entity_id, deleted, tasks_deleted=tasks_deleted)

        elif kind == EntityKind.MEMBER:
            tasks = [
                replace(
                    t,
                    assigned_team_member_ids=[m for m in t.assigned_team_member_ids if m != entity_id],
                )
                for t in state.task_store.tasks_assigned_to(entity_id)
            ]
            projects = [
                replace(p, team_member_ids=[m for m in p.team_member_ids if m != entity_id])
                for p in state.project_store.projects_for_member(entity_id)
            ]
            tasks_detached = state.task_store.update_many(tasks)
            projects_detached = state.project_store.update_many(projects)
            deleted = state.team_store.delete_by_id(entity_id)
            report = CascadeReport(
                kind,
                entity_id,
                deleted,
                tasks_detached=tasks_detached,
                projects_detached=projects_detached,
            )

        else:
            deleted = state.task_store.delete_by_id(entity_id)
            report = CascadeReport(kind, entity_id, deleted)

    logger.info(
        "Deleted %s id=%s found=%s tasks_deleted=%d tasks_detached=%d projects_detached=%d",
        kind.value,
        entity_id,
        report.deleted,
        report.tasks_deleted,
        report.tasks_detached,
        report.projects_detached,
    )
    return report


def find_dangling_references(state: AppState) -> DanglingReport:
    with state.lock:
        tasks = state.task_store.all()
        projects = state.project_store.all()
        members = state.team_store.all()

    project_ids = {p.id for p in projects}
    member_ids = {m.id for m in members}
    report = DanglingReport()

    for t in tasks:
        if t.project_id is not None and t.project_id not in project_ids:
            report.task_projects.append((t.id, t.project_id))
        for m in t.assigned_team_member_ids:
            if m not in member_ids:
                report.task_assignees.append((t.id, m))

    for p in projects:
        for m in p.team_member_ids:
            if m not in member_ids:
                report.project_members.append((p.id, m))

    if not report.is_clean:
        logger.warning(
            "Dangling references: task->project=%d task->member=%d project->member=%d",
            len(report.task_projects),
            len(report.task_assignees),
            len(report.project_members),
        )
    return report


def clear_all_data(state: AppState) -> None:
    with state.lock:
        state.task_store.reset_all()
        state.project_store.reset_all()
        state.team_store.reset_all()
    logger.info("All data cleared.")
