# src/tasksphere/projects/project_store.py

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any
from uuid import UUID

from ..core.timeutil import from_iso, opt_from_iso, opt_to_iso, resolve_now, to_iso
from ..storage.collection_store import CollectionStore
from .project_models import DEFAULT_PROJECT_COLOR, Project, ProjectMilestone, ProjectStatus

logger = logging.getLogger(__name__)

PROJECTS_KEY = "TaskSphere_Projects"


def _milestone_to_record(m: ProjectMilestone) -> dict[str, Any]:
    return {
        "id": str(m.id),
        "title": m.title,
        "dueDate": to_iso(m.due_date),
        "isCompleted": bool(m.is_completed),
    }


def _record_to_milestone(rec: dict[str, Any]) -> ProjectMilestone:
    return ProjectMilestone(
        id=UUID(rec["id"]),
        title=str(rec["title"]),
        due_date=from_iso(rec["dueDate"]),
        is_completed=bool(rec.get("isCompleted", False)),
    )


class ProjectStore(CollectionStore[Project]):
    """Project collection with milestone editing helpers."""

    name = "projects"
    default_key = PROJECTS_KEY

    # ---- record codec ----

    def _encode(self, item: Project) -> dict[str, Any]:
        return {
            "id": str(item.id),
            "name": item.name,
            "description": item.description,
            "status": item.status.value,
            "startDate": to_iso(item.start_date),
            "endDate": opt_to_iso(item.end_date),
            "milestones": [_milestone_to_record(m) for m in item.milestones],
            "teamMemberIds": [str(m) for m in item.team_member_ids],
            "color": item.color,
            "progress": float(item.progress),
        }

    def _decode(self, record: dict[str, Any]) -> Project:
        return Project(
            id=UUID(record["id"]),
            name=str(record["name"]),
            description=str(record.get("description") or ""),
            status=ProjectStatus(record["status"]),
            start_date=from_iso(record["startDate"]),
            end_date=opt_from_iso(record.get("endDate")),
            milestones=[_record_to_milestone(m) for m in record.get("milestones") or []],
            team_member_ids=[UUID(m) for m in record.get("teamMemberIds") or []],
            color=str(record.get("color") or DEFAULT_PROJECT_COLOR),
            progress=float(record.get("progress", 0.0)),
        )

    # ---- queries ----

    def active_projects(self) -> list[Project]:
        return self.filter(lambda p: p.status == ProjectStatus.ACTIVE)

    def projects_for_member(self, member_id: UUID) -> list[Project]:
        return self.filter(lambda p: member_id in p.team_member_ids)

    def projects_with_status(self, status: ProjectStatus) -> list[Project]:
        return self.filter(lambda p: p.status == status)

    def overdue_projects(self, now: datetime | None = None) -> list[Project]:
        now = resolve_now(now)
        return self.filter(lambda p: p.is_overdue(now))

    # ---- milestones ----

    def add_milestone(self, project_id: UUID, milestone: ProjectMilestone) -> bool:
        with self._lock:
            project = self.get(project_id)
            if project is None:
                logger.debug("add_milestone skipped: unknown project id=%s", project_id)
                return False
            return self.update(replace(project, milestones=[*project.milestones, milestone]))

    def update_milestone(self, project_id: UUID, milestone: ProjectMilestone) -> bool:
        with self._lock:
            project = self.get(project_id)
            if project is None:
                return False
            if not any(m.id == milestone.id for m in project.milestones):
                logger.debug(
                    "update_milestone skipped: unknown milestone id=%s project=%s",
                    milestone.id,
                    project_id,
                )
                return False
            milestones = [milestone if m.id == milestone.id else m for m in project.milestones]
            return self.update(replace(project, milestones=milestones))

    def delete_milestone(self, project_id: UUID, milestone_id: UUID) -> bool:
        with self._lock:
            project = self.get(project_id)
            if project is None:
                return False
            milestones = [m for m in project.milestones if m.id != milestone_id]
            return self.update(replace(project, milestones=milestones))
