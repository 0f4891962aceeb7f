# src/tasksphere/tasks/task_store.py

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from ..core.timeutil import from_iso, opt_from_iso, opt_to_iso, resolve_now, to_iso
from ..storage.collection_store import CollectionStore
from .task_models import Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

TASKS_KEY = "TaskSphere_Tasks"


class TaskStore(CollectionStore[Task]):
    """
    Task collection persisted under a single key.

    Queries are plain filters over a snapshot, recomputed on every call.
    """

    name = "tasks"
    default_key = TASKS_KEY

    # ---- record codec ----

    def _encode(self, item: Task) -> dict[str, Any]:
        return {
            "id": str(item.id),
            "title": item.title,
            "description": item.description,
            "priority": int(item.priority),
            "status": item.status.value,
            "dueDate": opt_to_iso(item.due_date),
            "projectId": None if item.project_id is None else str(item.project_id),
            "assignedTeamMemberIds": [str(m) for m in item.assigned_team_member_ids],
            "createdDate": to_iso(item.created_date),
            "completedDate": opt_to_iso(item.completed_date),
            "tags": list(item.tags),
        }

    def _decode(self, record: dict[str, Any]) -> Task:
        project_id = record.get("projectId")
        return Task(
            id=UUID(record["id"]),
            title=str(record["title"]),
            description=str(record.get("description") or ""),
            priority=TaskPriority(int(record["priority"])),
            status=TaskStatus(record["status"]),
            due_date=opt_from_iso(record.get("dueDate")),
            project_id=UUID(project_id) if project_id else None,
            assigned_team_member_ids=[UUID(m) for m in record.get("assignedTeamMemberIds") or []],
            created_date=from_iso(record["createdDate"]),
            completed_date=opt_from_iso(record.get("completedDate")),
            tags=[str(t) for t in record.get("tags") or []],
        )

    # ---- queries ----

    def tasks_for_project(self, project_id: UUID) -> list[Task]:
        return self.filter(lambda t: t.project_id == project_id)

    def tasks_assigned_to(self, member_id: UUID) -> list[Task]:
        return self.filter(lambda t: member_id in t.assigned_team_member_ids)

    def tasks_with_status(self, status: TaskStatus) -> list[Task]:
        return self.filter(lambda t: t.status == status)

    def tasks_with_priority(self, priority: TaskPriority) -> list[Task]:
        return self.filter(lambda t: t.priority == priority)

    def overdue_tasks(self, now: datetime | None = None) -> list[Task]:
        now = resolve_now(now)
        return self.filter(lambda t: t.is_overdue(now))

    def upcoming_tasks(self, days: int = 7, now: datetime | None = None) -> list[Task]:
        """Open tasks due between now and now + days (inclusive)."""
        now = resolve_now(now)
        end = now + timedelta(days=days)
        return self.filter(
            lambda t: t.due_date is not None and now <= t.due_date <= end and not t.is_completed
        )

    def sorted_by_urgency(self, now: datetime | None = None) -> list[Task]:
        now = resolve_now(now)
        return sorted(self.all(), key=lambda t: t.urgency_score(now), reverse=True)
