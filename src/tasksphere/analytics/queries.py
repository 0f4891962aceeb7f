# src/tasksphere/analytics/queries.py

from __future__ import annotations

"""
Cross-entity queries (tasks <-> projects <-> team members).

Inputs are snapshots; outputs are freshly computed on every call.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from ..core.timeutil import ensure_aware, resolve_now, whole_days_between
from ..projects.project_models import Project
from ..tasks.task_models import Task, TaskStatus
from ..team.team_models import TeamMember


@dataclass(frozen=True, slots=True)
class Workload:
    total: int
    completed: int
    pending: int


@dataclass(frozen=True, slots=True)
class TimelineEntry:
    project: Project
    # both normalized to the full span of all projects
    position: float
    width: float


def tasks_for_project(tasks: Iterable[Task], project_id: UUID) -> list[Task]:
    return [t for t in tasks if t.project_id == project_id]


def tasks_assigned_to(tasks: Iterable[Task], member_id: UUID) -> list[Task]:
    return [t for t in tasks if member_id in t.assigned_team_member_ids]


def member_workload(tasks: Iterable[Task], member_id: UUID) -> Workload:
    assigned = tasks_assigned_to(tasks, member_id)
    completed = sum(1 for t in assigned if t.status == TaskStatus.COMPLETED)
    return Workload(total=len(assigned), completed=completed, pending=len(assigned) - completed)


def members_by_workload(
    members: Iterable[TeamMember], tasks: Iterable[Task]
) -> list[tuple[TeamMember, int]]:
    """Members paired with their open task count, busiest first."""
    snapshot = list(tasks)
    rows = [(m, member_workload(snapshot, m.id).pending) for m in members]
    rows.sort(key=lambda row: row[1], reverse=True)
    return rows


def project_progress(tasks: Iterable[Task], project_id: UUID) -> float:
    """completed / total for the project's tasks; 0.0 when it has none."""
    own = tasks_for_project(tasks, project_id)
    if not own:
        return 0.0
    return sum(1 for t in own if t.status == TaskStatus.COMPLETED) / len(own)


def projects_for_timeline(projects: Sequence[Project]) -> list[TimelineEntry]:
    """
    Gantt-style layout.

    The span runs from the earliest start date to the latest end date; projects
    without an end date are left out. A zero-day span is treated as one day.
    """
    ordered = sorted(projects, key=lambda p: ensure_aware(p.start_date))
    if not ordered:
        return []

    end_dates = [p.end_date for p in ordered if p.end_date is not None]
    if not end_dates:
        return []

    earliest = ordered[0].start_date
    latest = max(end_dates, key=ensure_aware)
    total_days = max(whole_days_between(earliest, latest), 1)

    out: list[TimelineEntry] = []
    for project in ordered:
        if project.end_date is None:
            continue
        start_days = whole_days_between(earliest, project.start_date)
        project_days = whole_days_between(project.start_date, project.end_date)
        out.append(
            TimelineEntry(
                project=project,
                position=start_days / total_days,
                width=project_days / total_days,
            )
        )
    return out


def tasks_for_heatmap(tasks: Iterable[Task], now: datetime | None = None) -> list[tuple[Task, float]]:
    """Open tasks with their urgency, most urgent first."""
    now = resolve_now(now)
    rows = [(t, t.urgency_score(now)) for t in tasks if t.status != TaskStatus.COMPLETED]
    rows.sort(key=lambda row: row[1], reverse=True)
    return rows


def today_tasks(tasks: Iterable[Task], now: datetime | None = None) -> list[Task]:
    """Open tasks due on the same calendar day as now (in now's timezone, local by default)."""
    now = now or datetime.now().astimezone()
    tz = ensure_aware(now).tzinfo
    today = ensure_aware(now).date()
    return [
        t
        for t in tasks
        if t.due_date is not None
        and t.status != TaskStatus.COMPLETED
        and ensure_aware(t.due_date).astimezone(tz).date() == today
    ]
