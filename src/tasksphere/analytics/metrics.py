# src/tasksphere/analytics/metrics.py

from __future__ import annotations

"""
Derived metrics.

Pure functions over snapshots (lists returned by store.all()). Nothing is
cached; every call recomputes from its input.

Grouped counts enumerate every enum member explicitly, so the result always
carries all variants (zero counts included) in declaration order.
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TypeVar

from ..core.timeutil import resolve_now
from ..projects.project_models import Project, ProjectStatus
from ..tasks.task_models import Task, TaskPriority, TaskStatus
from ..team.team_models import (
    ATTENTION_THRESHOLD,
    MemberRole,
    TeamMember,
    WellnessStatus,
    wellness_status_for,
)

E = TypeVar("E", bound=Enum)
T = TypeVar("T")


def count_by(items: Iterable[T], variants: Iterable[E], key: Callable[[T], E]) -> dict[E, int]:
    snapshot = list(items)
    return {v: sum(1 for i in snapshot if key(i) == v) for v in variants}


def group_by(items: Iterable[T], variants: Iterable[E], key: Callable[[T], E]) -> dict[E, list[T]]:
    snapshot = list(items)
    return {v: [i for i in snapshot if key(i) == v] for v in variants}


# ---- tasks ----


def completion_rate(tasks: Sequence[Task]) -> float:
    if not tasks:
        return 0.0
    completed = sum(1 for t in tasks if t.status == TaskStatus.COMPLETED)
    return completed / len(tasks)


def tasks_by_priority(tasks: Iterable[Task]) -> dict[TaskPriority, int]:
    return count_by(tasks, list(TaskPriority), lambda t: t.priority)


def tasks_by_status(tasks: Iterable[Task]) -> dict[TaskStatus, int]:
    return count_by(tasks, list(TaskStatus), lambda t: t.status)


def group_tasks_by_priority(tasks: Iterable[Task]) -> dict[TaskPriority, list[Task]]:
    return group_by(tasks, list(TaskPriority), lambda t: t.priority)


def group_tasks_by_status(tasks: Iterable[Task]) -> dict[TaskStatus, list[Task]]:
    return group_by(tasks, list(TaskStatus), lambda t: t.status)


@dataclass(frozen=True, slots=True)
class TaskSummary:
    total: int
    completed: int
    overdue: int
    completion_rate: float


def task_summary(tasks: Sequence[Task], now: datetime | None = None) -> TaskSummary:
    now = resolve_now(now)
    completed = sum(1 for t in tasks if t.status == TaskStatus.COMPLETED)
    return TaskSummary(
        total=len(tasks),
        completed=completed,
        overdue=sum(1 for t in tasks if t.is_overdue(now)),
        completion_rate=completion_rate(tasks),
    )


# ---- projects ----


def average_progress(projects: Sequence[Project]) -> float:
    if not projects:
        return 0.0
    return sum(p.progress for p in projects) / len(projects)


def projects_by_status(projects: Iterable[Project]) -> dict[ProjectStatus, int]:
    return count_by(projects, list(ProjectStatus), lambda p: p.status)


# ---- team ----


def members_by_role(members: Iterable[TeamMember]) -> dict[MemberRole, int]:
    return count_by(members, list(MemberRole), lambda m: m.role)


def team_wellness_average(members: Iterable[TeamMember]) -> float:
    scores = [m.wellness_data.wellness_score for m in members if m.wellness_data is not None]
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


def team_wellness_status(members: Iterable[TeamMember]) -> WellnessStatus:
    return wellness_status_for(team_wellness_average(members))


def members_needing_attention(members: Iterable[TeamMember]) -> list[TeamMember]:
    return [
        m
        for m in members
        if m.wellness_data is not None and m.wellness_data.wellness_score < ATTENTION_THRESHOLD
    ]


def wellness_distribution(members: Iterable[TeamMember]) -> list[tuple[WellnessStatus, int]]:
    """Per-bucket member counts, best bucket first. Members without data are skipped."""
    with_data = [m for m in members if m.wellness_data is not None]
    counts = count_by(with_data, list(WellnessStatus), lambda m: m.wellness_data.wellness_status)
    return list(counts.items())
