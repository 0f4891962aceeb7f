# src/tasksphere/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum, StrEnum
from uuid import UUID, uuid4

from ..core.timeutil import ensure_aware, opt_ensure_aware, resolve_now, utc_now, whole_days_between

OVERDUE_BONUS = 0.5
DUE_SOON_BONUS = 0.3
DUE_SOON_DAYS = 3


class TaskPriority(IntEnum):
    """Ordered priority; the integer value is the persisted raw value."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2
    URGENT = 3

    @property
    def title(self) -> str:
        return self.name.capitalize()

    @property
    def heatmap_value(self) -> float:
        return (self.value + 1) * 0.25


class TaskStatus(StrEnum):
    """Task lifecycle status: todo -> in progress -> review -> completed."""

    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    REVIEW = "Review"
    COMPLETED = "Completed"


@dataclass(slots=True)
class Task:
    title: str
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    due_date: datetime | None = None
    project_id: UUID | None = None
    assigned_team_member_ids: list[UUID] = field(default_factory=list)
    created_date: datetime = field(default_factory=utc_now)
    completed_date: datetime | None = None
    tags: list[str] = field(default_factory=list)
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        # naive datetimes are UTC
        self.due_date = opt_ensure_aware(self.due_date)
        self.created_date = ensure_aware(self.created_date)
        self.completed_date = opt_ensure_aware(self.completed_date)

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    def is_overdue(self, now: datetime | None = None) -> bool:
        if self.due_date is None:
            return False
        now = resolve_now(now)
        return self.due_date < now and not self.is_completed

    def urgency_score(self, now: datetime | None = None) -> float:
        """
        Priority heat plus a due-date bonus, clamped to [0, 1].

        Overdue (and not completed) adds 0.5; otherwise due within
        DUE_SOON_DAYS whole days adds 0.3.
        """
        score = self.priority.heatmap_value

        if self.due_date is not None:
            now = resolve_now(now)
            if self.due_date < now:
                if not self.is_completed:
                    score += OVERDUE_BONUS
            elif whole_days_between(now, self.due_date) <= DUE_SOON_DAYS:
                score += DUE_SOON_BONUS

        return min(score, 1.0)
