# src/tasksphere/projects/project_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

from ..core.timeutil import ensure_aware, opt_ensure_aware, resolve_now, utc_now, whole_days_between

DEFAULT_PROJECT_COLOR = "#FE284A"


class ProjectStatus(StrEnum):
    PLANNING = "Planning"
    ACTIVE = "Active"
    ON_HOLD = "On Hold"
    COMPLETED = "Completed"
    ARCHIVED = "Archived"


@dataclass(slots=True)
class ProjectMilestone:
    title: str
    due_date: datetime
    is_completed: bool = False
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        self.due_date = ensure_aware(self.due_date)


@dataclass(slots=True)
class Project:
    name: str
    description: str = ""
    status: ProjectStatus = ProjectStatus.PLANNING
    start_date: datetime = field(default_factory=utc_now)
    end_date: datetime | None = None
    milestones: list[ProjectMilestone] = field(default_factory=list)
    team_member_ids: list[UUID] = field(default_factory=list)
    color: str = DEFAULT_PROJECT_COLOR
    # 0.0..1.0, written by recompute_project_progress()
    progress: float = 0.0
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        self.start_date = ensure_aware(self.start_date)
        self.end_date = opt_ensure_aware(self.end_date)

    @property
    def completion_percentage(self) -> int:
        return int(self.progress * 100)

    @property
    def duration(self) -> int:
        """Whole days from start to end; 0 without an end date."""
        if self.end_date is None:
            return 0
        return whole_days_between(self.start_date, self.end_date)

    def is_overdue(self, now: datetime | None = None) -> bool:
        if self.end_date is None:
            return False
        now = resolve_now(now)
        return self.end_date < now and self.status != ProjectStatus.COMPLETED
