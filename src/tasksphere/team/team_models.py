# src/tasksphere/team/team_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

from ..core.timeutil import ensure_aware, utc_now

DEFAULT_AVATAR_COLOR = "#FE284A"

STEPS_GOAL = 10_000
SLEEP_GOAL_HOURS = 8.0
ATTENTION_THRESHOLD = 0.4


class MemberRole(StrEnum):
    OWNER = "Owner"
    ADMIN = "Admin"
    MEMBER = "Member"
    VIEWER = "Viewer"


class WellnessStatus(StrEnum):
    """Score buckets, best first."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    NEEDS_ATTENTION = "Needs Attention"


def wellness_status_for(score: float) -> WellnessStatus:
    if score >= 0.8:
        return WellnessStatus.EXCELLENT
    if score >= 0.6:
        return WellnessStatus.GOOD
    if score >= ATTENTION_THRESHOLD:
        return WellnessStatus.FAIR
    return WellnessStatus.NEEDS_ATTENTION


@dataclass(slots=True)
class WellnessData:
    steps_today: int = 0
    sleep_hours_last_night: float = 0.0
    last_updated: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        self.last_updated = ensure_aware(self.last_updated)

    @property
    def wellness_score(self) -> float:
        steps_score = min(self.steps_today / STEPS_GOAL, 1.0) * 0.5
        sleep_score = min(self.sleep_hours_last_night / SLEEP_GOAL_HOURS, 1.0) * 0.5
        return steps_score + sleep_score

    @property
    def wellness_status(self) -> WellnessStatus:
        return wellness_status_for(self.wellness_score)


@dataclass(slots=True)
class TeamMember:
    name: str
    email: str
    role: MemberRole = MemberRole.MEMBER
    avatar_color: str = DEFAULT_AVATAR_COLOR
    join_date: datetime = field(default_factory=utc_now)
    wellness_data: WellnessData | None = None
    is_active: bool = True
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        self.join_date = ensure_aware(self.join_date)

    @property
    def initials(self) -> str:
        letters = [part[0] for part in self.name.split(" ") if part][:2]
        return "".join(letters).upper()

    @property
    def wellness_score(self) -> float | None:
        return None if self.wellness_data is None else self.wellness_data.wellness_score
