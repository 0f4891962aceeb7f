# src/tasksphere/team/team_api.py

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from ..core.integrity import CascadeReport, EntityKind, cascade_delete
from ..core.state import AppState
from ..core.timeutil import utc_now
from .team_models import DEFAULT_AVATAR_COLOR, MemberRole, TeamMember, WellnessData

logger = logging.getLogger(__name__)


def create_team_member(
    state: AppState,
    *,
    name: str,
    email: str,
    role: MemberRole = MemberRole.MEMBER,
    avatar_color: str = DEFAULT_AVATAR_COLOR,
) -> TeamMember:
    if not name or not name.strip():
        raise ValueError("name is required")

    member = TeamMember(
        name=name.strip(),
        email=email.strip(),
        role=role,
        avatar_color=avatar_color or DEFAULT_AVATAR_COLOR,
    )
    state.team_store.add(member)
    logger.debug("Team member created id=%s role=%s", member.id, role.value)
    return member


def update_member_wellness(
    state: AppState,
    member: TeamMember,
    *,
    steps: int,
    sleep_hours: float,
    now: datetime | None = None,
) -> WellnessData:
    if steps < 0 or sleep_hours < 0:
        raise ValueError("steps and sleep_hours must be non-negative")

    wellness = WellnessData(
        steps_today=int(steps),
        sleep_hours_last_night=float(sleep_hours),
        last_updated=now or utc_now(),
    )
    state.team_store.update_wellness_data(member.id, wellness)
    return wellness


def toggle_member_active(state: AppState, member: TeamMember) -> TeamMember | None:
    with state.lock:
        current = state.team_store.get(member.id)
        if current is None:
            logger.debug("Member toggle skipped: unknown id=%s", member.id)
            return None
        updated = replace(current, is_active=not current.is_active)
        state.team_store.update(updated)
    return updated


def delete_team_member(state: AppState, member: TeamMember) -> CascadeReport:
    """Delete the member and drop its id from every task and project that lists it."""
    return cascade_delete(state, EntityKind.MEMBER, member.id)
