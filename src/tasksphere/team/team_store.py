# src/tasksphere/team/team_store.py

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any
from uuid import UUID

from ..core.timeutil import from_iso, to_iso
from ..storage.collection_store import CollectionStore
from .team_models import DEFAULT_AVATAR_COLOR, MemberRole, TeamMember, WellnessData

logger = logging.getLogger(__name__)

TEAM_MEMBERS_KEY = "TaskSphere_TeamMembers"


def _wellness_to_record(w: WellnessData | None) -> dict[str, Any] | None:
    if w is None:
        return None
    return {
        "stepsToday": int(w.steps_today),
        "sleepHoursLastNight": float(w.sleep_hours_last_night),
        "lastUpdated": to_iso(w.last_updated),
    }


def _record_to_wellness(rec: dict[str, Any] | None) -> WellnessData | None:
    if rec is None:
        return None
    if not isinstance(rec, dict):
        raise ValueError("wellnessData must be an object")
    return WellnessData(
        steps_today=int(rec["stepsToday"]),
        sleep_hours_last_night=float(rec["sleepHoursLastNight"]),
        last_updated=from_iso(rec["lastUpdated"]),
    )


class TeamStore(CollectionStore[TeamMember]):
    name = "team"
    default_key = TEAM_MEMBERS_KEY

    # ---- record codec ----

    def _encode(self, item: TeamMember) -> dict[str, Any]:
        return {
            "id": str(item.id),
            "name": item.name,
            "email": item.email,
            "role": item.role.value,
            "avatarColor": item.avatar_color,
            "joinDate": to_iso(item.join_date),
            "wellnessData": _wellness_to_record(item.wellness_data),
            "isActive": bool(item.is_active),
        }

    def _decode(self, record: dict[str, Any]) -> TeamMember:
        return TeamMember(
            id=UUID(record["id"]),
            name=str(record["name"]),
            email=str(record.get("email") or ""),
            role=MemberRole(record["role"]),
            avatar_color=str(record.get("avatarColor") or DEFAULT_AVATAR_COLOR),
            join_date=from_iso(record["joinDate"]),
            wellness_data=_record_to_wellness(record.get("wellnessData")),
            is_active=bool(record.get("isActive", True)),
        )

    # ---- queries ----

    def active_members(self) -> list[TeamMember]:
        return self.filter(lambda m: m.is_active)

    def members_with_role(self, role: MemberRole) -> list[TeamMember]:
        return self.filter(lambda m: m.role == role)

    def member_with_id(self, member_id: UUID) -> TeamMember | None:
        return self.get(member_id)

    # ---- wellness ----

    def update_wellness_data(self, member_id: UUID, wellness: WellnessData) -> bool:
        with self._lock:
            member = self.get(member_id)
            if member is None:
                logger.debug("update_wellness_data skipped: unknown member id=%s", member_id)
                return False
            return self.update(replace(member, wellness_data=wellness))
