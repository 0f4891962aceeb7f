# tests/test_stores.py

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from tasksphere.projects.project_models import Project, ProjectMilestone, ProjectStatus
from tasksphere.projects.project_store import ProjectStore
from tasksphere.storage.collection_store import ChangeKind, StoreEvent
from tasksphere.storage.kv_store import SqliteKeyValueStore, StorageError
from tasksphere.tasks.task_models import Task, TaskPriority, TaskStatus
from tasksphere.tasks.task_store import TASKS_KEY, TaskStore
from tasksphere.team.team_models import MemberRole, TeamMember, WellnessData
from tasksphere.team.team_store import TeamStore

from .fakes import FailingKeyValueStore, InMemoryKeyValueStore


def _sample_tasks(now: datetime) -> list[Task]:
    project_id = uuid4()
    return [
        Task(
            title="Write report",
            description="quarterly",
            priority=TaskPriority.HIGH,
            status=TaskStatus.REVIEW,
            due_date=now + timedelta(days=2),
            project_id=project_id,
            assigned_team_member_ids=[uuid4(), uuid4()],
            created_date=now - timedelta(days=1),
            tags=["writing", "q1"],
        ),
        Task(
            title="Done thing",
            status=TaskStatus.COMPLETED,
            created_date=now - timedelta(days=5),
            completed_date=now - timedelta(hours=3),
        ),
        Task(title="Plain", priority=TaskPriority.LOW, created_date=now),
    ]


def test_task_store_round_trip_through_sqlite(kv: SqliteKeyValueStore, now: datetime) -> None:
    store = TaskStore(kv)
    tasks = _sample_tasks(now)
    for t in tasks:
        store.add(t)

    reloaded = TaskStore(kv)
    assert reloaded.all() == tasks


def test_project_store_round_trip(kv: SqliteKeyValueStore, now: datetime) -> None:
    store = ProjectStore(kv)
    project = Project(
        name="Launch",
        description="v1",
        status=ProjectStatus.ON_HOLD,
        start_date=now,
        end_date=now + timedelta(days=30),
        milestones=[ProjectMilestone(title="beta", due_date=now + timedelta(days=10), is_completed=True)],
        team_member_ids=[uuid4()],
        color="#00FF00",
        progress=0.25,
    )
    store.add(project)
    store.add(Project(name="Bare", start_date=now))

    assert ProjectStore(kv).all() == store.all()


def test_team_store_round_trip(kv: SqliteKeyValueStore, now: datetime) -> None:
    store = TeamStore(kv)
    store.add(
        TeamMember(
            name="Grace Hopper",
            email="grace@example.com",
            role=MemberRole.ADMIN,
            join_date=now,
            wellness_data=WellnessData(steps_today=7200, sleep_hours_last_night=6.5, last_updated=now),
            is_active=False,
        )
    )
    store.add(TeamMember(name="Linus", email="l@example.com", join_date=now))

    assert TeamStore(kv).all() == store.all()


def test_persisted_records_use_raw_enum_values(now: datetime) -> None:
    kv = InMemoryKeyValueStore()
    store = TaskStore(kv)
    store.add(Task(title="x", priority=TaskPriority.URGENT, status=TaskStatus.IN_PROGRESS, created_date=now))

    records = json.loads(kv.data[TASKS_KEY].decode("utf-8"))
    assert records[0]["priority"] == 3
    assert records[0]["status"] == "In Progress"
    assert records[0]["assignedTeamMemberIds"] == []
    assert records[0]["createdDate"].startswith("2026-03-10T12:00:00")


def test_each_mutation_saves_full_collection(now: datetime) -> None:
    kv = InMemoryKeyValueStore()
    store = TaskStore(kv)
    a, b = Task(title="a"), Task(title="b")
    store.add(a)
    store.add(b)
    store.update(replace(a, title="a2"))
    store.delete(b)

    assert kv.writes == 4
    assert [t.title for t in TaskStore(kv).all()] == ["a2"]


def test_update_and_delete_unknown_id_are_silent_noops() -> None:
    kv = InMemoryKeyValueStore()
    store = TaskStore(kv)
    store.add(Task(title="a"))
    writes = kv.writes

    assert store.update(Task(title="ghost")) is False
    assert store.delete_by_id(uuid4()) is False
    assert store.count() == 1
    assert kv.writes == writes


@pytest.mark.parametrize(
    "payload",
    [
        b"not json at all",
        b'{"id": "x"}',
        b'[{"title": "missing id"}]',
        b'[1, 2, 3]',
        b'[{"id": "not-a-uuid", "title": "t", "priority": 1, "status": "To Do", "createdDate": "2026-01-01T00:00:00+00:00"}]',
    ],
)
def test_malformed_data_loads_as_empty_collection(payload: bytes) -> None:
    kv = InMemoryKeyValueStore(data={TASKS_KEY: payload})
    store = TaskStore(kv)
    assert store.all() == []


def test_missing_key_loads_as_empty_collection(kv: SqliteKeyValueStore) -> None:
    assert TaskStore(kv).all() == []


def test_one_bad_record_rejects_the_whole_payload(now: datetime) -> None:
    kv = InMemoryKeyValueStore()
    store = TaskStore(kv)
    store.add(Task(title="good", created_date=now))
    records = json.loads(kv.data[TASKS_KEY])
    records.append({"id": str(uuid4()), "title": "bad", "priority": 9})
    kv.data[TASKS_KEY] = json.dumps(records).encode("utf-8")

    store.load_all()
    assert store.all() == []


def test_failed_write_raises_and_keeps_memory_unchanged() -> None:
    kv = FailingKeyValueStore()
    store = TaskStore(kv)
    keep = Task(title="keep")
    store.add(keep)

    kv.fail_writes = True
    with pytest.raises(StorageError):
        store.add(Task(title="lost"))
    with pytest.raises(StorageError):
        store.delete(keep)

    assert store.all() == [keep]


def test_subscribers_receive_events_and_can_unsubscribe() -> None:
    store = TaskStore(InMemoryKeyValueStore())
    events: list[StoreEvent] = []
    unsubscribe = store.subscribe(events.append)

    task = Task(title="a")
    store.add(task)
    store.update(replace(task, title="b"))
    store.delete(task)
    store.reset_all()

    assert [e.kind for e in events] == [
        ChangeKind.ADDED,
        ChangeKind.UPDATED,
        ChangeKind.DELETED,
        ChangeKind.RESET,
    ]
    assert events[0].ids == (task.id,)
    assert all(e.store == "tasks" for e in events)

    unsubscribe()
    store.add(Task(title="c"))
    assert len(events) == 4


def test_failing_listener_does_not_break_mutation() -> None:
    store = TaskStore(InMemoryKeyValueStore())

    def boom(event: StoreEvent) -> None:
        raise RuntimeError("listener bug")

    store.subscribe(boom)
    store.add(Task(title="a"))
    assert store.count() == 1


def test_delete_many_and_reset_all() -> None:
    kv = InMemoryKeyValueStore()
    store = TaskStore(kv)
    tasks = [Task(title=str(i)) for i in range(4)]
    for t in tasks:
        store.add(t)

    assert store.delete_many([tasks[0].id, tasks[2].id, uuid4()]) == 2
    assert [t.title for t in store.all()] == ["1", "3"]

    store.reset_all()
    assert TaskStore(kv).all() == []


def test_task_store_queries(now: datetime) -> None:
    store = TaskStore(InMemoryKeyValueStore())
    project_id, member_id = uuid4(), uuid4()
    overdue = Task(
        title="late", priority=TaskPriority.LOW, due_date=now - timedelta(days=1), project_id=project_id
    )
    soon = Task(
        title="soon",
        priority=TaskPriority.URGENT,
        due_date=now + timedelta(days=2),
        assigned_team_member_ids=[member_id],
    )
    later = Task(title="later", priority=TaskPriority.LOW, due_date=now + timedelta(days=20))
    done = Task(
        title="done",
        status=TaskStatus.COMPLETED,
        due_date=now + timedelta(days=1),
        project_id=project_id,
    )
    for t in (overdue, soon, later, done):
        store.add(t)

    assert store.tasks_for_project(project_id) == [overdue, done]
    assert store.tasks_assigned_to(member_id) == [soon]
    assert store.tasks_with_status(TaskStatus.COMPLETED) == [done]
    assert store.tasks_with_priority(TaskPriority.LOW) == [later]
    assert store.overdue_tasks(now) == [overdue]
    assert store.upcoming_tasks(7, now) == [soon]
    ranked = store.sorted_by_urgency(now)
    assert ranked[0] is soon
    assert ranked[-1] is later


def test_project_store_queries_and_milestones(now: datetime) -> None:
    store = ProjectStore(InMemoryKeyValueStore())
    member_id = uuid4()
    active = Project(name="a", status=ProjectStatus.ACTIVE, team_member_ids=[member_id])
    late = Project(name="late", start_date=now - timedelta(days=9), end_date=now - timedelta(days=1))
    store.add(active)
    store.add(late)

    assert store.active_projects() == [active]
    assert store.projects_for_member(member_id) == [active]
    assert store.overdue_projects(now) == [late]

    m = ProjectMilestone(title="alpha", due_date=now)
    assert store.add_milestone(active.id, m)
    assert store.update_milestone(active.id, replace(m, is_completed=True))
    assert store.get(active.id).milestones[0].is_completed

    assert not store.add_milestone(uuid4(), m)
    assert not store.update_milestone(active.id, ProjectMilestone(title="ghost", due_date=now))

    assert store.delete_milestone(active.id, m.id)
    assert store.get(active.id).milestones == []


def test_team_store_queries_and_wellness(now: datetime) -> None:
    store = TeamStore(InMemoryKeyValueStore())
    owner = TeamMember(name="o", email="o@x", role=MemberRole.OWNER)
    idle = TeamMember(name="i", email="i@x", is_active=False)
    store.add(owner)
    store.add(idle)

    assert store.active_members() == [owner]
    assert store.members_with_role(MemberRole.OWNER) == [owner]
    assert store.member_with_id(idle.id) == idle
    assert store.member_with_id(uuid4()) is None

    wellness = WellnessData(steps_today=3000, sleep_hours_last_night=7, last_updated=now)
    assert store.update_wellness_data(owner.id, wellness)
    assert store.get(owner.id).wellness_data == wellness
    assert not store.update_wellness_data(uuid4(), wellness)


def test_sqlite_kv_store_basic_ops(kv: SqliteKeyValueStore) -> None:
    assert kv.get("k") is None
    kv.set("k", b"\x00\x01binary")
    assert kv.get("k") == b"\x00\x01binary"
    kv.set("k", b"v2")
    assert kv.get("k") == b"v2"
    assert kv.keys() == ["k"]
    kv.delete("k")
    assert kv.get("k") is None


def test_naive_dates_survive_a_round_trip(kv: SqliteKeyValueStore, now: datetime) -> None:
    naive_now = now.replace(tzinfo=None)
    task = Task(title="naive", due_date=naive_now + timedelta(days=1), created_date=naive_now)
    TaskStore(kv).add(task)

    assert TaskStore(kv).all() == [task]


def test_queries_accept_naive_due_dates(now: datetime) -> None:
    naive_now = now.replace(tzinfo=None)
    store = TaskStore(InMemoryKeyValueStore())
    late = Task(title="late", due_date=naive_now - timedelta(days=1))
    soon = Task(title="soon", priority=TaskPriority.LOW, due_date=naive_now + timedelta(days=2))
    store.add(late)
    store.add(soon)

    assert store.overdue_tasks(now) == [late]
    assert store.upcoming_tasks(7, now) == [soon]
    assert [t.title for t in store.sorted_by_urgency(naive_now)] == ["late", "soon"]


def test_changing_a_returned_record_leaves_the_store_alone() -> None:
    kv = InMemoryKeyValueStore()
    store = TaskStore(kv)
    task = Task(title="a", tags=["x"])
    store.add(task)
    writes = kv.writes

    # the caller's own object is not shared with the store either
    task.tags.append("from-caller")

    fetched = store.get(task.id)
    fetched.tags.append("y")
    fetched.status = TaskStatus.COMPLETED
    store.all()[0].assigned_team_member_ids.append(uuid4())

    stored = store.get(task.id)
    assert stored.tags == ["x"]
    assert stored.status == TaskStatus.TODO
    assert stored.assigned_team_member_ids == []
    assert kv.writes == writes
