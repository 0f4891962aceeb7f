# tests/test_commands.py

from __future__ import annotations

from tasksphere.cli.commands import CommandRegistry, registry
from tasksphere.connectors.console_connector import handle_line
from tasksphere.core.state import AppState
from tasksphere.tasks.task_models import TaskPriority, TaskStatus

from .fakes import FailingKeyValueStore


def test_command_registry_routes_2_and_3_params(state: AppState) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/b y", emit=lambda _: None) == "h3"
    assert called["h2"] == 1
    assert called["h3"] == 1


def test_command_registry_unknown_and_non_command(state: AppState) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")


def test_task_commands_end_to_end(state: AppState) -> None:
    reply = registry.handle(state, "/task add urgent Fix the build")
    assert reply is not None and reply.startswith("Task added:")
    task = state.task_store.all()[0]
    assert task.title == "Fix the build"
    assert task.priority == TaskPriority.URGENT

    prefix = str(task.id)[:8]
    assert "Completed" in (registry.handle(state, f"/task status {prefix} done") or "")
    assert state.task_store.get(task.id).status == TaskStatus.COMPLETED
    assert state.task_store.get(task.id).completed_date is not None

    assert "Fix the build" in (registry.handle(state, "/tasks done") or "")
    assert registry.handle(state, "/heatmap") == "No open tasks."


def test_project_commands_and_timeline(state: AppState) -> None:
    registry.handle(state, "/project add 2026-01-01 2026-01-11 Alpha")
    registry.handle(state, "/project add 2026-01-06 2026-01-21 Beta")
    registry.handle(state, "/project add 2026-02-01 - Someday")

    listing = registry.handle(state, "/projects") or ""
    assert "Alpha" in listing and "Someday" in listing

    timeline = registry.handle(state, "/timeline") or ""
    assert "Alpha" in timeline and "Beta" in timeline
    assert "Someday" not in timeline


def test_member_and_stats_commands(state: AppState) -> None:
    registry.handle(state, "/member add ada@example.com Ada Lovelace")
    member = state.team_store.all()[0]
    reply = registry.handle(state, f"/member wellness {str(member.id)[:8]} 10000 8") or ""
    assert "Excellent" in reply

    assert "Team wellness: 100%" in (registry.handle(state, "/wellness") or "")
    stats = registry.handle(state, "/stats") or ""
    assert "Member=1" in stats
    assert "Urgent=0" in stats
    assert registry.handle(state, "/check") == "No dangling references."


def test_clear_requires_confirmation(state: AppState) -> None:
    registry.handle(state, "/task add low Something")
    assert "Confirm" in (registry.handle(state, "/clear") or "")
    assert state.task_store.count() == 1
    assert registry.handle(state, "/clear yes") == "All data cleared."
    assert state.task_store.count() == 0


def test_console_reports_storage_errors_without_crashing(settings) -> None:
    from tasksphere.projects.project_store import ProjectStore
    from tasksphere.tasks.task_store import TaskStore
    from tasksphere.team.team_store import TeamStore

    kv = FailingKeyValueStore(fail_writes=True)
    state = AppState(
        settings=settings,
        kv=kv,
        task_store=TaskStore(kv),
        project_store=ProjectStore(kv),
        team_store=TeamStore(kv),
    )
    assert handle_line(state, "/task add low doomed") == "Storage error: the change was not saved."
    assert state.task_store.count() == 0
    assert handle_line(state, "not a command") is None
