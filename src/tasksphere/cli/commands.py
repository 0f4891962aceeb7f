# src/tasksphere/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, date, datetime
from typing import TypeVar, cast

from ..analytics import metrics, queries
from ..core.integrity import clear_all_data, find_dangling_references
from ..core.ports import Identified
from ..core.state import AppState
from ..projects import project_api
from ..tasks import task_api
from ..tasks.task_models import TaskPriority, TaskStatus
from ..team import team_api

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Identified)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----

_STATUS_ALIASES = {
    "todo": TaskStatus.TODO,
    "in_progress": TaskStatus.IN_PROGRESS,
    "progress": TaskStatus.IN_PROGRESS,
    "review": TaskStatus.REVIEW,
    "completed": TaskStatus.COMPLETED,
    "done": TaskStatus.COMPLETED,
}


def _parse_status(raw: str) -> TaskStatus | None:
    return _STATUS_ALIASES.get(raw.lower())


def _parse_priority(raw: str) -> TaskPriority | None:
    try:
        return TaskPriority[raw.upper()]
    except KeyError:
        return None


def _parse_date(raw: str) -> datetime | None:
    try:
        d = date.fromisoformat(raw)
    except ValueError:
        return None
    return datetime(d.year, d.month, d.day, tzinfo=UTC)


def _find(items: Iterable[R], prefix: str) -> R | None:
    """Resolve an id prefix (as printed by the list commands) to a single record."""
    prefix = prefix.lower()
    hits = [i for i in items if str(i.id).startswith(prefix)]
    return hits[0] if len(hits) == 1 else None


def _short(item: Identified) -> str:
    return str(item.id)[:8]


def _fmt_date(dt: datetime | None) -> str:
    return dt.astimezone().strftime("%Y-%m-%d") if dt else "-"


def _pct(x: float) -> str:
    return f"{x * 100:.0f}%"


def _lines(title: str, rows: Sequence[str], empty: str) -> str:
    if not rows:
        return empty
    return "\n".join([title, *rows])


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    return (
        "Status:\n"
        f"  App: {getattr(settings, 'app_name', 'TaskSphere')}\n"
        f"  Database: {getattr(settings, 'db_path', '-')}\n"
        f"  Tasks: {state.task_store.count()}\n"
        f"  Projects: {state.project_store.count()}\n"
        f"  Team members: {state.team_store.count()}"
    )


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks            -> all tasks
    /tasks <status>   -> filter: todo | in_progress | review | done
    /tasks upcoming   -> open tasks due in the next N days
    /tasks today      -> open tasks due today
    """
    tasks = state.task_store.all()
    title = "Tasks:"
    if args:
        sub = args[0].lower()
        if sub == "upcoming":
            days = int(getattr(state.settings, "upcoming_days", 7))
            tasks = state.task_store.upcoming_tasks(days)
            title = f"Tasks due in the next {days} days:"
        elif sub == "today":
            tasks = queries.today_tasks(tasks)
            title = "Tasks due today:"
        else:
            status = _parse_status(sub)
            if status is None:
                return "Usage: /tasks [todo|in_progress|review|done|upcoming|today]"
            tasks = state.task_store.tasks_with_status(status)
            title = f"Tasks ({status.value}):"

    rows = [
        f"  {_short(t)} [{t.status.value}] ({t.priority.title}) {t.title} due={_fmt_date(t.due_date)}"
        for t in tasks
    ]
    return _lines(title, rows, "No tasks.")


def cmd_task(state: AppState, args: list[str]) -> str:
    """
    /task add <priority> <title...>
    /task status <id> <status>
    /task delete <id>
    """
    usage = (
        "Usage:\n"
        "  /task add <low|medium|high|urgent> <title...>\n"
        "  /task status <id> <todo|in_progress|review|done>\n"
        "  /task delete <id>"
    )
    if not args:
        return usage

    sub = args[0].lower()

    if sub == "add" and len(args) >= 3:
        priority = _parse_priority(args[1])
        if priority is None:
            return usage
        task = task_api.create_task(state, title=" ".join(args[2:]), priority=priority)
        return f"Task added: {_short(task)} {task.title}"

    if sub == "status" and len(args) == 3:
        task = _find(state.task_store.all(), args[1])
        status = _parse_status(args[2])
        if task is None or status is None:
            return "Task not found or bad status."
        task = task_api.update_task_status(state, task, status)
        if task is None:
            return "Task not found."
        if task.project_id is not None:
            project = state.project_store.get(task.project_id)
            if project is not None:
                project_api.recompute_project_progress(state, project)
        return f"Task {_short(task)} is now {task.status.value}."

    if sub == "delete" and len(args) == 2:
        task = _find(state.task_store.all(), args[1])
        if task is None:
            return "Task not found."
        task_api.delete_task(state, task)
        return f"Task deleted: {task.title}"

    return usage


def cmd_heatmap(state: AppState, args: list[str]) -> str:
    rows = [
        f"  {urgency:.2f} {_short(t)} ({t.priority.title}) {t.title}"
        for t, urgency in queries.tasks_for_heatmap(state.task_store.all())
    ]
    return _lines("Urgency (open tasks):", rows, "No open tasks.")


def cmd_projects(state: AppState, args: list[str]) -> str:
    tasks = state.task_store.all()
    rows = []
    for p in state.project_store.all():
        n = len(queries.tasks_for_project(tasks, p.id))
        overdue = " OVERDUE" if p.is_overdue() else ""
        rows.append(
            f"  {_short(p)} [{p.status.value}] {p.name} {p.completion_percentage}% tasks={n}{overdue}"
        )
    return _lines("Projects:", rows, "No projects.")


def cmd_project(state: AppState, args: list[str]) -> str:
    """
    /project add <start YYYY-MM-DD> <end YYYY-MM-DD|-> <name...>
    /project progress <id>
    /project delete <id>
    """
    usage = (
        "Usage:\n"
        "  /project add <start YYYY-MM-DD> <end YYYY-MM-DD|-> <name...>\n"
        "  /project progress <id>\n"
        "  /project delete <id>"
    )
    if not args:
        return usage

    sub = args[0].lower()

    if sub == "add" and len(args) >= 4:
        start = _parse_date(args[1])
        end = None if args[2] == "-" else _parse_date(args[2])
        if start is None or (args[2] != "-" and end is None):
            return usage
        project = project_api.create_project(
            state, name=" ".join(args[3:]), start_date=start, end_date=end
        )
        return f"Project added: {_short(project)} {project.name}"

    if sub in ("progress", "delete") and len(args) == 2:
        project = _find(state.project_store.all(), args[1])
        if project is None:
            return "Project not found."
        if sub == "progress":
            project = project_api.recompute_project_progress(state, project)
            if project is None:
                return "Project not found."
            return f"{project.name}: {project.completion_percentage}%"
        report = project_api.delete_project(state, project)
        return f"Project deleted: {project.name} (tasks removed: {report.tasks_deleted})"

    return usage


def cmd_timeline(state: AppState, args: list[str]) -> str:
    width = 40
    rows = []
    for entry in queries.projects_for_timeline(state.project_store.all()):
        offset = int(round(entry.position * width))
        length = max(1, int(round(entry.width * width)))
        bar = " " * offset + "#" * length
        rows.append(f"  {entry.project.name[:16]:<16} |{bar:<{width}}|")
    return _lines("Timeline:", rows, "No projects with an end date.")


def cmd_team(state: AppState, args: list[str]) -> str:
    rows = []
    for m in state.team_store.all():
        active = "" if m.is_active else " (inactive)"
        rows.append(f"  {_short(m)} {m.initials:<2} {m.name} <{m.email}> [{m.role.value}]{active}")
    return _lines("Team:", rows, "No team members.")


def cmd_member(state: AppState, args: list[str]) -> str:
    """
    /member add <email> <name...>
    /member wellness <id> <steps> <sleep_hours>
    /member delete <id>
    """
    usage = (
        "Usage:\n"
        "  /member add <email> <name...>\n"
        "  /member wellness <id> <steps> <sleep_hours>\n"
        "  /member delete <id>"
    )
    if not args:
        return usage

    sub = args[0].lower()

    if sub == "add" and len(args) >= 3:
        member = team_api.create_team_member(state, name=" ".join(args[2:]), email=args[1])
        return f"Member added: {_short(member)} {member.name}"

    if sub == "wellness" and len(args) == 4:
        member = _find(state.team_store.all(), args[1])
        if member is None:
            return "Member not found."
        try:
            steps, sleep = int(args[2]), float(args[3])
        except ValueError:
            return usage
        wellness = team_api.update_member_wellness(state, member, steps=steps, sleep_hours=sleep)
        return f"{member.name}: {_pct(wellness.wellness_score)} ({wellness.wellness_status.value})"

    if sub == "delete" and len(args) == 2:
        member = _find(state.team_store.all(), args[1])
        if member is None:
            return "Member not found."
        report = team_api.delete_team_member(state, member)
        return (
            f"Member deleted: {member.name} "
            f"(tasks updated: {report.tasks_detached}, projects updated: {report.projects_detached})"
        )

    return usage


def cmd_wellness(state: AppState, args: list[str]) -> str:
    members = state.team_store.all()
    avg = metrics.team_wellness_average(members)
    lines = [f"Team wellness: {_pct(avg)} ({metrics.team_wellness_status(members).value})"]
    for status, count in metrics.wellness_distribution(members):
        if count:
            lines.append(f"  {status.value}: {count}")
    attention = metrics.members_needing_attention(members)
    if attention:
        lines.append("Needs attention: " + ", ".join(m.name for m in attention))
    return "\n".join(lines)


def cmd_workload(state: AppState, args: list[str]) -> str:
    tasks = state.task_store.all()
    rows = []
    for member, pending in queries.members_by_workload(state.team_store.all(), tasks):
        load = queries.member_workload(tasks, member.id)
        rows.append(f"  {member.name}: open={pending} done={load.completed} total={load.total}")
    return _lines("Workload:", rows, "No team members.")


def cmd_stats(state: AppState, args: list[str]) -> str:
    tasks = state.task_store.all()
    projects = state.project_store.all()
    members = state.team_store.all()
    summary = metrics.task_summary(tasks)

    lines = [
        "Stats:",
        f"  Tasks: {summary.total} (completed {summary.completed}, overdue {summary.overdue}, "
        f"rate {_pct(summary.completion_rate)})",
        "  By priority: "
        + ", ".join(f"{p.title}={n}" for p, n in metrics.tasks_by_priority(tasks).items()),
        "  By status: "
        + ", ".join(f"{s.value}={n}" for s, n in metrics.tasks_by_status(tasks).items()),
        f"  Projects: {len(projects)} (active {len(state.project_store.active_projects())}, "
        f"avg progress {_pct(metrics.average_progress(projects))})",
        "  Project status: "
        + ", ".join(f"{s.value}={n}" for s, n in metrics.projects_by_status(projects).items()),
        f"  Team: {len(members)} (active {len(state.team_store.active_members())})",
        "  Roles: " + ", ".join(f"{r.value}={n}" for r, n in metrics.members_by_role(members).items()),
    ]
    return "\n".join(lines)


def cmd_check(state: AppState, args: list[str]) -> str:
    report = find_dangling_references(state)
    if report.is_clean:
        return "No dangling references."
    return (
        "Dangling references:\n"
        f"  task -> project: {len(report.task_projects)}\n"
        f"  task -> member: {len(report.task_assignees)}\n"
        f"  project -> member: {len(report.project_members)}"
    )


def cmd_clear(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args or args[0].lower() != "yes":
        return "This deletes all tasks, projects and team members. Confirm with /clear yes."
    if emit:
        emit("[DATA] Clearing all collections...")
    clear_all_data(state)
    return "All data cleared."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show database path and collection sizes.")
registry.register(
    "tasks", cmd_tasks, help_text="List tasks: /tasks [todo|in_progress|review|done|upcoming|today]."
)
registry.register("task", cmd_task, help_text="Edit tasks: /task add | status | delete.")
registry.register("heatmap", cmd_heatmap, help_text="Open tasks ordered by urgency.")
registry.register("projects", cmd_projects, help_text="List projects with progress.")
registry.register("project", cmd_project, help_text="Edit projects: /project add | progress | delete.")
registry.register("timeline", cmd_timeline, help_text="Project timeline (projects with an end date).")
registry.register("team", cmd_team, help_text="List team members.")
registry.register("member", cmd_member, help_text="Edit members: /member add | wellness | delete.")
registry.register("wellness", cmd_wellness, help_text="Team wellness overview.")
registry.register("workload", cmd_workload, help_text="Open tasks per team member.")
registry.register("stats", cmd_stats, help_text="Aggregate counts and averages.")
registry.register("check", cmd_check, help_text="Report dangling cross-references.")
registry.register("clear", cmd_clear, help_text="Delete all data: /clear yes.")
