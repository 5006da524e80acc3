# src/taskman/cli/commands.py

from __future__ import annotations

import argparse
import logging
import re
import sys
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path

from ..core.state import AppState
from ..tasks.task_errors import FormatError
from ..tasks.task_export import ExportFormat, default_export_filename, read_json_file, write_export
from ..tasks.task_models import MAX_PRIORITY, MIN_PRIORITY, PRIORITY_GLYPH, Task, is_valid_priority
from ..tasks.task_stats import compute_statistics, get_overdue, get_upcoming, group_by_priority, group_by_tag

CommandHandler = Callable[[AppState, argparse.Namespace], int]
ArgsConfigurator = Callable[[argparse.ArgumentParser], None]

logger = logging.getLogger(__name__)

PROG = "taskman"


class UsageError(Exception):
    """Command line could not be parsed."""


class _Parser(argparse.ArgumentParser):
    # Subparsers inherit this class, so every parse error ends up here.
    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


# ---- argument types ----
#
# Each flag maps to a typed value before it reaches the task service.


def parse_priority(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if not is_valid_priority(value):
        raise argparse.ArgumentTypeError(f"Priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}.")
    return value


_DUE_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_due_date(raw: str) -> date:
    value = raw.strip()
    if _DUE_DATE_RE.fullmatch(value):
        try:
            return datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError:
            pass
    raise argparse.ArgumentTypeError("Invalid date format. Use YYYY-MM-DD.")


def parse_tags(raw: str) -> list[str]:
    return [t.strip() for t in raw.split(",") if t.strip()]


def parse_task_id(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        raise argparse.ArgumentTypeError(f"Invalid task ID: {raw!r}")
    return value


def parse_export_format(raw: str) -> ExportFormat:
    try:
        return ExportFormat.parse(raw)
    except FormatError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


# ---- registry ----


@dataclass(slots=True)
class Command:
    name: str
    handler: CommandHandler
    help_text: str
    usage: str
    configure: ArgsConfigurator | None = None
    mutates: bool = False
    uses_store: bool = True
    aliases: list[str] = field(default_factory=list)


class CommandRegistry:
    """Subcommand registry; builds the argparse parser and the help text."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}
        self._aliases: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        *,
        usage: str | None = None,
        configure: ArgsConfigurator | None = None,
        mutates: bool = False,
        uses_store: bool = True,
        aliases: list[str] | None = None,
    ) -> None:
        key = name.lower()
        self._commands[key] = Command(
            name=key,
            handler=handler,
            help_text=help_text,
            usage=usage or key,
            configure=configure,
            mutates=mutates,
            uses_store=uses_store,
            aliases=[a.lower() for a in aliases or []],
        )
        for alias in aliases or []:
            self._aliases[alias.lower()] = key

    def get(self, name: str | None) -> Command | None:
        if not name:
            return None
        key = name.lower()
        return self._commands.get(self._aliases.get(key, key))

    def names(self) -> list[str]:
        return list(self._commands)

    def build_parser(self, prog: str = PROG) -> argparse.ArgumentParser:
        parser = _Parser(prog=prog, description="Personal task manager.")
        parser.add_argument("--file", type=Path, default=None, help="Task file to use for this run.")
        sub = parser.add_subparsers(dest="command", metavar="<command>", parser_class=_Parser)
        for cmd in self._commands.values():
            p = sub.add_parser(cmd.name, help=cmd.help_text, aliases=cmd.aliases)
            if cmd.configure is not None:
                cmd.configure(p)
        return parser

    def build_help(self) -> str:
        lines = [
            "Task Manager - a small CLI task tracker",
            "",
            f"Usage: {PROG} [--file PATH] <command> [options]",
            "",
            "Commands:",
        ]
        width = max(len(c.usage) for c in self._commands.values()) + 2
        for cmd in self._commands.values():
            lines.append(f"  {cmd.usage.ljust(width)} {cmd.help_text}")
        lines += [
            "",
            "Examples:",
            f'  {PROG} add "Buy groceries" --priority 4 --tags shopping,personal',
            f"  {PROG} list --pending",
            f"  {PROG} complete 1",
            f"  {PROG} export --format markdown",
        ]
        return "\n".join(lines)


registry = CommandRegistry()


# ---- output helpers ----


def _fail(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _date_format(state: AppState) -> str:
    return str(getattr(state.settings, "date_format", "%Y-%m-%d") or "%Y-%m-%d")


def _print_tasks(state: AppState, tasks: Iterable[Task]) -> None:
    fmt = _date_format(state)
    for t in tasks:
        print(t.format(fmt))


# ---- handlers ----


def cmd_help(state: AppState | None, args: argparse.Namespace) -> int:
    print(registry.build_help())
    return 0


def _configure_add(p: argparse.ArgumentParser) -> None:
    p.add_argument("description", nargs="+")
    p.add_argument("--priority", type=parse_priority, default=None)
    p.add_argument("--due", type=parse_due_date, default=None)
    p.add_argument("--tags", type=parse_tags, default=None)


def cmd_add(state: AppState, args: argparse.Namespace) -> int:
    priority = args.priority
    if priority is None:
        priority = int(getattr(state.settings, "default_priority", 3))
    task = state.tasks.add(" ".join(args.description), priority, args.due, args.tags)
    print(f"Added task #{task.id}: {task.description}")
    return 0


def _configure_list(p: argparse.ArgumentParser) -> None:
    group = p.add_mutually_exclusive_group()
    group.add_argument("--pending", action="store_true", help="Show only pending tasks.")
    group.add_argument("--all", action="store_true", help="Include completed tasks.")
    p.add_argument("--tag", default=None, help="Only tasks carrying this tag.")


def cmd_list(state: AppState, args: argparse.Namespace) -> int:
    if args.tag:
        tasks = state.tasks.get_by_tag(args.tag)
    else:
        include_completed = bool(getattr(state.settings, "show_completed_by_default", True))
        if args.pending:
            include_completed = False
        elif args.all:
            include_completed = True
        tasks = state.tasks.get_all(include_completed)

    if not tasks:
        print("No tasks found.")
        return 0

    print(f"\nTotal tasks: {len(tasks)}\n")
    _print_tasks(state, tasks)
    return 0


def _configure_id(p: argparse.ArgumentParser) -> None:
    p.add_argument("id", type=parse_task_id)


def cmd_complete(state: AppState, args: argparse.Namespace) -> int:
    if not state.tasks.complete(args.id):
        return _fail(f"Task #{args.id} not found.")
    print(f"Marked task #{args.id} as completed")
    return 0


def cmd_remove(state: AppState, args: argparse.Namespace) -> int:
    if not state.tasks.remove(args.id):
        return _fail(f"Task #{args.id} not found.")
    print(f"Removed task #{args.id}")
    return 0


def _configure_update(p: argparse.ArgumentParser) -> None:
    p.add_argument("id", type=parse_task_id)
    p.add_argument("description", nargs="+")


def cmd_update(state: AppState, args: argparse.Namespace) -> int:
    if not state.tasks.update_description(args.id, " ".join(args.description)):
        return _fail(f"Task #{args.id} not found.")
    print(f"Updated task #{args.id}")
    return 0


def _configure_priority(p: argparse.ArgumentParser) -> None:
    p.add_argument("id", type=parse_task_id)
    p.add_argument("priority", type=parse_priority)


def cmd_priority(state: AppState, args: argparse.Namespace) -> int:
    if not state.tasks.update_priority(args.id, args.priority):
        return _fail(f"Task #{args.id} not found.")
    print(f"Updated task #{args.id} priority to {args.priority}")
    return 0


def _configure_search(p: argparse.ArgumentParser) -> None:
    p.add_argument("query", nargs="+")


def cmd_search(state: AppState, args: argparse.Namespace) -> int:
    query = " ".join(args.query)
    results = state.tasks.search(query)
    if not results:
        print(f"No tasks found matching '{query}'")
        return 0
    print(f"\nFound {len(results)} task(s) matching '{query}':\n")
    _print_tasks(state, results)
    return 0


def cmd_clear(state: AppState, args: argparse.Namespace) -> int:
    count = state.tasks.clear_completed()
    print(f"Cleared {count} completed task(s)")
    return 0


def cmd_stats(state: AppState, args: argparse.Namespace) -> int:
    snapshot = state.tasks.snapshot()
    stats = compute_statistics(snapshot)
    days = int(getattr(state.settings, "upcoming_days", 7))

    lines = [
        "Task Statistics",
        f"  Total tasks:      {stats.total_tasks}",
        f"  Completed:        {stats.completed_tasks} ({stats.completion_rate:.1f}%)",
        f"  Pending:          {stats.pending_tasks}",
        f"  Overdue:          {stats.overdue_tasks}",
        f"  Due today:        {stats.due_today}",
        f"  Due this week:    {stats.due_this_week}",
        f"  Average priority: {stats.average_priority:.2f}",
        f"  Unique tags:      {stats.total_tags}",
    ]

    by_priority = group_by_priority(snapshot)
    if by_priority:
        lines += ["", "Pending by priority:"]
        for prio, n in by_priority.items():
            lines.append(f"  {(PRIORITY_GLYPH * prio).ljust(MAX_PRIORITY)} {n}")

    by_tag = group_by_tag(snapshot)
    if by_tag:
        lines += ["", "Tags:"]
        for tag, n in by_tag.items():
            lines.append(f"  {tag}: {n}")

    fmt = _date_format(state)
    overdue = get_overdue(snapshot)
    if overdue:
        lines += ["", "Overdue:"]
        lines += [f"  {t.format(fmt)}" for t in overdue]

    upcoming = get_upcoming(snapshot, days=days)
    if upcoming:
        lines += ["", f"Upcoming (next {days} days):"]
        lines += [f"  {t.format(fmt)}" for t in upcoming]

    print("\n".join(lines))
    return 0


def _configure_export(p: argparse.ArgumentParser) -> None:
    p.add_argument("--format", type=parse_export_format, default=ExportFormat.JSON)
    p.add_argument("--output", type=Path, default=None)


def cmd_export(state: AppState, args: argparse.Namespace) -> int:
    fmt: ExportFormat = args.format
    path = args.output
    if path is None:
        export_dir = Path(getattr(state.settings, "export_dir", "."))
        path = export_dir / default_export_filename(fmt)
        logger.debug("No --output given; exporting to %s", path)

    snapshot = state.tasks.snapshot()
    written = write_export(snapshot, fmt, path)
    print(f"Exported {len(snapshot)} task(s) to {written}")
    return 0


def _configure_import(p: argparse.ArgumentParser) -> None:
    p.add_argument("path", type=Path)
    p.add_argument("--replace", action="store_true", help="Replace all tasks instead of appending.")


def cmd_import(state: AppState, args: argparse.Namespace) -> int:
    tasks = read_json_file(args.path)
    count = state.tasks.import_tasks(tasks, replace=args.replace)
    verb = "Replaced tasks with" if args.replace else "Imported"
    print(f"{verb} {count} task(s) from {args.path}")
    return 0


registry.register(
    "add",
    cmd_add,
    "Add a new task",
    usage="add <description> [--priority 1-5] [--due YYYY-MM-DD] [--tags a,b]",
    configure=_configure_add,
    mutates=True,
)
registry.register(
    "list",
    cmd_list,
    "List tasks",
    usage="list [--pending|--all] [--tag TAG]",
    configure=_configure_list,
    aliases=["ls"],
)
registry.register("complete", cmd_complete, "Mark a task as completed", usage="complete <id>",
                  configure=_configure_id, mutates=True, aliases=["done"])
registry.register("remove", cmd_remove, "Remove a task", usage="remove <id>",
                  configure=_configure_id, mutates=True, aliases=["rm"])
registry.register("update", cmd_update, "Update task description", usage="update <id> <description>",
                  configure=_configure_update, mutates=True)
registry.register("priority", cmd_priority, "Update task priority", usage="priority <id> <1-5>",
                  configure=_configure_priority, mutates=True)
registry.register("search", cmd_search, "Search tasks by description or tags", usage="search <query>",
                  configure=_configure_search)
registry.register("clear", cmd_clear, "Remove all completed tasks", mutates=True)
registry.register("stats", cmd_stats, "Show task statistics")
registry.register(
    "export",
    cmd_export,
    "Export tasks to a file",
    usage="export [--format csv|markdown|json] [--output PATH]",
    configure=_configure_export,
)
registry.register("import", cmd_import, "Import tasks from a JSON export", usage="import <path> [--replace]",
                  configure=_configure_import, mutates=True)
registry.register("help", cmd_help, "Show this help message", uses_store=False, aliases=["h"])
