"""Command-line interface for OmniFocus (``of``).

Every command maps its arguments onto a catalog operation, runs it, and
renders the result payload. Failures print ``Error: <message>`` on stderr
and exit 1, or 3 when OmniFocus is not running.
"""

from __future__ import annotations

import logging
from typing import Any

import typer

from omnifocus_mcp.config import ConfigError, configure_logging, load_settings
from omnifocus_mcp.enums import ReorderPosition, ResponseFormat
from omnifocus_mcp.models.results import ErrorResult
from omnifocus_mcp.operations.base import compact
from omnifocus_mcp.server import get_catalog, run
from omnifocus_mcp.utils.formatters import render
from omnifocus_mcp.utils.outline import parse_outline

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_NOT_RUNNING = 3

app = typer.Typer(help="Manage OmniFocus tasks and projects from the command line.", no_args_is_help=True)
list_app = typer.Typer(help="List tasks, projects, folders, tags or perspectives.", no_args_is_help=True)
add_app = typer.Typer(help="Create tasks and projects.", no_args_is_help=True)
project_app = typer.Typer(help="Change project status, details or location.", no_args_is_help=True)
folder_app = typer.Typer(help="Create and modify folders.", no_args_is_help=True)
tag_app = typer.Typer(help="Create, modify and delete tags.", no_args_is_help=True)

app.add_typer(list_app, name="list")
app.add_typer(add_app, name="add")
app.add_typer(project_app, name="project")
app.add_typer(folder_app, name="folder")
app.add_typer(tag_app, name="tag")

_output = {"format": ResponseFormat.TEXT}


@app.callback()
def main_options(
    json_output: bool = typer.Option(False, "--json", help="Output compact JSON"),
    pretty: bool = typer.Option(False, "--pretty", help="Output indented JSON"),
    quiet: bool = typer.Option(False, "-q", "--quiet", help="Only output IDs"),
) -> None:
    """OmniFocus from the terminal."""
    if pretty:
        _output["format"] = ResponseFormat.PRETTY
    elif json_output:
        _output["format"] = ResponseFormat.JSON
    elif quiet:
        _output["format"] = ResponseFormat.QUIET
    else:
        _output["format"] = ResponseFormat.TEXT

    try:
        settings = load_settings()
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_FAILURE) from None
    configure_logging(settings.log_level)


def _run(name: str, options: dict[str, Any] | None = None) -> None:
    """Run an operation, print its rendered result, and exit non-zero on failure."""
    result = get_catalog().run(name, compact(options or {}))
    payload = result.to_payload()
    response_format = _output["format"]

    if isinstance(result, ErrorResult) and response_format in (ResponseFormat.TEXT, ResponseFormat.QUIET):
        typer.echo(f"Error: {result.error}", err=True)
    else:
        text = render(payload, response_format)
        if text:
            typer.echo(text)

    if not payload.get("success"):
        code = EXIT_NOT_RUNNING if getattr(result, "code", None) == "not_running" else EXIT_FAILURE
        raise typer.Exit(code)


def _split(value: str | None) -> list[str] | None:
    if not value:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def _read_stdin() -> str:
    stream = typer.get_text_stream("stdin")
    if stream.isatty():
        return ""
    return stream.read()


# ============================================================================
# list
# ============================================================================


@list_app.command("inbox")
def list_inbox(
    limit: int = typer.Option(100, "-l", "--limit", help="Maximum results"),
    all_tasks: bool = typer.Option(False, "-a", "--all", help="Include completed tasks"),
    brief: bool = typer.Option(False, "--brief", help="Fewer fields per task"),
) -> None:
    """Tasks in the inbox."""
    _run("task.inbox", {"limit": limit, "include_completed": all_tasks, "brief": brief})


@list_app.command("today")
def list_today(
    limit: int = typer.Option(100, "-l", "--limit", help="Maximum results"),
    flagged: bool = typer.Option(False, "--flagged", help="Also include flagged tasks"),
    brief: bool = typer.Option(False, "--brief", help="Fewer fields per task"),
) -> None:
    """Tasks due or overdue today, or deferred until today."""
    _run("task.today", {"limit": limit, "include_flagged": flagged, "brief": brief})


@list_app.command("flagged")
def list_flagged(
    limit: int = typer.Option(100, "-l", "--limit", help="Maximum results"),
    all_tasks: bool = typer.Option(False, "-a", "--all", help="Include completed tasks"),
    brief: bool = typer.Option(False, "--brief", help="Fewer fields per task"),
) -> None:
    """Flagged tasks."""
    _run("task.flagged", {"limit": limit, "include_completed": all_tasks, "brief": brief})


@list_app.command("forecast")
def list_forecast(days: int = typer.Option(7, "-d", "--days", help="Days ahead to include")) -> None:
    """Incomplete tasks due in the next few days, grouped by day."""
    _run("task.forecast", {"days": days})


@list_app.command("projects")
def list_projects(
    folder: str | None = typer.Option(None, "-f", "--folder", help="Filter by folder name or ID"),
    limit: int = typer.Option(100, "-l", "--limit", help="Maximum results"),
    all_projects: bool = typer.Option(False, "-a", "--all", help="Include completed, dropped and on-hold projects"),
    on_hold: bool = typer.Option(False, "--on-hold", help="Include on-hold projects"),
    brief: bool = typer.Option(False, "--brief", help="Fewer fields per project"),
) -> None:
    """Projects, active ones only by default."""
    _run(
        "project.list",
        {
            "folder": folder,
            "limit": limit,
            "include_completed": all_projects,
            "include_dropped": all_projects,
            "include_on_hold": all_projects or on_hold,
            "brief": brief,
        },
    )


@list_app.command("folders")
def list_folders(
    limit: int = typer.Option(100, "-l", "--limit", help="Maximum results"),
    folder: str | None = typer.Option(None, "-f", "--folder", help="List subfolders within this folder"),
    root_only: bool = typer.Option(False, "-r", "--root-only", help="Only top-level folders"),
    hidden: bool = typer.Option(False, "--hidden", help="Include hidden folders"),
) -> None:
    """Folders."""
    _run("folder.list", {"limit": limit, "parent": folder, "root_only": root_only, "include_hidden": hidden})


@list_app.command("tags")
def list_tags(
    limit: int = typer.Option(100, "-l", "--limit", help="Maximum results"),
    hidden: bool = typer.Option(False, "--hidden", help="Include hidden tags"),
) -> None:
    """Tags."""
    _run("tag.list", {"limit": limit, "include_hidden": hidden})


@list_app.command("perspectives")
def list_perspectives() -> None:
    """Built-in and custom perspectives."""
    _run("util.perspectives")


# ============================================================================
# search / get
# ============================================================================


@app.command()
def search(
    query: str | None = typer.Argument(None, help="Text to match in task name or note"),
    flagged: bool = typer.Option(False, "--flagged", help="Only flagged tasks"),
    available: bool = typer.Option(False, "--available", help="Only available tasks"),
    project: str | None = typer.Option(None, "-p", "--project", help="Project name or ID"),
    tag: str | None = typer.Option(None, "-t", "--tag", help="Tag name or ID"),
    due_before: str | None = typer.Option(None, "--due-before", help="Due on or before"),
    due_after: str | None = typer.Option(None, "--due-after", help="Due on or after"),
    has_due: bool = typer.Option(False, "--has-due", help="Only tasks with a due date"),
    defer_before: str | None = typer.Option(None, "--defer-before", help="Deferred until on or before"),
    defer_after: str | None = typer.Option(None, "--defer-after", help="Deferred until on or after"),
    all_tasks: bool = typer.Option(False, "-a", "--all", help="Include completed tasks"),
    limit: int = typer.Option(50, "-l", "--limit", help="Maximum results"),
) -> None:
    """Search tasks by text and filters."""
    _run(
        "task.search",
        {
            "query": query,
            "flagged": flagged or None,
            "available": available or None,
            "project": project,
            "tag": tag,
            "due_before": due_before,
            "due_after": due_after,
            "require_due": has_due,
            "defer_before": defer_before,
            "defer_after": defer_after,
            "include_completed": all_tasks,
            "limit": limit,
        },
    )


@app.command()
def get(
    identifier: str = typer.Argument(..., help="Task ID, or project name or ID with --project"),
    project: bool = typer.Option(False, "-p", "--project", help="Look up a project instead of a task"),
) -> None:
    """Show one task, or one project with its tasks."""
    _run("project.get" if project else "task.get", {"id": identifier})


# ============================================================================
# add / quick
# ============================================================================


@add_app.command("task")
def add_task(
    name: str | None = typer.Argument(None, help="Task name; omit to read one task per line from stdin"),
    project: str | None = typer.Option(None, "-p", "--project", help="Project name or ID (default: inbox)"),
    note: str | None = typer.Option(None, "-n", "--note", help="Task note"),
    due: str | None = typer.Option(None, "-d", "--due", help="Due date (today, tomorrow, +3d, 2024-01-15)"),
    defer: str | None = typer.Option(None, "--defer", help="Defer date"),
    flagged: bool = typer.Option(False, "-f", "--flagged", help="Flag the task"),
    tag: str | None = typer.Option(None, "-t", "--tag", help="Primary tag"),
    tags: str | None = typer.Option(None, "--tags", help="More tags, comma-separated"),
    estimate: int | None = typer.Option(None, "-e", "--estimate", help="Estimated minutes"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without creating"),
) -> None:
    """Create a task, or one task per stdin line."""
    options: dict[str, Any] = {
        "name": name,
        "project": project,
        "note": note,
        "due": due,
        "defer": defer,
        "flagged": flagged,
        "tag": tag,
        "tags": _split(tags),
        "estimated_minutes": estimate,
        "dry_run": dry_run,
    }
    if not name:
        bulk = [line.strip() for line in _read_stdin().splitlines() if line.strip()]
        if bulk:
            options["bulk"] = bulk
    _run("task.create", options)


@add_app.command("project")
def add_project(
    name: str = typer.Argument(..., help="Project name"),
    folder: str | None = typer.Option(None, "-f", "--folder", help="Folder name or ID"),
    note: str | None = typer.Option(None, "-n", "--note", help="Project note"),
    due: str | None = typer.Option(None, "-d", "--due", help="Due date"),
    defer: str | None = typer.Option(None, "--defer", help="Defer date"),
    flagged: bool = typer.Option(False, "--flagged", help="Flag the project"),
    tag: str | None = typer.Option(None, "-t", "--tag", help="Primary tag"),
    tasks: str | None = typer.Option(None, "--tasks", help="Tasks to add, comma-separated"),
    sequential: bool = typer.Option(False, "--sequential", help="Tasks must be done in order"),
    single_actions: bool = typer.Option(False, "--single-actions", help="Single-actions list"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without creating"),
) -> None:
    """Create a project, optionally with tasks."""
    _run(
        "project.create",
        {
            "name": name,
            "folder": folder,
            "note": note,
            "due": due,
            "defer": defer,
            "flagged": flagged,
            "tag": tag,
            "tasks": _split(tasks),
            "sequential": sequential or None,
            "single_actions": single_actions,
            "dry_run": dry_run,
        },
    )


@add_app.command("batch")
def add_batch(
    folder: str | None = typer.Option(None, "-f", "--folder", help="Put every project in this existing folder"),
    create_folder: str | None = typer.Option(None, "-c", "--create-folder", help="Create a folder for the projects"),
    sequential: bool = typer.Option(False, "--sequential", help="Make every project sequential"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without creating"),
) -> None:
    """
    Create projects with tasks from an outline on stdin.

    \b
    - Website Redesign
      - Research competitors
      - Build prototype
    - Marketing
      - Draft copy
    """
    projects = parse_outline(_read_stdin())
    if not projects:
        typer.echo("Error: No projects found in input", err=True)
        raise typer.Exit(EXIT_FAILURE)
    _run(
        "project.batch",
        {
            "projects": projects,
            "folder": folder,
            "create_folder": create_folder,
            "sequential": sequential,
            "dry_run": dry_run,
        },
    )


@app.command()
def quick(
    name: str = typer.Argument(..., help="Task name"),
    due: str | None = typer.Option(None, "-d", "--due", help="Due date"),
    flagged: bool = typer.Option(False, "-f", "--flagged", help="Flag the task"),
) -> None:
    """Drop a task into the inbox."""
    _run("task.create", {"name": name, "due": due, "flagged": flagged})


# ============================================================================
# task changes
# ============================================================================


@app.command()
def modify(
    task_id: str = typer.Argument(..., help="Task ID"),
    name: str | None = typer.Option(None, "--name", help="New name"),
    note: str | None = typer.Option(None, "-n", "--note", help="New note"),
    due: str | None = typer.Option(None, "-d", "--due", help="New due date"),
    due_by: str | None = typer.Option(None, "--due-by", help="Shift the due date (+3d, -1w, +1m)"),
    clear_due: bool = typer.Option(False, "--clear-due", help="Remove the due date"),
    defer: str | None = typer.Option(None, "--defer", help="New defer date"),
    defer_by: str | None = typer.Option(None, "--defer-by", help="Shift the defer date"),
    clear_defer: bool = typer.Option(False, "--clear-defer", help="Remove the defer date"),
    flagged: bool | None = typer.Option(None, "--flag/--unflag", help="Set or clear the flag"),
    tag: str | None = typer.Option(None, "-t", "--tag", help="Add a tag"),
    project: str | None = typer.Option(None, "-p", "--project", help="Move to this project"),
    estimate: int | None = typer.Option(None, "-e", "--estimate", help="Estimated minutes"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without changing"),
) -> None:
    """Change a task's fields."""
    options = compact(
        {
            "id": task_id,
            "name": name,
            "note": note,
            "due": due,
            "due_by": due_by,
            "defer": defer,
            "defer_by": defer_by,
            "flagged": flagged,
            "tag": tag,
            "project": project,
            "estimated_minutes": estimate,
            "dry_run": dry_run,
        }
    )
    if clear_due:
        options["due"] = ""
    if clear_defer:
        options["defer"] = ""
    _run("task.update", options)


@app.command()
def flag(
    task_id: str = typer.Argument(..., help="Task ID"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without changing"),
) -> None:
    """Flag a task."""
    _run("task.update", {"id": task_id, "flagged": True, "dry_run": dry_run})


@app.command()
def unflag(
    task_id: str = typer.Argument(..., help="Task ID"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without changing"),
) -> None:
    """Remove a task's flag."""
    _run("task.update", {"id": task_id, "flagged": False, "dry_run": dry_run})


@app.command()
def complete(
    ids: list[str] = typer.Argument(..., help="Task IDs"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without changing"),
) -> None:
    """Mark tasks complete."""
    _run("task.complete", {"ids": ids, "dry_run": dry_run})


@app.command()
def drop(
    ids: list[str] = typer.Argument(..., help="Task IDs"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without changing"),
) -> None:
    """Drop tasks."""
    _run("task.drop", {"ids": ids, "dry_run": dry_run})


@app.command()
def delete(
    ids: list[str] = typer.Argument(..., help="Task IDs"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without deleting"),
) -> None:
    """Delete tasks permanently."""
    _run("task.delete", {"ids": ids, "dry_run": dry_run})


@app.command()
def reorder(
    task_id: str = typer.Argument(..., help="Task ID"),
    position: ReorderPosition = typer.Argument(..., help="top, bottom, before or after"),
    target: str | None = typer.Option(None, "--target", help="Sibling task ID for before/after"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without moving"),
) -> None:
    """Move a task within its project."""
    _run("task.reorder", {"id": task_id, "position": position.value, "target": target, "dry_run": dry_run})


# ============================================================================
# project
# ============================================================================


def _project_status_command(action: str, doc: str):
    def command(
        project_id: str = typer.Argument(..., help="Project name or ID"),
        dry_run: bool = typer.Option(False, "--dry-run", help="Preview without changing"),
    ) -> None:
        _run(f"project.{action}", {"id": project_id, "dry_run": dry_run})

    command.__doc__ = doc
    return command


project_app.command("complete")(_project_status_command("complete", "Mark a project done."))
project_app.command("drop")(_project_status_command("drop", "Drop a project."))
project_app.command("hold")(_project_status_command("hold", "Put a project on hold."))
project_app.command("activate")(_project_status_command("activate", "Make a project active again."))
project_app.command("review")(_project_status_command("mark_reviewed", "Mark a project reviewed."))


@project_app.command("modify")
def project_modify(
    project_id: str = typer.Argument(..., help="Project name or ID"),
    name: str | None = typer.Option(None, "--name", help="New name"),
    note: str | None = typer.Option(None, "-n", "--note", help="New note"),
    due: str | None = typer.Option(None, "-d", "--due", help="New due date"),
    clear_due: bool = typer.Option(False, "--clear-due", help="Remove the due date"),
    defer: str | None = typer.Option(None, "--defer", help="New defer date"),
    clear_defer: bool = typer.Option(False, "--clear-defer", help="Remove the defer date"),
    flagged: bool | None = typer.Option(None, "--flag/--unflag", help="Set or clear the flag"),
    sequential: bool | None = typer.Option(None, "--sequential/--parallel", help="Task ordering"),
    tag: str | None = typer.Option(None, "-t", "--tag", help="Primary tag"),
    status: str | None = typer.Option(None, "-s", "--status", help="active, on-hold, done or dropped"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without changing"),
) -> None:
    """Change a project's fields or status."""
    _run(
        "project.update",
        {
            "id": project_id,
            "name": name,
            "note": note,
            "due": due,
            "clear_due": clear_due,
            "defer": defer,
            "clear_defer": clear_defer,
            "flagged": flagged,
            "sequential": sequential,
            "tag": tag,
            "status": status,
            "dry_run": dry_run,
        },
    )


@project_app.command("move")
def project_move(
    project_id: str = typer.Argument(..., help="Project name or ID"),
    folder: str | None = typer.Option(None, "-f", "--folder", help="Destination folder; omit for the top level"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without moving"),
) -> None:
    """Move a project into a folder or to the top level."""
    _run("project.move", {"id": project_id, "folder": folder, "dry_run": dry_run})


@project_app.command("tasks")
def project_tasks(
    project_id: str = typer.Argument(..., help="Project name or ID"),
    limit: int = typer.Option(100, "-l", "--limit", help="Maximum results"),
    all_tasks: bool = typer.Option(False, "-a", "--all", help="Include completed tasks"),
) -> None:
    """Tasks in a project."""
    _run("project.tasks", {"id": project_id, "limit": limit, "include_completed": all_tasks})


# ============================================================================
# folder / tag
# ============================================================================


@folder_app.command("add")
def folder_add(
    name: str = typer.Argument(..., help="Folder name"),
    parent: str | None = typer.Option(None, "-p", "--parent", help="Parent folder name or ID"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without creating"),
) -> None:
    """Create a folder."""
    _run("folder.create", {"name": name, "parent": parent, "dry_run": dry_run})


@folder_app.command("modify")
def folder_modify(
    folder_id: str = typer.Argument(..., help="Folder name or ID"),
    name: str | None = typer.Option(None, "--name", help="New name"),
    note: str | None = typer.Option(None, "-n", "--note", help="New note"),
    hidden: bool | None = typer.Option(None, "--hide/--unhide", help="Hide or show the folder"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without changing"),
) -> None:
    """Rename, annotate or hide a folder."""
    _run("folder.update", {"id": folder_id, "name": name, "note": note, "hidden": hidden, "dry_run": dry_run})


@tag_app.command("add")
def tag_add(
    name: str = typer.Argument(..., help="Tag name"),
    parent: str | None = typer.Option(None, "-p", "--parent", help="Parent tag name or ID"),
    next_action: bool | None = typer.Option(
        None, "--next-action/--no-next-action", help="Whether tagged tasks can be next actions"
    ),
    force: bool = typer.Option(False, "--force", help="Create even if the name is taken"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without creating"),
) -> None:
    """Create a tag."""
    _run(
        "tag.create",
        {"name": name, "parent": parent, "allows_next_action": next_action, "force": force, "dry_run": dry_run},
    )


@tag_app.command("modify")
def tag_modify(
    tag_id: str = typer.Argument(..., help="Tag name or ID"),
    name: str | None = typer.Option(None, "--name", help="New name"),
    hidden: bool | None = typer.Option(None, "--hide/--unhide", help="Hide or show the tag"),
    next_action: bool | None = typer.Option(
        None, "--next-action/--no-next-action", help="Whether tagged tasks can be next actions"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without changing"),
) -> None:
    """Rename, hide or reconfigure a tag."""
    _run(
        "tag.update",
        {"id": tag_id, "name": name, "hidden": hidden, "allows_next_action": next_action, "dry_run": dry_run},
    )


@tag_app.command("delete")
def tag_delete(
    tag_id: str = typer.Argument(..., help="Tag name or ID"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without deleting"),
) -> None:
    """Delete a tag."""
    _run("tag.delete", {"id": tag_id, "dry_run": dry_run})


@tag_app.command("tasks")
def tag_tasks(
    tag: str = typer.Argument(..., help="Tag name or ID"),
    limit: int = typer.Option(100, "-l", "--limit", help="Maximum results"),
    all_tasks: bool = typer.Option(False, "-a", "--all", help="Include completed tasks"),
) -> None:
    """Tasks with a tag."""
    _run("task.by_tag", {"tag": tag, "limit": limit, "include_completed": all_tasks})


# ============================================================================
# review / sync / status / mcp
# ============================================================================


@app.command()
def review(
    all_projects: bool = typer.Option(False, "-a", "--all", help="Include projects not yet due for review"),
    limit: int = typer.Option(50, "-l", "--limit", help="Maximum results"),
) -> None:
    """Projects due for review, most overdue first."""
    _run("project.review_list", {"all": all_projects, "limit": limit})


@app.command()
def sync(dry_run: bool = typer.Option(False, "--dry-run", help="Preview without syncing")) -> None:
    """Start an OmniFocus sync."""
    _run("util.sync", {"dry_run": dry_run})


@app.command()
def status() -> None:
    """Report whether OmniFocus is running; exits 3 when it is not."""
    result = get_catalog().run("util.status", {})
    typer.echo(render(result.to_payload(), _output["format"]))
    if not getattr(result, "running", False):
        raise typer.Exit(EXIT_NOT_RUNNING)


@app.command("mcp")
def mcp_server() -> None:
    """Run the MCP server over stdio."""
    run()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
