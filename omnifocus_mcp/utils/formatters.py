"""Formatting utilities for result payloads."""

import json
from typing import Any

from omnifocus_mcp.enums import ResponseFormat

ROOT = "(root)"


def _day(value: str | None) -> str:
    return value[:10] if value else ""


def _tag_names(task: dict[str, Any]) -> list[str]:
    names = []
    for tag in task.get("tags") or []:
        names.append(tag.get("name", "") if isinstance(tag, dict) else str(tag))
    return [n for n in names if n]


def _format_task_concise(task: dict[str, Any]) -> str:
    """
    Format a single task on one line.

    Output: "[abc123] Buy milk ⚑ (due 2024-12-31) #errands"
    """
    line = f"[{task.get('id', '?')}] {task.get('name') or 'Untitled'}"
    if task.get("flagged"):
        line += " ⚑"
    if task.get("completed"):
        line += " ✓"
    due = task.get("dueDate") or task.get("effectiveDueDate")
    if due:
        line += f" (due {_day(due)})"
    tags = _tag_names(task)
    if tags:
        line += " " + " ".join(f"#{t}" for t in tags)
    return line


def _format_tasks_concise(tasks: list[dict[str, Any]], title: str | None = None) -> str:
    """Format a task list, one task per line, with an optional header."""
    if not tasks:
        return "No tasks found."
    lines = []
    if title:
        lines.append(f"{title} ({len(tasks)} task(s))")
    lines.extend(_format_task_concise(t) for t in tasks)
    return "\n".join(lines)


def _format_task_detail(task: dict[str, Any]) -> str:
    lines = [task.get("name") or "Untitled", f"  ID: {task.get('id')}"]
    if task.get("projectName"):
        lines.append(f"  Project: {task['projectName']}")
    elif task.get("inInbox"):
        lines.append("  Project: (inbox)")
    for label, key in (("Due", "dueDate"), ("Defer", "deferDate"), ("Completed", "completionDate")):
        if task.get(key):
            lines.append(f"  {label}: {task[key]}")
    if task.get("flagged"):
        lines.append("  Flagged: yes")
    if task.get("estimatedMinutes"):
        lines.append(f"  Estimate: {task['estimatedMinutes']} min")
    tags = _tag_names(task)
    if tags:
        lines.append(f"  Tags: {', '.join(tags)}")
    if task.get("note"):
        lines.append("  Note:")
        lines.extend(f"    {line}" for line in task["note"].splitlines())
    return "\n".join(lines)


def _format_projects(projects: list[dict[str, Any]]) -> str:
    if not projects:
        return "No projects found."
    lines = []
    for project in projects:
        status = project.get("status")
        suffix = f" ({status})" if status and status != "active" else ""
        if project.get("folderName"):
            suffix += f" [{project['folderName']}]"
        if project.get("needsReview"):
            suffix += " (review due)"
        lines.append(f"{project.get('name')}{suffix}")
        lines.append(f"  ID: {project.get('id')}")
        if "taskCount" in project:
            lines.append(f"  Tasks: {project['taskCount']}")
    return "\n".join(lines)


def _format_project_detail(project: dict[str, Any], tasks: list[dict[str, Any]] | None) -> str:
    lines = [project.get("name") or "Untitled", f"  ID: {project.get('id')}", f"  Status: {project.get('status')}"]
    lines.append(f"  Folder: {project.get('folderName') or ROOT}")
    if project.get("dueDate"):
        lines.append(f"  Due: {project['dueDate']}")
    if project.get("nextReviewDate"):
        lines.append(f"  Next review: {_day(project['nextReviewDate'])}")
    if tasks is not None:
        lines.append("")
        lines.append(_format_tasks_concise(tasks, "Tasks"))
    return "\n".join(lines)


def _format_folders(folders: list[dict[str, Any]]) -> str:
    if not folders:
        return "No folders found."
    lines = []
    for folder in folders:
        hidden = " (hidden)" if folder.get("hidden") else ""
        lines.append(f"{folder.get('name')}{hidden}")
        lines.append(f"  ID: {folder.get('id')}")
        lines.append(f"  Projects: {folder.get('projectCount', 0)}, folders: {folder.get('folderCount', 0)}")
    return "\n".join(lines)


def _format_tags(tags: list[dict[str, Any]]) -> str:
    if not tags:
        return "No tags found."
    lines = []
    for tag in tags:
        parent = f" [{tag['containerName']}]" if tag.get("containerName") else ""
        lines.append(f"#{tag.get('name')}{parent} ({tag.get('availableTaskCount', 0)} available)  {tag.get('id')}")
    return "\n".join(lines)


def _format_forecast(days: list[dict[str, Any]]) -> str:
    if not days:
        return "Nothing due in the forecast window."
    lines = []
    for day in days:
        lines.append(f"{day.get('date')} ({day.get('count', len(day.get('tasks', [])))})")
        lines.extend(f"  {_format_task_concise(t)}" for t in day.get("tasks", []))
    return "\n".join(lines)


def _format_dry_run(payload: dict[str, Any]) -> str:
    message = (payload.get("message") or "No changes applied").removeprefix("DRY RUN: ")
    lines = [f"[DRY RUN] {message}"]
    lines.extend(f"  {key}: {json.dumps(value)}" for key, value in payload.get("preview", {}).items())
    for error in payload.get("errors") or []:
        lines.append(f"  error: {error.get('id') or error.get('name')}: {error.get('error')}")
    return "\n".join(lines)


def _format_batch(payload: dict[str, Any]) -> str:
    lines = [payload.get("message") or ""]
    for key in ("created", "completed", "dropped", "deleted"):
        for ref in payload.get(key) or []:
            lines.append(f"  [{ref.get('id')}] {ref.get('name')}")
    for error in payload.get("errors") or []:
        lines.append(f"  Error: {error.get('id') or error.get('name')}: {error.get('error')}")
    return "\n".join(line for line in lines if line)


def _format_mutation(payload: dict[str, Any]) -> str:
    line = payload.get("message") or "Done"
    if payload.get("id"):
        line += f"\n  [{payload['id']}] {payload.get('name', '')}"
    for ref in payload.get("createdTasks") or []:
        line += f"\n    - [{ref.get('id')}] {ref.get('name')}"
    return line


def format_text(payload: dict[str, Any]) -> str:
    """Render a result payload as human-readable text."""
    kind = payload.get("kind")
    if kind == "error":
        return f"Error: {payload.get('error', 'Unknown error')}"
    if kind == "dry_run":
        return _format_dry_run(payload)
    if kind == "batch":
        return _format_batch(payload)
    if kind == "mutation":
        return _format_mutation(payload)
    if kind == "status":
        return "OmniFocus is running" if payload.get("running") else "OmniFocus is not running"
    if kind == "entity":
        if payload.get("task"):
            return _format_task_detail(payload["task"])
        return _format_project_detail(payload.get("project") or {}, payload.get("tasks"))
    if "forecast" in payload:
        return _format_forecast(payload["forecast"])
    if "tasks" in payload:
        title = None
        if payload.get("project"):
            title = payload["project"].get("name")
        elif payload.get("tag"):
            title = f"#{payload['tag'].get('name')}"
        return _format_tasks_concise(payload["tasks"], title)
    if "projects" in payload:
        return _format_projects(payload["projects"])
    if "folders" in payload:
        return _format_folders(payload["folders"])
    if "tags" in payload:
        return _format_tags(payload["tags"])
    if "perspectives" in payload:
        return "\n".join(p.get("name", "") for p in payload["perspectives"]) or "No perspectives found."
    return payload.get("message") or json.dumps(payload, indent=2)


def format_quiet(payload: dict[str, Any]) -> str:
    """IDs only, one per line, for piping into other commands."""
    for key in ("tasks", "projects", "folders", "tags", "created", "completed", "dropped", "deleted"):
        if isinstance(payload.get(key), list):
            return "\n".join(str(item.get("id")) for item in payload[key] if item.get("id"))
    if payload.get("id"):
        return str(payload["id"])
    return ""


def render(payload: dict[str, Any], response_format: ResponseFormat = ResponseFormat.TEXT) -> str:
    """Render a payload in the requested format."""
    if response_format == ResponseFormat.JSON:
        return json.dumps(payload)
    if response_format == ResponseFormat.PRETTY:
        return json.dumps(payload, indent=2)
    if response_format == ResponseFormat.QUIET and payload.get("success"):
        return format_quiet(payload)
    return format_text(payload)
