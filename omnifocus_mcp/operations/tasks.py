"""Task operations: views, search, and mutations."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, time, timedelta
from typing import Any

from omnifocus_mcp.enums import OperationCategory, ReorderPosition
from omnifocus_mcp.models.entities import EntityRef, TaskModel
from omnifocus_mcp.models.options import (
    CreateTaskOptions,
    EntityIdOptions,
    FilterSet,
    FlaggedOptions,
    ForecastOptions,
    InboxOptions,
    ReorderTaskOptions,
    SearchOptions,
    TagTasksOptions,
    TaskIdsOptions,
    TodayOptions,
    UpdateTaskOptions,
)
from omnifocus_mcp.models.results import (
    BatchItemError,
    BatchResult,
    DryRunResult,
    EntityResult,
    ErrorResult,
    ForecastDay,
    ForecastResult,
    MutationResult,
    Result,
    TaskListResult,
)
from omnifocus_mcp.operations.base import Operation, OperationContext, compact, not_found
from omnifocus_mcp.utils.dates import adjust_date, format_iso, resolve_date
from omnifocus_mcp.utils.filters import compile_filters, evaluate
from omnifocus_mcp.utils.locator import NotFound, find_entity, lookup

logger = logging.getLogger(__name__)


def _effective_due(task: TaskModel) -> datetime | None:
    return task.effective_due_date or task.due_date


def _effective_defer(task: TaskModel) -> datetime | None:
    return task.effective_defer_date or task.defer_date


# ============================================================================
# Views
# ============================================================================


def inbox(ctx: OperationContext, opts: InboxOptions) -> Result:
    snapshot = ctx.tasks("inbox", include_completed=opts.include_completed, brief=opts.brief)
    if isinstance(snapshot, ErrorResult):
        return snapshot
    tasks, total = snapshot
    return TaskListResult(tasks=tasks[: opts.limit], total_count=total)


def today(ctx: OperationContext, opts: TodayOptions) -> Result:
    """Tasks due today or overdue, deferred until today, or (optionally) flagged."""
    snapshot = ctx.tasks(brief=opts.brief)
    if isinstance(snapshot, ErrorResult):
        return snapshot
    tasks, _ = snapshot

    day = ctx.now.date()
    start = datetime.combine(day, time.min, tzinfo=ctx.now.tzinfo)
    end = datetime.combine(day, time(23, 59, 59), tzinfo=ctx.now.tzinfo)

    selected: list[TaskModel] = []
    for task in tasks:
        if task.completed:
            continue
        due = _effective_due(task)
        defer = _effective_defer(task)
        if (
            (due is not None and due <= end)
            or (defer is not None and start <= defer <= end)
            or (opts.include_flagged and task.flagged)
        ):
            selected.append(task)
            if len(selected) >= opts.limit:
                break

    return TaskListResult(tasks=selected, total_count=len(selected))


def flagged(ctx: OperationContext, opts: FlaggedOptions) -> Result:
    snapshot = ctx.tasks(include_completed=opts.include_completed, brief=opts.brief)
    if isinstance(snapshot, ErrorResult):
        return snapshot
    tasks, _ = snapshot
    compiled = compile_filters(FilterSet(flagged=True, include_completed=opts.include_completed), now=ctx.now)
    matches = evaluate(tasks, compiled, opts.limit)
    return TaskListResult(tasks=matches, total_count=len(matches))


def forecast(ctx: OperationContext, opts: ForecastOptions) -> Result:
    """Incomplete tasks due within the window, grouped by local due date."""
    snapshot = ctx.tasks()
    if isinstance(snapshot, ErrorResult):
        return snapshot
    tasks, _ = snapshot

    horizon = ctx.now + timedelta(days=opts.days)
    groups: dict[str, list[TaskModel]] = defaultdict(list)
    for task in tasks:
        due = _effective_due(task)
        if task.completed or due is None or due > horizon:
            continue
        groups[due.astimezone(ctx.now.tzinfo).date().isoformat()].append(task)

    days = [ForecastDay(date=key, tasks=groups[key]) for key in sorted(groups)]
    return ForecastResult(forecast=days, days=opts.days, total_count=sum(len(d.tasks) for d in days))


def search(ctx: OperationContext, opts: SearchOptions) -> Result:
    projects: list = []
    if opts.project:
        projects = ctx.projects()
        if isinstance(projects, ErrorResult):
            return projects

    tags: list = []
    if opts.tag:
        tags = ctx.tags()
        if isinstance(tags, ErrorResult):
            return tags

    compiled = compile_filters(opts, projects=projects, tags=tags, now=ctx.now)
    if isinstance(compiled, NotFound):
        return not_found(compiled)

    snapshot = ctx.tasks(include_completed=opts.include_completed)
    if isinstance(snapshot, ErrorResult):
        return snapshot
    tasks, _ = snapshot

    matches = evaluate(tasks, compiled, opts.limit)
    echo = opts.model_dump(
        by_alias=True,
        exclude={"limit", "query"},
        exclude_none=True,
        exclude_defaults=True,
    )
    return TaskListResult(
        tasks=matches,
        total_count=len(matches),
        query=opts.query or "(filter only)",
        filters=echo,
    )


def by_tag(ctx: OperationContext, opts: TagTasksOptions) -> Result:
    tag = ctx.resolve(ctx.tags, opts.tag, "Tag")
    if isinstance(tag, ErrorResult):
        return tag

    snapshot = ctx.tasks(include_completed=opts.include_completed)
    if isinstance(snapshot, ErrorResult):
        return snapshot
    tasks, _ = snapshot

    compiled = compile_filters(
        FilterSet(tag=tag.id, include_completed=opts.include_completed),
        tags=[tag],
        now=ctx.now,
    )
    matches = evaluate(tasks, compiled, opts.limit)
    return TaskListResult(
        tasks=matches,
        total_count=len(matches),
        tag={"id": tag.id, "name": tag.name},
    )


def get(ctx: OperationContext, opts: EntityIdOptions) -> Result:
    task = ctx.resolve(lambda: ctx.tasks_matching([opts.id]), opts.id, "Task")
    if isinstance(task, ErrorResult):
        return task
    return EntityResult(task=task)


# ============================================================================
# Create
# ============================================================================


def create(ctx: OperationContext, opts: CreateTaskOptions) -> Result:
    project = ctx.resolve(ctx.projects, opts.project, "Project")
    if isinstance(project, ErrorResult):
        return project

    primary_tag = None
    tag_refs = []
    if opts.tag or opts.tags:
        tags = ctx.tags()
        if isinstance(tags, ErrorResult):
            return tags
        for name in ([opts.tag] if opts.tag else []) + list(opts.tags or []):
            found = lookup(tags, name, "Tag")
            if isinstance(found, NotFound):
                return not_found(found)
            tag_refs.append(found)
        if opts.tag:
            primary_tag = tag_refs.pop(0)

    due = resolve_date(opts.due, ctx.now)
    defer = resolve_date(opts.defer, ctx.now)

    base = compact(
        {
            "note": opts.note or None,
            "projectId": project.id if project else None,
            "dueDate": format_iso(due),
            "deferDate": format_iso(defer),
            "flagged": True if opts.flagged else None,
            "primaryTagId": primary_tag.id if primary_tag else None,
            "tagIds": [t.id for t in tag_refs] or None,
            "estimatedMinutes": opts.estimated_minutes,
        }
    )
    names = opts.bulk or [opts.name]

    if opts.dry_run:
        preview = compact(
            {
                "project": project.name if project else "(inbox)",
                "note": opts.note or None,
                "dueDate": base.get("dueDate"),
                "deferDate": base.get("deferDate"),
                "flagged": opts.flagged,
                "tag": primary_tag.name if primary_tag else None,
                "tags": [t.name for t in tag_refs] or None,
                "estimatedMinutes": opts.estimated_minutes,
            }
        )
        if opts.bulk:
            preview["tasks"] = names
            message = f"DRY RUN: {len(names)} task(s) would be created"
        else:
            preview["name"] = opts.name
            message = "DRY RUN: Task would be created"
        return DryRunResult(preview=preview, message=message)

    if opts.bulk:
        created: list[EntityRef] = []
        errors: list[BatchItemError] = []
        for name in names:
            envelope = ctx.write("create_task", {**base, "name": name})
            if isinstance(envelope, ErrorResult):
                errors.append(BatchItemError(name=name, error=envelope.error))
                continue
            info = envelope.get("task") or {}
            created.append(EntityRef(id=info.get("id"), name=info.get("name", name)))
        return BatchResult(
            success=not errors,
            created=created,
            errors=errors or None,
            message=f"{len(created)} task(s) created",
        )

    envelope = ctx.write("create_task", {**base, "name": opts.name})
    if isinstance(envelope, ErrorResult):
        return envelope
    task = TaskModel.model_validate(envelope.get("task") or {"id": "", "name": opts.name})
    return MutationResult(
        entity="task",
        id=task.id,
        name=task.name,
        message="Task created successfully",
        note=opts.note or None,
        due_date=task.due_date or due,
        defer_date=task.defer_date or defer,
        flagged=True if opts.flagged else None,
        estimated_minutes=opts.estimated_minutes,
        project=project.name if project else None,
        tag=primary_tag.name if primary_tag else None,
        tags=[t.name for t in tag_refs] or None,
    )


# ============================================================================
# Update
# ============================================================================


def _new_date(opts: UpdateTaskOptions, field: str, current: datetime | None, now: datetime) -> tuple[bool, Any]:
    """Work out the new value of a date field: (changed, iso-or-None)."""
    changed = False
    value: datetime | None = current

    if opts.provided(field):
        raw = getattr(opts, field)
        if not raw:
            changed, value = True, None
        else:
            resolved = resolve_date(raw, now)
            if resolved is not None:
                changed, value = True, resolved

    offset = getattr(opts, f"{field}_by")
    if offset:
        adjusted = adjust_date(value, offset, now)
        if adjusted is not None:
            changed, value = True, adjusted

    return changed, format_iso(value)


def update(ctx: OperationContext, opts: UpdateTaskOptions) -> Result:
    task = ctx.resolve(lambda: ctx.tasks_matching([opts.id]), opts.id, "Task")
    if isinstance(task, ErrorResult):
        return task

    changes: dict[str, Any] = {}
    diff: dict[str, dict[str, Any]] = {}

    def record(key: str, old: Any, new: Any) -> None:
        changes[key] = new
        diff[key] = {"from": old, "to": new}

    if opts.provided("name") and opts.name:
        record("name", task.name, opts.name)
    if opts.provided("note"):
        record("note", task.note, opts.note or "")

    due_changed, due_value = _new_date(opts, "due", task.due_date, ctx.now)
    if due_changed:
        record("dueDate", format_iso(task.due_date), due_value)
    defer_changed, defer_value = _new_date(opts, "defer", task.defer_date, ctx.now)
    if defer_changed:
        record("deferDate", format_iso(task.defer_date), defer_value)

    if opts.flagged is not None:
        record("flagged", task.flagged, opts.flagged)
    if opts.provided("estimated_minutes"):
        record("estimatedMinutes", task.estimated_minutes, opts.estimated_minutes)

    project_name = None
    if opts.project:
        project = ctx.resolve(ctx.projects, opts.project, "Project")
        if isinstance(project, ErrorResult):
            return project
        record("projectId", task.project_id, project.id)
        project_name = project.name

    tag_name = None
    if opts.provided("tag"):
        if opts.tag:
            tag = ctx.resolve(ctx.tags, opts.tag, "Tag")
            if isinstance(tag, ErrorResult):
                return tag
            record("primaryTagId", None, tag.id)
            tag_name = tag.name
        else:
            record("primaryTagId", None, None)

    if opts.dry_run:
        return DryRunResult(
            preview={"task": {"id": task.id, "name": task.name}, "changes": diff},
            message="DRY RUN: Task would be modified",
        )

    if not changes:
        return MutationResult(entity="task", id=task.id, name=task.name, changes=[], message="No changes made")

    envelope = ctx.write("update_task", {"id": task.id, "changes": changes})
    if isinstance(envelope, ErrorResult):
        return envelope
    updated = TaskModel.model_validate(envelope.get("task") or task.model_dump())

    return MutationResult(
        entity="task",
        id=updated.id,
        name=updated.name,
        changes=list(changes),
        message="Task updated successfully",
        note=updated.note if "note" in changes else None,
        due_date=updated.due_date if "dueDate" in changes else None,
        defer_date=updated.defer_date if "deferDate" in changes else None,
        flagged=updated.flagged if "flagged" in changes else None,
        estimated_minutes=updated.estimated_minutes if "estimatedMinutes" in changes else None,
        project=project_name,
        tag=tag_name,
    )


# ============================================================================
# Complete / drop / delete
# ============================================================================


_PAST_TENSE = {"complete": "completed", "drop": "dropped", "delete": "deleted"}


def _mark(action: str):
    past = _PAST_TENSE[action]

    def handler(ctx: OperationContext, opts: TaskIdsOptions) -> Result:
        tasks = ctx.tasks_matching(opts.ids)
        if isinstance(tasks, ErrorResult):
            return tasks

        done: list[EntityRef] = []
        errors: list[BatchItemError] = []
        for identifier in opts.ids:
            task = find_entity(tasks, identifier)
            if task is None:
                errors.append(BatchItemError(id=identifier, error=f"Task not found: {identifier}"))
                continue
            if opts.dry_run:
                done.append(EntityRef(id=task.id, name=task.name))
                continue
            envelope = ctx.write("mark_task", {"id": task.id, "action": action})
            if isinstance(envelope, ErrorResult):
                errors.append(BatchItemError(id=identifier, name=task.name, error=envelope.error))
                continue
            done.append(EntityRef(id=task.id, name=task.name))

        if opts.dry_run:
            return DryRunResult(
                preview={"action": action, "tasks": [ref.model_dump() for ref in done]},
                errors=errors or None,
                message=f"DRY RUN: {len(done)} task(s) would be {past}",
            )

        logger.info("%s %d task(s), %d error(s)", past, len(done), len(errors))
        return BatchResult(
            success=not errors,
            errors=errors or None,
            message=f"{len(done)} task(s) {past}",
            **{past: done},
        )

    handler.__name__ = action
    return handler


complete = _mark("complete")
drop = _mark("drop")
delete = _mark("delete")


# ============================================================================
# Reorder
# ============================================================================


def reorder(ctx: OperationContext, opts: ReorderTaskOptions) -> Result:
    tasks = ctx.tasks_matching([opts.id, opts.target])
    if isinstance(tasks, ErrorResult):
        return tasks

    task = lookup(tasks, opts.id, "Task")
    if isinstance(task, NotFound):
        return not_found(task)
    if not task.project_id:
        return ErrorResult(error="Task is not in a project", code="invalid_state")

    target = None
    if opts.position in (ReorderPosition.BEFORE, ReorderPosition.AFTER):
        target = lookup(tasks, opts.target, "Task")
        if isinstance(target, NotFound):
            return not_found(target)

    if opts.dry_run:
        preview = {
            "task": {"id": task.id, "name": task.name},
            "project": {"id": task.project_id, "name": task.project_name},
            "position": opts.position.value,
        }
        if target is not None:
            preview["target"] = {"id": target.id, "name": target.name}
        return DryRunResult(
            preview=preview,
            message=f'DRY RUN: Would move "{task.name}" to {opts.position.value} in "{task.project_name}"',
        )

    envelope = ctx.write(
        "reorder_task",
        compact({"id": task.id, "position": opts.position.value, "targetId": target.id if target else None}),
    )
    if isinstance(envelope, ErrorResult):
        return envelope
    return MutationResult(
        entity="task",
        id=task.id,
        name=task.name,
        position=opts.position.value,
        project=task.project_name,
        message=f'Task reordered in "{task.project_name}"',
    )


OPERATIONS = [
    Operation("task.inbox", OperationCategory.READ, InboxOptions, inbox, description="Inbox tasks"),
    Operation("task.today", OperationCategory.READ, TodayOptions, today, description="Due, overdue or available today"),
    Operation("task.flagged", OperationCategory.READ, FlaggedOptions, flagged, description="Flagged tasks"),
    Operation("task.forecast", OperationCategory.READ, ForecastOptions, forecast, description="Tasks due by day"),
    Operation("task.search", OperationCategory.READ, SearchOptions, search, description="Filter and search tasks"),
    Operation("task.by_tag", OperationCategory.READ, TagTasksOptions, by_tag, description="Tasks with a tag"),
    Operation("task.get", OperationCategory.READ, EntityIdOptions, get, description="One task by id"),
    Operation("task.create", OperationCategory.WRITE, CreateTaskOptions, create, description="Create task(s)"),
    Operation("task.update", OperationCategory.WRITE, UpdateTaskOptions, update, description="Modify a task"),
    Operation("task.complete", OperationCategory.WRITE, TaskIdsOptions, complete, description="Complete task(s)"),
    Operation("task.drop", OperationCategory.WRITE, TaskIdsOptions, drop, description="Drop task(s)"),
    Operation("task.delete", OperationCategory.WRITE, TaskIdsOptions, delete, description="Delete task(s)"),
    Operation("task.reorder", OperationCategory.WRITE, ReorderTaskOptions, reorder, description="Move within project"),
]
