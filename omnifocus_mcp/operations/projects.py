"""Project operations."""

from __future__ import annotations

from typing import Any

from omnifocus_mcp.enums import OperationCategory, ProjectStatus
from omnifocus_mcp.models.entities import EntityRef, ProjectModel
from omnifocus_mcp.models.options import (
    BatchProjectsOptions,
    CreateProjectOptions,
    EntityIdOptions,
    MoveProjectOptions,
    ProjectListOptions,
    ProjectRefOptions,
    ProjectTasksOptions,
    ReviewListOptions,
    UpdateProjectOptions,
)
from omnifocus_mcp.models.results import (
    BatchItemError,
    BatchResult,
    DryRunResult,
    EntityResult,
    ErrorResult,
    MutationResult,
    ProjectListResult,
    Result,
    TaskListResult,
)
from omnifocus_mcp.operations.base import Operation, OperationContext, compact
from omnifocus_mcp.utils.dates import format_iso, resolve_date

PROJECT_DETAIL_TASK_LIMIT = 50

ROOT = "(root)"


def _summary(project: ProjectModel) -> dict[str, Any]:
    return {
        "id": project.id,
        "name": project.name,
        "sequential": project.sequential,
        "singletonActionHolder": project.singleton_action_holder,
    }


# ============================================================================
# Reads
# ============================================================================


def list_projects(ctx: OperationContext, opts: ProjectListOptions) -> Result:
    folder = ctx.resolve(ctx.folders, opts.folder, "Folder")
    if isinstance(folder, ErrorResult):
        return folder

    projects = ctx.projects()
    if isinstance(projects, ErrorResult):
        return projects

    hidden = set()
    if not opts.include_completed:
        hidden.add(ProjectStatus.DONE)
    if not opts.include_dropped:
        hidden.add(ProjectStatus.DROPPED)
    if not opts.include_on_hold:
        hidden.add(ProjectStatus.ON_HOLD)

    selected = []
    for project in projects:
        if project.status in hidden:
            continue
        if folder is not None and project.folder_id != folder.id:
            continue
        if opts.brief:
            project = ProjectModel(
                id=project.id,
                name=project.name,
                status=project.status,
                folder_name=project.folder_name,
            )
        selected.append(project)
        if len(selected) >= opts.limit:
            break

    return ProjectListResult(projects=selected, total_count=len(projects))


def get(ctx: OperationContext, opts: EntityIdOptions) -> Result:
    project = ctx.resolve(ctx.projects, opts.id, "Project")
    if isinstance(project, ErrorResult):
        return project

    snapshot = ctx.tasks("project", project_id=project.id)
    if isinstance(snapshot, ErrorResult):
        return snapshot
    tasks, _ = snapshot
    return EntityResult(project=project, tasks=tasks[:PROJECT_DETAIL_TASK_LIMIT])


def tasks(ctx: OperationContext, opts: ProjectTasksOptions) -> Result:
    project = ctx.resolve(ctx.projects, opts.id, "Project")
    if isinstance(project, ErrorResult):
        return project

    snapshot = ctx.tasks("project", project_id=project.id, include_completed=opts.include_completed)
    if isinstance(snapshot, ErrorResult):
        return snapshot
    found, _ = snapshot
    return TaskListResult(tasks=found[: opts.limit], total_count=len(found), project=_summary(project))


def _review_key(project: ProjectModel) -> tuple[bool, float]:
    # Projects without a review date sort last
    if project.next_review_date is None:
        return (True, 0.0)
    return (False, project.next_review_date.timestamp())


def review_list(ctx: OperationContext, opts: ReviewListOptions) -> Result:
    """Active and on-hold projects due for review, most overdue first."""
    projects = ctx.projects()
    if isinstance(projects, ErrorResult):
        return projects

    selected = []
    for project in projects:
        if project.status in (ProjectStatus.DONE, ProjectStatus.DROPPED):
            continue
        due = project.next_review_date is not None and project.next_review_date <= ctx.now
        if due or opts.all:
            selected.append(project.model_copy(update={"needs_review": due}))

    selected.sort(key=_review_key)
    selected = selected[: opts.limit]
    return ProjectListResult(
        projects=selected,
        total_count=len(selected),
        due_count=sum(1 for p in selected if p.needs_review),
    )


# ============================================================================
# Create
# ============================================================================


def create(ctx: OperationContext, opts: CreateProjectOptions) -> Result:
    folder = ctx.resolve(ctx.folders, opts.folder, "Folder")
    if isinstance(folder, ErrorResult):
        return folder
    tag = ctx.resolve(ctx.tags, opts.tag, "Tag")
    if isinstance(tag, ErrorResult):
        return tag

    payload = compact(
        {
            "name": opts.name,
            "folderId": folder.id if folder else None,
            "note": opts.note or None,
            "dueDate": format_iso(resolve_date(opts.due, ctx.now)),
            "deferDate": format_iso(resolve_date(opts.defer, ctx.now)),
            "flagged": True if opts.flagged else None,
            "primaryTagId": tag.id if tag else None,
            "sequential": opts.sequential,
            "singleActions": True if opts.single_actions else None,
            "tasks": opts.tasks or None,
        }
    )

    if opts.dry_run:
        preview = {k: v for k, v in payload.items() if not k.endswith("Id")}
        preview["folder"] = folder.name if folder else ROOT
        if tag:
            preview["tag"] = tag.name
        preview.setdefault("tasks", [])
        return DryRunResult(
            preview=preview,
            message=f"DRY RUN: Project would be created with {len(opts.tasks or [])} task(s)",
        )

    envelope = ctx.write("create_project", payload)
    if isinstance(envelope, ErrorResult):
        return envelope
    info = envelope.get("project") or {}
    created_tasks = [EntityRef.model_validate(t) for t in envelope.get("tasks") or []]
    return MutationResult(
        entity="project",
        id=info.get("id"),
        name=info.get("name", opts.name),
        status=ProjectStatus.ACTIVE.value,
        flagged=True if opts.flagged else None,
        sequential=opts.sequential,
        folder=folder.name if folder else None,
        tag=tag.name if tag else None,
        created_tasks=created_tasks or None,
        message=f"Project created with {len(created_tasks)} task(s)" if created_tasks else "Project created successfully",
    )


def batch(ctx: OperationContext, opts: BatchProjectsOptions) -> Result:
    """Create several projects, one bridge call each, from an outline."""
    folder = None
    if not opts.create_folder:
        folder = ctx.resolve(ctx.folders, opts.folder, "Folder")
        if isinstance(folder, ErrorResult):
            return folder

    total_tasks = sum(len(p.tasks) for p in opts.projects)
    if opts.dry_run:
        if opts.create_folder:
            folder_label = f"{opts.create_folder} (new)"
        else:
            folder_label = folder.name if folder else ROOT
        return DryRunResult(
            preview={
                "folder": folder_label,
                "sequential": opts.sequential,
                "projects": [p.model_dump() for p in opts.projects],
            },
            message=f"DRY RUN: Would create {len(opts.projects)} project(s) with {total_tasks} task(s)",
        )

    folder_ref = None
    if opts.create_folder:
        envelope = ctx.write("create_folder", {"name": opts.create_folder})
        if isinstance(envelope, ErrorResult):
            return envelope
        folder_ref = EntityRef.model_validate(envelope.get("folder") or {"name": opts.create_folder})
        folder_id = folder_ref.id
    else:
        folder_id = folder.id if folder else None

    created: list[EntityRef] = []
    errors: list[BatchItemError] = []
    for outline in opts.projects:
        envelope = ctx.write(
            "create_project",
            compact(
                {
                    "name": outline.name,
                    "folderId": folder_id,
                    "sequential": True if opts.sequential else None,
                    "tasks": outline.tasks or None,
                }
            ),
        )
        if isinstance(envelope, ErrorResult):
            errors.append(BatchItemError(name=outline.name, error=envelope.error))
            continue
        info = envelope.get("project") or {}
        created.append(EntityRef(id=info.get("id"), name=info.get("name", outline.name)))

    message = f"Created {len(created)} project(s) with {total_tasks} task(s)"
    if folder_ref is not None:
        message = f'Created folder "{folder_ref.name}" with {len(created)} project(s)'
    return BatchResult(
        success=not errors,
        created=created,
        errors=errors or None,
        folder=folder_ref,
        message=message,
    )


# ============================================================================
# Update
# ============================================================================


def _apply(
    ctx: OperationContext,
    project: ProjectModel,
    changes: dict[str, Any],
    *,
    dry_run: bool,
    message: str,
    **result_fields: Any,
) -> Result:
    if dry_run:
        return DryRunResult(
            preview={"project": {"id": project.id, "name": project.name, "status": project.status.value}, "changes": changes},
            message="DRY RUN: Project would be modified",
        )
    if not changes:
        return MutationResult(entity="project", id=project.id, name=project.name, changes=[], message="No changes made")

    envelope = ctx.write("update_project", {"id": project.id, "changes": changes})
    if isinstance(envelope, ErrorResult):
        return envelope
    updated = ProjectModel.model_validate(envelope.get("project") or project.model_dump())
    return MutationResult(
        entity="project",
        id=updated.id,
        name=updated.name,
        status=updated.status.value,
        changes=list(changes),
        message=message,
        **result_fields,
    )


_TERMINAL = (ProjectStatus.DONE, ProjectStatus.DROPPED)


def _check_transition(project: ProjectModel, target: ProjectStatus) -> ErrorResult | None:
    # done and dropped are final; only active and on-hold move back and forth
    if project.status in _TERMINAL and target != project.status:
        return ErrorResult(
            error=f'Project "{project.name}" is {project.status.value} and cannot be set to {target.value}',
            code="invalid_state",
        )
    return None


def update(ctx: OperationContext, opts: UpdateProjectOptions) -> Result:
    project = ctx.resolve(ctx.projects, opts.id, "Project")
    if isinstance(project, ErrorResult):
        return project
    tag = ctx.resolve(ctx.tags, opts.tag, "Tag")
    if isinstance(tag, ErrorResult):
        return tag

    changes: dict[str, Any] = {}
    if opts.name:
        changes["name"] = opts.name
    if opts.note is not None:
        changes["note"] = opts.note
    if opts.clear_due:
        changes["dueDate"] = None
    elif (due := resolve_date(opts.due, ctx.now)) is not None:
        changes["dueDate"] = format_iso(due)
    if opts.clear_defer:
        changes["deferDate"] = None
    elif (defer := resolve_date(opts.defer, ctx.now)) is not None:
        changes["deferDate"] = format_iso(defer)
    if opts.flagged is not None:
        changes["flagged"] = opts.flagged
    if opts.sequential is not None:
        changes["sequential"] = opts.sequential
    if tag is not None:
        changes["primaryTagId"] = tag.id
    if opts.status:
        blocked = _check_transition(project, ProjectStatus(opts.status))
        if blocked is not None:
            return blocked
        changes["status"] = opts.status

    return _apply(
        ctx,
        project,
        changes,
        dry_run=opts.dry_run,
        message="Project modified" if changes else "No changes made",
        flagged=opts.flagged,
        sequential=opts.sequential,
        tag=tag.name if tag else None,
        note=opts.note,
    )


def _set_status(status: ProjectStatus, verb: str):
    def handler(ctx: OperationContext, opts: ProjectRefOptions) -> Result:
        project = ctx.resolve(ctx.projects, opts.id, "Project")
        if isinstance(project, ErrorResult):
            return project
        blocked = _check_transition(project, status)
        if blocked is not None:
            return blocked
        return _apply(ctx, project, {"status": status.value}, dry_run=opts.dry_run, message=f"Project {verb}")

    handler.__name__ = verb
    return handler


complete = _set_status(ProjectStatus.DONE, "completed")
drop = _set_status(ProjectStatus.DROPPED, "dropped")
hold = _set_status(ProjectStatus.ON_HOLD, "put on hold")
activate = _set_status(ProjectStatus.ACTIVE, "activated")


def mark_reviewed(ctx: OperationContext, opts: ProjectRefOptions) -> Result:
    project = ctx.resolve(ctx.projects, opts.id, "Project")
    if isinstance(project, ErrorResult):
        return project
    return _apply(ctx, project, {"reviewed": True}, dry_run=opts.dry_run, message="Project marked reviewed")


def move(ctx: OperationContext, opts: MoveProjectOptions) -> Result:
    project = ctx.resolve(ctx.projects, opts.id, "Project")
    if isinstance(project, ErrorResult):
        return project
    folder = ctx.resolve(ctx.folders, opts.folder, "Folder")
    if isinstance(folder, ErrorResult):
        return folder

    source = project.folder_name or ROOT
    target = folder.name if folder else ROOT
    if opts.dry_run:
        return DryRunResult(
            preview={"project": project.name, "from": source, "to": target},
            message="DRY RUN: Project would be moved",
        )

    envelope = ctx.write("move_project", {"id": project.id, "folderId": folder.id if folder else None})
    if isinstance(envelope, ErrorResult):
        return envelope
    return MutationResult(
        entity="project",
        id=project.id,
        name=project.name,
        from_folder=source,
        to_folder=target,
        folder=folder.name if folder else None,
        message=f'Project moved from "{source}" to "{target}"',
    )


OPERATIONS = [
    Operation("project.list", OperationCategory.READ, ProjectListOptions, list_projects, description="List projects"),
    Operation("project.get", OperationCategory.READ, EntityIdOptions, get, description="Project with its tasks"),
    Operation("project.tasks", OperationCategory.READ, ProjectTasksOptions, tasks, description="Tasks in a project"),
    Operation(
        "project.review_list", OperationCategory.READ, ReviewListOptions, review_list, description="Projects due for review"
    ),
    Operation("project.create", OperationCategory.WRITE, CreateProjectOptions, create, description="Create a project"),
    Operation("project.batch", OperationCategory.WRITE, BatchProjectsOptions, batch, description="Create from outline"),
    Operation("project.update", OperationCategory.WRITE, UpdateProjectOptions, update, description="Modify a project"),
    Operation("project.complete", OperationCategory.WRITE, ProjectRefOptions, complete, description="Mark done"),
    Operation("project.drop", OperationCategory.WRITE, ProjectRefOptions, drop, description="Mark dropped"),
    Operation("project.hold", OperationCategory.WRITE, ProjectRefOptions, hold, description="Put on hold"),
    Operation("project.activate", OperationCategory.WRITE, ProjectRefOptions, activate, description="Resume"),
    Operation(
        "project.mark_reviewed", OperationCategory.WRITE, ProjectRefOptions, mark_reviewed, description="Mark reviewed"
    ),
    Operation("project.move", OperationCategory.WRITE, MoveProjectOptions, move, description="Move to a folder"),
]
