"""Input models for OmniFocus MCP tools.

Each tool takes one action plus the union of that action family's
arguments. ``to_operation`` maps the input onto a catalog operation name
and an options dict; only fields the caller actually set are forwarded, so
an explicit ``null`` (e.g. ``due: null`` on update) still reaches the
operation and clears the field.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from omnifocus_mcp.enums import (
    FolderAction,
    ProjectAction,
    ReorderPosition,
    TagAction,
    TaskAction,
    TaskView,
    UtilAction,
)


class ToolInput(BaseModel):
    """Base for the consolidated tool inputs."""

    model_config = ConfigDict(str_strip_whitespace=True)

    def _options(self, *exclude: str) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True, exclude={"action", *exclude})


# ============================================================================
# omnifocus_task
# ============================================================================


class TaskToolInput(ToolInput):
    """Input model for the omnifocus_task tool."""

    action: TaskAction = Field(..., description="list, get, create, update, complete, drop, delete, reorder")
    view: TaskView = Field(
        default=TaskView.INBOX,
        description="For action=list: inbox, today, flagged, forecast, or search",
    )
    id: str | None = Field(default=None, description="Task ID (get, update, reorder; or a single id to complete)")
    ids: list[str] | None = Field(default=None, description="Task IDs for complete, drop or delete")
    name: str | None = Field(default=None, description="Task name (create, update)")
    bulk: list[str] | None = Field(default=None, description="Create one task per name")
    note: str | None = Field(default=None, description="Task note")
    project: str | None = Field(default=None, description="Project name or ID")
    tag: str | None = Field(default=None, description="Tag name or ID")
    tags: list[str] | None = Field(default=None, description="Additional tags for create")
    due: str | None = Field(
        default=None,
        description="Due date: 'today', 'tomorrow', 'next week', '+3d', '+2w', or ISO date. Empty/null clears on update",
    )
    defer: str | None = Field(default=None, description="Defer date, same forms as due")
    due_by: str | None = Field(default=None, description="Shift the due date: '+3d', '-1w', '+1m'")
    defer_by: str | None = Field(default=None, description="Shift the defer date: '+3d', '-1w', '+1m'")
    flagged: bool | None = Field(default=None, description="Flag state (create, update) or flagged-only filter (search)")
    estimated_minutes: int | None = Field(default=None, description="Estimated duration in minutes", ge=0)
    position: ReorderPosition | None = Field(default=None, description="For reorder: top, bottom, before, after")
    target: str | None = Field(default=None, description="For reorder before/after: the sibling task ID")
    query: str | None = Field(default=None, description="Search text matched against name and note")
    available: bool | None = Field(default=None, description="Only available (unblocked, not deferred) tasks")
    due_before: str | None = Field(default=None, description="Search: due on or before")
    due_after: str | None = Field(default=None, description="Search: due on or after")
    require_due: bool | None = Field(default=None, description="Search: drop tasks with no due date")
    defer_before: str | None = Field(default=None, description="Search: deferred until on or before")
    defer_after: str | None = Field(default=None, description="Search: deferred until on or after")
    include_completed: bool | None = Field(default=None, description="Include completed tasks")
    include_flagged: bool | None = Field(default=None, description="Today view: also include flagged tasks")
    days: int | None = Field(default=None, description="Forecast window in days", ge=1, le=365)
    limit: int | None = Field(default=None, description="Maximum number of tasks to return", ge=1, le=1000)
    dry_run: bool | None = Field(default=None, description="Preview a change without applying it")

    def to_operation(self) -> tuple[str, dict[str, Any]]:
        if self.action == TaskAction.LIST:
            return f"task.{self.view.value}", self._options("view")

        options = self._options("view")
        if self.action in (TaskAction.COMPLETE, TaskAction.DROP, TaskAction.DELETE):
            if not self.ids and self.id:
                options["ids"] = [self.id]
            options.pop("id", None)
        return f"task.{self.action.value}", options


# ============================================================================
# omnifocus_project
# ============================================================================


class OutlineProjectInput(BaseModel):
    """One project in a batch outline."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., description="Project name", min_length=1)
    tasks: list[str] = Field(default_factory=list, description="Task names to create in the project")


class ProjectToolInput(ToolInput):
    """Input model for the omnifocus_project tool."""

    action: ProjectAction = Field(
        ...,
        description="list, get, get_tasks, create, update, complete, drop, set_status, move, batch",
    )
    id: str | None = Field(default=None, description="Project name or ID")
    name: str | None = Field(default=None, description="Project name (create) or new name (update)")
    folder: str | None = Field(default=None, description="Folder name or ID")
    note: str | None = Field(default=None, description="Project note")
    due: str | None = Field(default=None, description="Due date")
    clear_due: bool | None = Field(default=None, description="Remove the due date")
    defer: str | None = Field(default=None, description="Defer date")
    clear_defer: bool | None = Field(default=None, description="Remove the defer date")
    flagged: bool | None = Field(default=None, description="Flag state")
    sequential: bool | None = Field(default=None, description="Tasks must be done in order")
    single_actions: bool | None = Field(default=None, description="Create as a single-actions list")
    tag: str | None = Field(default=None, description="Primary tag name or ID")
    status: str | None = Field(default=None, description="For set_status: active, on-hold, done, dropped")
    tasks: list[str] | None = Field(default=None, description="Task names to create with the project")
    projects: list[OutlineProjectInput] | None = Field(default=None, description="For batch: projects with tasks")
    create_folder: str | None = Field(default=None, description="For batch: create this folder first")
    include_completed: bool | None = Field(default=None, description="Include done projects / completed tasks")
    include_dropped: bool | None = Field(default=None, description="Include dropped projects")
    include_on_hold: bool | None = Field(default=None, description="Include on-hold projects")
    limit: int | None = Field(default=None, description="Maximum number of results", ge=1, le=1000)
    dry_run: bool | None = Field(default=None, description="Preview a change without applying it")

    def to_operation(self) -> tuple[str, dict[str, Any]]:
        options = self._options()
        if self.action == ProjectAction.LIST:
            return "project.list", options
        if self.action == ProjectAction.GET_TASKS:
            return "project.tasks", options
        if self.action == ProjectAction.SET_STATUS:
            return "project.update", {k: v for k, v in options.items() if k in ("id", "status", "dry_run")}
        return f"project.{self.action.value}", options


# ============================================================================
# omnifocus_folder / omnifocus_tag
# ============================================================================


class FolderToolInput(ToolInput):
    """Input model for the omnifocus_folder tool."""

    action: FolderAction = Field(..., description="list, create, update, move_project")
    id: str | None = Field(default=None, description="Folder name or ID (update)")
    name: str | None = Field(default=None, description="Folder name (create) or new name (update)")
    parent: str | None = Field(default=None, description="Parent folder name or ID")
    note: str | None = Field(default=None, description="Folder note")
    hidden: bool | None = Field(default=None, description="Hide or unhide the folder")
    project: str | None = Field(default=None, description="For move_project: the project to move")
    root_only: bool | None = Field(default=None, description="List only top-level folders")
    include_hidden: bool | None = Field(default=None, description="Include hidden folders")
    limit: int | None = Field(default=None, description="Maximum number of folders to return", ge=1, le=1000)
    dry_run: bool | None = Field(default=None, description="Preview a change without applying it")

    def to_operation(self) -> tuple[str, dict[str, Any]]:
        options = self._options()
        if self.action == FolderAction.MOVE_PROJECT:
            # id names the destination folder; without one the project moves to the top level
            moved = {"id": self.project, "folder": self.id or self.name}
            if self.dry_run is not None:
                moved["dry_run"] = self.dry_run
            return "project.move", moved
        return f"folder.{self.action.value}", options


class TagToolInput(ToolInput):
    """Input model for the omnifocus_tag tool."""

    action: TagAction = Field(..., description="list, get_tasks, create, update, delete")
    id: str | None = Field(default=None, description="Tag name or ID")
    name: str | None = Field(default=None, description="Tag name (create) or new name (update)")
    parent: str | None = Field(default=None, description="Parent tag name or ID")
    hidden: bool | None = Field(default=None, description="Hide or unhide the tag")
    allows_next_action: bool | None = Field(default=None, description="Whether tasks with this tag can be next actions")
    force: bool | None = Field(default=None, description="Create even if a tag with this name exists")
    include_hidden: bool | None = Field(default=None, description="Include hidden tags")
    include_completed: bool | None = Field(default=None, description="For get_tasks: include completed tasks")
    limit: int | None = Field(default=None, description="Maximum number of results", ge=1, le=1000)
    dry_run: bool | None = Field(default=None, description="Preview a change without applying it")

    def to_operation(self) -> tuple[str, dict[str, Any]]:
        options = self._options()
        if self.action == TagAction.GET_TASKS:
            options["tag"] = options.pop("id", None) or self.name
            return "task.by_tag", options
        return f"tag.{self.action.value}", options


# ============================================================================
# omnifocus_util
# ============================================================================


class UtilToolInput(ToolInput):
    """Input model for the omnifocus_util tool."""

    action: UtilAction = Field(..., description="sync, review_list, mark_reviewed, status, perspectives")
    id: str | None = Field(default=None, description="For mark_reviewed: project name or ID")
    all: bool | None = Field(default=None, description="For review_list: include projects not yet due")
    limit: int | None = Field(default=None, description="Maximum number of results", ge=1, le=1000)
    dry_run: bool | None = Field(default=None, description="Preview a change without applying it")

    def to_operation(self) -> tuple[str, dict[str, Any]]:
        options = self._options()
        if self.action == UtilAction.REVIEW_LIST:
            return "project.review_list", options
        if self.action == UtilAction.MARK_REVIEWED:
            return "project.mark_reviewed", options
        return f"util.{self.action.value}", options
