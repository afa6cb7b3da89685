"""Options models for catalog operations.

Each operation validates its loosely-typed options dict into one of these.
Keys may be snake_case or camelCase; unknown keys are ignored so older
callers keep working.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from omnifocus_mcp.enums import ReorderPosition
from omnifocus_mcp.models.entities import normalize_status


class OperationOptions(BaseModel):
    """Base options model."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )


class DryRunOptions(OperationOptions):
    """Options shared by every mutating operation."""

    dry_run: bool = Field(default=False, description="Preview the change without applying it")


def _split_ids(v: object) -> object:
    if isinstance(v, str):
        return [part.strip() for part in v.split(",") if part.strip()]
    if isinstance(v, list):
        return [str(part).strip() for part in v if str(part).strip()]
    return v


# ============================================================================
# Read options
# ============================================================================


class NoOptions(OperationOptions):
    """For operations that take no arguments."""


class InboxOptions(OperationOptions):
    limit: int = Field(default=100, ge=1)
    include_completed: bool = False
    brief: bool = False


class TodayOptions(OperationOptions):
    limit: int = Field(default=100, ge=1)
    include_flagged: bool = Field(default=False, description="Also include every flagged task")
    brief: bool = False


class FlaggedOptions(OperationOptions):
    limit: int = Field(default=100, ge=1)
    include_completed: bool = False
    brief: bool = False


class ForecastOptions(OperationOptions):
    days: int = Field(default=7, ge=1, le=365)


class FilterSet(OperationOptions):
    """Independent, AND-composed task predicates. Absent means unconstrained."""

    include_completed: bool = False
    flagged: bool | None = None
    available: bool | None = None
    project: str | None = None
    tag: str | None = None
    due_before: str | None = None
    due_after: str | None = None
    require_due: bool = False
    defer_before: str | None = None
    defer_after: str | None = None
    query: str | None = None


class SearchOptions(FilterSet):
    limit: int = Field(default=50, ge=1)


class TagTasksOptions(OperationOptions):
    tag: str = Field(..., min_length=1, description="Tag name or ID")
    limit: int = Field(default=100, ge=1)
    include_completed: bool = False


class EntityIdOptions(OperationOptions):
    id: str = Field(..., min_length=1, description="Entity ID or name")


class ProjectListOptions(OperationOptions):
    folder: str | None = None
    limit: int = Field(default=100, ge=1)
    include_completed: bool = False
    include_dropped: bool = False
    include_on_hold: bool = False
    brief: bool = False


class ProjectTasksOptions(EntityIdOptions):
    limit: int = Field(default=100, ge=1)
    include_completed: bool = False


class ReviewListOptions(OperationOptions):
    limit: int = Field(default=50, ge=1)
    all: bool = Field(default=False, description="Include projects not yet due for review")


class FolderListOptions(OperationOptions):
    parent: str | None = Field(default=None, description="List only subfolders of this folder")
    root_only: bool = False
    include_hidden: bool = False
    limit: int = Field(default=100, ge=1)


class TagListOptions(OperationOptions):
    include_hidden: bool = False
    limit: int = Field(default=100, ge=1)


# ============================================================================
# Task write options
# ============================================================================


class CreateTaskOptions(DryRunOptions):
    name: str | None = None
    bulk: list[str] | None = Field(default=None, description="Create one task per name")
    project: str | None = None
    note: str | None = None
    due: str | None = None
    defer: str | None = None
    flagged: bool = False
    tag: str | None = Field(default=None, description="Primary tag")
    tags: list[str] | None = None
    estimated_minutes: int | None = Field(default=None, ge=0)

    @field_validator("bulk")
    @classmethod
    def _clean_bulk(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return None
        return [name.strip() for name in v if name and name.strip()]

    @model_validator(mode="after")
    def _require_name(self) -> CreateTaskOptions:
        if not self.name and not self.bulk:
            raise ValueError("Task name is required")
        return self


class UpdateTaskOptions(DryRunOptions):
    """Only fields present in the input are changed; "" or null clears a date."""

    id: str = Field(..., min_length=1)
    name: str | None = None
    note: str | None = None
    due: str | None = None
    due_by: str | None = Field(default=None, description="Shift the due date, e.g. +3d, -1w, +2m")
    defer: str | None = None
    defer_by: str | None = Field(default=None, description="Shift the defer date, e.g. +3d, -1w, +2m")
    flagged: bool | None = None
    tag: str | None = None
    project: str | None = None
    estimated_minutes: int | None = Field(default=None, ge=0)

    def provided(self, field: str) -> bool:
        return field in self.model_fields_set


class TaskIdsOptions(DryRunOptions):
    ids: list[str] = Field(..., min_length=1, description="Task IDs (list or comma-separated)")

    _split = field_validator("ids", mode="before")(_split_ids)


class ReorderTaskOptions(DryRunOptions):
    id: str = Field(..., min_length=1)
    position: ReorderPosition
    target: str | None = Field(default=None, description="Sibling task for before/after")

    @model_validator(mode="after")
    def _require_target(self) -> ReorderTaskOptions:
        if self.position in (ReorderPosition.BEFORE, ReorderPosition.AFTER) and not self.target:
            raise ValueError(f"target is required for position '{self.position.value}'")
        return self


# ============================================================================
# Project write options
# ============================================================================


class CreateProjectOptions(DryRunOptions):
    name: str = Field(..., min_length=1)
    folder: str | None = None
    note: str | None = None
    due: str | None = None
    defer: str | None = None
    flagged: bool = False
    tag: str | None = None
    sequential: bool | None = None
    single_actions: bool = False
    tasks: list[str] | None = None

    @field_validator("tasks")
    @classmethod
    def _clean_tasks(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return None
        return [name.strip() for name in v if name and name.strip()]


class OutlineProject(OperationOptions):
    name: str = Field(..., min_length=1)
    tasks: list[str] = Field(default_factory=list)


class BatchProjectsOptions(DryRunOptions):
    projects: list[OutlineProject] = Field(..., min_length=1)
    folder: str | None = None
    create_folder: str | None = None
    sequential: bool = False


class UpdateProjectOptions(DryRunOptions):
    id: str = Field(..., min_length=1)
    name: str | None = None
    note: str | None = None
    due: str | None = None
    clear_due: bool = False
    defer: str | None = None
    clear_defer: bool = False
    flagged: bool | None = None
    sequential: bool | None = None
    tag: str | None = None
    status: str | None = None

    @field_validator("status")
    @classmethod
    def _known_status(cls, v: str | None) -> str | None:
        if v is None:
            return None
        status = normalize_status(v.replace("_", "-")) or normalize_status(v)
        if status is None:
            raise ValueError("status must be one of: active, on-hold, done, dropped")
        return status.value


class ProjectRefOptions(DryRunOptions):
    id: str = Field(..., min_length=1)


class MoveProjectOptions(DryRunOptions):
    id: str = Field(..., min_length=1)
    folder: str | None = Field(default=None, description="Target folder; omit to move to the top level")


# ============================================================================
# Folder and tag write options
# ============================================================================


class CreateFolderOptions(DryRunOptions):
    name: str = Field(..., min_length=1)
    parent: str | None = None


class UpdateFolderOptions(DryRunOptions):
    id: str = Field(..., min_length=1)
    name: str | None = None
    note: str | None = None
    hidden: bool | None = None


class CreateTagOptions(DryRunOptions):
    name: str = Field(..., min_length=1)
    parent: str | None = None
    allows_next_action: bool | None = None
    force: bool = Field(default=False, description="Create even if a tag with this name exists")


class UpdateTagOptions(DryRunOptions):
    id: str = Field(..., min_length=1)
    name: str | None = None
    hidden: bool | None = None
    allows_next_action: bool | None = None


class TagRefOptions(DryRunOptions):
    id: str = Field(..., min_length=1)


class SyncOptions(DryRunOptions):
    pass
