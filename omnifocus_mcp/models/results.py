"""Result variants returned by catalog operations.

Every result carries a ``kind`` discriminant and a ``success`` flag and is
serialized with camelCase keys by ``to_payload()``. Optional fields left as
``None`` are omitted from the payload, so ``errors`` only appears on a batch
that had failures.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from omnifocus_mcp.models.entities import (
    EntityRef,
    FolderModel,
    PerspectiveModel,
    ProjectModel,
    TagModel,
    TaskModel,
)


class ResultModel(BaseModel):
    """Base for all result variants."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    kind: str
    success: bool = True
    message: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ============================================================================
# Errors
# ============================================================================


class ErrorResult(ResultModel):
    """A failed operation: precondition, resolution, bridge, or validation."""

    kind: Literal["error"] = "error"
    success: Literal[False] = False
    error: str
    code: str | None = None
    stderr: str | None = None


# ============================================================================
# Read results
# ============================================================================


class TaskListResult(ResultModel):
    kind: Literal["list"] = "list"
    tasks: list[TaskModel] = Field(default_factory=list)
    total_count: int = 0
    query: str | None = None
    filters: dict[str, Any] | None = None
    project: dict[str, Any] | None = None
    tag: dict[str, Any] | None = None


class ProjectListResult(ResultModel):
    kind: Literal["list"] = "list"
    projects: list[ProjectModel] = Field(default_factory=list)
    total_count: int = 0
    due_count: int | None = None


class FolderListResult(ResultModel):
    kind: Literal["list"] = "list"
    folders: list[FolderModel] = Field(default_factory=list)
    total_count: int = 0
    parent_folder: str | None = None


class TagListResult(ResultModel):
    kind: Literal["list"] = "list"
    tags: list[TagModel] = Field(default_factory=list)
    total_count: int = 0


class ForecastDay(BaseModel):
    date: str
    tasks: list[TaskModel] = Field(default_factory=list)

    @computed_field
    @property
    def count(self) -> int:
        return len(self.tasks)


class ForecastResult(ResultModel):
    kind: Literal["list"] = "list"
    forecast: list[ForecastDay] = Field(default_factory=list)
    days: int = 7
    total_count: int = 0


class PerspectiveListResult(ResultModel):
    kind: Literal["list"] = "list"
    perspectives: list[PerspectiveModel] = Field(default_factory=list)
    total_count: int = 0


class EntityResult(ResultModel):
    """A single entity fetched by id or name."""

    kind: Literal["entity"] = "entity"
    task: TaskModel | None = None
    project: ProjectModel | None = None
    tasks: list[TaskModel] | None = None


# ============================================================================
# Write results
# ============================================================================


class MutationResult(ResultModel):
    """Minimal projection of a created or modified entity.

    Only ``id``, ``name`` and the fields the operation actually changed are
    populated.
    """

    kind: Literal["mutation"] = "mutation"
    entity: Literal["task", "project", "folder", "tag"]
    id: str | None = None
    name: str | None = None
    changes: list[str] | None = None
    note: str | None = None
    due_date: datetime | None = None
    defer_date: datetime | None = None
    flagged: bool | None = None
    completed: bool | None = None
    estimated_minutes: int | None = None
    status: str | None = None
    sequential: bool | None = None
    hidden: bool | None = None
    allows_next_action: bool | None = None
    project: str | None = None
    folder: str | None = None
    parent: str | None = None
    tag: str | None = None
    tags: list[str] | None = None
    from_folder: str | None = None
    to_folder: str | None = None
    position: str | None = None
    deleted: bool | None = None
    created_tasks: list[EntityRef] | None = None


class BatchItemError(BaseModel):
    """One failed item in a batch."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str | None = None
    name: str | None = None
    error: str


class BatchResult(ResultModel):
    """Outcome of a multi-item operation, one bridge call per item."""

    kind: Literal["batch"] = "batch"
    created: list[EntityRef] | None = None
    completed: list[EntityRef] | None = None
    dropped: list[EntityRef] | None = None
    deleted: list[EntityRef] | None = None
    errors: list[BatchItemError] | None = None
    folder: EntityRef | None = None


class DryRunResult(ResultModel):
    """Preview of what a mutating operation would do."""

    kind: Literal["dry_run"] = "dry_run"
    dry_run: Literal[True] = True
    preview: dict[str, Any] = Field(default_factory=dict)
    errors: list[BatchItemError] | None = None


class MessageResult(ResultModel):
    """A write with no entity projection (e.g. sync)."""

    kind: Literal["message"] = "message"


class StatusResult(ResultModel):
    """Liveness report."""

    kind: Literal["status"] = "status"
    running: bool


Result = (
    ErrorResult
    | TaskListResult
    | ProjectListResult
    | FolderListResult
    | TagListResult
    | ForecastResult
    | PerspectiveListResult
    | EntityResult
    | MutationResult
    | BatchResult
    | DryRunResult
    | MessageResult
    | StatusResult
)
