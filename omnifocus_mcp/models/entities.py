"""Entity models for OmniFocus snapshots."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from omnifocus_mcp.enums import ProjectStatus
from omnifocus_mcp.utils.dates import as_aware

# OmniFocus reports project status as e.g. "on hold status"
_STATUS_ALIASES = {
    "active status": ProjectStatus.ACTIVE,
    "active": ProjectStatus.ACTIVE,
    "on hold status": ProjectStatus.ON_HOLD,
    "on hold": ProjectStatus.ON_HOLD,
    "on-hold": ProjectStatus.ON_HOLD,
    "on_hold": ProjectStatus.ON_HOLD,
    "done status": ProjectStatus.DONE,
    "done": ProjectStatus.DONE,
    "completed": ProjectStatus.DONE,
    "dropped status": ProjectStatus.DROPPED,
    "dropped": ProjectStatus.DROPPED,
}


def normalize_status(value: object) -> ProjectStatus | None:
    """Map an application or user spelling of a project status onto ProjectStatus."""
    if isinstance(value, ProjectStatus):
        return value
    if not isinstance(value, str):
        return None
    return _STATUS_ALIASES.get(value.strip().lower())


class EntityModel(BaseModel):
    """Common base: camelCase on the wire, unknown payload fields kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: str
    name: str = ""

    @field_validator("*", mode="after")
    @classmethod
    def _aware_datetimes(cls, v: object) -> object:
        if isinstance(v, datetime):
            return as_aware(v)
        return v

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TagRef(BaseModel):
    """Weak reference from a task to one of its tags."""

    id: str | None = None
    name: str = ""


class TaskModel(EntityModel):
    """A task as reported by the bridge."""

    note: str = ""
    completed: bool = False
    flagged: bool = False
    defer_date: datetime | None = None
    due_date: datetime | None = None
    effective_defer_date: datetime | None = None
    effective_due_date: datetime | None = None
    completion_date: datetime | None = None
    estimated_minutes: int | None = None
    in_inbox: bool = False
    blocked: bool = False
    project_id: str | None = None
    project_name: str | None = None
    tags: list[TagRef] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tag_names(cls, v: object) -> object:
        # Older payloads emit bare tag names
        if isinstance(v, list):
            return [{"name": item} if isinstance(item, str) else item for item in v]
        return v

    @property
    def tag_names(self) -> list[str]:
        return [t.name for t in self.tags]


class ProjectModel(EntityModel):
    """A project as reported by the bridge."""

    note: str = ""
    status: ProjectStatus = ProjectStatus.ACTIVE
    completed: bool = False
    flagged: bool = False
    sequential: bool = False
    singleton_action_holder: bool = False
    defer_date: datetime | None = None
    due_date: datetime | None = None
    completion_date: datetime | None = None
    last_review_date: datetime | None = None
    next_review_date: datetime | None = None
    folder_id: str | None = None
    folder_name: str | None = None
    primary_tag_id: str | None = None
    primary_tag: str | None = None
    task_count: int = 0
    available_task_count: int = 0
    completed_task_count: int = 0
    needs_review: bool | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, v: object) -> object:
        return normalize_status(v) or v


class FolderModel(EntityModel):
    """A folder as reported by the bridge."""

    note: str = ""
    hidden: bool = False
    container_id: str | None = None
    container_name: str | None = None
    top_level: bool = True
    project_count: int = 0
    folder_count: int = 0


class TagModel(EntityModel):
    """A tag as reported by the bridge."""

    hidden: bool = False
    allows_next_action: bool = True
    container_id: str | None = None
    container_name: str | None = None
    available_task_count: int = 0
    remaining_task_count: int = 0


class PerspectiveModel(BaseModel):
    """A named perspective."""

    name: str
    index: int = 0


class EntityRef(BaseModel):
    """Minimal id/name projection used in batch and mutation results."""

    id: str | None = None
    name: str = ""
