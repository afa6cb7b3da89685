"""Pydantic models for OmniFocus MCP."""

from omnifocus_mcp.models.entities import (
    EntityRef,
    FolderModel,
    PerspectiveModel,
    ProjectModel,
    TagModel,
    TagRef,
    TaskModel,
)
from omnifocus_mcp.models.results import (
    BatchItemError,
    BatchResult,
    DryRunResult,
    EntityResult,
    ErrorResult,
    FolderListResult,
    ForecastDay,
    ForecastResult,
    MessageResult,
    MutationResult,
    PerspectiveListResult,
    ProjectListResult,
    Result,
    StatusResult,
    TagListResult,
    TaskListResult,
)

__all__ = [
    # Entity models
    "TaskModel",
    "TagRef",
    "ProjectModel",
    "FolderModel",
    "TagModel",
    "PerspectiveModel",
    "EntityRef",
    # Result variants
    "Result",
    "ErrorResult",
    "TaskListResult",
    "ProjectListResult",
    "FolderListResult",
    "TagListResult",
    "ForecastDay",
    "ForecastResult",
    "PerspectiveListResult",
    "EntityResult",
    "MutationResult",
    "BatchItemError",
    "BatchResult",
    "DryRunResult",
    "MessageResult",
    "StatusResult",
]
