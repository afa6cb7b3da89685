"""
MCP Server and CLI for OmniFocus.

This package drives OmniFocus on macOS through JavaScript for Automation
(``osascript -l JavaScript``), exposing task, project, folder and tag
operations as five consolidated MCP tools and as the ``of`` command line.
"""

# Re-export enums
from omnifocus_mcp.enums import ProjectStatus, ReorderPosition, ResponseFormat

# Re-export models
from omnifocus_mcp.models import (
    BatchResult,
    DryRunResult,
    EntityResult,
    ErrorResult,
    FolderModel,
    MutationResult,
    ProjectModel,
    Result,
    TagModel,
    TaskListResult,
    TaskModel,
)
from omnifocus_mcp.models.inputs import (
    FolderToolInput,
    ProjectToolInput,
    TagToolInput,
    TaskToolInput,
    UtilToolInput,
)

# Re-export the catalog
from omnifocus_mcp.operations import OperationCatalog, build_catalog

# Re-export MCP server instance
from omnifocus_mcp.server import mcp

# Re-export tools
from omnifocus_mcp.tools import (
    omnifocus_folder,
    omnifocus_project,
    omnifocus_tag,
    omnifocus_task,
    omnifocus_util,
)

# Re-export utilities
from omnifocus_mcp.utils.bridge import BridgeInvoker, BridgeResponse
from omnifocus_mcp.utils.dates import resolve_date
from omnifocus_mcp.utils.formatters import _format_task_concise, _format_tasks_concise, render
from omnifocus_mcp.utils.liveness import LivenessProbe

__all__ = [
    # Enums
    "ResponseFormat",
    "ProjectStatus",
    "ReorderPosition",
    # Entity models
    "TaskModel",
    "ProjectModel",
    "FolderModel",
    "TagModel",
    # Results
    "Result",
    "ErrorResult",
    "TaskListResult",
    "EntityResult",
    "MutationResult",
    "BatchResult",
    "DryRunResult",
    # Tool input models
    "TaskToolInput",
    "ProjectToolInput",
    "FolderToolInput",
    "TagToolInput",
    "UtilToolInput",
    # Catalog and bridge
    "OperationCatalog",
    "build_catalog",
    "BridgeInvoker",
    "BridgeResponse",
    "LivenessProbe",
    # Utility functions
    "resolve_date",
    "render",
    "_format_task_concise",
    "_format_tasks_concise",
    # Tools
    "omnifocus_task",
    "omnifocus_project",
    "omnifocus_folder",
    "omnifocus_tag",
    "omnifocus_util",
    # MCP server instance
    "mcp",
]
