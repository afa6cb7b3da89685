"""MCP tool for OmniFocus projects."""

from mcp.types import ToolAnnotations

from omnifocus_mcp.models.inputs import ProjectToolInput
from omnifocus_mcp.server import dispatch, mcp


@mcp.tool(
    name="omnifocus_project",
    annotations=ToolAnnotations(
        title="OmniFocus Projects",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=False,
    ),
)
async def omnifocus_project(params: ProjectToolInput) -> str:
    """
    List, inspect, create, update and change the status of OmniFocus projects.

    USE THIS WHEN:
    - Listing projects, optionally inside one folder
    - Reading a project with its tasks (action="get" or "get_tasks")
    - Creating a project with initial tasks, or several projects from an outline (action="batch")
    - Completing, dropping, holding or reactivating a project (action="set_status")
    - Moving a project to another folder (action="move"; omit folder for the top level)

    DO NOT USE WHEN:
    - Working with individual tasks → use omnifocus_task instead
    - Reviewing projects → use omnifocus_util with action="review_list"

    Args:
        params: ProjectToolInput with the action and its arguments

    Returns:
        JSON result with "success" and the projects, tasks or changed fields

    Examples:
        - Active projects in a folder: action="list", folder="Work"
        - Create: action="create", name="Launch", folder="Work", tasks=["Plan", "Ship"]
        - Batch: action="batch", create_folder="Q3", projects=[{"name": "A", "tasks": ["x"]}]
        - Hold: action="set_status", id="Launch", status="on-hold"
    """
    name, options = params.to_operation()
    return dispatch(name, options)
