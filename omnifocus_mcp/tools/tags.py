"""MCP tool for OmniFocus tags."""

from mcp.types import ToolAnnotations

from omnifocus_mcp.models.inputs import TagToolInput
from omnifocus_mcp.server import dispatch, mcp


@mcp.tool(
    name="omnifocus_tag",
    annotations=ToolAnnotations(
        title="OmniFocus Tags",
        readOnlyHint=False,
        destructiveHint=True,
        idempotentHint=False,
        openWorldHint=False,
    ),
)
async def omnifocus_tag(params: TagToolInput) -> str:
    """
    List tags, list a tag's tasks, and create, update or delete tags.

    DO NOT USE WHEN:
    - Tagging a task → use omnifocus_task with action="update" and tag

    Args:
        params: TagToolInput with the action and its arguments

    Returns:
        JSON result with "success" and the tags, tasks or changed fields

    Examples:
        - Tasks tagged errands: action="get_tasks", id="errands"
        - New child tag: action="create", name="phone", parent="contexts"
        - Delete: action="delete", id="old-tag", dry_run=true
    """
    name, options = params.to_operation()
    return dispatch(name, options)
