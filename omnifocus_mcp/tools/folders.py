"""MCP tool for OmniFocus folders."""

from mcp.types import ToolAnnotations

from omnifocus_mcp.models.inputs import FolderToolInput
from omnifocus_mcp.server import dispatch, mcp


@mcp.tool(
    name="omnifocus_folder",
    annotations=ToolAnnotations(
        title="OmniFocus Folders",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=False,
    ),
)
async def omnifocus_folder(params: FolderToolInput) -> str:
    """
    List, create and update folders, or move a project into a folder.

    Args:
        params: FolderToolInput with the action and its arguments

    Returns:
        JSON result with "success" and the folders or changed fields

    Examples:
        - Top-level folders: action="list", root_only=true
        - Subfolder: action="create", name="Clients", parent="Work"
        - Move a project: action="move_project", project="Launch", id="Work"
    """
    name, options = params.to_operation()
    return dispatch(name, options)
