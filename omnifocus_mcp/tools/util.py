"""MCP tool for sync, review and status."""

from mcp.types import ToolAnnotations

from omnifocus_mcp.models.inputs import UtilToolInput
from omnifocus_mcp.server import dispatch, mcp


@mcp.tool(
    name="omnifocus_util",
    annotations=ToolAnnotations(
        title="OmniFocus Utilities",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def omnifocus_util(params: UtilToolInput) -> str:
    """
    Sync, weekly review, perspectives and status checks.

    USE THIS WHEN:
    - Checking whether OmniFocus is running (action="status")
    - Finding projects due for review and marking them reviewed
    - Listing perspective names
    - Triggering a sync

    Args:
        params: UtilToolInput with the action and its arguments

    Returns:
        JSON result with "success" and the requested data

    Examples:
        - action="review_list"
        - action="mark_reviewed", id="Launch"
        - action="status"
    """
    name, options = params.to_operation()
    return dispatch(name, options)
