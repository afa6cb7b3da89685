"""MCP tool for OmniFocus tasks."""

from mcp.types import ToolAnnotations

from omnifocus_mcp.models.inputs import TaskToolInput
from omnifocus_mcp.server import dispatch, mcp


@mcp.tool(
    name="omnifocus_task",
    annotations=ToolAnnotations(
        title="OmniFocus Tasks",
        readOnlyHint=False,
        destructiveHint=True,
        idempotentHint=False,
        openWorldHint=False,
    ),
)
async def omnifocus_task(params: TaskToolInput) -> str:
    """
    List, search, create, update, complete, drop, delete or reorder OmniFocus tasks.

    USE THIS WHEN:
    - Reviewing the inbox, today's work, flagged tasks or the forecast (action="list")
    - Searching tasks by text, project, tag, flag, availability or date window
    - Capturing new tasks, singly or in bulk
    - Rescheduling, renaming, flagging or moving a task to another project

    DO NOT USE WHEN:
    - Creating or changing projects → use omnifocus_project instead
    - Listing tasks with a given tag → use omnifocus_tag with action="get_tasks"

    DATES: "today", "tomorrow", "next week", "+3d", "+2w" land at 17:00 local;
    ISO dates are also accepted. On update, due="" clears the due date and
    due_by="+3d" / "-1w" / "+1m" shifts the existing one.

    Every mutating action accepts dry_run=true to preview without changing anything.

    Args:
        params: TaskToolInput with the action and its arguments

    Returns:
        JSON result with "success" and either the tasks, the changed fields, or "error"

    Examples:
        - Inbox: action="list", view="inbox"
        - Search: action="list", view="search", query="milk", flagged=true
        - Create: action="create", name="Buy milk", due="tomorrow", project="Errands"
        - Postpone: action="update", id="abc123", due_by="+2d"
        - Complete several: action="complete", ids=["abc123", "def456"]
        - Reorder: action="reorder", id="abc123", position="before", target="def456"
    """
    name, options = params.to_operation()
    return dispatch(name, options)
