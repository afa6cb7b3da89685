"""MCP tool definitions for OmniFocus."""

# Import all tools to register them with the MCP server
from omnifocus_mcp.tools.folders import omnifocus_folder
from omnifocus_mcp.tools.projects import omnifocus_project
from omnifocus_mcp.tools.tags import omnifocus_tag
from omnifocus_mcp.tools.tasks import omnifocus_task
from omnifocus_mcp.tools.util import omnifocus_util

__all__ = [
    "omnifocus_task",
    "omnifocus_project",
    "omnifocus_folder",
    "omnifocus_tag",
    "omnifocus_util",
]
