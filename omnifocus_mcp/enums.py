"""Enums for OmniFocus MCP."""

from enum import Enum


class ResponseFormat(str, Enum):
    """Output format for CLI responses."""

    TEXT = "text"  # Human-readable lines (default)
    JSON = "json"  # Compact JSON
    PRETTY = "pretty"  # Indented JSON
    QUIET = "quiet"  # IDs only, for piping into other commands


class ProjectStatus(str, Enum):
    """Project lifecycle states."""

    ACTIVE = "active"
    ON_HOLD = "on-hold"
    DONE = "done"
    DROPPED = "dropped"


class OperationCategory(str, Enum):
    """Which side of the bridge an operation touches."""

    READ = "read"
    WRITE = "write"
    UTIL = "utils"


class BridgeErrorKind(str, Enum):
    """Failure taxonomy surfaced by the bridge invoker."""

    TIMEOUT = "timeout"
    SCRIPT_NOT_FOUND = "script_not_found"
    EMPTY_RESPONSE = "empty_response"
    MALFORMED_OUTPUT = "malformed_output"
    OUTPUT_TOO_LARGE = "output_too_large"
    PROCESS_ERROR = "process_error"


class ReorderPosition(str, Enum):
    """Target positions for reordering a task within its project."""

    TOP = "top"
    BOTTOM = "bottom"
    BEFORE = "before"
    AFTER = "after"


class TaskAction(str, Enum):
    """Actions accepted by the omnifocus_task tool."""

    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    COMPLETE = "complete"
    DROP = "drop"
    DELETE = "delete"
    REORDER = "reorder"


class TaskView(str, Enum):
    """Task listing views."""

    INBOX = "inbox"
    TODAY = "today"
    FLAGGED = "flagged"
    FORECAST = "forecast"
    SEARCH = "search"


class ProjectAction(str, Enum):
    """Actions accepted by the omnifocus_project tool."""

    LIST = "list"
    GET = "get"
    GET_TASKS = "get_tasks"
    CREATE = "create"
    UPDATE = "update"
    COMPLETE = "complete"
    DROP = "drop"
    SET_STATUS = "set_status"
    MOVE = "move"
    BATCH = "batch"


class FolderAction(str, Enum):
    """Actions accepted by the omnifocus_folder tool."""

    LIST = "list"
    CREATE = "create"
    UPDATE = "update"
    MOVE_PROJECT = "move_project"


class TagAction(str, Enum):
    """Actions accepted by the omnifocus_tag tool."""

    LIST = "list"
    GET_TASKS = "get_tasks"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class UtilAction(str, Enum):
    """Actions accepted by the omnifocus_util tool."""

    SYNC = "sync"
    REVIEW_LIST = "review_list"
    MARK_REVIEWED = "mark_reviewed"
    STATUS = "status"
    PERSPECTIVES = "perspectives"
