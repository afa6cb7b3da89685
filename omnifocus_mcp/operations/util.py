"""Perspectives, sync and liveness status."""

from __future__ import annotations

from omnifocus_mcp.enums import OperationCategory
from omnifocus_mcp.models.options import NoOptions, SyncOptions
from omnifocus_mcp.models.results import (
    DryRunResult,
    ErrorResult,
    MessageResult,
    PerspectiveListResult,
    Result,
    StatusResult,
)
from omnifocus_mcp.operations.base import Operation, OperationContext
from omnifocus_mcp.utils.liveness import NOT_RUNNING_MESSAGE
from omnifocus_mcp.utils.parsers import _parse_perspectives


def perspectives(ctx: OperationContext, opts: NoOptions) -> Result:
    envelope = ctx.read("perspectives")
    if isinstance(envelope, ErrorResult):
        return envelope
    found = _parse_perspectives(envelope.get("perspectives"))
    return PerspectiveListResult(perspectives=found, total_count=len(found))


def sync(ctx: OperationContext, opts: SyncOptions) -> Result:
    if opts.dry_run:
        return DryRunResult(preview={"action": "synchronize"}, message="DRY RUN: Would start synchronization")
    envelope = ctx.write("sync")
    if isinstance(envelope, ErrorResult):
        return envelope
    return MessageResult(message=envelope.get("message") or "Synchronization started")


def status(ctx: OperationContext, opts: NoOptions) -> Result:
    running = ctx.liveness is not None and ctx.liveness.is_alive()
    return StatusResult(running=running, message="OmniFocus is running" if running else NOT_RUNNING_MESSAGE)


OPERATIONS = [
    Operation(
        "util.perspectives", OperationCategory.READ, NoOptions, perspectives, description="List perspectives"
    ),
    Operation("util.sync", OperationCategory.WRITE, SyncOptions, sync, description="Start a sync"),
    Operation(
        "util.status",
        OperationCategory.UTIL,
        NoOptions,
        status,
        requires_live=False,
        description="Is OmniFocus running",
    ),
]
