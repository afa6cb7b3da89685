"""Tag operations."""

from __future__ import annotations

from typing import Any

from omnifocus_mcp.enums import OperationCategory
from omnifocus_mcp.models.options import CreateTagOptions, TagListOptions, TagRefOptions, UpdateTagOptions
from omnifocus_mcp.models.results import DryRunResult, ErrorResult, MutationResult, Result, TagListResult
from omnifocus_mcp.operations.base import Operation, OperationContext, compact, not_found
from omnifocus_mcp.utils.locator import NotFound, find_entity, lookup


def list_tags(ctx: OperationContext, opts: TagListOptions) -> Result:
    tags = ctx.tags()
    if isinstance(tags, ErrorResult):
        return tags
    visible = [t for t in tags if opts.include_hidden or not t.hidden]
    return TagListResult(tags=visible[: opts.limit], total_count=len(visible))


def create(ctx: OperationContext, opts: CreateTagOptions) -> Result:
    tags = ctx.tags()
    if isinstance(tags, ErrorResult):
        return tags

    if find_entity(tags, opts.name) is not None and not opts.force:
        return ErrorResult(error=f"Tag already exists: {opts.name}", code="already_exists")

    parent = None
    if opts.parent:
        parent = lookup(tags, opts.parent, "Tag")
        if isinstance(parent, NotFound):
            return not_found(parent)

    if opts.dry_run:
        return DryRunResult(
            preview=compact(
                {
                    "name": opts.name,
                    "parent": parent.name if parent else "(root)",
                    "allowsNextAction": opts.allows_next_action,
                }
            ),
            message="DRY RUN: Tag would be created",
        )

    envelope = ctx.write(
        "create_tag",
        compact(
            {
                "name": opts.name,
                "parentId": parent.id if parent else None,
                "allowsNextAction": opts.allows_next_action,
            }
        ),
    )
    if isinstance(envelope, ErrorResult):
        return envelope
    info = envelope.get("tag") or {}
    return MutationResult(
        entity="tag",
        id=info.get("id"),
        name=info.get("name", opts.name),
        parent=parent.name if parent else None,
        allows_next_action=opts.allows_next_action,
        message="Tag created successfully",
    )


def update(ctx: OperationContext, opts: UpdateTagOptions) -> Result:
    tag = ctx.resolve(ctx.tags, opts.id, "Tag")
    if isinstance(tag, ErrorResult):
        return tag

    changes: dict[str, Any] = {}
    if opts.name and opts.name != tag.name:
        changes["name"] = opts.name
    if opts.hidden is not None:
        changes["hidden"] = opts.hidden
    if opts.allows_next_action is not None:
        changes["allowsNextAction"] = opts.allows_next_action

    if opts.dry_run:
        return DryRunResult(
            preview={"tag": {"id": tag.id, "name": tag.name}, "changes": changes},
            message="DRY RUN: Tag would be modified",
        )
    if not changes:
        return MutationResult(entity="tag", id=tag.id, name=tag.name, changes=[], message="No changes made")

    envelope = ctx.write("update_tag", {"id": tag.id, "changes": changes})
    if isinstance(envelope, ErrorResult):
        return envelope
    return MutationResult(
        entity="tag",
        id=tag.id,
        name=changes.get("name", tag.name),
        hidden=changes.get("hidden"),
        allows_next_action=changes.get("allowsNextAction"),
        changes=list(changes),
        message=f"Tag modified: {', '.join(changes)}",
    )


def delete(ctx: OperationContext, opts: TagRefOptions) -> Result:
    tag = ctx.resolve(ctx.tags, opts.id, "Tag")
    if isinstance(tag, ErrorResult):
        return tag

    if opts.dry_run:
        return DryRunResult(
            preview={"tag": {"id": tag.id, "name": tag.name}, "delete": True},
            message="DRY RUN: Tag would be deleted",
        )

    envelope = ctx.write("delete_tag", {"id": tag.id})
    if isinstance(envelope, ErrorResult):
        return envelope
    return MutationResult(entity="tag", id=tag.id, name=tag.name, deleted=True, message="Tag deleted successfully")


OPERATIONS = [
    Operation("tag.list", OperationCategory.READ, TagListOptions, list_tags, description="List tags"),
    Operation("tag.create", OperationCategory.WRITE, CreateTagOptions, create, description="Create a tag"),
    Operation("tag.update", OperationCategory.WRITE, UpdateTagOptions, update, description="Modify a tag"),
    Operation("tag.delete", OperationCategory.WRITE, TagRefOptions, delete, description="Delete a tag"),
]
