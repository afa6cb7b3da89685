"""Folder operations."""

from __future__ import annotations

from typing import Any

from omnifocus_mcp.enums import OperationCategory
from omnifocus_mcp.models.options import CreateFolderOptions, FolderListOptions, UpdateFolderOptions
from omnifocus_mcp.models.results import DryRunResult, ErrorResult, FolderListResult, MutationResult, Result
from omnifocus_mcp.operations.base import Operation, OperationContext, compact


def list_folders(ctx: OperationContext, opts: FolderListOptions) -> Result:
    folders = ctx.folders()
    if isinstance(folders, ErrorResult):
        return folders

    parent = None
    if opts.parent:
        parent = ctx.resolve(lambda: folders, opts.parent, "Folder")
        if isinstance(parent, ErrorResult):
            return parent

    selected = []
    for folder in folders:
        if folder.hidden and not opts.include_hidden:
            continue
        if parent is not None and folder.container_id != parent.id:
            continue
        if opts.root_only and not folder.top_level:
            continue
        selected.append(folder)
        if len(selected) >= opts.limit:
            break

    return FolderListResult(
        folders=selected,
        total_count=len(selected),
        parent_folder=parent.name if parent else None,
    )


def create(ctx: OperationContext, opts: CreateFolderOptions) -> Result:
    parent = ctx.resolve(ctx.folders, opts.parent, "Folder")
    if isinstance(parent, ErrorResult):
        return parent

    if opts.dry_run:
        return DryRunResult(
            preview={"name": opts.name, "parent": parent.name if parent else "(root)"},
            message="DRY RUN: Folder would be created",
        )

    envelope = ctx.write("create_folder", compact({"name": opts.name, "parentId": parent.id if parent else None}))
    if isinstance(envelope, ErrorResult):
        return envelope
    info = envelope.get("folder") or {}
    return MutationResult(
        entity="folder",
        id=info.get("id"),
        name=info.get("name", opts.name),
        parent=parent.name if parent else None,
        message="Folder created successfully",
    )


def update(ctx: OperationContext, opts: UpdateFolderOptions) -> Result:
    folder = ctx.resolve(ctx.folders, opts.id, "Folder")
    if isinstance(folder, ErrorResult):
        return folder

    changes: dict[str, Any] = {}
    if opts.name and opts.name != folder.name:
        changes["name"] = opts.name
    if opts.note is not None:
        changes["note"] = opts.note
    if opts.hidden is not None:
        changes["hidden"] = opts.hidden

    if opts.dry_run:
        return DryRunResult(
            preview={"folder": {"id": folder.id, "name": folder.name}, "changes": changes},
            message="DRY RUN: Folder would be modified",
        )
    if not changes:
        return MutationResult(entity="folder", id=folder.id, name=folder.name, changes=[], message="No changes made")

    envelope = ctx.write("update_folder", {"id": folder.id, "changes": changes})
    if isinstance(envelope, ErrorResult):
        return envelope
    info = envelope.get("folder") or {}
    return MutationResult(
        entity="folder",
        id=folder.id,
        name=info.get("name", changes.get("name", folder.name)),
        note=changes.get("note"),
        hidden=changes.get("hidden"),
        changes=list(changes),
        message=f"Folder modified: {', '.join(changes)}",
    )


OPERATIONS = [
    Operation("folder.list", OperationCategory.READ, FolderListOptions, list_folders, description="List folders"),
    Operation("folder.create", OperationCategory.WRITE, CreateFolderOptions, create, description="Create a folder"),
    Operation("folder.update", OperationCategory.WRITE, UpdateFolderOptions, update, description="Modify a folder"),
]
