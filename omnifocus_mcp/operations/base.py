"""Shared plumbing for operation handlers."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from pydantic import BaseModel

from omnifocus_mcp.enums import OperationCategory
from omnifocus_mcp.models.entities import FolderModel, ProjectModel, TagModel, TaskModel
from omnifocus_mcp.models.results import ErrorResult
from omnifocus_mcp.utils.bridge import BridgeResponse
from omnifocus_mcp.utils.liveness import LivenessCheck
from omnifocus_mcp.utils.locator import NotFound, lookup
from omnifocus_mcp.utils.parsers import _parse_folders, _parse_projects, _parse_tags, _parse_tasks


class Bridge(Protocol):
    def invoke(
        self,
        category: OperationCategory | str,
        name: str,
        args: Sequence[str] = (),
        timeout_ms: int | None = None,
    ) -> BridgeResponse: ...


def envelope_or_error(response: BridgeResponse) -> dict[str, Any] | ErrorResult:
    """Unwrap a bridge response into its success envelope, or an ErrorResult."""
    envelope = response.to_envelope()
    if not isinstance(envelope, dict):
        return ErrorResult(error="Unexpected script output", code="malformed_output")
    if envelope.get("success") is not True:
        code = response.error.kind.value if response.error is not None else "script_error"
        return ErrorResult(
            error=str(envelope.get("error") or "Unknown error"),
            code=code,
            stderr=envelope.get("stderr"),
        )
    return envelope


def not_found(miss: NotFound) -> ErrorResult:
    return ErrorResult(error=miss.message, code="not_found")


@dataclass
class OperationContext:
    """What a handler gets to work with for a single run."""

    bridge: Bridge
    now: datetime
    liveness: LivenessCheck | None = None

    def call(
        self,
        category: OperationCategory,
        name: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any] | ErrorResult:
        args = [] if payload is None else [json.dumps(payload)]
        return envelope_or_error(self.bridge.invoke(category, name, args))

    def read(self, name: str, payload: dict[str, Any] | None = None) -> dict[str, Any] | ErrorResult:
        return self.call(OperationCategory.READ, name, payload)

    def write(self, name: str, payload: dict[str, Any] | None = None) -> dict[str, Any] | ErrorResult:
        return self.call(OperationCategory.WRITE, name, payload)

    def _snapshot(self, name: str, key: str, payload: dict[str, Any] | None = None) -> dict[str, Any] | ErrorResult:
        envelope = self.read(name, payload)
        if isinstance(envelope, ErrorResult):
            return envelope
        if not isinstance(envelope.get(key), list):
            raw = envelope.get("raw")
            detail = f": {raw[:200]}" if raw else ""
            return ErrorResult(error=f"Unexpected output from {name}{detail}", code="malformed_output")
        return envelope

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def tasks(
        self,
        scope: str = "all",
        *,
        project_id: str | None = None,
        include_completed: bool = False,
        brief: bool = False,
    ) -> tuple[list[TaskModel], int] | ErrorResult:
        """Fetch tasks; returns the parsed list and the payload's totalCount."""
        payload: dict[str, Any] = {"scope": scope, "includeCompleted": include_completed}
        if project_id:
            payload["projectId"] = project_id
        if brief:
            payload["brief"] = True
        envelope = self._snapshot("tasks", "tasks", payload)
        if isinstance(envelope, ErrorResult):
            return envelope
        tasks = _parse_tasks(envelope["tasks"])
        return tasks, int(envelope.get("totalCount", len(tasks)))

    def tasks_matching(self, keys: Sequence[str | None]) -> list[TaskModel] | ErrorResult:
        """Fetch only the tasks (completed included) whose id or name equals one of *keys*."""
        wanted = [key for key in keys if key]
        if not wanted:
            return []
        envelope = self._snapshot("tasks", "tasks", {"scope": "ids", "ids": wanted, "includeCompleted": True})
        if isinstance(envelope, ErrorResult):
            return envelope
        return _parse_tasks(envelope["tasks"])

    def projects(self) -> list[ProjectModel] | ErrorResult:
        envelope = self._snapshot("projects", "projects")
        if isinstance(envelope, ErrorResult):
            return envelope
        return _parse_projects(envelope["projects"])

    def folders(self) -> list[FolderModel] | ErrorResult:
        envelope = self._snapshot("folders", "folders")
        if isinstance(envelope, ErrorResult):
            return envelope
        return _parse_folders(envelope["folders"])

    def tags(self) -> list[TagModel] | ErrorResult:
        envelope = self._snapshot("tags", "tags")
        if isinstance(envelope, ErrorResult):
            return envelope
        return _parse_tags(envelope["tags"])

    def resolve(
        self,
        fetch: Callable[[], list[Any] | ErrorResult],
        identifier: str | None,
        kind: str,
    ) -> Any:
        """
        Fetch a snapshot and locate *identifier* in it.

        Returns None when no identifier was given, the entity when found, or
        an ErrorResult for a bridge failure or a miss.
        """
        if not identifier:
            return None
        collection = fetch()
        if isinstance(collection, ErrorResult):
            return collection
        found = lookup(collection, identifier, kind)
        if isinstance(found, NotFound):
            return not_found(found)
        return found


Handler = Callable[[OperationContext, Any], BaseModel]


@dataclass(frozen=True)
class Operation:
    """A named entry in the catalog."""

    name: str
    category: OperationCategory
    options_model: type[BaseModel]
    handler: Handler
    requires_live: bool = True
    description: str = ""


def compact(values: dict[str, Any]) -> dict[str, Any]:
    """Drop None values from a payload dict."""
    return {k: v for k, v in values.items() if v is not None}
