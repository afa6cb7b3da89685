"""Multi-predicate task filtering over a snapshot."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from omnifocus_mcp.models.entities import ProjectModel, TagModel, TaskModel
from omnifocus_mcp.models.options import FilterSet
from omnifocus_mcp.utils.dates import as_aware, resolve_date
from omnifocus_mcp.utils.locator import NotFound, lookup


@dataclass(frozen=True)
class CompiledFilter:
    """A FilterSet with references and date bounds resolved once."""

    include_completed: bool = False
    flagged: bool = False
    available: bool = False
    project: ProjectModel | None = None
    tag: TagModel | None = None
    due_before: datetime | None = None
    due_after: datetime | None = None
    require_due: bool = False
    defer_before: datetime | None = None
    defer_after: datetime | None = None
    query: str = ""
    now: datetime | None = None

    def matches(self, task: TaskModel) -> bool:
        """True when no predicate vetoes the task."""
        if not self.include_completed and task.completed:
            return False

        if self.flagged and not task.flagged:
            return False

        if self.available:
            if task.blocked:
                return False
            now = self.now or datetime.now().astimezone()
            if task.defer_date is not None and task.defer_date > now:
                return False

        if self.project is not None and task.project_id != self.project.id:
            return False

        if self.tag is not None and not any(
            ref.id == self.tag.id or ref.name == self.tag.name for ref in task.tags
        ):
            return False

        if self.due_before is not None or self.due_after is not None:
            if task.due_date is None:
                if self.require_due:
                    return False
            else:
                if self.due_before is not None and task.due_date > self.due_before:
                    return False
                if self.due_after is not None and task.due_date < self.due_after:
                    return False

        # Unlike due dates, a defer window always drops tasks with no defer date
        if self.defer_before is not None or self.defer_after is not None:
            if task.defer_date is None:
                return False
            if self.defer_before is not None and task.defer_date > self.defer_before:
                return False
            if self.defer_after is not None and task.defer_date < self.defer_after:
                return False

        if self.query:
            needle = self.query.lower()
            if needle not in task.name.lower() and needle not in (task.note or "").lower():
                return False

        return True


def compile_filters(
    filters: FilterSet,
    *,
    projects: Sequence[ProjectModel] = (),
    tags: Sequence[TagModel] = (),
    now: datetime | None = None,
) -> CompiledFilter | NotFound:
    """
    Resolve project/tag references and date bounds ahead of the scan.

    Returns NotFound when a named project or tag does not exist. Date bounds
    that cannot be parsed are dropped rather than treated as errors.
    """
    now = as_aware(now or datetime.now())

    project = None
    if filters.project:
        project = lookup(projects, filters.project, "Project")
        if isinstance(project, NotFound):
            return project

    tag = None
    if filters.tag:
        tag = lookup(tags, filters.tag, "Tag")
        if isinstance(tag, NotFound):
            return tag

    return CompiledFilter(
        include_completed=filters.include_completed,
        flagged=bool(filters.flagged),
        available=bool(filters.available),
        project=project,
        tag=tag,
        due_before=resolve_date(filters.due_before, now),
        due_after=resolve_date(filters.due_after, now),
        require_due=filters.require_due,
        defer_before=resolve_date(filters.defer_before, now),
        defer_after=resolve_date(filters.defer_after, now),
        query=(filters.query or "").strip(),
        now=now,
    )


def evaluate(tasks: Iterable[TaskModel], filters: CompiledFilter, limit: int | None) -> list[TaskModel]:
    """
    Return matching tasks in source order, stopping once *limit* are found.

    A limit of None means unbounded.
    """
    results: list[TaskModel] = []
    if limit is not None and limit <= 0:
        return results
    for task in tasks:
        if filters.matches(task):
            results.append(task)
            if limit is not None and len(results) >= limit:
                break
    return results
