"""Parser helpers for bridge snapshots."""

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from omnifocus_mcp.models.entities import (
    FolderModel,
    PerspectiveModel,
    ProjectModel,
    TagModel,
    TaskModel,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _parse_many(model: type[M], items: list[dict[str, Any]] | None) -> list[M]:
    """
    Validate a list of payload dictionaries into models.

    Entries that fail validation (e.g. missing an id) are skipped with a
    warning instead of failing the whole snapshot.
    """
    parsed: list[M] = []
    for item in items or []:
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning("skipping malformed %s entry: %s", model.__name__, e.errors()[0].get("msg"))
    return parsed


def _parse_task(task_dict: dict[str, Any]) -> TaskModel:
    """Parse a single task dictionary from a payload."""
    return TaskModel.model_validate(task_dict)


def _parse_tasks(tasks: list[dict[str, Any]] | None) -> list[TaskModel]:
    return _parse_many(TaskModel, tasks)


def _parse_projects(projects: list[dict[str, Any]] | None) -> list[ProjectModel]:
    return _parse_many(ProjectModel, projects)


def _parse_folders(folders: list[dict[str, Any]] | None) -> list[FolderModel]:
    return _parse_many(FolderModel, folders)


def _parse_tags(tags: list[dict[str, Any]] | None) -> list[TagModel]:
    return _parse_many(TagModel, tags)


def _parse_perspectives(perspectives: list[dict[str, Any]] | None) -> list[PerspectiveModel]:
    return _parse_many(PerspectiveModel, perspectives)
