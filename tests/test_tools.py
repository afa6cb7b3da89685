"""Tests for the MCP tools."""

import json

import pytest

from omnifocus_mcp import (
    FolderToolInput,
    ProjectToolInput,
    TagToolInput,
    TaskToolInput,
    UtilToolInput,
    mcp,
    omnifocus_folder,
    omnifocus_project,
    omnifocus_tag,
    omnifocus_task,
    omnifocus_util,
)
from omnifocus_mcp.operations.catalog import OperationCatalog
from omnifocus_mcp.server import set_catalog

from .conftest import FIXED_NOW, FakeLiveness


class TestRegistration:
    @pytest.mark.asyncio
    async def test_five_tools_registered(self):
        tools = await mcp.list_tools()
        assert {tool.name for tool in tools} == {
            "omnifocus_task",
            "omnifocus_project",
            "omnifocus_folder",
            "omnifocus_tag",
            "omnifocus_util",
        }

    @pytest.mark.asyncio
    async def test_read_only_hints(self):
        tools = {tool.name: tool for tool in await mcp.list_tools()}
        assert tools["omnifocus_task"].annotations.destructiveHint is True
        assert tools["omnifocus_folder"].annotations.readOnlyHint is False


class TestOmnifocusTask:
    """Tests for omnifocus_task."""

    @pytest.mark.asyncio
    async def test_list_inbox(self, installed_catalog):
        result = json.loads(await omnifocus_task(TaskToolInput(action="list")))
        assert result["success"] is True
        assert result["kind"] == "list"
        assert [t["id"] for t in result["tasks"]] == ["t1"]
        assert result["totalCount"] == 1

    @pytest.mark.asyncio
    async def test_search_unknown_project(self, installed_catalog):
        params = TaskToolInput(action="list", view="search", flagged=True, project="NoSuchProject")
        result = json.loads(await omnifocus_task(params))
        assert result == {
            "kind": "error",
            "success": False,
            "error": "Project not found: NoSuchProject",
            "code": "not_found",
        }

    @pytest.mark.asyncio
    async def test_create(self, installed_catalog, bridge):
        result = json.loads(await omnifocus_task(TaskToolInput(action="create", name="Buy milk", due="tomorrow")))
        assert result["kind"] == "mutation"
        assert result["name"] == "Buy milk"
        assert result["dueDate"].startswith("2024-06-11T17:00:00")
        assert len(bridge.writes) == 1

    @pytest.mark.asyncio
    async def test_complete_batch(self, installed_catalog):
        result = json.loads(await omnifocus_task(TaskToolInput(action="complete", ids=["t1", "missing", "t3"])))
        assert result["success"] is False
        assert len(result["completed"]) == 2
        assert result["errors"] == [{"id": "missing", "error": "Task not found: missing"}]

    @pytest.mark.asyncio
    async def test_update_clears_due(self, installed_catalog, bridge):
        params = TaskToolInput.model_validate({"action": "update", "id": "t2", "due": None})
        result = json.loads(await omnifocus_task(params))
        assert result["changes"] == ["dueDate"]
        assert bridge.writes[0][2]["changes"] == {"dueDate": None}

    @pytest.mark.asyncio
    async def test_dry_run(self, installed_catalog, bridge):
        result = json.loads(await omnifocus_task(TaskToolInput(action="delete", id="t1", dry_run=True)))
        assert result["dryRun"] is True
        assert bridge.writes == []

    @pytest.mark.asyncio
    async def test_not_running(self, bridge):
        set_catalog(OperationCatalog(bridge, FakeLiveness(False), clock=lambda: FIXED_NOW))
        try:
            result = json.loads(await omnifocus_task(TaskToolInput(action="list")))
        finally:
            set_catalog(None)
        assert result["code"] == "not_running"
        assert bridge.calls == []


class TestOtherTools:
    """Tests for the project, folder, tag and util tools."""

    @pytest.mark.asyncio
    async def test_project_list(self, installed_catalog):
        result = json.loads(await omnifocus_project(ProjectToolInput(action="list")))
        assert [p["name"] for p in result["projects"]] == ["Work", "Home"]

    @pytest.mark.asyncio
    async def test_project_set_status(self, installed_catalog, bridge):
        result = json.loads(await omnifocus_project(ProjectToolInput(action="set_status", id="Work", status="done")))
        assert result["status"] == "done"
        assert bridge.writes[0][2] == {"id": "p1", "changes": {"status": "done"}}

    @pytest.mark.asyncio
    async def test_project_batch(self, installed_catalog, bridge):
        params = ProjectToolInput(action="batch", projects=[{"name": "Alpha", "tasks": ["a"]}, {"name": "Beta"}])
        result = json.loads(await omnifocus_project(params))
        assert [p["name"] for p in result["created"]] == ["Alpha", "Beta"]

    @pytest.mark.asyncio
    async def test_folder_move_project(self, installed_catalog):
        params = FolderToolInput(action="move_project", project="Home", id="Office")
        result = json.loads(await omnifocus_folder(params))
        assert result["fromFolder"] == "(root)"
        assert result["toFolder"] == "Office"

    @pytest.mark.asyncio
    async def test_tag_get_tasks(self, installed_catalog):
        result = json.loads(await omnifocus_tag(TagToolInput(action="get_tasks", id="phone")))
        assert [t["id"] for t in result["tasks"]] == ["t3"]

    @pytest.mark.asyncio
    async def test_tag_create_duplicate(self, installed_catalog):
        result = json.loads(await omnifocus_tag(TagToolInput(action="create", name="office")))
        assert result["code"] == "already_exists"

    @pytest.mark.asyncio
    async def test_util_status(self, installed_catalog):
        result = json.loads(await omnifocus_util(UtilToolInput(action="status")))
        assert result["running"] is True

    @pytest.mark.asyncio
    async def test_util_review_list(self, installed_catalog):
        result = json.loads(await omnifocus_util(UtilToolInput(action="review_list")))
        assert [p["id"] for p in result["projects"]] == ["p4", "p1"]
        assert result["dueCount"] == 2
