"""Tests for the ``of`` command line."""

import json

import pytest
from typer.testing import CliRunner

from omnifocus_mcp.cli import app
from omnifocus_mcp.operations.catalog import OperationCatalog
from omnifocus_mcp.server import set_catalog

from .conftest import FIXED_NOW, FakeLiveness

runner = CliRunner()


@pytest.fixture
def down_catalog(bridge):
    set_catalog(OperationCatalog(bridge, FakeLiveness(False), clock=lambda: FIXED_NOW))
    yield
    set_catalog(None)


class TestListCommands:
    """Tests for `of list ...`."""

    def test_inbox_text(self, installed_catalog):
        result = runner.invoke(app, ["list", "inbox"])
        assert result.exit_code == 0
        assert "[t1] Buy milk" in result.output

    def test_inbox_json(self, installed_catalog):
        result = runner.invoke(app, ["--json", "list", "inbox"])
        payload = json.loads(result.output)
        assert payload["success"] is True
        assert payload["totalCount"] == 1

    def test_quiet_ids(self, installed_catalog):
        result = runner.invoke(app, ["-q", "list", "today"])
        assert result.output.split() == ["t2", "t3"]

    def test_projects_all(self, installed_catalog):
        result = runner.invoke(app, ["--json", "list", "projects", "--all"])
        assert [p["id"] for p in json.loads(result.output)["projects"]] == ["p1", "p2", "p3", "p4"]

    def test_forecast(self, installed_catalog):
        result = runner.invoke(app, ["list", "forecast", "--days", "3"])
        assert result.exit_code == 0
        assert "2024-06-10 (1)" in result.output

    def test_tags_and_folders(self, installed_catalog):
        assert "#office" in runner.invoke(app, ["list", "tags"]).output
        assert "Clients" in runner.invoke(app, ["list", "folders"]).output


class TestSearchAndGet:
    def test_search_unknown_project(self, installed_catalog):
        result = runner.invoke(app, ["search", "--flagged", "--project", "NoSuchProject"])
        assert result.exit_code == 1
        assert "Error: Project not found: NoSuchProject" in result.output

    def test_search_query(self, installed_catalog):
        result = runner.invoke(app, ["--json", "search", "flights"])
        assert [t["id"] for t in json.loads(result.output)["tasks"]] == ["t5"]

    def test_get_project(self, installed_catalog):
        result = runner.invoke(app, ["get", "--project", "Work"])
        assert result.exit_code == 0
        assert "Folder: Office" in result.output
        assert "[t2] Write report" in result.output


class TestAddCommands:
    """Tests for `of add ...` and `of quick`."""

    def test_add_task(self, installed_catalog, bridge):
        result = runner.invoke(app, ["add", "task", "Buy milk", "--due", "tomorrow", "--tags", "office, phone"])
        assert result.exit_code == 0
        assert "Task created successfully" in result.output
        payload = bridge.writes[0][2]
        assert payload["dueDate"] == "2024-06-11T17:00:00+00:00"
        assert payload["tagIds"] == ["g1", "g2"]

    def test_add_tasks_from_stdin(self, installed_catalog, bridge):
        result = runner.invoke(app, ["add", "task", "--project", "Home"], input="Eggs\n\nBread\n")
        assert result.exit_code == 0
        assert [w[2]["name"] for w in bridge.writes] == ["Eggs", "Bread"]

    def test_add_task_without_name(self, installed_catalog, bridge):
        result = runner.invoke(app, ["add", "task"], input="")
        assert result.exit_code == 1
        assert "Task name is required" in result.output
        assert bridge.writes == []

    def test_add_project_dry_run(self, installed_catalog, bridge):
        result = runner.invoke(app, ["add", "project", "Launch", "--tasks", "a,b", "--dry-run"])
        assert result.exit_code == 0
        assert result.output.startswith("[DRY RUN]")
        assert bridge.writes == []

    def test_add_batch_from_outline(self, installed_catalog, bridge):
        outline = "- Alpha\n  - a1\n  - a2\n- Beta\n"
        result = runner.invoke(app, ["--json", "add", "batch", "--create-folder", "Q3"], input=outline)
        payload = json.loads(result.output)
        assert [p["name"] for p in payload["created"]] == ["Alpha", "Beta"]
        assert [w[1] for w in bridge.writes] == ["create_folder", "create_project", "create_project"]

    def test_add_batch_empty_outline(self, installed_catalog):
        result = runner.invoke(app, ["add", "batch"], input="just prose\n")
        assert result.exit_code == 1
        assert "No projects found" in result.output

    def test_quick(self, installed_catalog, bridge):
        result = runner.invoke(app, ["-q", "quick", "Call bank", "--flagged"])
        assert result.output.strip() == "new-1"
        assert bridge.writes[0][2] == {"name": "Call bank", "flagged": True}


class TestTaskCommands:
    """Tests for modify, flag, complete and friends."""

    def test_modify_clear_due(self, installed_catalog, bridge):
        result = runner.invoke(app, ["modify", "t2", "--clear-due", "--unflag"])
        assert result.exit_code == 0
        assert bridge.writes[0][2] == {"id": "t2", "changes": {"dueDate": None, "flagged": False}}

    def test_flag(self, installed_catalog, bridge):
        runner.invoke(app, ["flag", "Buy milk"])
        assert bridge.writes[0][2] == {"id": "t1", "changes": {"flagged": True}}

    def test_complete_partial_failure(self, installed_catalog, bridge):
        result = runner.invoke(app, ["complete", "t1", "missing", "t3"])
        assert result.exit_code == 1
        assert "2 task(s) completed" in result.output
        assert "Error: missing: Task not found: missing" in result.output
        assert len(bridge.writes) == 2

    def test_delete_dry_run(self, installed_catalog, bridge):
        result = runner.invoke(app, ["delete", "t1", "--dry-run"])
        assert result.exit_code == 0
        assert bridge.writes == []

    def test_reorder(self, installed_catalog, bridge):
        result = runner.invoke(app, ["reorder", "t3", "after", "--target", "t5"])
        assert result.exit_code == 0
        assert bridge.writes[0][2] == {"id": "t3", "position": "after", "targetId": "t5"}

    def test_reorder_bad_position(self, installed_catalog):
        result = runner.invoke(app, ["reorder", "t3", "sideways"])
        assert result.exit_code == 2


class TestProjectFolderTagCommands:
    def test_project_hold(self, installed_catalog, bridge):
        result = runner.invoke(app, ["project", "hold", "Work"])
        assert result.exit_code == 0
        assert bridge.writes[0][2] == {"id": "p1", "changes": {"status": "on-hold"}}

    def test_project_review(self, installed_catalog, bridge):
        runner.invoke(app, ["project", "review", "Home"])
        assert bridge.writes[0][2] == {"id": "p2", "changes": {"reviewed": True}}

    def test_project_modify_parallel(self, installed_catalog, bridge):
        runner.invoke(app, ["project", "modify", "Work", "--parallel", "--status", "dropped"])
        assert bridge.writes[0][2]["changes"] == {"sequential": False, "status": "dropped"}

    def test_project_move(self, installed_catalog):
        result = runner.invoke(app, ["project", "move", "Home", "--folder", "Office"])
        assert 'Project moved from "(root)" to "Office"' in result.output

    def test_project_tasks(self, installed_catalog):
        result = runner.invoke(app, ["-q", "project", "tasks", "Home"])
        assert result.output.split() == ["t3", "t5"]

    def test_folder_add(self, installed_catalog, bridge):
        runner.invoke(app, ["folder", "add", "Vendors", "--parent", "Office"])
        assert bridge.writes[0][2] == {"name": "Vendors", "parentId": "f1"}

    def test_folder_modify_hide(self, installed_catalog, bridge):
        runner.invoke(app, ["folder", "modify", "Office", "--hide"])
        assert bridge.writes[0][2] == {"id": "f1", "changes": {"hidden": True}}

    def test_tag_add_duplicate(self, installed_catalog):
        result = runner.invoke(app, ["tag", "add", "office"])
        assert result.exit_code == 1
        assert "Tag already exists: office" in result.output

    def test_tag_modify_and_delete(self, installed_catalog, bridge):
        runner.invoke(app, ["tag", "modify", "phone", "--no-next-action"])
        runner.invoke(app, ["tag", "delete", "phone"])
        assert [w[1] for w in bridge.writes] == ["update_tag", "delete_tag"]
        assert bridge.writes[0][2]["changes"] == {"allowsNextAction": False}

    def test_tag_tasks(self, installed_catalog):
        result = runner.invoke(app, ["tag", "tasks", "office"])
        assert "#office" in result.output
        assert "[t2] Write report" in result.output


class TestUtilityCommands:
    def test_review(self, installed_catalog):
        result = runner.invoke(app, ["--json", "review"])
        assert json.loads(result.output)["dueCount"] == 2

    def test_sync(self, installed_catalog):
        result = runner.invoke(app, ["sync"])
        assert result.output.strip() == "Synchronization started"

    def test_status_running(self, installed_catalog):
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "OmniFocus is running" in result.output

    def test_status_not_running(self, down_catalog):
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 3

    def test_not_running_exit_code(self, down_catalog, bridge):
        result = runner.invoke(app, ["list", "inbox"])
        assert result.exit_code == 3
        assert "Error: OmniFocus is not running" in result.output
        assert bridge.calls == []

    def test_not_running_json(self, down_catalog):
        result = runner.invoke(app, ["--json", "add", "task", "x"])
        assert result.exit_code == 3
        assert json.loads(result.output)["code"] == "not_running"

    def test_bad_environment(self, installed_catalog, monkeypatch):
        monkeypatch.setenv("OF_TIMEOUT_MS", "soon")
        result = runner.invoke(app, ["list", "inbox"])
        assert result.exit_code == 1
        assert "OF_TIMEOUT_MS must be an integer" in result.output
