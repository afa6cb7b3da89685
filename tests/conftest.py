"""Pytest configuration and fixtures for omnifocus-mcp tests."""

import copy
import io
import json
import subprocess
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from omnifocus_mcp.enums import OperationCategory
from omnifocus_mcp.operations.catalog import OperationCatalog
from omnifocus_mcp.server import set_catalog
from omnifocus_mcp.utils.bridge import BridgeResponse

FIXED_NOW = datetime(2024, 6, 10, 9, 0, tzinfo=timezone.utc)

SAMPLE_TASKS = [
    {"id": "t1", "name": "Buy milk", "inInbox": True},
    {
        "id": "t2",
        "name": "Write report",
        "projectId": "p1",
        "projectName": "Work",
        "dueDate": "2024-06-10T12:00:00Z",
        "flagged": True,
        "tags": [{"id": "g1", "name": "office"}],
    },
    {
        "id": "t3",
        "name": "Call mom",
        "projectId": "p2",
        "projectName": "Home",
        "deferDate": "2024-06-10T08:00:00Z",
        "tags": [{"id": "g2", "name": "phone"}],
    },
    {
        "id": "t4",
        "name": "Pay rent",
        "projectId": "p2",
        "projectName": "Home",
        "dueDate": "2024-06-01T17:00:00Z",
        "completed": True,
    },
    {
        "id": "t5",
        "name": "Plan trip",
        "projectId": "p2",
        "projectName": "Home",
        "dueDate": "2024-06-13T10:00:00Z",
        "note": "Book flights",
    },
    {"id": "t6", "name": "Old inbox thing", "inInbox": True, "completed": True},
]

SAMPLE_PROJECTS = [
    {
        "id": "p1",
        "name": "Work",
        "status": "active status",
        "folderId": "f1",
        "folderName": "Office",
        "nextReviewDate": "2024-06-01T09:00:00Z",
        "taskCount": 1,
    },
    {"id": "p2", "name": "Home", "status": "active status", "nextReviewDate": "2024-06-20T09:00:00Z", "taskCount": 3},
    {"id": "p3", "name": "Archive", "status": "done status", "completed": True},
    {
        "id": "p4",
        "name": "Someday",
        "status": "on hold status",
        "folderId": "f1",
        "folderName": "Office",
        "nextReviewDate": "2024-05-01T09:00:00Z",
    },
]

SAMPLE_FOLDERS = [
    {"id": "f1", "name": "Office", "topLevel": True, "projectCount": 2, "folderCount": 1},
    {"id": "f2", "name": "Clients", "containerId": "f1", "containerName": "Office", "topLevel": False},
    {"id": "f3", "name": "Attic", "hidden": True},
]

SAMPLE_TAGS = [
    {"id": "g1", "name": "office", "availableTaskCount": 1},
    {"id": "g2", "name": "phone", "availableTaskCount": 1},
    {"id": "g3", "name": "waiting", "hidden": True},
]

SAMPLE_PERSPECTIVES = [{"name": "Inbox", "index": 0}, {"name": "Forecast", "index": 1}]


class FakeBridge:
    """
    In-memory stand-in for BridgeInvoker.

    Serves snapshots for read payloads, echoes write payloads back as if they
    had been applied, and records every call as (category, name, payload).
    Writes whose ``id`` is in ``fail_ids`` report a script failure.
    """

    def __init__(self, tasks=None, projects=None, folders=None, tags=None, perspectives=None, fail_ids=()):
        self.tasks = copy.deepcopy(SAMPLE_TASKS if tasks is None else tasks)
        self.projects = copy.deepcopy(SAMPLE_PROJECTS if projects is None else projects)
        self.folders = copy.deepcopy(SAMPLE_FOLDERS if folders is None else folders)
        self.tags = copy.deepcopy(SAMPLE_TAGS if tags is None else tags)
        self.perspectives = copy.deepcopy(SAMPLE_PERSPECTIVES if perspectives is None else perspectives)
        self.fail_ids = set(fail_ids)
        self.calls = []
        self._next_id = 0

    @property
    def writes(self):
        return [call for call in self.calls if call[0] == "write"]

    def invoke(self, category, name, args=(), timeout_ms=None):
        category = OperationCategory(category).value
        payload = json.loads(args[0]) if args else {}
        self.calls.append((category, name, payload))
        if category == "read":
            return BridgeResponse(value=self._read(name, payload))
        if category == "write":
            return BridgeResponse(value=self._write(name, payload))
        return BridgeResponse(value={"success": True, "running": True})

    def _read(self, name, payload):
        if name == "tasks":
            source = self.tasks
            if payload.get("scope") == "inbox":
                source = [t for t in source if t.get("inInbox")]
            elif payload.get("scope") == "project":
                source = [t for t in source if t.get("projectId") == payload.get("projectId")]
            elif payload.get("scope") == "ids":
                keys = payload.get("ids") or []
                source = [t for t in source if t["id"] in keys or t["name"] in keys]
            if not payload.get("includeCompleted"):
                source = [t for t in source if not t.get("completed")]
            return {"success": True, "tasks": source, "totalCount": len(source)}
        collection = getattr(self, name)
        return {"success": True, name: collection}

    def _new_id(self):
        self._next_id += 1
        return f"new-{self._next_id}"

    def _write(self, name, payload):
        if payload.get("id") in self.fail_ids:
            return {"success": False, "error": f"Cannot process {payload['id']}"}

        if name == "create_task":
            return {"success": True, "task": {"id": self._new_id(), **payload}}
        if name == "create_project":
            project_id = self._new_id()
            tasks = [{"id": f"{project_id}-{i}", "name": n} for i, n in enumerate(payload.get("tasks") or [])]
            return {"success": True, "project": {"id": project_id, "name": payload["name"]}, "tasks": tasks}
        if name in ("create_folder", "create_tag"):
            key = name.split("_")[1]
            return {"success": True, key: {"id": self._new_id(), "name": payload["name"]}}
        if name in ("update_task", "update_project", "update_folder"):
            key, collection = name.split("_")[1], getattr(self, f"{name.split('_')[1]}s")
            current = next(item for item in collection if item["id"] == payload["id"])
            return {"success": True, key: {**current, **payload["changes"]}}
        if name == "sync":
            return {"success": True, "message": "Synchronization started"}
        return {"success": True}


class FakeLiveness:
    """Liveness check with a fixed answer; counts how often it was asked."""

    def __init__(self, alive=True):
        self.alive = alive
        self.checks = 0

    def is_alive(self, timeout_ms=None):
        self.checks += 1
        return self.alive


@pytest.fixture
def bridge():
    return FakeBridge()


@pytest.fixture
def liveness():
    return FakeLiveness(True)


@pytest.fixture
def catalog(bridge, liveness):
    return OperationCatalog(bridge, liveness, clock=lambda: FIXED_NOW)


@pytest.fixture
def installed_catalog(catalog):
    """Point the MCP tools and CLI at the fake-backed catalog."""
    set_catalog(catalog)
    yield catalog
    set_catalog(None)




def fake_process(returncode=0, stdout="", stderr="", hang=False):
    """A stand-in for subprocess.Popen's return value with canned pipe contents."""
    process = MagicMock()
    process.stdout = io.BytesIO(stdout.encode("utf-8"))
    process.stderr = io.BytesIO(stderr.encode("utf-8"))
    if hang:
        process.wait.side_effect = [subprocess.TimeoutExpired(cmd="osascript", timeout=60), -9]
    else:
        process.wait.return_value = returncode
    return process


@pytest.fixture
def mock_subprocess_success():
    """Mock subprocess.Popen to return a successful JSON envelope."""
    with patch("subprocess.Popen") as mock_popen:
        mock_popen.return_value = fake_process(0, '{"success": true, "tasks": []}\n')
        yield mock_popen


@pytest.fixture
def mock_subprocess_error():
    """Mock subprocess.Popen to simulate osascript failing without output."""
    with patch("subprocess.Popen") as mock_popen:
        mock_popen.return_value = fake_process(1, "", "execution error: Error: Application isn't running. (-600)")
        yield mock_popen


@pytest.fixture
def mock_subprocess_timeout():
    """Mock subprocess.Popen to simulate a child that never finishes."""
    with patch("subprocess.Popen") as mock_popen:
        mock_popen.return_value = fake_process(hang=True)
        yield mock_popen


@pytest.fixture
def fake_osascript(tmp_path):
    """Write an executable shell script to stand in for osascript."""

    def make(body):
        path = tmp_path / "osascript"
        path.write_text("#!/bin/sh\n" + body + "\n")
        path.chmod(0o755)
        return str(path)

    return make
