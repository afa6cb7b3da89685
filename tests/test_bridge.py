"""Tests for the osascript bridge, liveness probe and settings."""

import json
import sys
import time
from unittest.mock import patch

import pytest

from omnifocus_mcp.config import ConfigError, Settings, load_settings
from omnifocus_mcp.enums import BridgeErrorKind, OperationCategory
from omnifocus_mcp.utils.bridge import BridgeInvoker, BridgeResponse, PayloadNotFound, build_script, load_payload
from omnifocus_mcp.utils.liveness import NOT_RUNNING_MESSAGE, LivenessProbe, require_live

from .conftest import fake_process

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell script as osascript")
class TestBuildScript:
    """Tests for payload loading and script assembly."""

    def test_prelude_defines_app_name(self):
        script = build_script("read", "tasks", "OmniFocus 3")
        assert script.startswith('const APP_NAME = "OmniFocus 3";\n')
        assert "function getArg" in script
        assert "function formatTask" in script

    def test_missing_payload(self):
        with pytest.raises(PayloadNotFound, match="Script not found: jxa/read/nope.js"):
            load_payload("read", "nope")

    @pytest.mark.parametrize(
        "category,name",
        [
            ("read", "tasks"),
            ("read", "projects"),
            ("read", "folders"),
            ("read", "tags"),
            ("read", "perspectives"),
            ("write", "create_task"),
            ("write", "update_task"),
            ("write", "mark_task"),
            ("write", "reorder_task"),
            ("write", "create_project"),
            ("write", "update_project"),
            ("write", "move_project"),
            ("write", "create_folder"),
            ("write", "update_folder"),
            ("write", "create_tag"),
            ("write", "update_tag"),
            ("write", "delete_tag"),
            ("write", "sync"),
            ("utils", "is_running"),
        ],
    )
    def test_every_payload_is_packaged(self, category, name):
        source = load_payload(category, name)
        assert "fail(" in source or "JSON.stringify" in source


class TestBridgeInvoker:
    """Tests for BridgeInvoker.invoke."""

    def test_success_parses_json(self, mock_subprocess_success):
        response = BridgeInvoker().invoke(OperationCategory.READ, "tasks", ['{"scope": "inbox"}'])

        assert response.ok
        assert response.value == {"success": True, "tasks": []}
        cmd = mock_subprocess_success.call_args[0][0]
        assert cmd[:4] == ["osascript", "-l", "JavaScript", "-e"]
        assert cmd[5:] == ["--", '{"scope": "inbox"}']

    def test_timeout_uses_settings(self, mock_subprocess_success):
        BridgeInvoker(Settings(timeout_ms=2500)).invoke("read", "tags")
        assert mock_subprocess_success.return_value.wait.call_args.kwargs["timeout"] == 2.5

    def test_explicit_timeout_wins(self, mock_subprocess_success):
        BridgeInvoker().invoke("read", "tags", timeout_ms=500)
        assert mock_subprocess_success.return_value.wait.call_args.kwargs["timeout"] == 0.5

    def test_custom_osascript(self, mock_subprocess_success):
        BridgeInvoker(Settings(osascript="/usr/local/bin/osascript")).invoke("read", "tags")
        assert mock_subprocess_success.call_args[0][0][0] == "/usr/local/bin/osascript"

    def test_timeout(self, mock_subprocess_timeout):
        response = BridgeInvoker().invoke("read", "tasks")

        assert not response.ok
        assert response.error.kind == BridgeErrorKind.TIMEOUT
        assert response.to_envelope() == {"success": False, "error": "Script timed out"}
        mock_subprocess_timeout.return_value.kill.assert_called()

    def test_nonzero_exit_with_json_stdout(self):
        with patch("subprocess.Popen") as mock_popen:
            mock_popen.return_value = fake_process(1, '{"success": false, "error": "Task not found: x"}', "boom")
            response = BridgeInvoker().invoke("write", "mark_task", ["{}"])

        assert response.ok
        assert response.value == {"success": False, "error": "Task not found: x"}

    def test_nonzero_exit_without_json(self, mock_subprocess_error):
        response = BridgeInvoker().invoke("read", "tasks")

        assert response.error.kind == BridgeErrorKind.PROCESS_ERROR
        assert response.error.message == "osascript exited with status 1"
        assert "isn't running" in response.to_envelope()["stderr"]

    def test_empty_output(self):
        with patch("subprocess.Popen") as mock_popen:
            mock_popen.return_value = fake_process(0, "  \n")
            response = BridgeInvoker().invoke("read", "tasks")

        assert response.error.kind == BridgeErrorKind.EMPTY_RESPONSE
        assert response.to_envelope()["error"] == "Empty response from script"

    def test_non_json_output_is_raw(self):
        with patch("subprocess.Popen") as mock_popen:
            mock_popen.return_value = fake_process(0, "hello from JXA\n")
            response = BridgeInvoker().invoke("read", "tasks")

        assert response.ok
        assert response.raw == "hello from JXA"
        assert response.to_envelope() == {"success": True, "raw": "hello from JXA"}

    def test_output_too_large_kills_child(self):
        with patch("subprocess.Popen") as mock_popen:
            mock_popen.return_value = fake_process(0, json.dumps({"success": True, "x": "y" * 100}))
            response = BridgeInvoker(Settings(max_output_bytes=50)).invoke("read", "tasks")

        assert response.error.kind == BridgeErrorKind.OUTPUT_TOO_LARGE
        mock_popen.return_value.kill.assert_called_once()

    def test_missing_payload_never_spawns(self):
        with patch("subprocess.Popen") as mock_popen:
            response = BridgeInvoker().invoke("read", "no_such_payload")

        mock_popen.assert_not_called()
        assert response.error.kind == BridgeErrorKind.SCRIPT_NOT_FOUND
        assert response.error.message == "Script not found: jxa/read/no_such_payload.js"

    def test_missing_binary(self):
        with patch("subprocess.Popen") as mock_popen:
            mock_popen.side_effect = FileNotFoundError(2, "No such file or directory")
            response = BridgeInvoker().invoke("read", "tasks")

        assert response.error.kind == BridgeErrorKind.PROCESS_ERROR
        assert "FileNotFoundError" in response.error.message


@posix_only
class TestBridgeInvokerRealProcess:
    """BridgeInvoker against a shell script standing in for osascript."""

    def test_json_argument_reaches_child(self, fake_osascript):
        # $6 is the first argument after "-l JavaScript -e <script> --"
        osascript = fake_osascript("printf '{\"success\": true, \"arg\": %s}\\n' \"$6\"")
        response = BridgeInvoker(Settings(osascript=osascript)).invoke("read", "tasks", ['{"scope": "inbox"}'])

        assert response.value == {"success": True, "arg": {"scope": "inbox"}}

    def test_slow_child_is_killed_at_timeout(self, fake_osascript):
        osascript = fake_osascript("exec sleep 30")
        started = time.monotonic()
        response = BridgeInvoker(Settings(osascript=osascript, timeout_ms=500)).invoke("read", "tasks")
        elapsed = time.monotonic() - started

        assert response.error.kind == BridgeErrorKind.TIMEOUT
        assert elapsed < 0.5 + 1.5

    def test_runaway_output_is_cut_off(self, fake_osascript):
        osascript = fake_osascript("exec yes 0123456789")
        settings = Settings(osascript=osascript, max_output_bytes=1024 * 1024, timeout_ms=10_000)
        started = time.monotonic()
        response = BridgeInvoker(settings).invoke("read", "tasks")
        elapsed = time.monotonic() - started

        assert response.error.kind == BridgeErrorKind.OUTPUT_TOO_LARGE
        assert elapsed < 5


class TestLivenessProbe:
    """Tests for LivenessProbe and require_live."""

    def test_running(self):
        with patch("subprocess.Popen") as mock_popen:
            mock_popen.return_value = fake_process(0, '{"success": true, "running": true}')
            probe = LivenessProbe(BridgeInvoker(Settings(app_name="OmniFocus", probe_timeout_ms=1000)))
            assert probe.is_alive() is True

        cmd = mock_popen.call_args[0][0]
        assert cmd[-1] == "OmniFocus"
        assert mock_popen.return_value.wait.call_args.kwargs["timeout"] == 1.0

    def test_not_running(self):
        with patch("subprocess.Popen") as mock_popen:
            mock_popen.return_value = fake_process(0, '{"success": true, "running": false}')
            assert LivenessProbe(BridgeInvoker()).is_alive() is False

    def test_probe_failure_counts_as_down(self, mock_subprocess_timeout):
        assert LivenessProbe(BridgeInvoker()).is_alive() is False

    def test_truthy_but_not_true_is_down(self):
        with patch("subprocess.Popen") as mock_popen:
            mock_popen.return_value = fake_process(0, '{"success": true, "running": "yes"}')
            assert LivenessProbe(BridgeInvoker()).is_alive() is False

    def test_require_live(self):
        class Down:
            def is_alive(self, timeout_ms=None):
                return False

        class Up:
            def is_alive(self, timeout_ms=None):
                return True

        assert require_live(Up()) is None
        gate = require_live(Down())
        assert gate.code == "not_running"
        assert gate.error == NOT_RUNNING_MESSAGE


class TestBridgeResponse:
    def test_error_envelope_without_stderr(self):
        from omnifocus_mcp.utils.bridge import BridgeError

        response = BridgeResponse(error=BridgeError(BridgeErrorKind.TIMEOUT, "Script timed out"))
        assert response.to_envelope() == {"success": False, "error": "Script timed out"}

    def test_value_passthrough(self):
        assert BridgeResponse(value=[1, 2]).to_envelope() == [1, 2]


class TestSettings:
    """Tests for load_settings."""

    def test_defaults(self):
        settings = load_settings({})
        assert settings.osascript == "osascript"
        assert settings.app_name == "OmniFocus"
        assert settings.timeout_ms == 60_000
        assert settings.probe_timeout_ms == 5_000
        assert settings.max_output_bytes == 10 * 1024 * 1024
        assert settings.log_level == "WARNING"

    def test_environment_overrides(self):
        settings = load_settings(
            {
                "OF_APP_NAME": "OmniFocus 4",
                "OF_TIMEOUT_MS": " 1500 ",
                "OF_LOG_LEVEL": "debug",
            }
        )
        assert settings.app_name == "OmniFocus 4"
        assert settings.timeout_ms == 1500
        assert settings.log_level == "DEBUG"

    def test_blank_values_fall_back(self):
        assert load_settings({"OF_OSASCRIPT": "  "}).osascript == "osascript"

    def test_non_integer(self):
        with pytest.raises(ConfigError, match="OF_TIMEOUT_MS must be an integer"):
            load_settings({"OF_TIMEOUT_MS": "soon"})

    def test_non_positive(self):
        with pytest.raises(ConfigError, match="positive"):
            load_settings({"OF_MAX_OUTPUT_BYTES": "0"})

    def test_bad_log_level(self):
        with pytest.raises(ConfigError, match="OF_LOG_LEVEL"):
            load_settings({"OF_LOG_LEVEL": "chatty"})
