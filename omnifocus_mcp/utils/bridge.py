"""Run JXA payloads through osascript and recover their JSON output."""

from __future__ import annotations

import json
import logging
import re
import subprocess
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from typing import IO, Any

from omnifocus_mcp.config import Settings
from omnifocus_mcp.enums import BridgeErrorKind, OperationCategory

logger = logging.getLogger(__name__)

_LEADING_COMMENTS = re.compile(r"^(?:(?://.*|\s*)\r?\n)+")
_SHEBANG = re.compile(r"^#!.*\r?\n")

_READ_CHUNK_BYTES = 64 * 1024
# How long to wait for the pipe readers once the child has exited
_DRAIN_GRACE_S = 2.0


class PayloadNotFound(LookupError):
    """No payload file exists for the requested category/name."""


@dataclass(frozen=True)
class BridgeError:
    """Why a bridge call produced no usable value."""

    kind: BridgeErrorKind
    message: str
    stderr: str | None = None


@dataclass(frozen=True)
class BridgeResponse:
    """
    Outcome of one bridge call.

    Exactly one of ``value`` (parsed JSON), ``raw`` (non-JSON text) or
    ``error`` is meaningful.
    """

    value: Any = None
    raw: str | None = None
    error: BridgeError | None = None
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_envelope(self) -> Any:
        """Collapse the response into the payload envelope shape."""
        if self.error is not None:
            envelope: dict[str, Any] = {"success": False, "error": self.error.message}
            if self.error.stderr:
                envelope["stderr"] = self.error.stderr
            return envelope
        if self.raw is not None:
            return {"success": True, "raw": self.raw}
        return self.value


@lru_cache(maxsize=None)
def load_payload(category: str, name: str) -> str:
    """Read a payload's source from package data."""
    path = resources.files("omnifocus_mcp") / "jxa" / category / f"{name}.js"
    try:
        return path.read_text(encoding="utf-8")
    except (FileNotFoundError, IsADirectoryError):
        raise PayloadNotFound(f"Script not found: jxa/{category}/{name}.js") from None


def build_script(category: str, name: str, app_name: str) -> str:
    """Prepend the shared prelude to a payload."""
    helpers = _LEADING_COMMENTS.sub("", load_payload("utils", "helpers"), count=1)
    script = _SHEBANG.sub("", load_payload(category, name), count=1)
    return f"const APP_NAME = {json.dumps(app_name)};\n{helpers}\n{script}"


def _parse_json(text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except json.JSONDecodeError:
        return False, None


class _PipeReader(threading.Thread):
    """
    Drain one child pipe in the background, keeping at most *limit* bytes.

    When the limit is crossed ``on_overflow`` runs once (the invoker passes
    ``Popen.kill``) and reading stops; without a callback the excess is read
    and discarded so the child never blocks on a full pipe.
    """

    def __init__(self, stream: IO[bytes], limit: int, on_overflow: Callable[[], None] | None = None):
        super().__init__(daemon=True)
        self.stream = stream
        self.limit = limit
        self.on_overflow = on_overflow
        self.chunks: list[bytes] = []
        self.size = 0
        self.overflowed = False

    def run(self) -> None:
        while chunk := self.stream.read1(_READ_CHUNK_BYTES):
            self.size += len(chunk)
            if self.size <= self.limit:
                self.chunks.append(chunk)
                continue
            if not self.overflowed:
                self.overflowed = True
                if self.on_overflow is not None:
                    self.on_overflow()
                    return

    def text(self) -> str:
        return b"".join(self.chunks).decode("utf-8", errors="replace").strip()


class BridgeInvoker:
    """Executes one payload per call; never raises for bridge-level failures."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()

    def invoke(
        self,
        category: OperationCategory | str,
        name: str,
        args: Sequence[str] = (),
        timeout_ms: int | None = None,
    ) -> BridgeResponse:
        """
        Run ``jxa/<category>/<name>.js`` with positional string arguments.

        Stdout is read as it arrives; a child that prints more than
        ``max_output_bytes`` is killed on the spot.

        Args:
            category: Payload directory (read, write, utils)
            name: Payload file name without the .js suffix
            args: Positional arguments passed after ``--``
            timeout_ms: Kill the child after this long (defaults to settings)

        Returns:
            BridgeResponse with the parsed JSON value, raw text, or an error
        """
        category = OperationCategory(category).value
        timeout_ms = timeout_ms or self.settings.timeout_ms
        label = f"{category}/{name}"

        try:
            script = build_script(category, name, self.settings.app_name)
        except PayloadNotFound as e:
            logger.warning("bridge %s: %s", label, e)
            return BridgeResponse(error=BridgeError(BridgeErrorKind.SCRIPT_NOT_FOUND, str(e)))

        cmd = [self.settings.osascript, "-l", "JavaScript", "-e", script, "--", *[str(a) for a in args]]
        started = time.monotonic()
        try:
            process = subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        except OSError as e:
            logger.warning("bridge %s could not start %s: %s", label, self.settings.osascript, e)
            return BridgeResponse(
                error=BridgeError(BridgeErrorKind.PROCESS_ERROR, f"{type(e).__name__}: {e}"),
                elapsed_ms=(time.monotonic() - started) * 1000,
            )

        with process:
            limit = self.settings.max_output_bytes
            stdout = _PipeReader(process.stdout, limit, on_overflow=process.kill)
            stderr = _PipeReader(process.stderr, limit)
            stdout.start()
            stderr.start()

            timed_out = False
            try:
                returncode = process.wait(timeout=timeout_ms / 1000)
            except subprocess.TimeoutExpired:
                timed_out = True
                process.kill()
                returncode = process.wait()
            stdout.join(_DRAIN_GRACE_S)
            stderr.join(_DRAIN_GRACE_S)
        elapsed_ms = (time.monotonic() - started) * 1000

        if stdout.overflowed:
            response = BridgeResponse(
                error=BridgeError(BridgeErrorKind.OUTPUT_TOO_LARGE, f"Script output exceeded {limit} bytes"),
                elapsed_ms=elapsed_ms,
            )
        elif timed_out:
            response = BridgeResponse(error=BridgeError(BridgeErrorKind.TIMEOUT, "Script timed out"), elapsed_ms=elapsed_ms)
        else:
            response = self._interpret(returncode, stdout.text(), stderr.text(), elapsed_ms)

        if response.ok:
            logger.debug("bridge %s finished in %.0f ms", label, elapsed_ms)
        else:
            logger.warning("bridge %s failed (%s): %s", label, response.error.kind.value, response.error.message)
        return response

    def _interpret(self, returncode: int, stdout: str, stderr: str, elapsed_ms: float) -> BridgeResponse:
        if returncode != 0:
            # A payload that printed JSON before failing has the final word
            if stdout:
                parsed, value = _parse_json(stdout)
                if parsed:
                    return BridgeResponse(value=value, elapsed_ms=elapsed_ms)
            return BridgeResponse(
                error=BridgeError(
                    BridgeErrorKind.PROCESS_ERROR,
                    f"osascript exited with status {returncode}",
                    stderr=stderr or None,
                ),
                elapsed_ms=elapsed_ms,
            )

        if not stdout:
            return BridgeResponse(
                error=BridgeError(BridgeErrorKind.EMPTY_RESPONSE, "Empty response from script", stderr=stderr or None),
                elapsed_ms=elapsed_ms,
            )

        parsed, value = _parse_json(stdout)
        if parsed:
            return BridgeResponse(value=value, elapsed_ms=elapsed_ms)
        return BridgeResponse(raw=stdout, elapsed_ms=elapsed_ms)
