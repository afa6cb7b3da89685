"""Check that OmniFocus is running before talking to it."""

from __future__ import annotations

import logging
from typing import Protocol

from omnifocus_mcp.config import Settings
from omnifocus_mcp.enums import OperationCategory
from omnifocus_mcp.models.results import ErrorResult
from omnifocus_mcp.utils.bridge import BridgeInvoker

logger = logging.getLogger(__name__)

NOT_RUNNING_MESSAGE = "OmniFocus is not running. Please launch OmniFocus and try again."


class LivenessCheck(Protocol):
    def is_alive(self, timeout_ms: int | None = None) -> bool: ...


class LivenessProbe:
    """Asks System Events whether a process named like the app exists."""

    def __init__(self, invoker: BridgeInvoker, settings: Settings | None = None):
        self.invoker = invoker
        self.settings = settings or invoker.settings

    def is_alive(self, timeout_ms: int | None = None) -> bool:
        """True only on an explicit ``{"success": true, "running": true}``."""
        response = self.invoker.invoke(
            OperationCategory.UTIL,
            "is_running",
            [self.settings.app_name],
            timeout_ms=timeout_ms or self.settings.probe_timeout_ms,
        )
        envelope = response.to_envelope()
        if not isinstance(envelope, dict):
            return False
        alive = envelope.get("success") is True and envelope.get("running") is True
        if not alive:
            logger.info("liveness probe negative: %s", envelope.get("error", "not running"))
        return alive


def require_live(probe: LivenessCheck) -> ErrorResult | None:
    """Return a not_running error when the app is down, else None."""
    if probe.is_alive():
        return None
    return ErrorResult(error=NOT_RUNNING_MESSAGE, code="not_running")
