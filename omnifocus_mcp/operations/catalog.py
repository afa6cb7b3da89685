"""Named operations and the dispatcher that runs them."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from omnifocus_mcp.config import Settings
from omnifocus_mcp.models.results import ErrorResult, Result
from omnifocus_mcp.operations import folders, projects, tags, tasks, util
from omnifocus_mcp.operations.base import Bridge, Operation, OperationContext
from omnifocus_mcp.utils.bridge import BridgeInvoker
from omnifocus_mcp.utils.liveness import LivenessCheck, LivenessProbe, require_live

logger = logging.getLogger(__name__)


def default_operations() -> list[Operation]:
    return [*tasks.OPERATIONS, *projects.OPERATIONS, *folders.OPERATIONS, *tags.OPERATIONS, *util.OPERATIONS]


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    message = str(first.get("msg", "Invalid options"))
    message = message.removeprefix("Value error, ")
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {message}" if location else message


class OperationCatalog:
    """
    Dispatch table of named operations.

    ``run`` validates options against the operation's model, applies the
    liveness gate, then hands a fresh OperationContext to the handler.
    Expected failures come back as ErrorResult values.
    """

    def __init__(
        self,
        bridge: Bridge,
        liveness: LivenessCheck,
        clock: Callable[[], datetime] | None = None,
        operations: Iterable[Operation] | None = None,
    ):
        self.bridge = bridge
        self.liveness = liveness
        self.clock = clock or _local_now
        self._operations = {op.name: op for op in (operations if operations is not None else default_operations())}

    def __contains__(self, name: str) -> bool:
        return name in self._operations

    def names(self) -> list[str]:
        return sorted(self._operations)

    def get(self, name: str) -> Operation | None:
        return self._operations.get(name)

    def run(self, name: str, options: Mapping[str, Any] | None = None) -> Result:
        operation = self._operations.get(name)
        if operation is None:
            return ErrorResult(error=f"Unknown operation: {name}", code="unknown_operation")

        try:
            parsed = operation.options_model.model_validate(dict(options or {}))
        except ValidationError as e:
            return ErrorResult(error=_validation_message(e), code="invalid_options")

        if operation.requires_live:
            gate = require_live(self.liveness)
            if gate is not None:
                return gate

        ctx = OperationContext(bridge=self.bridge, now=self.clock(), liveness=self.liveness)
        logger.debug("running %s", name)
        result = operation.handler(ctx, parsed)
        if isinstance(result, ErrorResult):
            logger.info("%s failed: %s", name, result.error)
        return result


def build_catalog(settings: Settings | None = None) -> OperationCatalog:
    """Wire a catalog to the real osascript bridge."""
    settings = settings or Settings()
    invoker = BridgeInvoker(settings)
    return OperationCatalog(invoker, LivenessProbe(invoker, settings))
