"""Lightweight event bus for refresh and telemetry hooks."""

from collections.abc import Callable, Coroutine
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

logger = structlog.get_logger()

# Event name constants
STATUS_APPLIED = "status.applied"
SELECTION_CHANGED = "selection.changed"
MERGE_SUCCEEDED = "conflict.merge_succeeded"
MERGE_ABORTED = "conflict.merge_aborted"
REBASE_SUCCEEDED = "conflict.rebase_succeeded"
REBASE_ABORTED = "conflict.rebase_aborted"


def conflict_event_name(signal: str) -> str:
    """Map a conflict signal value to its event name."""
    return f"conflict.{signal}"


class Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


EventHandler = Callable[[Event], Coroutine[Any, Any, None]]


class EventBus:
    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event_name, []).append(handler)

    def unsubscribe(self, event_name: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_name, [])
        if handler in handlers:
            handlers.remove(handler)

    def handler_count(self, event_name: str) -> int:
        return len(self._handlers.get(event_name, []))

    async def emit(self, event: Event) -> None:
        handlers = list(self._handlers.get(event.name, []))
        if not handlers:
            return
        logger.debug("event_emit", event_name=event.name, handlers=len(handlers))
        for handler in handlers:
            try:
                await handler(event)
            except Exception:
                logger.exception(
                    "event_handler_error",
                    event_name=event.name,
                    handler_name=getattr(handler, "__name__", repr(handler)),
                )
