"""
import_engine.events - Lifecycle events fired while an import runs.

Handlers are called as ``handler(session, payload)`` in registration
order.  A bus built on top of a base importer replays the base's own
handlers for the same event as a second, separate pass.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from import_engine.errors import UnknownEventError

Handler = Callable[[Any, Any], Any]     # (session, payload) -> None

EVENTS = (
    "row_success",
    "row_error",
    "row_processing",
    "row_skipped",
    "row_processed",
    "import_started",
    "import_finished",
    "import_failed",
    "import_aborted",
)


def check_event(event: str) -> str:
    if event not in EVENTS:
        raise UnknownEventError(f"Unknown importer event '{event}'")
    return event


class EventBus:

    def __init__(
        self,
        handlers: Optional[dict[str, list[Handler]]] = None,
        base: Optional["EventBus"] = None,
    ):
        handlers = handlers or {}
        for event in handlers:
            check_event(event)
        self._handlers: dict[str, tuple[Handler, ...]] = {
            event: tuple(handlers.get(event, ())) for event in EVENTS
        }
        self._base = base

    def handlers(self, event: str) -> tuple[Handler, ...]:
        return self._handlers[check_event(event)]

    def fire(self, event: str, session: Any, payload: Any = None) -> None:
        self._fire_own(event, session, payload)
        if self._base is not None:
            self._base._fire_own(event, session, payload)

    def _fire_own(self, event: str, session: Any, payload: Any) -> None:
        for handler in self.handlers(event):
            handler(session, payload)
