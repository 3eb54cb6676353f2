"""
Event sink interface.

Sinks consume decision events emitted by the selection rule engine.
"""
from __future__ import annotations

from typing import Any, Protocol


class EventSink(Protocol):
    def on_event(self, event: Any) -> None:
        """Consume one decision event."""
