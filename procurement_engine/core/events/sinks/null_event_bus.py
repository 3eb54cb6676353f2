from __future__ import annotations

from typing import Any

from procurement_engine.core.events.event_bus import EventBus


class NullEventBus(EventBus):
    """EventBus without sinks; decisions are computed but not observed (tests)."""

    def __init__(self) -> None:
        super().__init__(sinks=())

    def emit(self, event: Any) -> None:
        return
