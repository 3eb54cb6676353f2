"""
Synchronous decision event bus.
"""
from __future__ import annotations

from typing import Any, Iterable

from procurement_engine.core.events.event_sink import EventSink


class EventBus:
    """Fans decision events out to registered sinks, in registration order.

    Sink errors propagate to the emitter. Emitting after close() is an error.
    """

    def __init__(self, sinks: Iterable[EventSink] | None = None) -> None:
        self._sinks: list[EventSink] = list(sinks or ())
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def register(self, sink: EventSink) -> None:
        if self._closed:
            raise RuntimeError("cannot register a sink on a closed event bus")
        self._sinks.append(sink)

    def emit(self, event: Any) -> None:
        if self._closed:
            raise RuntimeError("event bus is closed")
        for sink in self._sinks:
            sink.on_event(event)

    def close(self) -> None:
        """Close every sink exposing close(); idempotent."""
        if self._closed:
            return
        self._closed = True
        for sink in self._sinks:
            close_fn = getattr(sink, "close", None)
            if callable(close_fn):
                close_fn()
