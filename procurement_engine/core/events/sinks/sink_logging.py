"""
Logging event sink.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from typing import Any


class LoggingEventSink:
    """Logs decision events; refusals at INFO, permitted decisions at DEBUG."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def on_event(self, event: Any) -> None:
        fields = asdict(event) if is_dataclass(event) else {"event": repr(event)}
        level = logging.DEBUG if fields.get("allowed", False) else logging.INFO
        self._logger.log(
            level,
            "%s basket=%s allowed=%s kind=%s",
            type(event).__name__,
            fields.get("basket_id"),
            fields.get("allowed"),
            fields.get("kind"),
            extra={"decision": fields},
        )
