from __future__ import annotations

import json
import logging
import os
from typing import Any

from prometheus_client import CollectorRegistry, Counter, push_to_gateway

from procurement_engine.core.events.events import (
    BasketTransitionDecisionEvent,
    SelectionDecisionEvent,
)

LOGGER = logging.getLogger(__name__)


class PrometheusDecisionSink:
    """Counts decisions per operation, outcome and refusal kind.

    Counters live on a private registry so several engines (and tests) can
    coexist in one process. The registry can be scraped by the embedding
    service through ``registry``, or pushed to a Pushgateway on close().

    Expected environment for pushing:
    - PROMETHEUS_PUSHGATEWAY_URL: URL to the Pushgateway.

    Optional:
    - PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON: JSON object used as grouping key.

    Pushing is best-effort: a failed push is logged and never raised.
    """

    def __init__(
        self,
        *,
        job: str = "procurement_engine",
        pushgateway_url: str | None = None,
        registry: CollectorRegistry | None = None,
    ) -> None:
        self._job = job
        self._pushgateway_url = pushgateway_url or os.environ.get("PROMETHEUS_PUSHGATEWAY_URL")
        self._grouping_key = self._load_grouping_key()
        self.registry = registry if registry is not None else CollectorRegistry()
        self._closed = False

        self._decisions = Counter(
            "procurement_decisions",
            "Selection rule decisions by operation and outcome.",
            labelnames=["scope", "operation", "allowed", "kind"],
            registry=self.registry,
        )

    @staticmethod
    def _load_grouping_key() -> dict[str, str]:
        raw = os.environ.get("PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON")
        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            LOGGER.warning("Invalid PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON; ignoring")
            return {}

        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(k, str) and isinstance(v, str)}

    def on_event(self, event: Any) -> None:
        if isinstance(event, SelectionDecisionEvent):
            operation = event.operation
        elif isinstance(event, BasketTransitionDecisionEvent):
            operation = "transition"
        else:
            return

        self._decisions.labels(
            scope=event.scope,
            operation=operation,
            allowed="true" if event.allowed else "false",
            kind=event.kind or "none",
        ).inc()

    def value(self, *, scope: str, operation: str, allowed: bool, kind: str | None = None) -> float:
        """Current counter value for one label set (0.0 if never incremented)."""
        sample = self.registry.get_sample_value(
            "procurement_decisions_total",
            {
                "scope": scope,
                "operation": operation,
                "allowed": "true" if allowed else "false",
                "kind": kind or "none",
            },
        )
        return 0.0 if sample is None else sample

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if not self._pushgateway_url:
            return

        try:
            push_to_gateway(
                gateway=self._pushgateway_url,
                job=self._job,
                registry=self.registry,
                grouping_key=self._grouping_key,
            )
        except OSError:
            LOGGER.exception("Prometheus push failed")
            return

        LOGGER.info(
            "Prometheus metrics pushed",
            extra={"job": self._job, "grouping_key": self._grouping_key},
        )
