"""Observable facade over the selection rules."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping

from procurement_engine.core.domain.basket_status import is_locked_phase, normalize_target_phase
from procurement_engine.core.domain.reception import can_receive_basket
from procurement_engine.core.domain.reject_reasons import ReasonText, RejectKind
from procurement_engine.core.domain.types import LineId, SupplierOrderLine, as_basket, as_line
from procurement_engine.core.events.event_bus import EventBus
from procurement_engine.core.events.events import (
    BasketTransitionDecisionEvent,
    SelectionDecisionEvent,
)
from procurement_engine.core.events.sinks.file_recorder import FileRecorderSink
from procurement_engine.core.events.sinks.prometheus_sink import PrometheusDecisionSink
from procurement_engine.core.events.sinks.sink_logging import LoggingEventSink
from procurement_engine.core.rules import selection_rules
from procurement_engine.core.rules.selection_rules import (
    BasketInput,
    ItemDecision,
    SelectionInput,
    SiblingsInput,
    TransitionDecision,
)

if TYPE_CHECKING:
    from procurement_engine.core.config.engine_config import EngineConfig
    from procurement_engine.core.domain.types import SupplierOrder
    from procurement_engine.core.events.event_sink import EventSink
    from procurement_engine.core.ports.basket_directory import BasketDirectory

LOGGER = logging.getLogger(__name__)

ItemInput = SupplierOrderLine | Mapping[str, Any]


class SelectionRuleEngine:
    """Selection rule engine with decision events.

    This layer is allowed to:
    - evaluate the pure selection rules against one snapshot
    - emit one decision event per call

    It must NOT write baskets, lines or requests, and an event sink can never
    change the decision being returned.

    When a call does not pass the sibling baskets explicitly, the injected
    BasketDirectory (if any) is consulted instead.

    After close(), decisions are still computed and returned; they are just
    no longer emitted.
    """

    def __init__(
        self,
        config: EngineConfig,
        event_bus: EventBus,
        directory: BasketDirectory | None = None,
    ) -> None:
        self.config = config
        self._event_bus = event_bus
        self._directory = directory

    @classmethod
    def from_config(
        cls,
        config: EngineConfig,
        directory: BasketDirectory | None = None,
    ) -> SelectionRuleEngine:
        """Build an engine whose event sinks follow ``config``."""
        return cls(config=config, event_bus=cls._build_event_bus(config), directory=directory)

    @staticmethod
    def _build_event_bus(config: EngineConfig) -> EventBus:
        sinks: list[EventSink] = [LoggingEventSink(logging.getLogger(config.logger_name))]

        if config.event_log_path is not None:
            sinks.append(FileRecorderSink(config.event_log_path))

        prom = config.prometheus
        if prom is not None and prom.enabled:
            sinks.append(PrometheusDecisionSink(job=prom.job, pushgateway_url=prom.pushgateway_url))

        return EventBus(sinks=sinks)

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    def close(self) -> None:
        self._event_bus.close()

    # ---------------------------------------------------------------------
    # Item decisions
    # ---------------------------------------------------------------------

    def can_select_item(self, basket: BasketInput, item: ItemInput) -> ItemDecision:
        basket = as_basket(basket)
        line = as_line(item)
        decision = selection_rules.can_select_item(basket, line)
        self._emit_item("select", basket, line.id, decision)
        return decision

    def can_deselect_item(
        self,
        basket: BasketInput,
        item: ItemInput,
        all_baskets: SiblingsInput = None,
    ) -> ItemDecision:
        basket = as_basket(basket)
        line = as_line(item)
        decision = selection_rules.can_deselect_item(basket, line, self._siblings(all_baskets))
        self._emit_item("deselect", basket, line.id, decision)
        return decision

    def can_purge_items(self, basket: BasketInput) -> ItemDecision:
        basket = as_basket(basket)
        decision = selection_rules.can_purge_items(basket)
        self._emit_item("purge", basket, None, decision)
        return decision

    def can_modify_item(self, basket: BasketInput) -> bool:
        basket = as_basket(basket)
        allowed = selection_rules.can_modify_item(basket)
        if allowed:
            decision = ItemDecision.permit()
        elif is_locked_phase(basket.phase):
            decision = ItemDecision.refuse(RejectKind.POLICY_VIOLATION, ReasonText.LOCKED_ITEMS)
        else:
            decision = ItemDecision.refuse(RejectKind.UNKNOWN_STATUS, ReasonText.UNKNOWN_STATUS)
        self._emit_item("modify", basket, None, decision)
        return allowed

    def can_receive_basket(self, basket: BasketInput) -> ItemDecision:
        basket = as_basket(basket)
        decision = can_receive_basket(basket)
        self._emit_item("receive", basket, None, decision)
        return decision

    def initial_item_selection(self, basket: BasketInput) -> dict[LineId, bool]:
        basket = as_basket(basket)
        selection = selection_rules.initial_item_selection(basket)
        LOGGER.debug(
            "initial selection basket=%s phase=%s lines=%d",
            basket.id,
            basket.phase,
            len(selection),
        )
        return selection

    # ---------------------------------------------------------------------
    # Basket transitions
    # ---------------------------------------------------------------------

    def can_transition_basket(
        self,
        basket: BasketInput,
        target_status: str,
        item_selection_state: SelectionInput | None = None,
        all_baskets: SiblingsInput = None,
    ) -> TransitionDecision:
        basket = as_basket(basket)
        decision = selection_rules.can_transition_basket(
            basket,
            target_status,
            item_selection_state,
            self._siblings(all_baskets),
        )

        self._emit(
            BasketTransitionDecisionEvent(
                scope=self.config.scope,
                basket_id=str(basket.id),
                current_phase=basket.phase,
                target_phase=normalize_target_phase(target_status),
                allowed=decision.can_transition,
                kind=decision.kind,
                reason=decision.reason,
                items_to_remove=len(decision.items_to_remove),
                orphaned=len(decision.orphaned_line_ids),
            )
        )
        return decision

    # ---------------------------------------------------------------------
    # Internals
    # ---------------------------------------------------------------------

    def _emit(self, event: SelectionDecisionEvent | BasketTransitionDecisionEvent) -> None:
        if self._event_bus.closed:
            LOGGER.warning("event bus closed; dropping %s", type(event).__name__)
            return
        self._event_bus.emit(event)

    def _siblings(self, all_baskets: SiblingsInput) -> SiblingsInput:
        if all_baskets is not None:
            return all_baskets
        return self._directory

    def _emit_item(
        self,
        operation: str,
        basket: SupplierOrder,
        line_id: LineId | None,
        decision: ItemDecision,
    ) -> None:
        self._emit(
            SelectionDecisionEvent(
                scope=self.config.scope,
                operation=operation,
                basket_id=str(basket.id),
                basket_phase=basket.phase,
                line_id=None if line_id is None else str(line_id),
                allowed=decision.allowed,
                kind=decision.kind,
                reason=decision.reason,
            )
        )
