"""Reception planning for ordered baskets.

When a basket is received, every selected line is considered fully received
and the purchase requests behind those lines become "received". This module
only computes the plan; applying it is the persistence layer's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from procurement_engine.core.domain.basket_status import ORDERED
from procurement_engine.core.domain.reject_reasons import ReasonText, RejectKind
from procurement_engine.core.domain.types import (
    LineId,
    SupplierOrder,
    SupplierOrderLine,
    as_basket,
    as_line,
)
from procurement_engine.core.rules.selection_rules import ItemDecision


@dataclass(frozen=True, slots=True)
class ReceivedQuantity:
    line_id: LineId
    quantity_received: float


@dataclass(frozen=True, slots=True)
class ReceptionPlan:
    line_updates: tuple[ReceivedQuantity, ...]
    purchase_request_uids: tuple[str, ...]


def has_any_selected_line(lines: Iterable[SupplierOrderLine | Mapping[str, Any]]) -> bool:
    """Return True if at least one line is explicitly selected."""
    return any(as_line(line).is_selected is True for line in lines)


def can_receive_basket(basket: SupplierOrder | Mapping[str, Any]) -> ItemDecision:
    """Receiving requires an ORDERED basket with at least one selected line."""
    basket = as_basket(basket)

    if basket.phase != ORDERED:
        return ItemDecision.refuse(RejectKind.POLICY_VIOLATION, ReasonText.NOT_ORDERED)
    if not has_any_selected_line(basket.lines):
        return ItemDecision.refuse(RejectKind.POLICY_VIOLATION, ReasonText.NO_SELECTED_LINE)
    return ItemDecision.permit()


def plan_order_reception(basket: SupplierOrder | Mapping[str, Any]) -> ReceptionPlan:
    """Compute received quantities and received requests for ``basket``.

    Selected lines get ``quantity_received = quantity`` (lines without a
    quantity are left alone). Request UIDs are de-duplicated, in line order.
    """
    basket = as_basket(basket)
    selected = [line for line in basket.lines if line.is_selected is True]

    updates = tuple(
        ReceivedQuantity(line_id=line.id, quantity_received=line.quantity)
        for line in selected
        if line.quantity is not None
    )
    uids = tuple(
        dict.fromkeys(
            line.purchase_request_uid for line in selected if line.purchase_request_uid
        )
    )
    return ReceptionPlan(line_updates=updates, purchase_request_uids=uids)


def clamp_received_quantities(
    lines: Iterable[SupplierOrderLine | Mapping[str, Any]],
) -> list[ReceivedQuantity]:
    """List corrections for lines that report more received than ordered."""
    corrections: list[ReceivedQuantity] = []
    for raw in lines:
        line = as_line(raw)
        if line.quantity is None or line.quantity_received is None:
            continue
        if line.quantity_received > line.quantity:
            corrections.append(ReceivedQuantity(line_id=line.id, quantity_received=line.quantity))
    return corrections
