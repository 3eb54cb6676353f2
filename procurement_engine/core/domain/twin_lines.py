"""Twin lines: the same demand carried by several competing baskets.

While supplier competition is unresolved, one purchase request can appear as
a line in several active baskets. Once a basket has left POOLING, at most one
of those lines may be explicitly selected. These helpers list twins and audit
that invariant on a snapshot; they never repair anything.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from procurement_engine.core.domain.basket_status import POOLING, BasketPhase, is_active_phase
from procurement_engine.core.domain.types import (
    BasketId,
    LineId,
    SupplierOrder,
    SupplierOrderLine,
    as_basket,
)


@dataclass(frozen=True, slots=True)
class TwinLine:
    basket_id: BasketId
    basket_phase: BasketPhase
    line: SupplierOrderLine


@dataclass(frozen=True, slots=True)
class SelectionConflict:
    """More than one line selected for the same purchase request UID."""

    purchase_request_uid: str
    selected: tuple[tuple[BasketId, LineId], ...]


def find_twin_lines(
    baskets: Iterable[SupplierOrder | Mapping[str, Any]],
    purchase_request_uid: str,
) -> list[TwinLine]:
    """Return every line for ``purchase_request_uid`` in an active basket."""
    twins: list[TwinLine] = []
    for raw in baskets:
        basket = as_basket(raw)
        phase = basket.phase
        if not is_active_phase(phase):
            continue
        for line in basket.lines:
            if line.purchase_request_uid == purchase_request_uid:
                twins.append(TwinLine(basket_id=basket.id, basket_phase=phase, line=line))
    return twins


def find_selection_conflicts(
    baskets: Iterable[SupplierOrder | Mapping[str, Any]],
) -> list[SelectionConflict]:
    """Report UIDs explicitly selected in more than one active post-POOLING basket.

    Only ``is_selected is True`` counts. An undecided line in a SENT basket is
    selected by default for display, but no supplier choice was recorded for it.
    """
    selected: defaultdict[str, list[tuple[BasketId, LineId]]] = defaultdict(list)
    for raw in baskets:
        basket = as_basket(raw)
        phase = basket.phase
        if phase == POOLING or not is_active_phase(phase):
            continue
        for line in basket.lines:
            if line.purchase_request_uid is None or line.is_selected is not True:
                continue
            selected[line.purchase_request_uid].append((basket.id, line.id))

    return [
        SelectionConflict(purchase_request_uid=uid, selected=tuple(hits))
        for uid, hits in selected.items()
        if len(hits) > 1
    ]
