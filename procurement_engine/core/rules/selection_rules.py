"""Selection rules for basket lines and basket transitions.

Every function here is a pure decision over in-memory snapshots: the same
inputs always produce the same decision, nothing is written, and business
refusals are returned as decision objects, never raised.

Rules by basket phase:

- POOLING: every line is implicitly selected (mutualization). Explicit
  select/deselect is refused.
- SENT: the buyer chooses among quoted suppliers. A line may be deselected
  only if another active basket still carries the same demand.
- ORDERED / CLOSED: lines are locked.
- UNKNOWN: nothing is permitted.
"""

# pylint: disable=too-many-return-statements
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from procurement_engine.core.domain.basket_status import (
    CLOSED,
    ORDERED,
    POOLING,
    SENT,
    is_active_phase,
    is_locked_phase,
    is_supported_transition,
    normalize_target_phase,
)
from procurement_engine.core.domain.reject_reasons import ReasonText, RejectKind
from procurement_engine.core.domain.types import (
    BasketId,
    LineId,
    SelectionState,
    SupplierOrder,
    SupplierOrderLine,
    as_basket,
    as_line,
)
from procurement_engine.core.ports.basket_directory import BasketDirectory, as_directory

BasketInput = SupplierOrder | Mapping[str, Any]
SiblingsInput = BasketDirectory | Iterable[BasketInput] | None
SelectionInput = Mapping[LineId, bool | SelectionState | None]


# ---------------------------------------------------------------------------
# Decision models
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ItemDecision:
    """Outcome of a per-item or per-basket permission check.

    - allowed: whether the caller may perform the action
    - reason: operator-facing explanation (empty when allowed)
    - kind: RejectKind code when refused, None when allowed
    - alternative_basket_ids: sibling baskets whose lines the decision relied on
    """

    allowed: bool
    reason: str
    kind: str | None = None
    alternative_basket_ids: tuple[BasketId, ...] = ()

    @classmethod
    def permit(cls, alternative_basket_ids: tuple[BasketId, ...] = ()) -> ItemDecision:
        return cls(allowed=True, reason="", kind=None, alternative_basket_ids=alternative_basket_ids)

    @classmethod
    def refuse(cls, kind: str, reason: str) -> ItemDecision:
        return cls(allowed=False, reason=reason, kind=kind)


@dataclass(frozen=True, slots=True)
class ItemToRemove:
    """A deselected line the caller must evict and route back to dispatch."""

    id: LineId
    purchase_request_uid: str | None
    should_return_to_dispatch: bool = True


@dataclass(frozen=True, slots=True)
class TransitionDecision:
    """Outcome of a basket phase transition check.

    A refused transition never carries eviction instructions: either every
    deselected line has an alternative, or nothing is to be done.
    """

    can_transition: bool
    reason: str
    kind: str | None = None
    items_to_remove: tuple[ItemToRemove, ...] = ()
    orphaned_line_ids: tuple[LineId, ...] = ()
    alternative_basket_ids: tuple[BasketId, ...] = ()

    @property
    def allowed(self) -> bool:
        return self.can_transition


# ---------------------------------------------------------------------------
# Cross-basket helpers
# ---------------------------------------------------------------------------


def _active_siblings(basket: SupplierOrder, baskets: SiblingsInput) -> tuple[SupplierOrder, ...]:
    """Materialize the sibling snapshot once per decision.

    Siblings are the other baskets in an active phase. CLOSED and UNKNOWN
    baskets never count as carrying demand. UNKNOWN admits no decision at all
    (see ``basket_status``), including as an alternative.
    """
    directory = as_directory(baskets)
    return tuple(
        other
        for other in directory.iter_baskets()
        if other.id != basket.id and is_active_phase(other.phase)
    )


def _baskets_carrying(
    purchase_request_uid: str,
    siblings: tuple[SupplierOrder, ...],
    line_filter: Callable[[SupplierOrderLine], bool] | None = None,
) -> tuple[BasketId, ...]:
    found: list[BasketId] = []
    for other in siblings:
        for line in other.lines:
            if line.purchase_request_uid != purchase_request_uid:
                continue
            if line_filter is not None and not line_filter(line):
                continue
            found.append(other.id)
            break
    return tuple(found)


def _selection_of(selection: SelectionInput, line_id: LineId) -> SelectionState:
    # JSON payloads key the map by string even for integer line ids.
    if line_id in selection:
        return SelectionState.from_flag(selection[line_id])
    return SelectionState.from_flag(selection.get(str(line_id)))


def _unique(ids: Iterable[BasketId]) -> tuple[BasketId, ...]:
    return tuple(dict.fromkeys(ids))


# ---------------------------------------------------------------------------
# Item rules
# ---------------------------------------------------------------------------


def can_select_item(basket: BasketInput, item: SupplierOrderLine | Mapping[str, Any]) -> ItemDecision:
    """Return whether ``item`` may be explicitly selected in ``basket``."""
    phase = as_basket(basket).phase
    as_line(item)

    if phase == POOLING:
        return ItemDecision.refuse(RejectKind.POLICY_VIOLATION, ReasonText.POOLING_ALL_SELECTED)
    if phase == SENT:
        return ItemDecision.permit()
    if is_locked_phase(phase):
        return ItemDecision.refuse(RejectKind.POLICY_VIOLATION, ReasonText.LOCKED_ITEMS)
    return ItemDecision.refuse(RejectKind.UNKNOWN_STATUS, ReasonText.UNKNOWN_STATUS)


def can_deselect_item(
    basket: BasketInput,
    item: SupplierOrderLine | Mapping[str, Any],
    all_baskets: SiblingsInput = None,
) -> ItemDecision:
    """Return whether ``item`` may be deselected in ``basket``.

    In SENT, deselection requires another active basket (not this one, not
    CLOSED) holding a line for the same purchase request UID. The sibling
    line's own selection flag is not inspected.
    """
    basket = as_basket(basket)
    line = as_line(item)
    phase = basket.phase

    if phase == POOLING:
        return ItemDecision.refuse(RejectKind.POLICY_VIOLATION, ReasonText.POOLING_NO_DESELECT)
    if is_locked_phase(phase):
        return ItemDecision.refuse(RejectKind.POLICY_VIOLATION, ReasonText.LOCKED_ITEMS)
    if phase != SENT:
        return ItemDecision.refuse(RejectKind.UNKNOWN_STATUS, ReasonText.UNKNOWN_STATUS)

    uid = line.purchase_request_uid
    if uid is None:
        return ItemDecision.refuse(RejectKind.MALFORMED_INPUT, ReasonText.MISSING_UID)

    carriers = _baskets_carrying(uid, _active_siblings(basket, all_baskets))
    if not carriers:
        return ItemDecision.refuse(RejectKind.MISSING_ALTERNATIVE, ReasonText.NO_ALTERNATIVE)

    return ItemDecision.permit(alternative_basket_ids=carriers)


def can_purge_items(basket: BasketInput) -> ItemDecision:
    """Return whether lines may be purged from ``basket``.

    Purge exists as an action but no phase currently permits it: pooling
    lines are all implicit, deselected SENT lines stay visible for history,
    and ordered/closed baskets are locked.
    """
    phase = as_basket(basket).phase

    if phase == POOLING:
        return ItemDecision.refuse(RejectKind.POLICY_VIOLATION, ReasonText.POOLING_NO_PURGE)
    if is_locked_phase(phase):
        return ItemDecision.refuse(RejectKind.POLICY_VIOLATION, ReasonText.LOCKED_NO_PURGE)
    if phase == SENT:
        return ItemDecision.refuse(RejectKind.POLICY_VIOLATION, ReasonText.SENT_NO_PURGE)
    return ItemDecision.refuse(RejectKind.UNKNOWN_STATUS, ReasonText.UNKNOWN_STATUS)


def can_modify_item(basket: BasketInput) -> bool:
    """Gate for quantity/price edits: open in POOLING and SENT only."""
    return as_basket(basket).phase in (POOLING, SENT)


def initial_item_selection(basket: BasketInput) -> dict[LineId, bool]:
    """Default selection map for a freshly loaded basket.

    - POOLING, ORDERED, CLOSED: every line selected
    - SENT: selected unless the line is explicitly deselected
    - anything else: empty map
    """
    basket = as_basket(basket)
    phase = basket.phase

    if phase in (POOLING, ORDERED, CLOSED):
        return {line.id: True for line in basket.lines}
    if phase == SENT:
        return {line.id: line.selection is not SelectionState.DESELECTED for line in basket.lines}
    return {}


# ---------------------------------------------------------------------------
# Basket transitions
# ---------------------------------------------------------------------------


def can_transition_basket(
    basket: BasketInput,
    target_status: str,
    item_selection_state: SelectionInput | None = None,
    all_baskets: SiblingsInput = None,
) -> TransitionDecision:
    """Validate a basket phase transition.

    Supported:
    - POOLING -> SENT: every line deselected in ``item_selection_state`` needs
      another active basket carrying its demand. On success each such line
      is returned in ``items_to_remove`` for the caller to route back to
      dispatch.
    - SENT -> ORDERED: same check, but the sibling line must not be mapped to
      False in ``item_selection_state``. Nothing is evicted.

    A line of ``basket`` is deselected unless ``item_selection_state`` maps it
    to True (or SelectionState.SELECTED): absent and None entries count as
    deselected. Entries are looked up by line id, then by its string form.
    ``target_status`` may be a phase name or a raw status token.
    """
    basket = as_basket(basket)
    current = basket.phase
    target = normalize_target_phase(target_status)

    if not is_supported_transition(current, target):
        return TransitionDecision(
            can_transition=False,
            reason=ReasonText.unsupported_transition(current, target),
            kind=RejectKind.UNSUPPORTED_TRANSITION,
        )

    selection: SelectionInput = item_selection_state or {}
    deselected = [
        line
        for line in basket.lines
        if _selection_of(selection, line.id) is not SelectionState.SELECTED
    ]
    siblings = _active_siblings(basket, all_baskets)

    line_filter: Callable[[SupplierOrderLine], bool] | None = None
    if current == SENT:
        # A sibling deselected in the same wave is not a valid alternative.
        def _still_selected(line: SupplierOrderLine) -> bool:
            return _selection_of(selection, line.id) is not SelectionState.DESELECTED

        line_filter = _still_selected

    orphaned: list[LineId] = []
    relied_on: list[BasketId] = []
    for line in deselected:
        uid = line.purchase_request_uid
        carriers = () if uid is None else _baskets_carrying(uid, siblings, line_filter)
        if carriers:
            relied_on.extend(carriers)
        else:
            orphaned.append(line.id)

    if orphaned:
        reason = (
            ReasonText.orphaned_on_send(len(orphaned))
            if current == POOLING
            else ReasonText.orphaned_on_order(len(orphaned))
        )
        return TransitionDecision(
            can_transition=False,
            reason=reason,
            kind=RejectKind.MISSING_ALTERNATIVE,
            orphaned_line_ids=tuple(orphaned),
        )

    if current == POOLING:
        return TransitionDecision(
            can_transition=True,
            reason="",
            items_to_remove=tuple(
                ItemToRemove(id=line.id, purchase_request_uid=line.purchase_request_uid)
                for line in deselected
            ),
            alternative_basket_ids=_unique(relied_on),
        )

    return TransitionDecision(
        can_transition=True,
        reason=ReasonText.ALL_ITEMS_VALIDATED,
        alternative_basket_ids=_unique(relied_on),
    )
