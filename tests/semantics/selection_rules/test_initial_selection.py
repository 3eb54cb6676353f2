"""
Semantic test: default selection map for a freshly loaded basket.

Invariant:
POOLING and locked baskets select every line. SENT baskets select every line
not explicitly deselected (absence counts as selected). Unknown statuses
produce no opinion at all.
"""

from __future__ import annotations

import pytest

from procurement_engine.core.domain.types import SelectionState, SupplierOrder
from procurement_engine.core.rules.selection_rules import initial_item_selection

LINES = [
    {"id": "L1", "purchase_request_uid": "PR-1", "is_selected": True},
    {"id": "L2", "purchase_request_uid": "PR-2", "is_selected": False},
    {"id": "L3", "purchase_request_uid": "PR-3"},
]


@pytest.mark.parametrize("status", ["OPEN", "ACK", "CLOSED", "CANCELLED"])
def test_every_line_selected_outside_sent(status: str) -> None:
    selection = initial_item_selection({"id": "B1", "status": status, "lines": LINES})

    assert selection == {"L1": True, "L2": True, "L3": True}


def test_sent_keeps_explicit_deselection_and_defaults_to_selected() -> None:
    selection = initial_item_selection({"id": "B1", "status": "SENT", "lines": LINES})

    assert selection == {"L1": True, "L2": False, "L3": True}


def test_unknown_status_yields_empty_map() -> None:
    assert initial_item_selection({"id": "B1", "status": "???", "lines": LINES}) == {}


def test_line_selection_is_tri_state() -> None:
    basket = SupplierOrder.model_validate({"id": "B1", "status": "SENT", "lines": LINES})

    assert [line.selection for line in basket.lines] == [
        SelectionState.SELECTED,
        SelectionState.DESELECTED,
        SelectionState.UNDECIDED,
    ]
