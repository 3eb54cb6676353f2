"""
Semantic test: deselecting in a SENT basket requires an alternative basket.

Invariant:
A purchase request can never end up unrepresented in every active basket as
a side effect of a deselection. The alternative must be another basket, not
CLOSED, holding a line with the same purchase request UID.
"""

from __future__ import annotations

import pytest

from procurement_engine.core.domain.reject_reasons import RejectKind
from procurement_engine.core.ports.basket_directory import InMemoryBasketDirectory
from procurement_engine.core.rules.selection_rules import can_deselect_item

ITEM = {"id": "L1", "purchase_request_uid": "PR-1"}


def sent_basket() -> dict:
    return {"id": "B1", "status": "SENT", "lines": [ITEM]}


def sibling(basket_id: str, status: str, uid: str = "PR-1") -> dict:
    return {
        "id": basket_id,
        "status": status,
        "lines": [{"id": f"{basket_id}-L", "purchase_request_uid": uid}],
    }


def test_deselect_refused_without_any_sibling() -> None:
    current = sent_basket()

    decision = can_deselect_item(current, ITEM, [current])

    assert decision.allowed is False
    assert decision.kind == RejectKind.MISSING_ALTERNATIVE
    assert "aucun autre panier actif" in decision.reason


def test_deselect_allowed_with_active_sibling() -> None:
    current = sent_basket()
    other = sibling("B2", "SENT")

    decision = can_deselect_item(current, ITEM, [current, other])

    assert decision.allowed is True
    assert decision.alternative_basket_ids == ("B2",)


@pytest.mark.parametrize("status", ["OPEN", "ACK", "RECEIVED"])
def test_any_active_phase_counts_as_alternative(status: str) -> None:
    decision = can_deselect_item(sent_basket(), ITEM, [sibling("B2", status)])

    assert decision.allowed is True


@pytest.mark.parametrize("status", ["CLOSED", "CANCELLED", "MYSTERY"])
def test_closed_or_unknown_sibling_is_not_an_alternative(status: str) -> None:
    decision = can_deselect_item(sent_basket(), ITEM, [sibling("B2", status)])

    assert decision.allowed is False
    assert decision.kind == RejectKind.MISSING_ALTERNATIVE


def test_sibling_for_another_demand_is_not_an_alternative() -> None:
    decision = can_deselect_item(sent_basket(), ITEM, [sibling("B2", "SENT", uid="PR-2")])

    assert decision.allowed is False


def test_a_second_line_in_the_same_basket_is_not_an_alternative() -> None:
    current = {
        "id": "B1",
        "status": "SENT",
        "lines": [ITEM, {"id": "L2", "purchase_request_uid": "PR-1"}],
    }

    decision = can_deselect_item(current, ITEM, [current])

    assert decision.allowed is False


def test_item_without_uid_cannot_be_evaluated() -> None:
    item = {"id": "L9"}

    decision = can_deselect_item(sent_basket(), item, [sibling("B2", "SENT")])

    assert decision.allowed is False
    assert decision.kind == RejectKind.MALFORMED_INPUT


def test_camel_case_uid_is_accepted() -> None:
    item = {"id": "L1", "purchaseRequestUid": "PR-1"}

    decision = can_deselect_item(sent_basket(), item, [sibling("B2", "SENT")])

    assert decision.allowed is True


@pytest.mark.parametrize("status", ["OPEN", "POOLING"])
def test_deselect_refused_while_pooling_even_with_alternative(status: str) -> None:
    current = {"id": "B1", "status": status, "lines": [ITEM]}

    decision = can_deselect_item(current, ITEM, [sibling("B2", "SENT")])

    assert decision.allowed is False
    assert decision.kind == RejectKind.POLICY_VIOLATION


@pytest.mark.parametrize("status", ["ACK", "CLOSED"])
def test_deselect_refused_when_locked(status: str) -> None:
    current = {"id": "B1", "status": status, "lines": [ITEM]}

    decision = can_deselect_item(current, ITEM, [sibling("B2", "SENT")])

    assert decision.allowed is False
    assert decision.kind == RejectKind.POLICY_VIOLATION


def test_directory_can_replace_the_sibling_list() -> None:
    directory = InMemoryBasketDirectory([sent_basket(), sibling("B2", "SENT")])

    decision = can_deselect_item(sent_basket(), ITEM, directory)

    assert decision.allowed is True
    assert decision.alternative_basket_ids == ("B2",)
