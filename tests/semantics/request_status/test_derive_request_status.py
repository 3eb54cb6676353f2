"""
Semantic test: request status is derived from the link graph.

Invariant:
Explicit cancellation wins; no link means open; otherwise the selected line
(or every line, when none is selected) decides, most advanced basket phase
first. Deriving twice from the same snapshot gives the same answer.
"""

from __future__ import annotations

from typing import Any

import pytest

from procurement_engine.core.domain.request_status import (
    derive_request_status,
    enrich_with_derived_status,
)
from procurement_engine.core.domain.types import PurchaseRequest


def link(basket_status: str | None, *, selected: bool | None = None, line_id: str = "L1") -> dict[str, Any]:
    line: dict[str, Any] = {
        "id": line_id,
        "purchase_request_uid": "PR-1",
        "supplier_order_id": {"id": f"B-{line_id}", "status": basket_status},
    }
    if selected is not None:
        line["is_selected"] = selected
    return {"id": f"link-{line_id}", "supplier_order_line_id": line}


def request(*links: dict[str, Any], **fields: Any) -> dict[str, Any]:
    return {"id": "PR-1", "supplier_order_line_ids": list(links), **fields}


def test_no_links_is_open() -> None:
    assert derive_request_status(request()) == "open"
    assert derive_request_status({"id": "PR-1", "supplier_order_line_ids": None}) == "open"


def test_single_sent_basket_is_sent() -> None:
    assert derive_request_status(request(link("SENT"))) == "sent"


@pytest.mark.parametrize(
    ("basket_status", "expected"),
    [
        ("OPEN", "pooling"),
        ("pooling", "pooling"),
        ("SENT", "sent"),
        ("ACK", "ordered"),
        ("RECEIVED", "ordered"),
        ("CLOSED", "received"),
        ("CANCELLED", "open"),
        ("MYSTERY", "open"),
        (None, "open"),
    ],
)
def test_single_basket_phase_mapping(basket_status: str | None, expected: str) -> None:
    assert derive_request_status(request(link(basket_status))) == expected


def test_selected_closed_line_wins_over_sent() -> None:
    snapshot = request(
        link("CLOSED", selected=True, line_id="L1"),
        link("SENT", selected=False, line_id="L2"),
    )

    assert derive_request_status(snapshot) == "received"


def test_selected_line_is_used_exclusively() -> None:
    snapshot = request(
        link("SENT", selected=True, line_id="L1"),
        link("CLOSED", selected=False, line_id="L2"),
    )

    assert derive_request_status(snapshot) == "sent"


def test_without_selection_most_advanced_phase_wins() -> None:
    snapshot = request(
        link("OPEN", line_id="L1"),
        link("SENT", line_id="L2"),
        link("ACK", line_id="L3"),
    )

    assert derive_request_status(snapshot) == "ordered"


def test_cancelled_basket_outranks_ordered_and_releases_demand() -> None:
    snapshot = request(link("CANCELLED", line_id="L1"), link("ACK", line_id="L2"))

    assert derive_request_status(snapshot) == "open"


def test_explicit_cancellation_beats_ordered_links() -> None:
    snapshot = request(
        link("ACK", selected=True, line_id="L1"),
        link("RECEIVED", selected=True, line_id="L2"),
        is_cancelled=True,
    )

    assert derive_request_status(snapshot) == "cancelled"


def test_cancelled_status_field_beats_links() -> None:
    assert derive_request_status(request(link("CLOSED"), status="cancelled")) == "cancelled"


def test_stored_status_is_otherwise_ignored() -> None:
    assert derive_request_status(request(link("SENT"), status="received")) == "sent"


def test_unjoined_relations_are_skipped() -> None:
    snapshot = request(
        {"id": "link-x", "supplier_order_line_id": 42},
        {"id": "link-y", "supplier_order_line_id": {"id": "L9", "supplier_order_id": 7}},
    )

    assert derive_request_status(snapshot) == "open"


def test_camel_case_selection_flag_is_honored() -> None:
    closed = link("CLOSED", line_id="L1")
    closed["supplier_order_line_id"]["isSelected"] = True

    assert derive_request_status(request(closed, link("SENT", line_id="L2"))) == "received"


def test_derivation_is_idempotent_and_does_not_mutate() -> None:
    snapshot = PurchaseRequest.model_validate(
        request(link("SENT", selected=True), link("OPEN", line_id="L2"))
    )
    before = snapshot.model_dump()

    first = derive_request_status(snapshot)
    second = derive_request_status(snapshot)

    assert first == second == "sent"
    assert snapshot.model_dump() == before


def test_enrich_keeps_stored_status() -> None:
    enriched = enrich_with_derived_status(request(link("ACK"), status="open"))

    assert enriched["derived_status"] == "ordered"
    assert enriched["status"] == "open"
    assert enriched["id"] == "PR-1"


def test_missing_request_is_a_precondition_failure() -> None:
    with pytest.raises(ValueError):
        derive_request_status(None)  # type: ignore[arg-type]


def test_unexpanded_link_rows_are_skipped() -> None:
    assert derive_request_status({"id": 1, "supplier_order_line_ids": [5, "link-6"]}) == "open"
    assert derive_request_status(request(5, link("SENT"))) == "sent"
