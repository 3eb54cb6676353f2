"""Derived purchase request status.

A purchase request never stores its procurement status redundantly. The
status is computed on read from the link graph:

    purchase_request -> supplier_order_line_purchase_request
                     -> supplier_order_line -> supplier_order

Derivation rules, first match wins:

- explicit cancellation on the request          -> cancelled
- no linked order line                          -> open
- any considered basket CLOSED                  -> received
- any considered basket CANCELLED               -> open (demand back to dispatch)
- any considered basket ACK / RECEIVED          -> ordered
- any considered basket SENT                    -> sent
- any considered basket OPEN / POOLING          -> pooling
- otherwise                                     -> open

When several baskets compete for the same demand, only the explicitly
selected line counts. Without any selected line, every link is considered.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Iterable, Literal, Mapping

from procurement_engine.core.domain.basket_status import (
    BASKET_STATUS_GROUPS,
    ORDERED,
    POOLING,
    SENT,
)
from procurement_engine.core.domain.types import (
    PurchaseRequest,
    PurchaseRequestLink,
    as_purchase_request,
)

RequestStatus = Literal["open", "pooling", "sent", "ordered", "received", "cancelled"]

REQUEST_STATUSES: tuple[RequestStatus, ...] = (
    "open",
    "pooling",
    "sent",
    "ordered",
    "received",
    "cancelled",
)

RequestInput = PurchaseRequest | Mapping[str, Any]


def _considered_links(request: PurchaseRequest) -> list[PurchaseRequestLink]:
    links = request.supplier_order_line_ids
    selected = [
        link
        for link in links
        if link.supplier_order_line_id is not None
        and link.supplier_order_line_id.is_selected is True
    ]
    return selected if selected else links


def _basket_tokens(links: Iterable[PurchaseRequestLink]) -> set[str]:
    tokens: set[str] = set()
    for link in links:
        line = link.supplier_order_line_id
        if line is None or line.supplier_order_id is None:
            continue
        status = line.supplier_order_id.status
        if status:
            tokens.add(str(status).strip().upper())
    return tokens


def derive_request_status(request: RequestInput) -> RequestStatus:
    """Compute the externally visible status of a purchase request."""
    request = as_purchase_request(request)

    if request.status == "cancelled" or request.is_cancelled:
        return "cancelled"

    if not request.supplier_order_line_ids:
        return "open"

    tokens = _basket_tokens(_considered_links(request))

    if "CLOSED" in tokens:
        return "received"
    if "CANCELLED" in tokens:
        return "open"
    if tokens & BASKET_STATUS_GROUPS[ORDERED]:
        return "ordered"
    if tokens & BASKET_STATUS_GROUPS[SENT]:
        return "sent"
    if tokens & BASKET_STATUS_GROUPS[POOLING]:
        return "pooling"
    return "open"


def enrich_with_derived_status(request: RequestInput) -> dict[str, Any]:
    """Dump the request with a ``derived_status`` key.

    The stored ``status`` is kept as-is for backward compatibility; nothing is
    written back.
    """
    request = as_purchase_request(request)
    payload = request.model_dump(mode="json")
    payload["derived_status"] = derive_request_status(request)
    return payload


# ---------------------------------------------------------------------------
# Batch helpers
# ---------------------------------------------------------------------------


def calculate_status_stats(requests: Iterable[RequestInput] | None = None) -> dict[str, int]:
    """Count requests by derived status (every status present, zero if unused)."""
    counts = Counter(derive_request_status(r) for r in (requests or ()))
    return {status: counts.get(status, 0) for status in REQUEST_STATUSES}


def filter_by_derived_status(
    requests: Iterable[RequestInput] | None,
    target_status: str | Iterable[str],
) -> list[RequestInput]:
    """Return the requests whose derived status is one of ``target_status``.

    Inputs are returned unchanged (mapping stays mapping, model stays model).
    """
    targets = {target_status} if isinstance(target_status, str) else set(target_status)
    return [r for r in (requests or ()) if derive_request_status(r) in targets]

