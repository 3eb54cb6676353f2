"""
Supplier basket lifecycle definitions.

This module maps the raw status tokens stored on a supplier order ("basket")
onto the four canonical lifecycle phases, and lists the phase transitions the
selection rules know how to validate. It is passive: nothing here mutates a
basket or decides whether an action is permitted.

Tokens outside the known groups normalize to UNKNOWN. There is no fallback
guessing; callers treat UNKNOWN as "no valid decision can be made".
"""

from __future__ import annotations

from typing import Literal

BasketPhase = Literal["POOLING", "SENT", "ORDERED", "CLOSED", "UNKNOWN"]

POOLING: BasketPhase = "POOLING"
SENT: BasketPhase = "SENT"
ORDERED: BasketPhase = "ORDERED"
CLOSED: BasketPhase = "CLOSED"
UNKNOWN: BasketPhase = "UNKNOWN"


# Raw tokens (upper-case) grouped by canonical phase.
#
# Notes:
# - OPEN is the backend's name for a pooling basket.
# - CANCELLED shares the CLOSED phase: a cancelled basket is no longer active.
#   The request status deriver still tells the two tokens apart.
BASKET_STATUS_GROUPS: dict[BasketPhase, frozenset[str]] = {
    POOLING: frozenset({"OPEN", "POOLING"}),
    SENT: frozenset({"SENT"}),
    ORDERED: frozenset({"ACK", "RECEIVED"}),
    CLOSED: frozenset({"CLOSED", "CANCELLED"}),
}

# Phases in which the lines of a basket can no longer be touched.
LOCKED_PHASES: frozenset[BasketPhase] = frozenset({ORDERED, CLOSED})

# Phases of a basket that still carries live demand.
ACTIVE_PHASES: frozenset[BasketPhase] = frozenset({POOLING, SENT, ORDERED})


# Basket transitions with a defined validation rule.
#
# Key   : current phase
# Value : target phases that can be validated from it
#
# Every other pair is rejected as unsupported by the selection rules.
SUPPORTED_BASKET_TRANSITIONS: dict[BasketPhase, frozenset[BasketPhase]] = {
    POOLING: frozenset({SENT}),
    SENT: frozenset({ORDERED}),
}


def normalize_basket_status(raw_status: str | None) -> BasketPhase:
    """Return the canonical phase for a raw basket status token (case-insensitive)."""
    token = (raw_status or "").strip().upper()
    for phase, tokens in BASKET_STATUS_GROUPS.items():
        if token in tokens:
            return phase
    return UNKNOWN


def is_locked_phase(phase: str) -> bool:
    """Return True if lines of a basket in this phase are frozen."""
    return phase in LOCKED_PHASES


def is_active_phase(phase: str) -> bool:
    """Return True if a basket in this phase still carries demand."""
    return phase in ACTIVE_PHASES


def is_supported_transition(current: str, target: str) -> bool:
    """Return True if current -> target has a validation rule."""
    allowed = SUPPORTED_BASKET_TRANSITIONS.get(current)
    if allowed is None:
        return False
    return target in allowed


def normalize_target_phase(target: str | None) -> BasketPhase:
    """Return the phase a transition request points at.

    Accepts a canonical phase name ("ORDERED") as well as any raw token
    ("ACK"), case-insensitively.
    """
    token = (target or "").strip().upper()
    for phase in BASKET_STATUS_GROUPS:
        if token == phase:
            return phase
    return normalize_basket_status(token)
