"""
Semantic test: raw basket tokens normalize to exactly one phase.

Invariant:
Known tokens map case-insensitively onto POOLING, SENT, ORDERED or CLOSED.
Anything else is UNKNOWN, never coerced to a valid phase.
"""

from __future__ import annotations

import pytest

from procurement_engine.core.domain.basket_status import (
    BASKET_STATUS_GROUPS,
    is_active_phase,
    is_locked_phase,
    is_supported_transition,
    normalize_basket_status,
    normalize_target_phase,
)


@pytest.mark.parametrize(
    ("raw", "phase"),
    [
        ("OPEN", "POOLING"),
        ("pooling", "POOLING"),
        ("Sent", "SENT"),
        ("ACK", "ORDERED"),
        ("received", "ORDERED"),
        ("CLOSED", "CLOSED"),
        ("cancelled", "CLOSED"),
    ],
)
def test_known_tokens_map_to_their_phase(raw: str, phase: str) -> None:
    assert normalize_basket_status(raw) == phase


@pytest.mark.parametrize("raw", ["", None, "DRAFT", "CANCELED", "in_progress", "SENT-ish"])
def test_unrecognized_tokens_are_unknown(raw: str | None) -> None:
    assert normalize_basket_status(raw) == "UNKNOWN"


def test_every_token_belongs_to_a_single_group() -> None:
    seen: dict[str, str] = {}
    for phase, tokens in BASKET_STATUS_GROUPS.items():
        for token in tokens:
            assert token not in seen, f"{token} in both {seen.get(token)} and {phase}"
            seen[token] = phase


def test_phase_predicates() -> None:
    assert is_locked_phase("ORDERED")
    assert is_locked_phase("CLOSED")
    assert not is_locked_phase("SENT")
    assert not is_locked_phase("UNKNOWN")

    assert is_active_phase("POOLING")
    assert is_active_phase("ORDERED")
    assert not is_active_phase("CLOSED")
    assert not is_active_phase("UNKNOWN")


def test_only_two_transitions_are_supported() -> None:
    assert is_supported_transition("POOLING", "SENT")
    assert is_supported_transition("SENT", "ORDERED")

    assert not is_supported_transition("POOLING", "ORDERED")
    assert not is_supported_transition("ORDERED", "CLOSED")
    assert not is_supported_transition("SENT", "SENT")
    assert not is_supported_transition("UNKNOWN", "SENT")


@pytest.mark.parametrize(
    ("target", "phase"),
    [
        ("ORDERED", "ORDERED"),
        ("ordered", "ORDERED"),
        ("ACK", "ORDERED"),
        ("sent", "SENT"),
        ("Closed", "CLOSED"),
        ("UNKNOWN", "UNKNOWN"),
        ("SHIPPED", "UNKNOWN"),
        (None, "UNKNOWN"),
    ],
)
def test_transition_targets_accept_phase_names(target, phase) -> None:
    assert normalize_target_phase(target) == phase


def test_phase_name_is_not_a_stored_status_token() -> None:
    assert normalize_basket_status("ORDERED") == "UNKNOWN"
