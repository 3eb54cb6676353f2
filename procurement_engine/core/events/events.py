"""
Decision events.

Each engine call emits exactly one event describing the decision it returned.
Events are immutable facts for loggers, recorders and metrics; nothing in the
engine reads them back.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SelectionDecisionEvent:
    scope: str
    operation: str  # select | deselect | purge | modify | receive

    basket_id: str
    basket_phase: str
    line_id: str | None

    allowed: bool
    kind: str | None
    reason: str


@dataclass(frozen=True, slots=True)
class BasketTransitionDecisionEvent:
    scope: str

    basket_id: str
    current_phase: str
    target_phase: str

    allowed: bool
    kind: str | None
    reason: str

    items_to_remove: int
    orphaned: int
