"""Public API for the procurement_engine package.

Only symbols imported here are considered part of the stable,
supported external interface.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ----------------------------------------------------------------------
# Basket lifecycle
# ----------------------------------------------------------------------
from procurement_engine.core.domain.basket_status import (
    BasketPhase,
    normalize_basket_status,
)

# ----------------------------------------------------------------------
# Snapshot models
# ----------------------------------------------------------------------
from procurement_engine.core.domain.types import (
    PurchaseRequest,
    SelectionState,
    SupplierOrder,
    SupplierOrderLine,
)
from procurement_engine.core.domain.reject_reasons import RejectKind

# ----------------------------------------------------------------------
# Request status derivation
# ----------------------------------------------------------------------
from procurement_engine.core.domain.request_status import (
    RequestStatus,
    calculate_status_stats,
    derive_request_status,
    enrich_with_derived_status,
    filter_by_derived_status,
)

# ----------------------------------------------------------------------
# Selection rules
# ----------------------------------------------------------------------
from procurement_engine.core.rules.selection_rules import (
    ItemDecision,
    ItemToRemove,
    TransitionDecision,
    can_deselect_item,
    can_modify_item,
    can_purge_items,
    can_select_item,
    can_transition_basket,
    initial_item_selection,
)
from procurement_engine.core.rules.selection_engine import SelectionRuleEngine
from procurement_engine.core.ports.basket_directory import (
    BasketDirectory,
    InMemoryBasketDirectory,
)

# ----------------------------------------------------------------------
# Config API
# ----------------------------------------------------------------------
from procurement_engine.core.config.engine_config import EngineConfig

# ----------------------------------------------------------------------
# Public API definition
# ----------------------------------------------------------------------

__all__ = [
    # Lifecycle
    "BasketPhase",
    "normalize_basket_status",

    # Snapshots
    "SupplierOrder",
    "SupplierOrderLine",
    "PurchaseRequest",
    "SelectionState",

    # Decisions
    "RejectKind",
    "ItemDecision",
    "ItemToRemove",
    "TransitionDecision",

    # Rules
    "can_select_item",
    "can_deselect_item",
    "can_purge_items",
    "can_modify_item",
    "can_transition_basket",
    "initial_item_selection",
    "SelectionRuleEngine",
    "BasketDirectory",
    "InMemoryBasketDirectory",

    # Derived request status
    "RequestStatus",
    "derive_request_status",
    "enrich_with_derived_status",
    "calculate_status_stats",
    "filter_by_derived_status",

    # Config
    "EngineConfig",

    # Version
    "__version__",
]

# ----------------------------------------------------------------------
# Package version
# ----------------------------------------------------------------------

try:
    __version__ = version("procurement-engine")
except PackageNotFoundError:
    __version__ = "0.0.0"
