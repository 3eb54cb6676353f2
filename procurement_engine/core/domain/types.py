"""Snapshot models for baskets, order lines and purchase requests.

These Pydantic models describe the in-memory snapshots the engine receives
from the persistence layer. Only the fields the rules inspect are declared;
anything else the backend sends is ignored. Snapshots are frozen: the engine
reads them and never writes back.
"""

# pylint: disable=missing-class-docstring
from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from procurement_engine.core.domain.basket_status import BasketPhase, normalize_basket_status

LineId = str | int
BasketId = str | int

_SNAPSHOT_CONFIG = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class SelectionState(Enum):
    """Explicit tri-state for a line's ``is_selected`` flag."""

    SELECTED = "selected"
    DESELECTED = "deselected"
    UNDECIDED = "undecided"

    @classmethod
    def from_flag(cls, flag: bool | SelectionState | None) -> SelectionState:
        if isinstance(flag, SelectionState):
            return flag
        if flag is True:
            return cls.SELECTED
        if flag is False:
            return cls.DESELECTED
        return cls.UNDECIDED


# ---------------------------------------------------------------------------
# Basket snapshots
# ---------------------------------------------------------------------------


class SupplierOrderLine(BaseModel):
    """One article line inside a basket."""

    id: LineId
    purchase_request_uid: str | None = Field(
        default=None,
        validation_alias=AliasChoices("purchase_request_uid", "purchaseRequestUid"),
        description="Correlates the same underlying demand across baskets.",
    )
    is_selected: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("is_selected", "isSelected"),
        description="Explicit selection flag; absent means not yet decided.",
    )
    quantity: float | None = Field(default=None, ge=0)
    quantity_received: float | None = Field(default=None, ge=0)

    model_config = _SNAPSHOT_CONFIG

    @field_validator("purchase_request_uid", mode="before")
    @classmethod
    def _blank_uid_is_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def selection(self) -> SelectionState:
        return SelectionState.from_flag(self.is_selected)


class SupplierOrder(BaseModel):
    """A basket: one batch purchase order addressed to one supplier."""

    id: BasketId
    status: str | None = Field(default=None, description="Raw backend status token.")
    lines: list[SupplierOrderLine] = Field(default_factory=list)
    # Optional row version for optimistic-concurrency checks by the caller.
    version: int | None = None

    model_config = _SNAPSHOT_CONFIG

    @field_validator("lines", mode="before")
    @classmethod
    def _null_lines_are_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def phase(self) -> BasketPhase:
        return normalize_basket_status(self.status)


# ---------------------------------------------------------------------------
# Purchase request snapshots (M2M through supplier_order_line_purchase_request)
# ---------------------------------------------------------------------------


class BasketRef(BaseModel):
    """Parent basket joined onto a linked order line."""

    id: BasketId | None = None
    status: str | None = None

    model_config = _SNAPSHOT_CONFIG


class LinkedOrderLine(SupplierOrderLine):
    """Order line as seen through a purchase request link."""

    supplier_order_id: BasketRef | None = None

    @field_validator("supplier_order_id", mode="before")
    @classmethod
    def _bare_id_is_unjoined_ref(cls, value: Any) -> Any:
        # An unexpanded relation arrives as a bare id: its status is unknown.
        if isinstance(value, (str, int)) and not isinstance(value, bool):
            return {"id": value, "status": None}
        return value


class PurchaseRequestLink(BaseModel):
    """One row of the purchase request <-> order line link table."""

    id: LineId | None = None
    supplier_order_line_id: LinkedOrderLine | None = None

    model_config = _SNAPSHOT_CONFIG

    @field_validator("supplier_order_line_id", mode="before")
    @classmethod
    def _bare_line_id_is_unjoined(cls, value: Any) -> Any:
        # Without the joined line there is nothing to derive from.
        if isinstance(value, (str, int)) and not isinstance(value, bool):
            return None
        return value


class PurchaseRequest(BaseModel):
    """A demand for an article/quantity, independent of any basket."""

    id: LineId
    status: str | None = None
    is_cancelled: bool | None = None
    supplier_order_line_ids: list[PurchaseRequestLink] = Field(default_factory=list)

    model_config = _SNAPSHOT_CONFIG

    @field_validator("supplier_order_line_ids", mode="before")
    @classmethod
    def _normalize_links(cls, value: Any) -> Any:
        if value is None:
            return []
        if not isinstance(value, list):
            return value
        # An unexpanded link row arrives as a bare id: nothing to derive from.
        return [
            {"id": item, "supplier_order_line_id": None}
            if isinstance(item, (str, int)) and not isinstance(item, bool)
            else item
            for item in value
        ]


# ---------------------------------------------------------------------------
# Boundary coercion
# ---------------------------------------------------------------------------

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def _coerce(model_type: type[_ModelT], obj: _ModelT | Mapping[str, Any] | None, what: str) -> _ModelT:
    if obj is None:
        raise ValueError(f"{what} snapshot is required")
    if isinstance(obj, model_type):
        return obj
    return model_type.model_validate(obj)


def as_basket(obj: SupplierOrder | Mapping[str, Any] | None) -> SupplierOrder:
    """Validate a basket snapshot; ``None`` is a precondition failure."""
    return _coerce(SupplierOrder, obj, "basket")


def as_line(obj: SupplierOrderLine | Mapping[str, Any] | None) -> SupplierOrderLine:
    """Validate an order line snapshot; ``None`` is a precondition failure."""
    return _coerce(SupplierOrderLine, obj, "order line")


def as_purchase_request(obj: PurchaseRequest | Mapping[str, Any] | None) -> PurchaseRequest:
    """Validate a purchase request snapshot; ``None`` is a precondition failure."""
    return _coerce(PurchaseRequest, obj, "purchase request")
