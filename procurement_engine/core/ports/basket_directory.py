"""Read-only basket lookup used for cross-basket checks.

The "alternative exists" rules need every sibling basket, not just the one
being edited. Instead of reaching for an ambient global, the rules take this
capability explicitly so they can run against synthetic in-memory fixtures.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping, Protocol, runtime_checkable

from procurement_engine.core.domain.types import SupplierOrder, as_basket


@runtime_checkable
class BasketDirectory(Protocol):
    """Snapshot of all baskets a decision may consult.

    Implementations must return the same snapshot for the whole duration of a
    decision. Staleness relative to the store is the caller's concern.
    """

    def iter_baskets(self) -> Iterator[SupplierOrder]:
        """Yield every known basket snapshot."""


class InMemoryBasketDirectory:
    """BasketDirectory over a fixed list of snapshots."""

    def __init__(
        self,
        baskets: Iterable[SupplierOrder | Mapping[str, Any]] | None = None,
    ) -> None:
        # Validated once, so every consumer sees the same objects.
        self._baskets: tuple[SupplierOrder, ...] = tuple(
            as_basket(b) for b in (baskets or ())
        )

    def iter_baskets(self) -> Iterator[SupplierOrder]:
        return iter(self._baskets)

    def __len__(self) -> int:
        return len(self._baskets)


def as_directory(
    baskets: BasketDirectory | Iterable[SupplierOrder | Mapping[str, Any]] | None,
) -> BasketDirectory:
    """Wrap a plain collection of baskets; pass directories through."""
    if isinstance(baskets, BasketDirectory):
        return baskets
    return InMemoryBasketDirectory(baskets)
