"""
Run-scoped placement state shared across collections.

Holds the product ids and drop-groups already placed in any collection's
visible window during the current run. It only grows; a new run starts
with a new instance.
"""

from typing import Iterable, Optional


class GlobalMerchState:
    """Placed product ids and drop-groups for one sort run."""

    def __init__(
        self,
        product_ids: Optional[Iterable[str]] = None,
        groups: Optional[Iterable[str]] = None
    ):
        self._product_ids: set[str] = set(product_ids or ())
        self._groups: set[str] = {g for g in (groups or ()) if g}

    def is_product_placed(self, product_id: str) -> bool:
        return product_id in self._product_ids

    def is_group_placed(self, group: Optional[str]) -> bool:
        if not group:
            return False
        return group in self._groups

    def commit(
        self,
        product_ids: Iterable[str],
        groups: Iterable[Optional[str]] = ()
    ) -> None:
        """Add placements. Idempotent; empty groups are ignored."""
        self._product_ids.update(product_ids)
        self._groups.update(g for g in groups if g)

    @property
    def placed_product_ids(self) -> frozenset[str]:
        return frozenset(self._product_ids)

    @property
    def placed_groups(self) -> frozenset[str]:
        return frozenset(self._groups)

    @property
    def product_count(self) -> int:
        return len(self._product_ids)

    @property
    def group_count(self) -> int:
        return len(self._groups)

    def __repr__(self) -> str:
        return f"GlobalMerchState(products={self.product_count}, groups={self.group_count})"
