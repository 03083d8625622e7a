"""
Catalog schemas: products and collections as read from the Shopify Admin API.
"""

from pydantic import Field
from typing import Optional

from models.base import BaseSchema
from utils.text_utils import normalize_tag

# Option names that carry a size ("talla" is the Spanish storefront label)
SIZE_OPTION_NAMES = ("SIZE", "TALLA")

MANUAL_SORT_ORDER = "MANUAL"


class SelectedOption(BaseSchema):
    """One option of a variant, e.g. Size: M."""

    name: str
    value: Optional[str] = None


class ProductVariant(BaseSchema):
    """Variant with its stock level and options."""

    inventory_quantity: int = Field(default=0, description="Available units")
    selected_options: list[SelectedOption] = Field(default_factory=list)

    @property
    def size_option_value(self) -> Optional[str]:
        """Value of the size option, or None if the variant has no size."""
        for option in self.selected_options:
            if normalize_tag(option.name) in SIZE_OPTION_NAMES:
                return option.value
        return None


class Product(BaseSchema):
    """
    Product inside a collection.

    Order of products in CollectionSnapshot.products is the catalog order
    used as the tie-breaker between equal sales counts.
    """

    id: str = Field(..., description="Product GID")
    title: str = Field(default="", description="Product title")
    tags: list[str] = Field(default_factory=list)
    total_inventory: int = Field(default=0)
    tracks_inventory: bool = Field(default=False)
    variants: list[ProductVariant] = Field(default_factory=list)


class CollectionSnapshot(BaseSchema):
    """Collection with all of its products (all pages)."""

    id: str
    title: str
    sort_order: str = Field(..., description="Shopify CollectionSortOrder, e.g. MANUAL")
    products: list[Product] = Field(default_factory=list)

    @property
    def is_manual(self) -> bool:
        return self.sort_order == MANUAL_SORT_ORDER
