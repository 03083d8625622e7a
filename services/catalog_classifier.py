"""
Catalog classifier. Derives merchandising facets from a raw product.

Pure functions: no state, no I/O. Unknown tags or titles simply fall back
to the default facets (no color, no drop-group, garment type OTHER).
"""

from typing import Iterable, Optional

from models.catalog import Product, ProductVariant
from models.merchandising import (
    COLOR_PALETTE,
    DROP_GROUP_PREFIX,
    SPECIAL_ITEM_MARKER,
    GarmentType,
    ProductFacets,
)
from utils.text_utils import normalize_tag

DEFAULT_MIN_SIZES = 4

# Title keywords checked in this order; OTHER is the fallback
GARMENT_KEYWORDS = [t for t in GarmentType if t is not GarmentType.OTHER]

_PALETTE = frozenset(COLOR_PALETTE)


def extract_color(tags: Iterable[str]) -> Optional[str]:
    """First tag that names a palette color, uppercased."""
    for tag in tags:
        normalized = normalize_tag(tag)
        if normalized in _PALETTE:
            return normalized
    return None


def extract_drop_group(tags: Iterable[str]) -> Optional[str]:
    """First Group_* tag, verbatim."""
    for tag in tags:
        if tag.startswith(DROP_GROUP_PREFIX):
            return tag
    return None


def extract_garment_type(title: Optional[str]) -> GarmentType:
    """First garment keyword contained in the uppercased title."""
    upper = (title or "").upper()
    for garment_type in GARMENT_KEYWORDS:
        if garment_type.value in upper:
            return garment_type
    return GarmentType.OTHER


def count_available_sizes(variants: Iterable[ProductVariant]) -> int:
    """Variants in stock that carry a size option."""
    return sum(
        1 for v in variants
        if v.inventory_quantity > 0 and v.size_option_value is not None
    )


def is_special_item(title: Optional[str]) -> bool:
    return SPECIAL_ITEM_MARKER in (title or "").upper()


def classify(
    product: Product,
    sales_index: dict[str, int],
    seasonal_ids: set[str],
    min_sizes: int = DEFAULT_MIN_SIZES
) -> ProductFacets:
    """
    Derive facets for one product.

    Args:
        product: Product as read from the catalog
        sales_index: product id -> units sold in the lookback window
        seasonal_ids: product ids excluded for the season
        min_sizes: in-stock sizes required to be eligible

    Returns:
        ProductFacets for the product (never raises)
    """
    special = is_special_item(product.title)
    sizes = count_available_sizes(product.variants)

    return ProductFacets(
        product_id=product.id,
        title=product.title,
        color=extract_color(product.tags),
        drop_group=extract_drop_group(product.tags),
        garment_type=extract_garment_type(product.title),
        available_size_count=sizes,
        is_sold_out=product.tracks_inventory and product.total_inventory == 0,
        is_special_item=special,
        is_seasonally_excluded=product.id in seasonal_ids,
        has_sufficient_sizes=special or sizes >= min_sizes,
        sales_count=max(0, sales_index.get(product.id, 0)),
    )


def classify_all(
    products: Iterable[Product],
    sales_index: dict[str, int],
    seasonal_ids: set[str],
    min_sizes: int = DEFAULT_MIN_SIZES
) -> list[ProductFacets]:
    """Classify products, keeping catalog order."""
    return [
        classify(p, sales_index, seasonal_ids, min_sizes=min_sizes)
        for p in products
    ]
