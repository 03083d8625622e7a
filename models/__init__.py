"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.catalog import (
    SelectedOption,
    ProductVariant,
    Product,
    CollectionSnapshot,
    MANUAL_SORT_ORDER,
)
from models.merchandising import (
    COLOR_PALETTE,
    DROP_GROUP_PREFIX,
    SPECIAL_ITEM_MARKER,
    GarmentType,
    MAIN_TYPES,
    ProductFacets,
    EligibilityClasses,
    SequencerConfig,
    CollectionPlacementResult,
)
from models.sort_run import (
    CollectionSortSuccess,
    CollectionSortFailure,
    SortRunSummary,
)

__all__ = [
    # Base
    "BaseSchema",

    # Catalog
    "SelectedOption",
    "ProductVariant",
    "Product",
    "CollectionSnapshot",
    "MANUAL_SORT_ORDER",

    # Merchandising
    "COLOR_PALETTE",
    "DROP_GROUP_PREFIX",
    "SPECIAL_ITEM_MARKER",
    "GarmentType",
    "MAIN_TYPES",
    "ProductFacets",
    "EligibilityClasses",
    "SequencerConfig",
    "CollectionPlacementResult",

    # Sort run
    "CollectionSortSuccess",
    "CollectionSortFailure",
    "SortRunSummary",
]
