"""
Merchandising schemas: derived product facets, sequencer config and results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import Field

from models.base import BaseSchema


# ===================
# VOCABULARY
# ===================

COLOR_PALETTE = (
    "BLACK", "BLUE", "YELLOW", "RED", "GREEN", "WHITE", "GREY", "GRAY",
    "PINK", "ORANGE", "PURPLE", "BROWN", "BEIGE", "NAVY", "CREAM", "KHAKI",
    "OLIVE", "BURGUNDY", "MAROON", "TEAL", "CORAL", "GOLD", "SILVER",
)

DROP_GROUP_PREFIX = "Group_"

SPECIAL_ITEM_MARKER = "GIFT CARD"


class GarmentType(str, Enum):
    """Garment types, in title-matching priority order."""
    HOODIE = "HOODIE"
    CREWNECK = "CREWNECK"
    JEANS = "JEANS"
    PANTS = "PANTS"
    JERSEY = "JERSEY"
    LONGSLEEVE = "LONGSLEEVE"
    SNEAKERS = "SNEAKERS"
    OTHER = "OTHER"


MAIN_TYPES = frozenset({GarmentType.HOODIE, GarmentType.CREWNECK})


# ===================
# FACETS
# ===================

class ProductFacets(BaseSchema):
    """
    Facets derived from one product for one run.

    Never persisted; rebuilt from the catalog on every run.
    """

    product_id: str
    title: str = ""
    color: Optional[str] = Field(None, description="Palette color, uppercase")
    drop_group: Optional[str] = Field(None, description="Group_* tag, verbatim")
    garment_type: GarmentType = GarmentType.OTHER
    available_size_count: int = Field(default=0, ge=0)
    is_sold_out: bool = False
    is_special_item: bool = False
    is_seasonally_excluded: bool = False
    has_sufficient_sizes: bool = False
    sales_count: int = Field(default=0, ge=0)

    @property
    def is_main_type(self) -> bool:
        return self.garment_type in MAIN_TYPES


@dataclass
class EligibilityClasses:
    """Partition of one collection's products, each class sorted by sales."""
    eligible: list[ProductFacets] = field(default_factory=list)
    insufficient_sizes: list[ProductFacets] = field(default_factory=list)
    seasonally_excluded: list[ProductFacets] = field(default_factory=list)
    sold_out: list[ProductFacets] = field(default_factory=list)
    special_item: Optional[ProductFacets] = None
    extra_special_items: list[ProductFacets] = field(default_factory=list)

    def counts(self) -> dict:
        return {
            "eligible": len(self.eligible),
            "insufficient_sizes": len(self.insufficient_sizes),
            "seasonally_excluded": len(self.seasonally_excluded),
            "sold_out": len(self.sold_out),
        }


# ===================
# SEQUENCER
# ===================

class SequencerConfig(BaseSchema):
    """Per-collection knobs for building the visible window."""

    visible_window_size: int = Field(default=24, ge=0)
    color_gap_window: int = Field(default=3, ge=0)
    alternate_types: bool = True
    insert_special_at: Optional[int] = Field(
        None,
        ge=0,
        description="Zero-based window offset for the special item; None disables"
    )


class CollectionPlacementResult(BaseSchema):
    """
    Final ordering for one collection.

    product_ids is authoritative: a permutation of the collection's input.
    """

    product_ids: list[str]
    window_ids: list[str] = Field(default_factory=list, description="Visible window, special item included")
    special_item_id: Optional[str] = None
    special_item_inserted: bool = False
    eligible_count: int = 0
    insufficient_sizes_count: int = 0
    seasonally_excluded_count: int = 0
    sold_out_count: int = 0

    @property
    def visible_count(self) -> int:
        return len(self.window_ids)
