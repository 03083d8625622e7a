"""
Placement rules for the visible window.

Each rule is a pure predicate over a candidate and the current slot
context. Rules are grouped into tiers ordered from strict to relaxed; the
sequencer takes the best-selling candidate of the first tier that matches
anything. Uniqueness (product id, drop-group) is enforced before the tiers
run and is never relaxed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Optional, Sequence

from models.merchandising import ProductFacets
from services.merch_state import GlobalMerchState

# Main-type placements per cycle before one "other" slot
MAIN_RUN_LENGTH = 2


class SlotTarget(str, Enum):
    """Garment family wanted for the next slot."""
    MAIN = "MAIN"
    OTHER = "OTHER"


@dataclass(frozen=True)
class TypePattern:
    """
    "main, main, other" cycle.

    States are needMain(remaining) and needOther; every placement advances
    the pattern, whether or not the placed product matched the target.
    """
    main_remaining: int = MAIN_RUN_LENGTH

    @property
    def target(self) -> SlotTarget:
        return SlotTarget.MAIN if self.main_remaining > 0 else SlotTarget.OTHER

    def advance(self) -> "TypePattern":
        if self.main_remaining > 1:
            return TypePattern(self.main_remaining - 1)
        if self.main_remaining == 1:
            return TypePattern(0)
        return TypePattern(MAIN_RUN_LENGTH)


@dataclass
class SlotContext:
    """What the rules need to know about the window so far."""
    recent_colors: list[str] = field(default_factory=list)
    target: Optional[SlotTarget] = None


Rule = Callable[[ProductFacets, SlotContext], bool]


# ===================
# UNIQUENESS
# ===================

def is_placeable(
    candidate: ProductFacets,
    window_ids: set[str],
    window_groups: set[str],
    global_state: GlobalMerchState
) -> bool:
    """Hard constraints: product and drop-group not yet used anywhere this run."""
    if candidate.product_id in window_ids:
        return False
    if global_state.is_product_placed(candidate.product_id):
        return False
    if candidate.drop_group:
        if candidate.drop_group in window_groups:
            return False
        if global_state.is_group_placed(candidate.drop_group):
            return False
    return True


def recent_colors(window: Sequence[ProductFacets], gap: int) -> list[str]:
    """Colors of the last `gap` colored entries, newest first. Colorless entries are skipped."""
    colors: list[str] = []
    for entry in reversed(window):
        if len(colors) >= gap:
            break
        if entry.color:
            colors.append(entry.color)
    return colors


# ===================
# RULES
# ===================

def color_ok(candidate: ProductFacets, context: SlotContext) -> bool:
    """Colorless products never clash."""
    if not candidate.color:
        return True
    return candidate.color not in context.recent_colors


def type_ok(candidate: ProductFacets, context: SlotContext) -> bool:
    if context.target is None:
        return True
    if context.target is SlotTarget.MAIN:
        return candidate.is_main_type
    return not candidate.is_main_type


def any_ok(candidate: ProductFacets, context: SlotContext) -> bool:
    return True


def type_and_color_ok(candidate: ProductFacets, context: SlotContext) -> bool:
    return type_ok(candidate, context) and color_ok(candidate, context)


# (name, rule) from strict to relaxed
ALTERNATING_TIERS: list[tuple[str, Rule]] = [
    ("type+color", type_and_color_ok),
    ("type", type_ok),
    ("color", color_ok),
    ("any", any_ok),
]

PLAIN_TIERS: list[tuple[str, Rule]] = [
    ("color", color_ok),
    ("any", any_ok),
]


def tiers_for(alternate_types: bool) -> list[tuple[str, Rule]]:
    return ALTERNATING_TIERS if alternate_types else PLAIN_TIERS


def select_candidate(
    pool: Iterable[ProductFacets],
    context: SlotContext,
    tiers: Sequence[tuple[str, Rule]]
) -> Optional[tuple[ProductFacets, str]]:
    """
    Pick the first candidate (pool order) of the first tier with a match.

    Returns:
        (candidate, tier name), or None if the pool is empty
    """
    candidates = list(pool)
    for name, rule in tiers:
        for candidate in candidates:
            if rule(candidate, context):
                return candidate, name
    return None
