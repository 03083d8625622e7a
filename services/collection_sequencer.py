"""
Collection sequencer — Core ranking logic.

Turns one collection's classified products into its final ordering:

1. Partition into eligibility classes, each sorted by sales (desc, stable).
2. Greedily fill the visible window under uniqueness, color and
   garment-type rules, relaxing color/type when nothing matches.
3. Splice the special item (gift card) at a fixed offset if configured.
4. Commit the window to the run's GlobalMerchState.
5. Append the rest: unselected eligible, few sizes, seasonal, sold out.

State is passed in explicitly; collections must be sequenced one at a
time because each commit changes what the next collection may show.
"""

from typing import Iterable, Optional
import structlog

from models.merchandising import (
    CollectionPlacementResult,
    EligibilityClasses,
    ProductFacets,
    SequencerConfig,
)
from services.merch_state import GlobalMerchState
from services.placement_rules import (
    SlotContext,
    TypePattern,
    is_placeable,
    recent_colors,
    select_candidate,
    tiers_for,
)
from utils.text_utils import truncate

logger = structlog.get_logger(__name__)

# Window entries included in the log line
LOG_TOP_N = 12


def sort_by_sales(items: Iterable[ProductFacets]) -> list[ProductFacets]:
    """Descending sales; sorted() is stable so catalog order breaks ties."""
    return sorted(items, key=lambda f: -f.sales_count)


def partition(facets: Iterable[ProductFacets]) -> EligibilityClasses:
    """
    Split products into eligibility classes.

    The first special item is isolated; later ones go to extra_special_items.
    Precedence for the rest: sold out > seasonal > few sizes > eligible.
    """
    classes = EligibilityClasses()
    eligible, few_sizes, seasonal, sold_out = [], [], [], []

    for f in facets:
        if f.is_special_item:
            if classes.special_item is None:
                classes.special_item = f
            else:
                classes.extra_special_items.append(f)
        elif f.is_sold_out:
            sold_out.append(f)
        elif f.is_seasonally_excluded:
            seasonal.append(f)
        elif not f.has_sufficient_sizes:
            few_sizes.append(f)
        else:
            eligible.append(f)

    classes.eligible = sort_by_sales(eligible)
    classes.insufficient_sizes = sort_by_sales(few_sizes)
    classes.seasonally_excluded = sort_by_sales(seasonal)
    classes.sold_out = sort_by_sales(sold_out)
    return classes


class CollectionSequencer:
    """
    Visible-window builder and tail assembler.

    Stateless between calls; everything that carries over between
    collections lives in the GlobalMerchState handed to sequence().
    """

    def build_window(
        self,
        eligible: list[ProductFacets],
        config: SequencerConfig,
        global_state: GlobalMerchState,
        size: Optional[int] = None
    ) -> list[ProductFacets]:
        """
        Fill the window one slot at a time.

        Stops at `size` (default config.visible_window_size) or when no
        candidate passes the uniqueness constraints. No backtracking.
        """
        size = config.visible_window_size if size is None else size
        tiers = tiers_for(config.alternate_types)
        window: list[ProductFacets] = []
        window_ids: set[str] = set()
        window_groups: set[str] = set()
        pattern = TypePattern()
        relaxed = 0

        while len(window) < size:
            pool = [
                p for p in eligible
                if is_placeable(p, window_ids, window_groups, global_state)
            ]
            context = SlotContext(
                recent_colors=recent_colors(window, config.color_gap_window),
                target=pattern.target if config.alternate_types else None,
            )
            picked = select_candidate(pool, context, tiers)
            if picked is None:
                break

            candidate, tier = picked
            if tier != tiers[0][0]:
                relaxed += 1

            window.append(candidate)
            window_ids.add(candidate.product_id)
            if candidate.drop_group:
                window_groups.add(candidate.drop_group)
            pattern = pattern.advance()

        if relaxed:
            logger.debug("window_slots_relaxed", relaxed=relaxed, window=len(window))

        return window

    def sequence(
        self,
        facets: list[ProductFacets],
        config: SequencerConfig,
        global_state: GlobalMerchState,
        collection_id: Optional[str] = None,
        title: Optional[str] = None
    ) -> CollectionPlacementResult:
        """
        Produce the final ordering for one collection and commit its window.

        When the special item is spliced into a full window, the last
        window member moves to the head of the tail.

        Args:
            facets: Classified products, in catalog order
            config: Window size, color gap, alternation, special item offset
            global_state: Placements from earlier collections in this run
            collection_id: Bound to log events, if given
            title: Bound to log events, if given

        Returns:
            CollectionPlacementResult whose product_ids is a permutation
            of the input product ids
        """
        log = logger.bind(collection_id=collection_id, title=title) if collection_id else logger
        classes = partition(facets)
        special = classes.special_item

        log.info("collection_partitioned", **classes.counts())

        window = self.build_window(classes.eligible, config, global_state)

        # Offset must fall inside the window and be reached by it
        splice = (
            special is not None
            and config.insert_special_at is not None
            and config.insert_special_at < config.visible_window_size
            and len(window) >= config.insert_special_at
            and not global_state.is_product_placed(special.product_id)
        )

        bumped: list[ProductFacets] = []
        if splice:
            if len(window) >= config.visible_window_size:
                bumped.append(window.pop())
            window.insert(config.insert_special_at, special)

        global_state.commit(
            (p.product_id for p in window),
            (p.drop_group for p in window)
        )

        taken = {p.product_id for p in window + bumped}
        tail = bumped + [p for p in classes.eligible if p.product_id not in taken]
        tail += classes.insufficient_sizes
        tail += classes.seasonally_excluded
        tail += classes.sold_out
        if special is not None and not splice:
            tail.append(special)
        tail += classes.extra_special_items

        ordered = window + tail

        log.info(
            "visible_window_built",
            visible=len(window),
            special_inserted=splice,
            top=[
                f"{i + 1}. {truncate(p.title)} | {p.color or 'N/A'} | {p.drop_group or 'no group'}"
                for i, p in enumerate(window[:LOG_TOP_N])
            ]
        )

        counts = classes.counts()
        return CollectionPlacementResult(
            product_ids=[p.product_id for p in ordered],
            window_ids=[p.product_id for p in window],
            special_item_id=special.product_id if special else None,
            special_item_inserted=splice,
            eligible_count=counts["eligible"],
            insufficient_sizes_count=counts["insufficient_sizes"],
            seasonally_excluded_count=counts["seasonally_excluded"],
            sold_out_count=counts["sold_out"],
        )


def get_collection_sequencer() -> CollectionSequencer:
    """Sequencer holds no state, so a fresh one is as good as a shared one."""
    return CollectionSequencer()
