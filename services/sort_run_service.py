"""
Sort run service: one run across all configured collections.

For each collection, strictly in order:
fetch → classify → sequence (commits to GlobalMerchState) → write.

A failing collection is recorded and skipped; placements committed by
earlier collections are kept. Missing configuration aborts the run before
anything is fetched.
"""

from datetime import datetime, timezone
from typing import Optional
import structlog

from config import settings
from exceptions import (
    AppError,
    ConfigurationError,
    CollectionModeError,
)
from integrations.shopify import ShopifyClient, get_shopify_client
from models.merchandising import SequencerConfig
from models.sort_run import (
    CollectionSortFailure,
    CollectionSortSuccess,
    SortRunSummary,
)
from services.catalog_classifier import classify_all
from services.collection_sequencer import CollectionSequencer, get_collection_sequencer
from services.merch_state import GlobalMerchState

logger = structlog.get_logger(__name__)


class SortRunService:
    """
    Sort run business logic.

    The Shopify client is created lazily so that configuration errors
    surface as ConfigurationError when a run starts, not at import time.
    """

    def __init__(
        self,
        client: Optional[ShopifyClient] = None,
        sequencer: Optional[CollectionSequencer] = None
    ):
        self._client = client
        self.sequencer = sequencer or get_collection_sequencer()

    @property
    def client(self) -> ShopifyClient:
        if self._client is None:
            self._client = get_shopify_client()
        return self._client

    def validate_configuration(self) -> list[str]:
        """
        Check everything a run needs.

        Returns:
            Collection ids to process, in order

        Raises:
            ConfigurationError: If store, token or collection list is missing
        """
        missing = []
        if self._client is None:
            if not settings.shopify_store:
                missing.append("SHOPIFY_STORE")
            if not settings.shopify_access_token:
                missing.append("SHOPIFY_ACCESS_TOKEN")
        collection_ids = settings.collection_id_list
        if not collection_ids:
            missing.append("COLLECTION_IDS")
        if missing:
            logger.error("sort_run_misconfigured", missing=missing)
            raise ConfigurationError(missing)
        return collection_ids

    def config_for(self, collection_id: str) -> SequencerConfig:
        """Per-collection sequencer settings."""
        special_at = None
        if collection_id in settings.special_item_collection_id_list:
            special_at = settings.special_item_position

        return SequencerConfig(
            visible_window_size=settings.visible_products,
            color_gap_window=settings.color_gap,
            alternate_types=collection_id not in settings.no_alternate_collection_id_list,
            insert_special_at=special_at,
        )

    def load_seasonal_ids(self) -> set[str]:
        if not settings.seasonal_collection_id:
            return set()
        return self.client.fetch_collection_product_ids(settings.seasonal_collection_id)

    def sort_collection(
        self,
        collection_id: str,
        sales_index: dict[str, int],
        seasonal_ids: set[str],
        state: GlobalMerchState,
        dry_run: bool = False
    ) -> CollectionSortSuccess:
        """
        Rank and write one collection.

        Raises:
            CollectionModeError: Collection isn't manually sorted
            DataFetchError: Read failed
            MutationError: Write rejected
        """
        snapshot = self.client.fetch_collection(collection_id)
        if not snapshot.is_manual:
            raise CollectionModeError(collection_id, snapshot.title, snapshot.sort_order)

        facets = classify_all(
            snapshot.products,
            sales_index,
            seasonal_ids,
            min_sizes=settings.min_sizes
        )
        log = logger.bind(collection_id=collection_id, title=snapshot.title)
        log.info("collection_classified", products=len(facets))

        placement = self.sequencer.sequence(
            facets,
            self.config_for(collection_id),
            state,
            collection_id=collection_id,
            title=snapshot.title
        )

        if not dry_run:
            self.client.reorder_collection(
                collection_id,
                placement.product_ids,
                chunk_size=settings.reorder_chunk_size
            )

        return CollectionSortSuccess(
            collection_id=collection_id,
            title=snapshot.title,
            product_count=len(snapshot.products),
            visible_count=placement.visible_count,
            product_ids=placement.product_ids if dry_run else None,
        )

    def run(self, dry_run: bool = False) -> SortRunSummary:
        """
        Sort every configured collection.

        Args:
            dry_run: Compute orderings without writing them

        Returns:
            SortRunSummary with per-collection results and failures

        Raises:
            ConfigurationError: Before any processing
            DataFetchError: If sales or the seasonal set can't be read
        """
        collection_ids = self.validate_configuration()
        started_at = datetime.now(timezone.utc)

        logger.info(
            "sort_run_started",
            collections=len(collection_ids),
            lookback_days=settings.sales_lookback_days,
            min_sizes=settings.min_sizes,
            visible_products=settings.visible_products,
            color_gap=settings.color_gap,
            dry_run=dry_run
        )

        sales_index = self.client.fetch_sales(settings.sales_lookback_days)
        seasonal_ids = self.load_seasonal_ids()
        state = GlobalMerchState()

        summary = SortRunSummary(dry_run=dry_run, started_at=started_at)

        for collection_id in collection_ids:
            try:
                result = self.sort_collection(
                    collection_id,
                    sales_index,
                    seasonal_ids,
                    state,
                    dry_run=dry_run
                )
                summary.results.append(result)
            except AppError as e:
                logger.error(
                    "collection_sort_failed",
                    collection_id=collection_id,
                    code=e.code,
                    error=e.message,
                    details=e.details
                )
                summary.failures.append(CollectionSortFailure(
                    collection_id=collection_id,
                    error_code=e.code,
                    error_message=e.message,
                ))

        summary.unique_products = state.product_count
        summary.unique_groups = state.group_count
        summary.success = not summary.failures
        summary.finished_at = datetime.now(timezone.utc)

        logger.info(
            "sort_run_complete",
            sorted=len(summary.results),
            failed=len(summary.failures),
            unique_products=summary.unique_products,
            unique_groups=summary.unique_groups
        )
        return summary


# Singleton instance
_sort_run_service: Optional[SortRunService] = None


def get_sort_run_service() -> SortRunService:
    """Get or create SortRunService instance."""
    global _sort_run_service
    if _sort_run_service is None:
        _sort_run_service = SortRunService()
    return _sort_run_service
