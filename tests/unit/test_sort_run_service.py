"""
Unit tests for SortRunService.

Tests cover configuration checks, per-collection error isolation and
state carried between collections.

Run: pytest tests/unit/test_sort_run_service.py -v
"""

import pytest
from unittest.mock import MagicMock, patch

from exceptions import (
    CollectionNotFoundError,
    ConfigurationError,
    DataFetchError,
    MutationError,
)
from integrations.shopify import ShopifyClient
from models.catalog import CollectionSnapshot
from services.sort_run_service import SortRunService, get_sort_run_service
from tests.factories import ProductFactory, ProductNodeFactory


C1 = "gid://shopify/Collection/1"
C2 = "gid://shopify/Collection/2"


def snapshot(collection_id, products, sort_order="MANUAL", title=None):
    return CollectionSnapshot(
        id=collection_id,
        title=title or f"Collection {collection_id[-1]}",
        sort_order=sort_order,
        products=products,
    )


@pytest.fixture
def service(mock_shopify, run_settings):
    """SortRunService with mocked Shopify client and settings."""
    return SortRunService(client=mock_shopify)


# ===================
# CONFIGURATION
# ===================

class TestConfiguration:
    """Run-level configuration checks."""

    def test_missing_collection_ids_aborts_before_fetch(self, service, mock_shopify, run_settings):
        run_settings.collection_id_list = []

        with pytest.raises(ConfigurationError) as exc_info:
            service.run()

        assert "COLLECTION_IDS" in exc_info.value.details["missing"]
        mock_shopify.fetch_sales.assert_not_called()

    def test_missing_credentials_without_client(self, run_settings):
        run_settings.shopify_store = None
        run_settings.shopify_access_token = ""

        with pytest.raises(ConfigurationError) as exc_info:
            SortRunService().run()

        assert exc_info.value.details["missing"] == ["SHOPIFY_STORE", "SHOPIFY_ACCESS_TOKEN"]

    def test_config_for_regular_collection(self, service):
        config = service.config_for(C1)

        assert config.visible_window_size == 24
        assert config.color_gap_window == 3
        assert config.alternate_types is True
        assert config.insert_special_at is None

    def test_config_for_special_collections(self, service, run_settings):
        run_settings.no_alternate_collection_id_list = [C1]
        run_settings.special_item_collection_id_list = [C1]

        config = service.config_for(C1)

        assert config.alternate_types is False
        assert config.insert_special_at == 2

    def test_get_sort_run_service_singleton(self):
        assert get_sort_run_service() is get_sort_run_service()


# ===================
# RUN
# ===================

class TestRun:
    """Full run across collections."""

    def test_sorts_and_writes_each_collection(self, service, mock_shopify):
        low = ProductFactory.create(id="low")
        high = ProductFactory.create(id="high")
        mock_shopify.fetch_sales.return_value = {"high": 5}
        mock_shopify.fetch_collection.side_effect = [
            snapshot(C1, [low, high]),
            snapshot(C2, [ProductFactory.create(id="other")]),
        ]

        summary = service.run()

        assert summary.success is True
        assert [r.collection_id for r in summary.results] == [C1, C2]
        assert summary.results[0].product_count == 2
        assert summary.unique_products == 3
        mock_shopify.reorder_collection.assert_any_call(C1, ["high", "low"], chunk_size=250)
        assert mock_shopify.reorder_collection.call_count == 2

    def test_seasonal_products_pushed_back(self, service, mock_shopify):
        mock_shopify.fetch_sales.return_value = {"summer": 100, "winter": 1}
        mock_shopify.fetch_collection_product_ids.return_value = {"summer"}
        mock_shopify.fetch_collection.side_effect = [
            snapshot(C1, [ProductFactory.create(id="summer"), ProductFactory.create(id="winter")]),
            snapshot(C2, []),
        ]

        service.run()

        mock_shopify.fetch_collection_product_ids.assert_called_once_with("gid://shopify/Collection/999")
        mock_shopify.reorder_collection.assert_any_call(C1, ["winter", "summer"], chunk_size=250)

    def test_shared_product_only_in_first_window(self, service, mock_shopify):
        mock_shopify.fetch_sales.return_value = {"shared": 50}
        mock_shopify.fetch_collection.side_effect = [
            snapshot(C1, [ProductFactory.create(id="a"), ProductFactory.create(id="shared")]),
            snapshot(C2, [ProductFactory.create(id="shared"), ProductFactory.create(id="b")]),
        ]

        service.run()

        calls = mock_shopify.reorder_collection.call_args_list
        assert calls[0].args[1] == ["shared", "a"]
        assert calls[1].args[1] == ["b", "shared"]

    def test_non_manual_collection_is_skipped(self, service, mock_shopify):
        mock_shopify.fetch_collection.side_effect = [
            snapshot(C1, [ProductFactory.create(id="a")], sort_order="BEST_SELLING"),
            snapshot(C2, [ProductFactory.create(id="b")]),
        ]

        summary = service.run()

        assert summary.success is False
        assert summary.failures[0].collection_id == C1
        assert summary.failures[0].error_code == "COLLECTION_NOT_MANUAL"
        assert [r.collection_id for r in summary.results] == [C2]
        mock_shopify.reorder_collection.assert_called_once()

    def test_write_failure_keeps_earlier_commits(self, service, mock_shopify):
        mock_shopify.fetch_collection.side_effect = [
            snapshot(C1, [ProductFactory.create(id="a")]),
            snapshot(C2, [ProductFactory.create(id="a"), ProductFactory.create(id="b")]),
        ]
        mock_shopify.reorder_collection.side_effect = [
            MutationError(C1, "Invalid position", chunk_offset=0, applied_moves=0),
            2,
        ]

        summary = service.run()

        assert summary.failures[0].error_code == "SHOPIFY_MUTATION_ERROR"
        # C1's window was committed before its write failed
        assert mock_shopify.reorder_collection.call_args_list[1].args[1] == ["b", "a"]
        assert summary.unique_products == 2

    def test_missing_collection_recorded(self, service, mock_shopify):
        mock_shopify.fetch_collection.side_effect = [
            CollectionNotFoundError(C1),
            snapshot(C2, []),
        ]

        summary = service.run()

        assert summary.failures[0].error_code == "COLLECTION_NOT_FOUND"
        assert len(summary.results) == 1

    def test_sales_fetch_failure_is_fatal(self, service, mock_shopify):
        mock_shopify.fetch_sales.side_effect = DataFetchError("Throttled")

        with pytest.raises(DataFetchError):
            service.run()

        mock_shopify.fetch_collection.assert_not_called()

    def test_dry_run_does_not_write(self, service, mock_shopify):
        mock_shopify.fetch_collection.side_effect = [
            snapshot(C1, [ProductFactory.create(id="a")]),
            snapshot(C2, [ProductFactory.create(id="b")]),
        ]

        summary = service.run(dry_run=True)

        mock_shopify.reorder_collection.assert_not_called()
        assert summary.dry_run is True
        assert summary.results[0].product_ids == ["a"]

    def test_no_seasonal_collection_configured(self, service, mock_shopify, run_settings):
        run_settings.seasonal_collection_id = None
        mock_shopify.fetch_collection.side_effect = [snapshot(C1, []), snapshot(C2, [])]

        service.run()

        mock_shopify.fetch_collection_product_ids.assert_not_called()

    def test_sequencer_logs_bound_to_collection(self, service, mock_shopify):
        mock_shopify.fetch_collection.side_effect = [
            snapshot(C1, [ProductFactory.create(id="a")], title="Hoodies"),
            snapshot(C2, [], title="Jeans"),
        ]

        with patch("services.collection_sequencer.logger") as mock_logger:
            service.run()

        bound = [c.kwargs for c in mock_logger.bind.call_args_list]
        assert bound == [
            {"collection_id": C1, "title": "Hoodies"},
            {"collection_id": C2, "title": "Jeans"},
        ]


# ===================
# MALFORMED SHOPIFY DATA
# ===================

def graphql_response(data: dict) -> MagicMock:
    resp = MagicMock()
    resp.status_code = 200
    resp.json.return_value = {"data": data}
    return resp


class TestMalformedPages:
    """A bad page from Shopify fails one collection, not the run."""

    def test_run_continues_past_malformed_collection_page(self, run_settings):
        session = MagicMock()
        client = ShopifyClient(store="test-shop.myshopify.com", access_token="shpat_test", session=session)
        no_more = {"hasNextPage": False, "endCursor": None}
        session.post.side_effect = [
            # sales, seasonal set
            graphql_response({"orders": {"pageInfo": no_more, "nodes": []}}),
            graphql_response({"collection": None}),
            # C1: first page fine, second page lacks products
            graphql_response({"collection": {
                "title": "C1", "sortOrder": "MANUAL",
                "products": {
                    "pageInfo": {"hasNextPage": True, "endCursor": "c1"},
                    "nodes": [ProductNodeFactory.create(id="a")]
                }
            }}),
            graphql_response({"collection": {"title": "C1", "sortOrder": "MANUAL"}}),
            # C2: read and write
            graphql_response({"collection": {
                "title": "C2", "sortOrder": "MANUAL",
                "products": {"pageInfo": no_more, "nodes": [ProductNodeFactory.create(id="b")]}
            }}),
            graphql_response({"collectionReorderProducts": {"job": None, "userErrors": []}}),
        ]

        summary = SortRunService(client=client).run()

        assert summary.success is False
        assert [f.collection_id for f in summary.failures] == [C1]
        assert summary.failures[0].error_code == "SHOPIFY_FETCH_ERROR"
        assert [r.collection_id for r in summary.results] == [C2]
        assert summary.unique_products == 1
        assert session.post.call_count == 6
