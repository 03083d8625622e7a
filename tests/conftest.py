"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest
from unittest.mock import MagicMock, patch

from services.merch_state import GlobalMerchState


# ===================
# FIXTURES
# ===================

@pytest.fixture
def merch_state() -> GlobalMerchState:
    """Fresh run state."""
    return GlobalMerchState()


@pytest.fixture
def mock_shopify() -> MagicMock:
    """
    Mock ShopifyClient.

    Usage:
        def test_something(mock_shopify):
            mock_shopify.fetch_sales.return_value = {"gid://shopify/Product/1": 3}
    """
    client = MagicMock()
    client.fetch_sales.return_value = {}
    client.fetch_collection_product_ids.return_value = set()
    client.reorder_collection.return_value = 0
    return client


@pytest.fixture
def run_settings():
    """
    Patch settings used by the sort run.

    Yields the mock so tests can override individual values.
    """
    with patch("services.sort_run_service.settings") as mock:
        mock.shopify_store = "test-shop.myshopify.com"
        mock.shopify_access_token = "shpat_test"
        mock.collection_id_list = [
            "gid://shopify/Collection/1",
            "gid://shopify/Collection/2",
        ]
        mock.no_alternate_collection_id_list = []
        mock.special_item_collection_id_list = []
        mock.seasonal_collection_id = "gid://shopify/Collection/999"
        mock.special_item_position = 2
        mock.sales_lookback_days = 1
        mock.min_sizes = 4
        mock.visible_products = 24
        mock.color_gap = 3
        mock.reorder_chunk_size = 250
        yield mock


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/health")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
