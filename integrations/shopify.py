"""
Shopify Admin GraphQL integration.

Reads sales, collections and products; writes collection positions via
collectionReorderProducts. All reads paginate 250 nodes per page.
"""

from datetime import date, timedelta
from typing import Any, Optional
from pydantic import ValidationError as SchemaValidationError
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
import structlog

from config import settings
from exceptions import (
    ConfigurationError,
    DataFetchError,
    CollectionNotFoundError,
    MutationError,
)
from models.catalog import (
    CollectionSnapshot,
    Product,
    ProductVariant,
    SelectedOption,
)

logger = structlog.get_logger(__name__)

PAGE_SIZE = 250
MAX_REORDER_CHUNK = 250

# Raised when reading a page whose data lacks the expected shape
MALFORMED_PAGE_ERRORS = (KeyError, TypeError, AttributeError, SchemaValidationError)


# ===================
# QUERIES
# ===================

ORDERS_QUERY = """
query GetOrders($cursor: String, $query: String!) {
  orders(first: 250, after: $cursor, query: $query) {
    pageInfo { hasNextPage endCursor }
    nodes {
      id
      lineItems(first: 100) { nodes { product { id } quantity } }
    }
  }
}
"""

COLLECTION_PRODUCT_IDS_QUERY = """
query GetCollectionProductIds($id: ID!, $cursor: String) {
  collection(id: $id) {
    products(first: 250, after: $cursor) {
      pageInfo { hasNextPage endCursor }
      nodes { id }
    }
  }
}
"""

COLLECTION_PRODUCTS_QUERY = """
query GetCollectionProducts($id: ID!, $cursor: String) {
  collection(id: $id) {
    title
    sortOrder
    products(first: 250, after: $cursor) {
      pageInfo { hasNextPage endCursor }
      nodes {
        id
        title
        tags
        totalInventory
        tracksInventory
        variants(first: 100) {
          nodes { inventoryQuantity selectedOptions { name value } }
        }
      }
    }
  }
}
"""

REORDER_MUTATION = """
mutation ReorderProducts($id: ID!, $moves: [MoveInput!]!) {
  collectionReorderProducts(id: $id, moves: $moves) {
    job { id }
    userErrors { field message }
  }
}
"""


def build_orders_search(lookback_days: int, today: Optional[date] = None) -> str:
    """Paid web orders created since `lookback_days` ago."""
    start = (today or date.today()) - timedelta(days=lookback_days)
    return f"created_at:>={start.isoformat()} source_name:web financial_status:paid"


def parse_product(node: dict) -> Product:
    """Convert a GraphQL product node into a Product."""
    variants = [
        ProductVariant(
            inventory_quantity=v.get("inventoryQuantity") or 0,
            selected_options=[
                SelectedOption(name=o.get("name") or "", value=o.get("value"))
                for o in (v.get("selectedOptions") or [])
            ],
        )
        for v in ((node.get("variants") or {}).get("nodes") or [])
    ]
    return Product(
        id=node["id"],
        title=node.get("title") or "",
        tags=node.get("tags") or [],
        total_inventory=node.get("totalInventory") or 0,
        tracks_inventory=bool(node.get("tracksInventory")),
        variants=variants,
    )


def malformed_page(what: str, error: Exception, **context) -> DataFetchError:
    """DataFetchError for a response whose data lacks the expected shape."""
    logger.error("shopify_malformed_page", page=what, error=repr(error), **context)
    return DataFetchError(
        f"Malformed {what} page from Shopify: {error!r}",
        details={"page": what, **context}
    )


def build_moves(ordered_ids: list[str]) -> list[dict]:
    """Positions are global indices into the full ordering, as strings."""
    return [
        {"id": product_id, "newPosition": str(index)}
        for index, product_id in enumerate(ordered_ids)
    ]


class ShopifyClient:
    """
    Thin Admin GraphQL client.

    Retries cover connection errors and 429 throttling only; a throttled
    call was never applied, so retrying it cannot double-write.
    """

    def __init__(
        self,
        store: str,
        access_token: str,
        api_version: str = "2024-10",
        timeout: float = 30,
        max_retries: int = 3,
        session: Optional[requests.Session] = None
    ):
        self.store = store
        self.api_version = api_version
        self.timeout = timeout
        self.url = f"https://{store}/admin/api/{api_version}/graphql.json"
        self.session = session or self._build_session(max_retries)
        self.session.headers.update({
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": access_token,
        })

    @staticmethod
    def _build_session(max_retries: int) -> requests.Session:
        session = requests.Session()
        retries = Retry(
            total=max_retries,
            connect=max_retries,
            read=0,
            backoff_factor=1,
            status_forcelist=[429],
            allowed_methods=["POST"],
            respect_retry_after_header=True,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retries)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def graphql(self, query: str, variables: Optional[dict] = None) -> dict[str, Any]:
        """
        Execute a GraphQL request.

        Returns:
            The `data` object of the response

        Raises:
            DataFetchError: Transport failure, HTTP error or GraphQL errors
        """
        try:
            response = self.session.post(
                self.url,
                json={"query": query, "variables": variables or {}},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            logger.error("shopify_request_failed", error=str(e))
            raise DataFetchError(f"Shopify request failed: {e}") from e
        except ValueError as e:
            raise DataFetchError(f"Shopify returned invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise DataFetchError("Shopify returned a non-object response")

        errors = payload.get("errors")
        if errors:
            message = errors[0].get("message", "Unknown error") if isinstance(errors, list) else str(errors)
            logger.error("shopify_graphql_error", error=message)
            raise DataFetchError(message, details={"errors": errors})

        data = payload.get("data") or {}
        if not isinstance(data, dict):
            raise DataFetchError("Shopify returned a non-object data field")
        return data

    # ===================
    # READS
    # ===================

    def fetch_sales(self, lookback_days: int, today: Optional[date] = None) -> dict[str, int]:
        """
        Units sold per product over the lookback window.

        Returns:
            product id -> quantity (products without sales are absent)
        """
        search = build_orders_search(lookback_days, today)
        sales: dict[str, int] = {}
        cursor = None
        total_orders = 0

        while True:
            data = self.graphql(ORDERS_QUERY, {"cursor": cursor, "query": search})
            try:
                orders = data["orders"]
                for order in orders["nodes"]:
                    total_orders += 1
                    for item in order["lineItems"]["nodes"]:
                        product = item.get("product")
                        if product and product.get("id"):
                            sales[product["id"]] = sales.get(product["id"], 0) + (item.get("quantity") or 0)
                has_next = orders["pageInfo"]["hasNextPage"]
                cursor = orders["pageInfo"]["endCursor"]
            except MALFORMED_PAGE_ERRORS as e:
                raise malformed_page("orders", e) from e

            if not has_next:
                break

        logger.info(
            "sales_fetched",
            lookback_days=lookback_days,
            search=search,
            orders=total_orders,
            products_sold=len(sales)
        )
        return sales

    def fetch_collection_product_ids(self, collection_id: str) -> set[str]:
        """All product ids of a collection; empty if the collection doesn't exist."""
        product_ids: set[str] = set()
        cursor = None

        while True:
            data = self.graphql(COLLECTION_PRODUCT_IDS_QUERY, {"id": collection_id, "cursor": cursor})
            collection = data.get("collection")
            if not collection:
                logger.warning("reference_collection_missing", collection_id=collection_id)
                break
            try:
                product_ids.update(p["id"] for p in collection["products"]["nodes"])
                page_info = collection["products"]["pageInfo"]
                has_next = page_info["hasNextPage"]
                cursor = page_info["endCursor"]
            except MALFORMED_PAGE_ERRORS as e:
                raise malformed_page("collection product ids", e, collection_id=collection_id) from e
            if not has_next:
                break

        logger.info("collection_ids_fetched", collection_id=collection_id, products=len(product_ids))
        return product_ids

    def fetch_collection(self, collection_id: str) -> CollectionSnapshot:
        """
        Collection title, sort order and every product (catalog order).

        Raises:
            CollectionNotFoundError: If the id doesn't resolve
            DataFetchError: On any read failure
        """
        products: list[Product] = []
        title = ""
        sort_order = ""
        cursor = None

        while True:
            data = self.graphql(COLLECTION_PRODUCTS_QUERY, {"id": collection_id, "cursor": cursor})
            collection = data.get("collection")
            if not collection:
                raise CollectionNotFoundError(collection_id)
            try:
                title = collection.get("title") or ""
                sort_order = collection.get("sortOrder") or ""
                products.extend(parse_product(n) for n in collection["products"]["nodes"])
                page_info = collection["products"]["pageInfo"]
                has_next = page_info["hasNextPage"]
                cursor = page_info["endCursor"]
            except MALFORMED_PAGE_ERRORS as e:
                raise malformed_page("collection", e, collection_id=collection_id) from e
            if not has_next:
                break

        logger.info(
            "collection_fetched",
            collection_id=collection_id,
            title=title,
            sort_order=sort_order,
            products=len(products)
        )
        return CollectionSnapshot(
            id=collection_id,
            title=title,
            sort_order=sort_order,
            products=products,
        )

    # ===================
    # WRITES
    # ===================

    def reorder_collection(
        self,
        collection_id: str,
        ordered_ids: list[str],
        chunk_size: int = MAX_REORDER_CHUNK
    ) -> int:
        """
        Apply the ordering in chunks, in list order.

        Chunks already accepted stay applied if a later chunk fails; the
        MutationError says how many moves went through. No retry here.

        Returns:
            Number of moves applied
        """
        chunk_size = max(1, min(chunk_size, MAX_REORDER_CHUNK))
        moves = build_moves(ordered_ids)
        applied = 0

        for offset in range(0, len(moves), chunk_size):
            chunk = moves[offset:offset + chunk_size]
            try:
                data = self.graphql(REORDER_MUTATION, {"id": collection_id, "moves": chunk})
            except DataFetchError as e:
                raise MutationError(
                    collection_id=collection_id,
                    message=e.message,
                    chunk_offset=offset,
                    applied_moves=applied,
                ) from e

            result = data.get("collectionReorderProducts") or {}
            user_errors = result.get("userErrors") or []
            if user_errors:
                first = user_errors[0]
                logger.error(
                    "reorder_chunk_rejected",
                    collection_id=collection_id,
                    chunk_offset=offset,
                    applied_moves=applied,
                    error=first.get("message"),
                    field=first.get("field")
                )
                raise MutationError(
                    collection_id=collection_id,
                    message=first.get("message") or "Reorder rejected",
                    chunk_offset=offset,
                    applied_moves=applied,
                    field=first.get("field"),
                )

            applied += len(chunk)
            logger.debug(
                "reorder_chunk_applied",
                collection_id=collection_id,
                chunk_offset=offset,
                moves=len(chunk),
                job_id=(result.get("job") or {}).get("id")
            )

        logger.info("collection_reordered", collection_id=collection_id, moves=applied)
        return applied


def get_shopify_client() -> ShopifyClient:
    """
    Build a client from settings.

    Raises:
        ConfigurationError: If store or access token is missing
    """
    missing = []
    if not settings.shopify_store:
        missing.append("SHOPIFY_STORE")
    if not settings.shopify_access_token:
        missing.append("SHOPIFY_ACCESS_TOKEN")
    if missing:
        raise ConfigurationError(missing)

    return ShopifyClient(
        store=settings.shopify_store,
        access_token=settings.shopify_access_token,
        api_version=settings.shopify_api_version,
        timeout=settings.shopify_timeout_seconds,
        max_retries=settings.shopify_max_retries,
    )
