"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
Collection lists are comma-separated strings (e.g. COLLECTION_IDS=gid://...,gid://...).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


def split_csv(value: Optional[str]) -> list[str]:
    """Split a comma-separated env value into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Shopify credentials and the collection list are optional here so the
    API can boot without them; the sort run validates them before starting.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SHOPIFY
    # ===================
    shopify_store: Optional[str] = Field(
        None,
        description="Shop domain, e.g. my-shop.myshopify.com"
    )
    shopify_access_token: Optional[str] = Field(
        None,
        description="Admin API access token"
    )
    shopify_api_version: str = Field(
        default="2024-10",
        description="Admin GraphQL API version"
    )
    shopify_timeout_seconds: float = Field(
        default=30,
        gt=0,
        le=300,
        description="Per-request timeout for Admin API calls"
    )
    shopify_max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries on connection errors and 429 throttling"
    )

    # ===================
    # API SECURITY
    # ===================
    cron_secret: Optional[str] = Field(
        None,
        description="Shared secret expected as 'Authorization: Bearer <secret>'"
    )

    # ===================
    # COLLECTIONS
    # ===================
    collection_ids: Optional[str] = Field(
        None,
        description="Comma-separated collection GIDs, processed in this order"
    )
    no_alternate_collection_ids: Optional[str] = Field(
        default="gid://shopify/Collection/687225241945",
        description="Collections where garment-type alternation is disabled"
    )
    special_item_collection_ids: Optional[str] = Field(
        default="gid://shopify/Collection/687225209177",
        description="Collections that get the gift card spliced into the visible window"
    )
    seasonal_collection_id: Optional[str] = Field(
        default="gid://shopify/Collection/685894238553",
        description="Reference collection whose products are seasonally excluded"
    )

    # ===================
    # MERCHANDISING RULES
    # ===================
    sales_lookback_days: int = Field(
        default=1,
        ge=1,
        le=365,
        description="Days of paid web orders used for the sales index"
    )
    min_sizes: int = Field(
        default=4,
        ge=0,
        le=50,
        description="Minimum in-stock sizes for a product to be eligible"
    )
    visible_products: int = Field(
        default=24,
        ge=0,
        le=250,
        description="Length of the visible window per collection"
    )
    color_gap: int = Field(
        default=3,
        ge=0,
        le=24,
        description="Recent colored window slots a candidate's color should not repeat"
    )
    special_item_position: int = Field(
        default=2,
        ge=0,
        le=250,
        description="Zero-based window offset for the gift card"
    )
    reorder_chunk_size: int = Field(
        default=250,
        ge=1,
        le=250,
        description="Moves per collectionReorderProducts call (Shopify max 250)"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def shopify_configured(self) -> bool:
        """Check if Shopify credentials are present."""
        return bool(self.shopify_store and self.shopify_access_token)

    @property
    def collection_id_list(self) -> list[str]:
        return split_csv(self.collection_ids)

    @property
    def no_alternate_collection_id_list(self) -> list[str]:
        return split_csv(self.no_alternate_collection_ids)

    @property
    def special_item_collection_id_list(self) -> list[str]:
        return split_csv(self.special_item_collection_ids)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are present but invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
