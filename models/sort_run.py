"""
Sort run summary schemas returned by the run entrypoint.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from models.base import BaseSchema


class CollectionSortSuccess(BaseSchema):
    """Collection that was ranked (and written, unless dry run)."""

    collection_id: str
    title: str
    product_count: int = Field(..., ge=0)
    visible_count: int = Field(default=0, ge=0)
    product_ids: Optional[list[str]] = Field(
        None,
        description="Final ordering, only included on dry runs"
    )


class CollectionSortFailure(BaseSchema):
    """Collection that failed; the run continued with the next one."""

    collection_id: str
    error_code: str
    error_message: str


class SortRunSummary(BaseSchema):
    """Result of one sort run across all configured collections."""

    success: bool = True
    dry_run: bool = False
    results: list[CollectionSortSuccess] = Field(default_factory=list)
    failures: list[CollectionSortFailure] = Field(default_factory=list)
    unique_products: int = Field(default=0, description="Product ids placed in any visible window")
    unique_groups: int = Field(default=0, description="Drop-groups placed in any visible window")
    started_at: datetime
    finished_at: Optional[datetime] = None
