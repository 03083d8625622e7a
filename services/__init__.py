"""
Business logic services.

Each service handles one domain area.
"""

from services.catalog_classifier import classify, classify_all
from services.merch_state import GlobalMerchState
from services.collection_sequencer import (
    CollectionSequencer,
    get_collection_sequencer,
    partition,
)
from services.sort_run_service import SortRunService, get_sort_run_service

__all__ = [
    "classify",
    "classify_all",
    "GlobalMerchState",
    "CollectionSequencer",
    "get_collection_sequencer",
    "partition",
    "SortRunService",
    "get_sort_run_service",
]
