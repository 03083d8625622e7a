"""
Sort API routes.

Cron entrypoint that re-ranks every configured collection. Guarded by a
shared secret sent as `Authorization: Bearer <CRON_SECRET>`.
"""

import secrets
from typing import Optional

from fastapi import APIRouter, Header, Query
from fastapi.responses import JSONResponse
import structlog

from config import settings
from exceptions import AppError, UnauthorizedError
from models.sort_run import SortRunSummary
from services.sort_run_service import get_sort_run_service

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Sort"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def verify_cron_secret(authorization: Optional[str]) -> None:
    """
    Check the bearer secret.

    Raises:
        UnauthorizedError: Secret unset, header missing or mismatched
    """
    if not settings.cron_secret or not authorization:
        raise UnauthorizedError()
    expected = f"Bearer {settings.cron_secret}"
    if not secrets.compare_digest(authorization.encode(), expected.encode()):
        raise UnauthorizedError()


# ===================
# ROUTES
# ===================

@router.api_route("/sort-collections", methods=["GET", "POST"], response_model=SortRunSummary)
def sort_collections(
    authorization: Optional[str] = Header(None),
    dry_run: bool = Query(False, description="Compute orderings without writing them")
):
    """
    Re-rank all configured collections.

    Collections are processed one at a time in COLLECTION_IDS order.
    Failures are reported per collection; the run continues.
    """
    try:
        verify_cron_secret(authorization)
    except UnauthorizedError as e:
        logger.warning("sort_unauthorized")
        return handle_error(e)

    try:
        service = get_sort_run_service()
        return service.run(dry_run=dry_run)

    except Exception as e:
        return handle_error(e)
