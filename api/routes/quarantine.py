"""
Quarantine listing endpoint with pagination and filtering
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from typing import Optional
import math
import time
import logging

from core.exceptions import QuarantineError
from ingestion.quarantine import QuarantineStore
from api.dependencies import get_quarantine_store
from schemas.api import PaginationMetadata, QuarantineListResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Quarantine"])


@router.get("/quarantine", response_model=QuarantineListResponse)
async def list_quarantine(
    request: Request,
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=500, description="Items per page"),
    external_id: Optional[str] = Query(None, description="Filter by item id"),
    checkpoint_name: Optional[str] = Query(None, description="Filter by checkpoint name"),
    store: QuarantineStore = Depends(get_quarantine_store)
):
    """Rejected items, newest first."""
    start_time = time.time()
    request_id = getattr(request.state, "request_id", "-")

    try:
        total_items = await store.count(external_id=external_id, checkpoint_name=checkpoint_name)
        items = await store.list_entries(
            limit=page_size,
            offset=(page - 1) * page_size,
            external_id=external_id,
            checkpoint_name=checkpoint_name
        )
    except QuarantineError as e:
        logger.error(f"[{request_id}] Quarantine query failed: {e}")
        raise HTTPException(status_code=503, detail="Quarantine store unavailable")

    total_pages = math.ceil(total_items / page_size) if total_items > 0 else 0

    logger.info(
        f"[{request_id}] Returned {len(items)} quarantine records "
        f"({(time.time() - start_time) * 1000:.2f}ms)"
    )

    return QuarantineListResponse(
        items=items,
        pagination=PaginationMetadata(
            current_page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1
        ),
        filters_applied={k: v for k, v in {
            "external_id": external_id,
            "checkpoint_name": checkpoint_name
        }.items() if v is not None}
    )
