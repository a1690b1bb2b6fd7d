"""
Health check endpoint with database and checkpoint status
"""

from fastapi import APIRouter, Depends, Request
from core.exceptions import CheckpointError
from ingestion.checkpoint import CheckpointStore
from api.dependencies import get_checkpoint_store
from schemas.api import HealthCheckResponse, CheckpointInfo
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    request: Request,
    checkpoints: CheckpointStore = Depends(get_checkpoint_store)
):
    """
    Health check endpoint.

    Returns:
    - Database connectivity (a checkpoint read doubles as the probe)
    - Import progress for every known source
    """
    request_id = getattr(request.state, "request_id", "-")

    try:
        states = await checkpoints.list_all()
    except CheckpointError as e:
        logger.error(f"[{request_id}] Database check failed: {e}")
        return HealthCheckResponse(database_connected=False)

    return HealthCheckResponse(
        database_connected=True,
        checkpoints=[
            CheckpointInfo(
                name=state.name,
                last_page=state.last_page,
                last_processed_at=state.last_processed_at
            )
            for state in states
        ],
        total_sources=len(states)
    )
