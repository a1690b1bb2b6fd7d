"""
Pydantic schemas for the inspection API
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from models.base import utcnow
from schemas.quarantine import QuarantineRecordResponse


# ============================================================================
# Health Check Schemas
# ============================================================================

class CheckpointInfo(BaseModel):
    """Checkpoint information for health check"""
    name: str
    last_page: int
    last_processed_at: Optional[datetime] = None


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field("healthy", description="Overall status: healthy or unhealthy")
    timestamp: datetime = Field(default_factory=utcnow)
    database_connected: bool
    checkpoints: List[CheckpointInfo] = Field(default_factory=list)
    total_sources: int = 0

    @model_validator(mode="after")
    def determine_status(self):
        """Without a database nothing can be imported or inspected"""
        self.status = "healthy" if self.database_connected else "unhealthy"
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2024-01-15T10:30:00Z",
                "database_connected": True,
                "checkpoints": [
                    {
                        "name": "thirdparty_products_default",
                        "last_page": 42,
                        "last_processed_at": "2024-01-15T10:29:54Z"
                    }
                ],
                "total_sources": 1
            }
        }


# ============================================================================
# Quarantine Listing Schemas
# ============================================================================

class PaginationMetadata(BaseModel):
    """Pagination metadata"""
    total_items: int
    total_pages: int
    current_page: int
    page_size: int
    has_next: bool
    has_previous: bool


class QuarantineListResponse(BaseModel):
    """Paginated quarantine listing"""
    items: List[QuarantineRecordResponse]
    pagination: PaginationMetadata
    filters_applied: Dict[str, Any] = Field(default_factory=dict)
