"""
Quarantine entry schemas
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.base import utcnow


class QuarantineEntry(BaseModel):
    """
    One rejected item with its errors.

    Attributes:
        external_id: Identifier taken from the item (not unique, may be missing)
        payload: The raw item as received
        errors: Field name -> list of human-readable messages
        checkpoint_name: Checkpoint the item was imported under
        page: Source page the item came from
        created_at: When the item was quarantined
    """

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "external_id": "p-1042",
                "payload": {"id": "p-1042", "sku": "SKU-1042", "title": "Lamp"},
                "errors": {"price": ["The price field is required."]},
                "checkpoint_name": "thirdparty_products_default",
                "page": 7,
            }
        },
    )

    external_id: Optional[str] = None
    payload: Any = None
    errors: Dict[str, List[str]] = Field(..., min_length=1)
    checkpoint_name: Optional[str] = None
    page: Optional[int] = None
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("external_id")
    @classmethod
    def truncate_external_id(cls, v):
        """Column is 255 wide; the full value stays in the payload."""
        if v is not None and len(v) > 255:
            return v[:255]
        return v


class QuarantineRecordResponse(QuarantineEntry):
    """Stored quarantine entry as returned by the inspection API"""
    id: int
