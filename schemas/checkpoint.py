"""
Checkpoint state exchanged between the importer and checkpoint stores
"""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class CheckpointState(BaseModel):
    """
    Progress of one named source.

    last_page is the highest page whose items have all been routed
    (accepted or quarantined). meta is never interpreted by the importer.
    """

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(..., min_length=1, max_length=255)
    last_page: int = Field(0, ge=0)
    meta: Optional[Dict[str, Any]] = None
    last_processed_at: Optional[datetime] = None

    @property
    def next_page(self) -> int:
        return self.last_page + 1
