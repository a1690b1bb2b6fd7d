"""
Schemas describing the outcome of an import run
"""

from datetime import datetime
from typing import Optional
import enum
from pydantic import BaseModel


class HaltReason(str, enum.Enum):
    """Why a run stopped without raising"""
    COMPLETED = "completed"        # last page reached (total_pages hint)
    EXHAUSTED = "exhausted"        # empty page
    FETCH_FAILED = "fetch_failed"  # retries exhausted or unusable response
    STOPPED = "stopped"            # stop requested between pages


class ImportResult(BaseModel):
    """Statistics for one run of one source"""

    source_name: str
    checkpoint_name: str
    status: HaltReason

    start_page: int
    last_page: int

    pages_processed: int = 0
    items_seen: int = 0
    items_accepted: int = 0
    items_quarantined: int = 0
    quarantine_failures: int = 0

    started_at: datetime
    finished_at: Optional[datetime] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()
