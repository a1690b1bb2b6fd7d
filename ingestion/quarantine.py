"""
Quarantine stores: append-only records of rejected items
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import QuarantineError
from models.invalid_product import InvalidProduct
from schemas.quarantine import QuarantineEntry, QuarantineRecordResponse
import logging

logger = logging.getLogger(__name__)


class QuarantineStore(ABC):
    """
    Durable insert of quarantine entries.

    append() raises QuarantineError on failure; the importer decides
    whether that matters.
    """

    @abstractmethod
    async def append(self, entry: QuarantineEntry) -> None:
        pass

    @abstractmethod
    async def list_entries(
        self,
        limit: int = 50,
        offset: int = 0,
        external_id: Optional[str] = None,
        checkpoint_name: Optional[str] = None
    ) -> List[QuarantineRecordResponse]:
        """Newest first."""

    @abstractmethod
    async def count(
        self,
        external_id: Optional[str] = None,
        checkpoint_name: Optional[str] = None
    ) -> int:
        pass


class InMemoryQuarantineStore(QuarantineStore):
    """Process-local store for dry runs."""

    def __init__(self):
        self.entries: List[QuarantineEntry] = []

    async def append(self, entry: QuarantineEntry) -> None:
        self.entries.append(entry.model_copy(deep=True))

    def _filtered(self, external_id, checkpoint_name) -> List[QuarantineRecordResponse]:
        records = [
            QuarantineRecordResponse(id=i, **entry.model_dump())
            for i, entry in enumerate(self.entries, start=1)
        ]
        if external_id is not None:
            records = [r for r in records if r.external_id == external_id]
        if checkpoint_name is not None:
            records = [r for r in records if r.checkpoint_name == checkpoint_name]
        return records

    async def list_entries(self, limit=50, offset=0, external_id=None, checkpoint_name=None):
        records = list(reversed(self._filtered(external_id, checkpoint_name)))
        return records[offset:offset + limit]

    async def count(self, external_id=None, checkpoint_name=None) -> int:
        return len(self._filtered(external_id, checkpoint_name))


class SQLQuarantineStore(QuarantineStore):
    """Quarantine entries in the invalid_products table, one commit per entry."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def append(self, entry: QuarantineEntry) -> None:
        record = InvalidProduct(
            external_id=entry.external_id,
            payload=entry.payload,
            errors=entry.errors,
            checkpoint_name=entry.checkpoint_name,
            page=entry.page,
            created_at=entry.created_at,
        )
        try:
            self.db.add(record)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise QuarantineError(
                "Failed to store quarantine entry",
                context={
                    "external_id": entry.external_id,
                    "checkpoint_name": entry.checkpoint_name,
                    "page": entry.page
                },
                original_exception=e
            )

    @staticmethod
    def _filters(external_id, checkpoint_name):
        filters = []
        if external_id is not None:
            filters.append(InvalidProduct.external_id == external_id)
        if checkpoint_name is not None:
            filters.append(InvalidProduct.checkpoint_name == checkpoint_name)
        return filters

    async def list_entries(self, limit=50, offset=0, external_id=None, checkpoint_name=None):
        query = (
            select(InvalidProduct)
            .where(*self._filters(external_id, checkpoint_name))
            .order_by(InvalidProduct.created_at.desc(), InvalidProduct.id.desc())
            .offset(offset)
            .limit(limit)
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            raise QuarantineError(
                "Failed to list quarantine entries",
                context={"external_id": external_id, "checkpoint_name": checkpoint_name},
                original_exception=e
            )
        return [QuarantineRecordResponse.model_validate(r) for r in result.scalars().all()]

    async def count(self, external_id=None, checkpoint_name=None) -> int:
        query = select(func.count(InvalidProduct.id)).where(
            *self._filters(external_id, checkpoint_name)
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            raise QuarantineError(
                "Failed to count quarantine entries",
                context={"external_id": external_id, "checkpoint_name": checkpoint_name},
                original_exception=e
            )
        return result.scalar_one()
