"""
FastAPI dependencies: database session and stores
"""

from typing import AsyncIterator
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_session
from ingestion.checkpoint import CheckpointStore, SQLCheckpointStore
from ingestion.quarantine import QuarantineStore, SQLQuarantineStore


async def get_db() -> AsyncIterator[AsyncSession]:
    async for session in get_session():
        yield session


def get_checkpoint_store(db: AsyncSession = Depends(get_db)) -> CheckpointStore:
    return SQLCheckpointStore(db)


def get_quarantine_store(db: AsyncSession = Depends(get_db)) -> QuarantineStore:
    return SQLQuarantineStore(db)
