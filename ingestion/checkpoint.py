"""
Checkpoint stores: durable page progress per named source
"""

from abc import ABC, abstractmethod
from typing import Dict, List
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import CheckpointError
from models.checkpoint import ImportCheckpoint
from schemas.checkpoint import CheckpointState
import logging

logger = logging.getLogger(__name__)


class CheckpointStore(ABC):
    """
    Read and upsert checkpoints by unique name.

    Failures raise CheckpointError and are never retried here.
    """

    @abstractmethod
    async def get_or_create(self, name: str) -> CheckpointState:
        """Return the checkpoint, creating it with last_page=0 if absent."""

    @abstractmethod
    async def save(self, state: CheckpointState) -> CheckpointState:
        """Persist last_page, meta and last_processed_at; return the stored state."""

    @abstractmethod
    async def list_all(self) -> List[CheckpointState]:
        pass


class InMemoryCheckpointStore(CheckpointStore):
    """Process-local store for dry runs."""

    def __init__(self):
        self._states: Dict[str, CheckpointState] = {}

    async def get_or_create(self, name: str) -> CheckpointState:
        if name not in self._states:
            self._states[name] = CheckpointState(name=name, last_page=0)
        return self._states[name].model_copy(deep=True)

    async def save(self, state: CheckpointState) -> CheckpointState:
        current = self._states.get(state.name)
        stored = state.model_copy(deep=True)
        if current is not None and current.last_page > stored.last_page:
            stored.last_page = current.last_page
        self._states[state.name] = stored
        return stored.model_copy(deep=True)

    async def list_all(self) -> List[CheckpointState]:
        return [s.model_copy(deep=True) for s in self._states.values()]


class SQLCheckpointStore(CheckpointStore):
    """
    Checkpoints in the import_checkpoints table.

    Every operation commits, so a saved page survives a crash right after.
    save() locks the row and never lowers a stored last_page, so two
    writers for the same name cannot move progress backwards.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def _get(self, name: str, for_update: bool = False):
        query = select(ImportCheckpoint).where(ImportCheckpoint.name == name)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_or_create(self, name: str) -> CheckpointState:
        try:
            checkpoint = await self._get(name)
            if checkpoint is None:
                checkpoint = ImportCheckpoint(name=name, last_page=0)
                self.db.add(checkpoint)
                try:
                    await self.db.commit()
                except IntegrityError:
                    # Another run created it first
                    await self.db.rollback()
                    checkpoint = await self._get(name)
                    if checkpoint is None:
                        raise
                else:
                    logger.info(f"Created checkpoint {name}")
            return CheckpointState.model_validate(checkpoint)

        except SQLAlchemyError as e:
            await self.db.rollback()
            raise CheckpointError(
                "Failed to load checkpoint",
                context={"checkpoint_name": name, "operation": "read"},
                original_exception=e
            )

    async def save(self, state: CheckpointState) -> CheckpointState:
        try:
            checkpoint = await self._get(state.name, for_update=True)
            if checkpoint is None:
                checkpoint = ImportCheckpoint(name=state.name, last_page=state.last_page)
                self.db.add(checkpoint)
            elif checkpoint.last_page > state.last_page:
                logger.warning(
                    f"Checkpoint {state.name} is at page {checkpoint.last_page}, "
                    f"not lowering it to {state.last_page}"
                )
            else:
                checkpoint.last_page = state.last_page

            checkpoint.meta = state.meta
            checkpoint.last_processed_at = state.last_processed_at

            await self.db.commit()
            return CheckpointState.model_validate(checkpoint)

        except SQLAlchemyError as e:
            await self.db.rollback()
            raise CheckpointError(
                "Failed to save checkpoint",
                context={
                    "checkpoint_name": state.name,
                    "operation": "save",
                    "last_page": state.last_page
                },
                original_exception=e
            )

    async def list_all(self) -> List[CheckpointState]:
        try:
            result = await self.db.execute(
                select(ImportCheckpoint).order_by(ImportCheckpoint.name)
            )
        except (SQLAlchemyError, OSError) as e:
            raise CheckpointError(
                "Failed to list checkpoints",
                context={"operation": "read"},
                original_exception=e
            )
        return [CheckpointState.model_validate(c) for c in result.scalars().all()]
