"""
Wire one import run: settings -> database session, stores, fetcher, importer.

Shared by the CLI and the scheduler.
"""

from typing import Callable, Optional
import logging

from core.config import Settings, settings as default_settings
from core.database import create_engine, create_session_maker
from ingestion.checkpoint import InMemoryCheckpointStore, SQLCheckpointStore
from ingestion.fetcher import RateLimitedFetcher
from ingestion.importer import ProductImporter
from ingestion.quarantine import InMemoryQuarantineStore, SQLQuarantineStore
from schemas.importer import ImportResult

logger = logging.getLogger(__name__)


async def run_import(
    source_name: str = "default",
    resume: bool = True,
    dry_run: bool = False,
    app_settings: Optional[Settings] = None,
    on_importer: Optional[Callable[[ProductImporter], None]] = None
) -> ImportResult:
    """
    Run the importer for one source.

    Args:
        source_name: Configured source name
        resume: Continue from the stored checkpoint
        dry_run: Use in-memory stores; nothing is written to the database
        app_settings: Settings override (defaults to the process settings)
        on_importer: Called with the importer before the run starts, e.g.
            to hook request_stop() to a signal handler

    Raises:
        ConfigurationError: If the source has no base URL
    """
    app_settings = app_settings or default_settings
    config = app_settings.importer_config(source_name)

    async with RateLimitedFetcher(config) as fetcher:
        if dry_run:
            logger.info(f"Dry run for source={source_name}: nothing will be persisted")
            importer = ProductImporter(
                config=config,
                fetcher=fetcher,
                checkpoints=InMemoryCheckpointStore(),
                quarantine=InMemoryQuarantineStore()
            )
            if on_importer:
                on_importer(importer)
            return await importer.run(source_name, resume=resume)

        engine = create_engine(app_settings.DATABASE_URL)
        session_maker = create_session_maker(engine)
        try:
            # Separate sessions: a failed quarantine insert must not roll
            # back checkpoint state and vice versa
            async with session_maker() as checkpoint_session, session_maker() as quarantine_session:
                importer = ProductImporter(
                    config=config,
                    fetcher=fetcher,
                    checkpoints=SQLCheckpointStore(checkpoint_session),
                    quarantine=SQLQuarantineStore(quarantine_session)
                )
                if on_importer:
                    on_importer(importer)
                return await importer.run(source_name, resume=resume)
        finally:
            await engine.dispose()
