import logging
from datetime import datetime
from typing import List, Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from core.config import Settings, settings as default_settings
from core.exceptions import ImporterException
from ingestion.runner import run_import

logger = logging.getLogger(__name__)


class ImportScheduler:
    """
    Re-runs the import for every configured source on an interval.

    Each source is its own job with max_instances=1, so a long import is
    never overlapped by a second run of the same source.
    """

    def __init__(self, app_settings: Optional[Settings] = None):
        self.settings = app_settings or default_settings
        self.scheduler = AsyncIOScheduler()

    async def run_import_job(self, source_name: str):
        """Job to run one source, resuming from its checkpoint"""
        logger.info(f"Scheduler: starting import for {source_name}")
        try:
            result = await run_import(source_name, resume=True, app_settings=self.settings)
            logger.info(
                f"Scheduler: import for {source_name} ended with {result.status.value} "
                f"at page {result.last_page}"
            )
        except ImporterException as e:
            logger.error(f"Scheduler: import for {source_name} failed - {e.to_dict()}")
        except Exception as e:
            # Next interval resumes from the last checkpoint
            logger.error(f"Scheduler: import for {source_name} failed - {e}")

    def add_jobs(self) -> List[str]:
        sources = self.settings.configured_sources()
        if not sources:
            logger.warning("No sources configured. Nothing to schedule.")

        for source_name in sources:
            self.scheduler.add_job(
                self.run_import_job,
                trigger=IntervalTrigger(minutes=self.settings.IMPORT_SCHEDULE_MINUTES),
                args=[source_name],
                id=f"import_{source_name}",
                max_instances=1,
                coalesce=True,
                replace_existing=True,
                next_run_time=datetime.now()  # first run right away
            )
        return sources

    def start(self):
        """Start the scheduler"""
        sources = self.add_jobs()
        self.scheduler.start()
        logger.info(f"Import scheduler started for sources: {', '.join(sources) or 'none'}")

    def stop(self):
        self.scheduler.shutdown(wait=False)
        logger.info("Import scheduler stopped")
