"""
Product importer - drives a resumable, rate-limited paginated import.

For one named source the importer:
- resumes from the page after its checkpoint (or from page 1)
- fetches one page per cycle, at most one cycle every 6 seconds
- validates every item, quarantining the invalid ones
- checkpoints only after every item of the page has been routed

A run ends without raising when pages run out (empty page or the
total_pages hint), when the fetcher gives up, or when a stop is requested.
Checkpoint failures and anything unexpected are logged and re-raised;
the last checkpoint written stays the resume point.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

from core.config import ImporterConfig
from core.exceptions import AcceptanceError
from ingestion.checkpoint import CheckpointStore
from ingestion.fetcher import RateLimitedFetcher
from ingestion.quarantine import QuarantineStore
from ingestion.sink import LoggingProductSink, ProductSink
from ingestion.validator import ItemValidator, extract_external_id
from models.base import utcnow
from schemas.checkpoint import CheckpointState
from schemas.importer import HaltReason, ImportResult
from schemas.page import Page
from schemas.quarantine import QuarantineEntry

logger = logging.getLogger(__name__)


class ProductImporter:
    """
    Orchestrates fetch -> validate -> quarantine/accept -> checkpoint.

    Collaborators are injected so the loop can be driven with in-memory
    stores, a mock transport and a fake clock.
    """

    def __init__(
        self,
        config: ImporterConfig,
        fetcher: RateLimitedFetcher,
        checkpoints: CheckpointStore,
        quarantine: QuarantineStore,
        validator: Optional[ItemValidator] = None,
        sink: Optional[ProductSink] = None,
        log: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        now: Callable[[], datetime] = utcnow
    ):
        self.config = config
        self.fetcher = fetcher
        self.checkpoints = checkpoints
        self.quarantine = quarantine
        self.validator = validator or ItemValidator()
        self.sink = sink or LoggingProductSink()
        self.log = log or logger
        self.clock = clock
        self.sleep = sleep
        self.now = now
        self._stop_requested = False

    def request_stop(self) -> None:
        """Stop after the current page has been checkpointed."""
        if not self._stop_requested:
            self.log.info("Stop requested, finishing current page")
        self._stop_requested = True

    async def run(self, source_name: str = "default", resume: bool = True) -> ImportResult:
        """
        Import one source until completion or a resumable halt.

        Args:
            source_name: Source name; the checkpoint is "<prefix>_<source_name>"
            resume: Continue after the checkpoint instead of from page 1

        Returns:
            ImportResult with the halt reason and counters

        Raises:
            CheckpointError: If progress cannot be persisted
        """
        self.log.info(f"Importer started for source={source_name} resume={resume}")

        checkpoint = await self.checkpoints.get_or_create(
            self.config.checkpoint_name(source_name)
        )
        start_page = checkpoint.next_page if resume else 1
        page = max(1, int(start_page))

        result = ImportResult(
            source_name=source_name,
            checkpoint_name=checkpoint.name,
            status=HaltReason.FETCH_FAILED,
            start_page=page,
            last_page=checkpoint.last_page,
            started_at=self.now()
        )

        try:
            while True:
                started = self.clock()

                self.log.info(f"Fetching page={page}")
                fetched = await self._fetch_page(page)

                if fetched is None:
                    self.log.error(f"Request failed page={page}, stopping run")
                    checkpoint = await self._halt(checkpoint, page, result, HaltReason.FETCH_FAILED)
                    break

                if fetched.is_empty:
                    self.log.info(f"Page empty or no items. page={page}. Import finished.")
                    checkpoint = await self._halt(checkpoint, page, result, HaltReason.EXHAUSTED)
                    break

                await self._process_page(fetched.items, page, checkpoint.name, result)

                checkpoint = await self._record_page(checkpoint, page)
                result.last_page = checkpoint.last_page
                result.pages_processed += 1
                self.log.info(
                    f"Checkpointed page={page} items={len(fetched.items)} "
                    f"quarantined_total={result.items_quarantined}"
                )

                if fetched.total_pages is not None and page >= fetched.total_pages:
                    self.log.info(f"All pages processed. total_pages={fetched.total_pages}")
                    result.status = HaltReason.COMPLETED
                    break

                if self._stop_requested:
                    self.log.info(f"Import stopped after page={page}")
                    result.status = HaltReason.STOPPED
                    break

                page += 1
                await self._throttle(started)

        except Exception:
            self.log.exception(
                f"Importer crashed source={source_name} page={page} "
                f"checkpoint_last_page={checkpoint.last_page}"
            )
            raise

        result.finished_at = self.now()
        self.log.info(
            f"Importer finished source={source_name} status={result.status.value} "
            f"pages={result.pages_processed} accepted={result.items_accepted} "
            f"quarantined={result.items_quarantined}"
        )
        return result

    async def _fetch_page(self, page: int) -> Optional[Page]:
        response = await self.fetcher.fetch(
            self.config.resource_path,
            {"page": page, "limit": self.config.page_size}
        )
        if response is None:
            return None
        if response.is_error:
            self.log.error(f"Request failed page={page} status={response.status_code}")
            return None

        try:
            return Page.from_payload(response.json())
        except ValueError as e:
            # Covers JSON decode errors and PageFormatError
            self.log.error(f"Unusable response body page={page}: {e}")
            return None

    async def _process_page(
        self,
        items: List[Any],
        page: int,
        checkpoint_name: str,
        result: ImportResult
    ) -> None:
        for item in items:
            result.items_seen += 1
            external_id = extract_external_id(item)
            verdict = self.validator.validate(item)

            if not verdict.valid:
                self.log.info(f"Invalid product external_id={external_id} errors={verdict.errors}")
                await self._quarantine(item, external_id, verdict.errors, checkpoint_name, page, result)
                continue

            try:
                await self.sink.accept(verdict.product, item)
                result.items_accepted += 1
            except Exception as e:
                message = e.message if isinstance(e, AcceptanceError) else (str(e) or type(e).__name__)
                self.log.error(f"Failed to save product external_id={external_id}: {message}")
                await self._quarantine(item, external_id, {"save": [message]},
                                       checkpoint_name, page, result)

    async def _quarantine(
        self,
        item: Any,
        external_id: Optional[str],
        errors: Dict[str, List[str]],
        checkpoint_name: str,
        page: int,
        result: ImportResult
    ) -> None:
        entry = QuarantineEntry(
            external_id=external_id,
            payload=item,
            errors=errors,
            checkpoint_name=checkpoint_name,
            page=page,
            created_at=self.now()
        )
        try:
            await self.quarantine.append(entry)
            result.items_quarantined += 1
        except Exception as e:
            # A lost quarantine entry must not stop the import
            result.quarantine_failures += 1
            self.log.error(f"Could not quarantine external_id={external_id} page={page}: {e}")

    async def _record_page(self, checkpoint: CheckpointState, last_page: int) -> CheckpointState:
        """Persist progress; last_page never moves backwards."""
        updated = checkpoint.model_copy(update={
            "last_page": max(checkpoint.last_page, last_page),
            "last_processed_at": self.now(),
        })
        return await self.checkpoints.save(updated)

    async def _halt(
        self,
        checkpoint: CheckpointState,
        page: int,
        result: ImportResult,
        reason: HaltReason
    ) -> CheckpointState:
        # The current page contributed nothing
        checkpoint = await self._record_page(checkpoint, page - 1)
        result.last_page = checkpoint.last_page
        result.status = reason
        return checkpoint

    async def _throttle(self, started: float) -> None:
        elapsed = self.clock() - started
        if elapsed < self.config.min_delay_seconds:
            delay = self.config.min_delay_seconds - elapsed
            self.log.debug(f"Sleeping {delay:.2f} seconds to respect rate limit")
            await self.sleep(delay)
