"""
Resumable, rate-limited product import.

Modules:
    fetcher: RateLimitedFetcher - one page per call, retry/backoff, 429 handling
    validator: ItemValidator - fixed product rules, field -> messages on failure
    checkpoint: Checkpoint stores (SQL and in-memory)
    quarantine: Quarantine stores (SQL and in-memory)
    sink: Hand-off seam for valid products
    importer: ProductImporter - pagination, throttling, checkpointing
    runner: Builds and runs an importer for one configured source
    scheduler: APScheduler integration for periodic runs

Flow per page:
    fetch -> validate each item -> quarantine or accept -> checkpoint page

Usage:
    from ingestion.runner import run_import

    result = await run_import("default", resume=True)
    print(result.status, result.last_page)

Error Handling:
    Transient HTTP failures end a run cleanly (status fetch_failed) and the
    next run resumes at the same page. Checkpoint failures propagate.
    See core.exceptions.
"""

__all__ = [
    "RateLimitedFetcher",
    "ItemValidator",
    "CheckpointStore",
    "QuarantineStore",
    "ProductSink",
    "ProductImporter",
    "run_import",
]
