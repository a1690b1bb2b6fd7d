"""
Command line entry point for the product importer.

    product-importer import [SOURCE] [--no-resume] [--dry-run]
    product-importer init-db
    product-importer schedule
    product-importer serve [--host HOST] [--port PORT]
"""

import asyncio
import logging
import signal
from typing import Optional

import typer

from core.config import settings
from core.exceptions import ConfigurationError
from core.logging import setup_logging
from ingestion.importer import ProductImporter
from ingestion.runner import run_import

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, help="Import third-party products page by page.")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Root logging level (defaults to LOG_LEVEL).",
    ),
) -> None:
    setup_logging(log_level)


def _install_stop_handlers(importer: ProductImporter) -> None:
    """SIGINT/SIGTERM finish the current page, then stop."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, importer.request_stop)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform/loop; Ctrl-C then aborts mid-page
            logger.debug(f"Cannot install handler for {sig.name}")


@app.command("import")
def import_command(
    source: str = typer.Argument("default", help="Source name (selects base URL and checkpoint)."),
    resume: bool = typer.Option(
        True,
        "--resume/--no-resume",
        help="Continue after the stored checkpoint instead of starting at page 1.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Validate the feed without writing checkpoints or quarantine records.",
    ),
) -> None:
    """Import products for one source."""
    typer.echo(f"Import started for source={source}, resume={'yes' if resume else 'no'}")

    try:
        result = asyncio.run(
            run_import(source, resume=resume, dry_run=dry_run, on_importer=_install_stop_handlers)
        )
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e.message}", err=True)
        raise typer.Exit(code=1)
    except Exception as e:
        logger.error(f"Import command failed: {e}")
        typer.echo(f"Import failed: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(
        f"Import completed: status={result.status.value} last_page={result.last_page} "
        f"pages={result.pages_processed} accepted={result.items_accepted} "
        f"quarantined={result.items_quarantined}"
    )


@app.command("init-db")
def init_db_command() -> None:
    """Create the checkpoint and quarantine tables."""
    from core.database import create_engine, init_models

    async def _init():
        engine = create_engine(settings.DATABASE_URL)
        try:
            await init_models(engine)
        finally:
            await engine.dispose()

    try:
        asyncio.run(_init())
    except Exception as e:
        typer.echo(f"Database initialisation failed: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo("Tables created.")


@app.command("serve")
def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (defaults to API_HOST)."),
    port: Optional[int] = typer.Option(None, "--port", help="Port (defaults to API_PORT)."),
) -> None:
    """Serve the inspection API (/health, /quarantine)."""
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=host or settings.API_HOST,
        port=port or settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower()
    )


@app.command("schedule")
def schedule_command() -> None:
    """Run every configured source on an interval until interrupted."""
    from ingestion.scheduler import ImportScheduler

    async def _serve():
        scheduler = ImportScheduler()
        scheduler.start()
        try:
            await asyncio.Event().wait()
        finally:
            scheduler.stop()

    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        typer.echo("Scheduler stopped.")


if __name__ == "__main__":
    app()
