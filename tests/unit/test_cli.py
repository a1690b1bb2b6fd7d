"""
Unit tests for the command line interface
"""

from datetime import datetime, timezone

import pytest
from typer.testing import CliRunner

import cli.main
from cli.main import app
from core.exceptions import ConfigurationError
from schemas.importer import HaltReason, ImportResult

runner = CliRunner()


def result_for(source_name, status=HaltReason.COMPLETED, last_page=3):
    now = datetime.now(timezone.utc)
    return ImportResult(
        source_name=source_name,
        checkpoint_name=f"thirdparty_products_{source_name}",
        status=status,
        start_page=1,
        last_page=last_page,
        pages_processed=last_page,
        items_accepted=250,
        items_quarantined=4,
        started_at=now,
        finished_at=now,
    )


@pytest.fixture
def fake_run_import(monkeypatch):
    calls = []

    async def _run_import(source_name="default", resume=True, dry_run=False,
                          app_settings=None, on_importer=None):
        calls.append({"source_name": source_name, "resume": resume, "dry_run": dry_run})
        return result_for(source_name)

    monkeypatch.setattr(cli.main, "run_import", _run_import)
    return calls


def test_import_defaults(fake_run_import):
    outcome = runner.invoke(app, ["import"])

    assert outcome.exit_code == 0
    assert fake_run_import == [{"source_name": "default", "resume": True, "dry_run": False}]
    assert "Import started for source=default, resume=yes" in outcome.output
    assert "status=completed last_page=3" in outcome.output


def test_import_named_source_without_resume(fake_run_import):
    outcome = runner.invoke(app, ["import", "acme", "--no-resume", "--dry-run"])

    assert outcome.exit_code == 0
    assert fake_run_import == [{"source_name": "acme", "resume": False, "dry_run": True}]
    assert "resume=no" in outcome.output


def test_fetch_failure_still_exits_cleanly(monkeypatch):
    async def _run_import(source_name, **kwargs):
        return result_for(source_name, status=HaltReason.FETCH_FAILED, last_page=1)

    monkeypatch.setattr(cli.main, "run_import", _run_import)

    outcome = runner.invoke(app, ["import"])

    assert outcome.exit_code == 0
    assert "status=fetch_failed last_page=1" in outcome.output


def test_missing_configuration_exits_non_zero(monkeypatch):
    async def _run_import(source_name, **kwargs):
        raise ConfigurationError("API base URL not found.", context={"source_name": source_name})

    monkeypatch.setattr(cli.main, "run_import", _run_import)

    outcome = runner.invoke(app, ["import", "acme"])

    assert outcome.exit_code == 1
    assert "Configuration error: API base URL not found." in outcome.output


def test_unexpected_failure_exits_non_zero(monkeypatch):
    async def _run_import(source_name, **kwargs):
        raise RuntimeError("checkpoint table missing")

    monkeypatch.setattr(cli.main, "run_import", _run_import)

    outcome = runner.invoke(app, ["import"])

    assert outcome.exit_code == 1
    assert "Import failed: checkpoint table missing" in outcome.output


def test_serve_uses_configured_address(monkeypatch):
    calls = []
    monkeypatch.setattr("uvicorn.run", lambda target, **kwargs: calls.append((target, kwargs)))
    monkeypatch.setattr(cli.main.settings, "API_HOST", "127.0.0.1")
    monkeypatch.setattr(cli.main.settings, "API_PORT", 8123)

    outcome = runner.invoke(app, ["serve"])

    assert outcome.exit_code == 0
    assert calls[0][0] == "api.main:app"
    assert calls[0][1]["host"] == "127.0.0.1"
    assert calls[0][1]["port"] == 8123


def test_serve_options_override_settings(monkeypatch):
    calls = []
    monkeypatch.setattr("uvicorn.run", lambda target, **kwargs: calls.append(kwargs))

    outcome = runner.invoke(app, ["serve", "--host", "0.0.0.0", "--port", "9000"])

    assert outcome.exit_code == 0
    assert calls[0]["host"] == "0.0.0.0"
    assert calls[0]["port"] == 9000
