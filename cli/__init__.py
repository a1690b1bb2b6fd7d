"""Typer command line interface for the product importer."""

from cli.main import app

__all__ = ["app"]
