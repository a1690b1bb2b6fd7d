"""
Core utilities and configuration for the product importer.

Modules:
    config: Settings from the environment and the per-run ImporterConfig
    database: Async SQLAlchemy engine and session helpers
    exceptions: Exception hierarchy with structured context
    logging: Logging configuration

Usage:
    from core.config import settings
    from core.logging import setup_logging
    from core.exceptions import CheckpointError, ConfigurationError

Example:
    setup_logging()
    config = settings.importer_config("default")
"""

__all__ = [
    "settings",
    "Settings",
    "ImporterConfig",
    "setup_logging",
    # Exceptions
    "ImporterException",
    "ConfigurationError",
    "PersistenceError",
    "CheckpointError",
    "QuarantineError",
    "AcceptanceError",
]
