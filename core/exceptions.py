"""
Custom exceptions for the product importer with structured error context.

Transient transport failures never surface as exceptions: the fetcher
absorbs them and reports "no response". Validation failures are data, not
exceptions. What remains is configuration, persistence and hand-off errors.

Exception Hierarchy:
    ImporterException (base)
    ├── ConfigurationError
    ├── PersistenceError
    │   ├── CheckpointError   (fatal, propagates out of the run)
    │   └── QuarantineError   (logged and swallowed by the importer)
    └── AcceptanceError       (valid product rejected by the sink)
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ImporterException(Exception):
    """
    Base exception for all importer errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (source, page, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = dict(context or {})
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += (
                f" | Caused by: {type(self.original_exception).__name__}: "
                f"{self.original_exception}"
            )

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


class ConfigurationError(ImporterException):
    """
    Raised when a run cannot be configured.

    Context should include:
        - source_name: The source whose configuration is missing
    """
    pass


# ============================================================================
# Persistence Errors
# ============================================================================

class PersistenceError(ImporterException):
    """Base exception for checkpoint and quarantine storage failures."""
    pass


class CheckpointError(PersistenceError):
    """
    Raised when a checkpoint cannot be read or written.

    Progress that cannot be recorded cannot be trusted, so this is
    never retried or swallowed.

    Context should include:
        - checkpoint_name: Name of the checkpoint
        - operation: read, create or save
        - last_page: Page value being written (for save)
    """
    pass


class QuarantineError(PersistenceError):
    """
    Raised when a quarantine entry cannot be stored.

    Context should include:
        - external_id: Identifier taken from the item (may be None)
        - checkpoint_name: Checkpoint the item was imported under
    """
    pass


# ============================================================================
# Hand-off Errors
# ============================================================================

class AcceptanceError(ImporterException):
    """
    Raised by a product sink that refuses a valid product.

    The importer converts it into a quarantine entry.
    """
    pass
