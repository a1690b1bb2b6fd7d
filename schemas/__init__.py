"""
Pydantic schemas used across the importer.

Schemas:
    product: ProductItem - the validation rules for a remote product
    page: Page - one page envelope from the remote source
    checkpoint: CheckpointState - progress of one named source
    quarantine: QuarantineEntry / QuarantineRecordResponse
    importer: HaltReason and ImportResult for a run
    api: Inspection API responses

Usage:
    from schemas.product import ProductItem
    from schemas.importer import HaltReason
"""

__all__ = [
    "ProductItem",
    "Page",
    "CheckpointState",
    "QuarantineEntry",
    "QuarantineRecordResponse",
    "HaltReason",
    "ImportResult",
    "HealthCheckResponse",
    "QuarantineListResponse",
]
