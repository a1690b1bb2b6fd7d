"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class and the portable JSON column type
    checkpoint: Import progress per named source (import_checkpoints)
    invalid_product: Quarantined items with their errors (invalid_products)

Usage:
    from models.checkpoint import ImportCheckpoint
    from models.invalid_product import InvalidProduct

Both tables are written only through the stores in ingestion.checkpoint
and ingestion.quarantine.
"""

__all__ = [
    "Base",
    "ImportCheckpoint",
    "InvalidProduct",
]
