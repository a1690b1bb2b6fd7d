from sqlalchemy import Column, Integer, String, DateTime, BigInteger
from models.base import Base, JSONType, utcnow


class ImportCheckpoint(Base):
    """
    Tracks page-based import progress per named source.

    Design:
    - One row per checkpoint name (e.g. "thirdparty_products_default")
    - last_page is the highest page whose items were all routed
    - meta is opaque to the importer and preserved across saves
    """
    __tablename__ = "import_checkpoints"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)

    last_page = Column(BigInteger, nullable=False, default=0)
    meta = Column(JSONType, nullable=True)
    last_processed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
