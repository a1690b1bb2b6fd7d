from sqlalchemy import Column, BigInteger, String, DateTime, Index
from models.base import Base, JSONType, utcnow


class InvalidProduct(Base):
    """
    Append-only quarantine of items that failed validation or hand-off.

    No uniqueness: a page re-processed after a crash quarantines its
    invalid items again. checkpoint_name and page identify the origin.
    """
    __tablename__ = "invalid_products"

    id = Column(BigInteger, primary_key=True, autoincrement=True)

    external_id = Column(String(255), nullable=True, index=True)
    payload = Column(JSONType, nullable=True)
    errors = Column(JSONType, nullable=False)

    checkpoint_name = Column(String(255), nullable=True)
    page = Column(BigInteger, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_invalid_products_origin", "checkpoint_name", "page"),
    )
