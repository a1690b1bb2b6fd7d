"""create import_checkpoints and invalid_products

Revision ID: 0001
Revises:
Create Date: 2024-01-15 10:00:00
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade():
    op.create_table(
        "import_checkpoints",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("last_page", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("meta", JSONType, nullable=True),
        sa.Column("last_processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "invalid_products",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("external_id", sa.String(length=255), nullable=True),
        sa.Column("payload", JSONType, nullable=True),
        sa.Column("errors", JSONType, nullable=False),
        sa.Column("checkpoint_name", sa.String(length=255), nullable=True),
        sa.Column("page", sa.BigInteger(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_invalid_products_external_id", "invalid_products", ["external_id"])
    op.create_index("ix_invalid_products_created_at", "invalid_products", ["created_at"])
    op.create_index("idx_invalid_products_origin", "invalid_products", ["checkpoint_name", "page"])


def downgrade():
    op.drop_index("idx_invalid_products_origin", table_name="invalid_products")
    op.drop_index("ix_invalid_products_created_at", table_name="invalid_products")
    op.drop_index("ix_invalid_products_external_id", table_name="invalid_products")
    op.drop_table("invalid_products")
    op.drop_table("import_checkpoints")
