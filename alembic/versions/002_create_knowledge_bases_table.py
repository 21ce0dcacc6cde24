"""Create knowledge_bases table

One knowledge base per business. `sections` holds the structured editor
state; rows migrated from the flat-text era have it NULL and are parsed
from `raw_text` on read.

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "knowledge_bases",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("business_id", UUID(as_uuid=True), sa.ForeignKey("businesses.id"), nullable=False),
        sa.Column("title", sa.String, nullable=False, server_default="Main Knowledge Base"),
        sa.Column("sections", sa.JSON, nullable=True),
        sa.Column("raw_text", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
    )
    # Unique index is the conflict target for the upsert.
    op.create_index("ix_knowledge_bases_business_id", "knowledge_bases", ["business_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_knowledge_bases_business_id", table_name="knowledge_bases")
    op.drop_table("knowledge_bases")
