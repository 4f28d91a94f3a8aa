"""Initial schema.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

This migration creates the Haru database schema:
- Extensions: pgcrypto (gen_random_uuid)
- Tables: records, chat_messages, saved_charts
- Indexes: per-user lookups ordered by date / created_at
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ==========================================================================
    # EXTENSIONS
    # ==========================================================================
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # ==========================================================================
    # RECORDS TABLE
    # ==========================================================================
    op.create_table(
        "records",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("fatigue", sa.SmallInteger(), nullable=True),  # 1 (not tired) .. 10 (exhausted)
        sa.Column("emotion", sa.String(50), nullable=True),
        sa.Column("created_at", postgresql.TIMESTAMP(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "fatigue IS NULL OR (fatigue >= 1 AND fatigue <= 10)",
            name="records_fatigue_range",
        ),
    )
    op.create_index("idx_records_user_id_date", "records", ["user_id", "date"])

    # ==========================================================================
    # CHAT_MESSAGES TABLE
    # ==========================================================================
    op.create_table(
        "chat_messages",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("user_chat", sa.Text(), nullable=False),
        sa.Column("ai_answer", sa.Text(), nullable=True),  # filled in after the response is sent
        sa.Column("created_at", postgresql.TIMESTAMP(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_chat_messages_user_id_created_at", "chat_messages", ["user_id", "created_at"])

    # ==========================================================================
    # SAVED_CHARTS TABLE
    # ==========================================================================
    op.create_table(
        "saved_charts",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("chart_name", sa.String(255), nullable=False),
        sa.Column("chart_type", sa.String(20), nullable=False),
        sa.Column("chart_data", postgresql.JSONB(), nullable=False),
        sa.Column("chart_config", postgresql.JSONB(), nullable=True),
        sa.Column("period_start", sa.Date(), nullable=True),
        sa.Column("period_end", sa.Date(), nullable=True),
        sa.Column("created_at", postgresql.TIMESTAMP(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_saved_charts_user_id_created_at", "saved_charts", ["user_id", "created_at"])


def downgrade() -> None:
    op.drop_index("idx_saved_charts_user_id_created_at", table_name="saved_charts")
    op.drop_table("saved_charts")
    op.drop_index("idx_chat_messages_user_id_created_at", table_name="chat_messages")
    op.drop_table("chat_messages")
    op.drop_index("idx_records_user_id_date", table_name="records")
    op.drop_table("records")
