"""add kv_entries table

Revision ID: 001
Revises:
Create Date: 2026-10-19

Namespaced key-value documents (prefs:, config:, rl:, analytics:) with optional
expiry. Rows past expires_at are ignored on read and removed by the cleanup job.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "kv_entries",
        sa.Column("key", sa.String(length=512), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("key"),
    )
    op.create_index(
        "ix_kv_entries_expires_at",
        "kv_entries",
        ["expires_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_kv_entries_expires_at", table_name="kv_entries", if_exists=True)
    op.drop_table("kv_entries", if_exists=True)
