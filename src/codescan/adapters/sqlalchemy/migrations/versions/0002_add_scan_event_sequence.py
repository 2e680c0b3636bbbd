"""add per-caller sequence to scan_events

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-20 10:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        "scan_events",
        sa.Column("sequence", sa.Integer(), nullable=False, server_default="0"),
    )


def downgrade() -> None:
    with op.batch_alter_table("scan_events") as batch_op:
        batch_op.drop_column("sequence")
