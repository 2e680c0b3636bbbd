"""create codes and scan_events

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "codes",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("system_acronym", sa.String(), nullable=False),
        sa.Column("size", sa.String(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_codes")),
    )
    op.create_table(
        "scan_events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("code_id", sa.String(length=32), nullable=False),
        sa.Column("scanned_by_id", sa.String(), nullable=False),
        sa.Column("scanned_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("raw_payload", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(
            ["code_id"],
            ["codes.id"],
            name=op.f("fk_scan_events_code_id_codes"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_scan_events")),
    )
    op.create_index(
        "ix_scan_events_scanned_by_id_scanned_at",
        "scan_events",
        ["scanned_by_id", "scanned_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_scan_events_scanned_by_id_scanned_at", table_name="scan_events")
    op.drop_table("scan_events")
    op.drop_table("codes")
