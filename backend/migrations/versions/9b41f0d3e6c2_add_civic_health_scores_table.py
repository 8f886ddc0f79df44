"""Add civic_health_scores table.

Revision ID: 9b41f0d3e6c2
Revises: 7e2a91c4d5b0
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "9b41f0d3e6c2"
down_revision: str | None = "7e2a91c4d5b0"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "civic_health_scores",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("category", sa.String(length=20), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("unresolved_count", sa.Integer(), nullable=False),
        sa.Column("total_count", sa.Integer(), nullable=False),
        sa.Column("window_days", sa.Integer(), nullable=False),
        sa.Column(
            "computed_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        if_not_exists=True,
    )
    op.create_index(
        "ix_civic_health_scores_category",
        "civic_health_scores",
        ["category"],
        if_not_exists=True,
    )


def downgrade() -> None:
    op.drop_index("ix_civic_health_scores_category", table_name="civic_health_scores", if_exists=True)
    op.drop_table("civic_health_scores", if_exists=True)
