"""Initial schema for civic reports.

Revision ID: 7e2a91c4d5b0
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "7e2a91c4d5b0"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "departments",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("categories", sa.JSON(), nullable=False),
        _created_at(),
        if_not_exists=True,
    )

    op.create_table(
        "service_areas",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "department_id",
            sa.Integer(),
            sa.ForeignKey("departments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("center_longitude", sa.Float(), nullable=False),
        sa.Column("center_latitude", sa.Float(), nullable=False),
        sa.Column("radius_meters", sa.Float(), nullable=False, server_default=sa.text("0")),
        if_not_exists=True,
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="citizen"),
        sa.Column(
            "department_id",
            sa.Integer(),
            sa.ForeignKey("departments.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("points", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("badges", sa.JSON(), nullable=False),
        _created_at(),
        sa.UniqueConstraint("email"),
        if_not_exists=True,
    )

    op.create_table(
        "reports",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "reporter_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=20), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="new"),
        sa.Column("priority", sa.String(length=10), nullable=False, server_default="medium"),
        sa.Column("urgency", sa.String(length=10), nullable=False, server_default="medium"),
        sa.Column(
            "assigned_department_id",
            sa.Integer(),
            sa.ForeignKey("departments.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "assigned_staff_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("media_urls", sa.JSON(), nullable=False),
        sa.Column("resolved_media_urls", sa.JSON(), nullable=False),
        sa.Column(
            "resolved_by_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("upvote_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "processing_method", sa.String(length=20), nullable=False, server_default="manual"
        ),
        sa.Column("confidence", sa.Float(), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        if_not_exists=True,
    )

    op.create_table(
        "report_upvotes",
        sa.Column(
            "report_id",
            sa.Integer(),
            sa.ForeignKey("reports.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        if_not_exists=True,
    )

    op.create_table(
        "report_updates",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "report_id",
            sa.Integer(),
            sa.ForeignKey("reports.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("change_type", sa.String(length=20), nullable=False),
        sa.Column("from_value", sa.String(length=255), nullable=True),
        sa.Column("to_value", sa.String(length=255), nullable=True),
        sa.Column("comment", sa.Text(), nullable=True),
        _created_at(),
        if_not_exists=True,
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "recipient_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "report_id",
            sa.Integer(),
            sa.ForeignKey("reports.id", ondelete="SET NULL"),
            nullable=True,
        ),
        _created_at(),
        if_not_exists=True,
    )

    # Indexes - departments and users
    op.create_index(
        "ix_service_areas_department_id", "service_areas", ["department_id"], if_not_exists=True
    )
    op.create_index("ix_users_role", "users", ["role"], if_not_exists=True)
    op.create_index("ix_users_department_id", "users", ["department_id"], if_not_exists=True)
    op.create_index("ix_users_points", "users", ["points"], if_not_exists=True)

    # Indexes - reports
    op.create_index("ix_reports_reporter_id", "reports", ["reporter_id"], if_not_exists=True)
    op.create_index("ix_reports_category", "reports", ["category"], if_not_exists=True)
    op.create_index("ix_reports_status", "reports", ["status"], if_not_exists=True)
    op.create_index("ix_reports_upvote_count", "reports", ["upvote_count"], if_not_exists=True)
    op.create_index(
        "ix_reports_assigned_department_id",
        "reports",
        ["assigned_department_id"],
        if_not_exists=True,
    )
    op.create_index(
        "ix_reports_assigned_staff_id", "reports", ["assigned_staff_id"], if_not_exists=True
    )
    op.create_index(
        "idx_reports_staff_status",
        "reports",
        ["assigned_staff_id", "status"],
        if_not_exists=True,
    )
    op.create_index(
        "idx_reports_created",
        "reports",
        [sa.text("created_at DESC"), sa.text("id DESC")],
        if_not_exists=True,
    )

    # Indexes - audit trail and notifications
    op.create_index(
        "idx_updates_report", "report_updates", ["report_id", "id"], if_not_exists=True
    )
    op.create_index(
        "idx_notifications_recipient",
        "notifications",
        ["recipient_id", sa.text("created_at DESC")],
        if_not_exists=True,
    )


def downgrade() -> None:
    op.drop_table("notifications", if_exists=True)
    op.drop_table("report_updates", if_exists=True)
    op.drop_table("report_upvotes", if_exists=True)
    op.drop_table("reports", if_exists=True)
    op.drop_table("users", if_exists=True)
    op.drop_table("service_areas", if_exists=True)
    op.drop_table("departments", if_exists=True)
