"""Initial schema: admin workloads and per-category expertise.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Admin workloads
    op.create_table(
        "admin_workloads",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("admin_id", sa.BigInteger, unique=True, nullable=False),
        sa.Column("active_appeals_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_appeals_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_available", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("last_activity_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("active_appeals_count >= 0", name="ck_workload_active_non_negative"),
        sa.CheckConstraint("total_appeals_count >= 0", name="ck_workload_total_non_negative"),
    )
    op.create_index("idx_workloads_available", "admin_workloads", ["is_available"])

    # Category expertise
    op.create_table(
        "admin_category_expertise",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "admin_id",
            sa.BigInteger,
            sa.ForeignKey("admin_workloads.admin_id"),
            nullable=False,
        ),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("experience_level", sa.Integer, nullable=False, server_default="1"),
        sa.Column("successful_resolutions", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_resolutions", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("admin_id", "category", name="uq_expertise_admin_category"),
        sa.CheckConstraint("experience_level BETWEEN 1 AND 5", name="ck_expertise_level_range"),
        sa.CheckConstraint(
            "successful_resolutions >= 0 AND successful_resolutions <= total_resolutions",
            name="ck_expertise_resolutions",
        ),
    )
    op.create_index("idx_expertise_category", "admin_category_expertise", ["category"])


def downgrade() -> None:
    op.drop_index("idx_expertise_category", table_name="admin_category_expertise")
    op.drop_table("admin_category_expertise")
    op.drop_index("idx_workloads_available", table_name="admin_workloads")
    op.drop_table("admin_workloads")
