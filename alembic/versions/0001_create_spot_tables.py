"""Create spot and practice log tables"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_create_spot_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "spots",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("piece_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=255), server_default=sa.text("''"), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("page_number", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("x", sa.Float(), nullable=False),
        sa.Column("y", sa.Float(), nullable=False),
        sa.Column("width", sa.Float(), nullable=False),
        sa.Column("height", sa.Float(), nullable=False),
        sa.Column("priority", sa.String(length=20), server_default=sa.text("'medium'"), nullable=False),
        sa.Column("color", sa.String(length=20), server_default=sa.text("'red'"), nullable=False),
        sa.Column("readiness_level", sa.String(length=20), server_default=sa.text("'new'"), nullable=False),
        sa.Column("practice_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("success_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("interval_days", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("next_due", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_practiced_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_outcome", sa.String(length=20), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("page_number >= 1", name="ck_spots_page_number_positive"),
        sa.CheckConstraint("practice_count >= 0", name="ck_spots_practice_count_non_negative"),
        sa.CheckConstraint("success_count >= 0", name="ck_spots_success_count_non_negative"),
        sa.CheckConstraint("interval_days >= 0", name="ck_spots_interval_non_negative"),
        sa.PrimaryKeyConstraint("id", name="pk_spots"),
    )
    op.create_index("ix_spots_piece_id", "spots", ["piece_id"])
    op.create_index("ix_spots_active_next_due", "spots", ["is_active", "next_due"])

    op.create_table(
        "practice_logs",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("spot_id", sa.String(length=64), nullable=False),
        sa.Column("outcome", sa.String(length=20), nullable=False),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("level_before", sa.String(length=20), nullable=False),
        sa.Column("level_after", sa.String(length=20), nullable=False),
        sa.Column("interval_before", sa.Integer(), nullable=False),
        sa.Column("interval_after", sa.Integer(), nullable=False),
        sa.Column("practice_time_minutes", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(
            ["spot_id"],
            ["spots.id"],
            name="fk_practice_logs_spot_id_spots",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_practice_logs"),
    )
    op.create_index("ix_practice_logs_spot_id", "practice_logs", ["spot_id"])


def downgrade() -> None:
    op.drop_index("ix_practice_logs_spot_id", table_name="practice_logs")
    op.drop_table("practice_logs")
    op.drop_index("ix_spots_active_next_due", table_name="spots")
    op.drop_index("ix_spots_piece_id", table_name="spots")
    op.drop_table("spots")
