"""Create course analytics tables"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("password_hash", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("timezone('utc', now())"), nullable=True),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "courses",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("stepik_course_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=500), server_default=sa.text("''"), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cover_url", sa.String(length=1000), nullable=True),
        sa.Column("is_enabled", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("timezone('utc', now())"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("timezone('utc', now())"), nullable=True),
        sa.Column("last_synced_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_courses_stepik_course_id", "courses", ["stepik_course_id"], unique=True)

    op.create_table(
        "metrics_daily",
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("total_submissions", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("correct_submissions", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("wrong_submissions", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("active_learners_dau", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("new_learners", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("certificates", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("learners_total", sa.Integer(), nullable=True),
        sa.Column("certificates_total", sa.Integer(), nullable=True),
        sa.Column("reputation_delta", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("knowledge_delta", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("reviews_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("reviews_avg", sa.Float(), server_default=sa.text("0"), nullable=False),
        sa.Column("rating_value", sa.Float(), server_default=sa.text("0"), nullable=False),
        sa.Column("rating_delta", sa.Float(), server_default=sa.text("0"), nullable=False),
        sa.PrimaryKeyConstraint("course_id", "date", name="pk_metrics_daily"),
    )

    op.create_table(
        "sync_runs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("started_at", sa.DateTime(timezone=True), server_default=sa.text("timezone('utc', now())"), nullable=False),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=20), server_default=sa.text("'running'"), nullable=False),
        sa.Column("error_text", sa.Text(), nullable=True),
        sa.Column("fetched_items_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
    )
    op.create_index("ix_sync_runs_course_id", "sync_runs", ["course_id"], unique=False)
    op.create_index("ix_sync_runs_started_at", "sync_runs", ["started_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_sync_runs_started_at", table_name="sync_runs")
    op.drop_index("ix_sync_runs_course_id", table_name="sync_runs")
    op.drop_table("sync_runs")
    op.drop_table("metrics_daily")
    op.drop_index("ix_courses_stepik_course_id", table_name="courses")
    op.drop_table("courses")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
