"""scoring and progress tables

Revision ID: 3b7e2c91d4a0
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b7e2c91d4a0"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _uuid_pk() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True)


def _tstz(name: str, nullable: bool) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    # --- content ---
    op.create_table(
        "courses",
        _uuid_pk(),
        sa.Column("slug", sa.String(length=255), nullable=False, unique=True),
        sa.Column("title", sa.String(length=500), nullable=False),
    )
    op.create_table(
        "sections",
        _uuid_pk(),
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("courses.id"),
            nullable=False,
        ),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "test_questions_count", sa.Integer(), nullable=False, server_default="6"
        ),
        sa.Column("pass_percent", sa.Integer(), nullable=False, server_default="60"),
        sa.UniqueConstraint("course_id", "slug"),
        sa.CheckConstraint(
            "test_questions_count >= 1", name="ck_sections_test_questions_count"
        ),
        sa.CheckConstraint(
            "pass_percent BETWEEN 0 AND 100", name="ck_sections_pass_percent"
        ),
    )
    op.create_table(
        "islands",
        _uuid_pk(),
        sa.Column(
            "section_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("sections.id"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False, server_default="normal"),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_table(
        "exercises",
        _uuid_pk(),
        sa.Column("answer_type", sa.String(length=16), nullable=False),
        sa.Column("points_max", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("prompt", sa.Text(), nullable=False, server_default=""),
    )
    op.create_table(
        "exercise_answer_keys",
        sa.Column(
            "exercise_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("exercises.id"),
            primary_key=True,
        ),
        sa.Column("answer_key", postgresql.JSONB(), nullable=False),
    )
    op.create_table(
        "island_items",
        _uuid_pk(),
        sa.Column(
            "island_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("islands.id"),
            nullable=False,
        ),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("item_type", sa.String(length=16), nullable=False),
        sa.Column(
            "exercise_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("exercises.id"),
            nullable=True,
        ),
    )
    op.create_index(
        "ix_island_items_island_order", "island_items", ["island_id", "order_index"]
    )

    # --- attempt log ---
    op.create_table(
        "exercise_attempts",
        _uuid_pk(),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column(
            "exercise_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("exercises.id"),
            nullable=False,
        ),
        sa.Column(
            "island_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("islands.id"),
            nullable=False,
        ),
        sa.Column("answer", postgresql.JSONB(), nullable=False),
        sa.Column("is_correct", sa.Boolean(), nullable=False),
        sa.Column("points_awarded", sa.Integer(), nullable=False),
        sa.Column("time_spent_sec", sa.Integer(), nullable=False, server_default="0"),
        _tstz("created_at", nullable=False),
    )
    op.create_index(
        "ix_exercise_attempts_latest",
        "exercise_attempts",
        ["user_id", "island_id", "exercise_id", "created_at"],
    )

    # --- progress ---
    op.create_table(
        "island_item_progress",
        sa.Column("user_id", sa.String(length=255), primary_key=True),
        sa.Column(
            "island_item_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("island_items.id"),
            primary_key=True,
        ),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("points_earned", sa.Integer(), nullable=False, server_default="0"),
        _tstz("completed_at", nullable=True),
        sa.Column("last_answer", postgresql.JSONB(), nullable=True),
    )
    op.create_table(
        "section_test_attempts",
        _uuid_pk(),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column(
            "section_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("sections.id"),
            nullable=False,
        ),
        sa.Column(
            "island_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("islands.id"),
            nullable=False,
        ),
        sa.Column("score_percent", sa.Integer(), nullable=False),
        sa.Column("passed", sa.Boolean(), nullable=False),
        sa.Column("correct_count", sa.Integer(), nullable=False, server_default="0"),
        _tstz("created_at", nullable=False),
    )
    op.create_index(
        "ix_section_test_attempts_user_section",
        "section_test_attempts",
        ["user_id", "section_id"],
    )
    op.create_table(
        "section_progress",
        sa.Column("user_id", sa.String(length=255), primary_key=True),
        sa.Column(
            "section_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("sections.id"),
            primary_key=True,
        ),
        sa.Column(
            "best_test_score_percent", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("points_done", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("points_catchup", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("points_total", sa.Integer(), nullable=False, server_default="0"),
        _tstz("updated_at", nullable=True),
    )


def downgrade() -> None:
    op.drop_table("section_progress")
    op.drop_index(
        "ix_section_test_attempts_user_section", table_name="section_test_attempts"
    )
    op.drop_table("section_test_attempts")
    op.drop_table("island_item_progress")
    op.drop_index("ix_exercise_attempts_latest", table_name="exercise_attempts")
    op.drop_table("exercise_attempts")
    op.drop_index("ix_island_items_island_order", table_name="island_items")
    op.drop_table("island_items")
    op.drop_table("exercise_answer_keys")
    op.drop_table("exercises")
    op.drop_table("islands")
    op.drop_table("sections")
    op.drop_table("courses")
