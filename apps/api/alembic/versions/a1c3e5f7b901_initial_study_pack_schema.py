"""initial study pack schema

Revision ID: a1c3e5f7b901
Revises:
Create Date: 2026-10-19 10:12:31.402118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a1c3e5f7b901"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "study_packs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=512), nullable=False),
        sa.Column("original_file_name", sa.String(length=512), nullable=False),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("topics", sa.JSON(), nullable=False),
        sa.Column("difficulty", sa.String(length=16), nullable=False, server_default="Medium"),
        sa.Column("summary_length", sa.String(length=16), nullable=False, server_default="Medium"),
        sa.Column("flashcard_count", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("quiz_count", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
    )
    op.create_index("ix_study_packs_user_id", "study_packs", ["user_id"])

    op.create_table(
        "flashcards",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "study_pack_id",
            sa.Integer(),
            sa.ForeignKey("study_packs.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("answer", sa.Text(), nullable=False),
    )
    op.create_index("ix_flashcards_id", "flashcards", ["id"])
    op.create_index("ix_flashcards_study_pack_id", "flashcards", ["study_pack_id"])

    op.create_table(
        "quizzes",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "study_pack_id",
            sa.Integer(),
            sa.ForeignKey("study_packs.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("options", sa.JSON(), nullable=False),
        sa.Column("correct_answer", sa.Text(), nullable=False),
    )
    op.create_index("ix_quizzes_id", "quizzes", ["id"])
    op.create_index("ix_quizzes_study_pack_id", "quizzes", ["study_pack_id"])

    op.create_table(
        "flashcard_progress",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column(
            "flashcard_id",
            sa.Integer(),
            sa.ForeignKey("flashcards.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("mastered", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("last_reviewed", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("user_id", "flashcard_id", name="uq_flashcard_progress_user_card"),
    )
    op.create_index("ix_flashcard_progress_id", "flashcard_progress", ["id"])
    op.create_index("ix_flashcard_progress_user_id", "flashcard_progress", ["user_id"])
    op.create_index("ix_flashcard_progress_flashcard_id", "flashcard_progress", ["flashcard_id"])

    op.create_table(
        "quiz_attempts",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column(
            "study_pack_id",
            sa.Integer(),
            sa.ForeignKey("study_packs.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("total_questions", sa.Integer(), nullable=False),
        sa.Column("correct_answers", sa.Integer(), nullable=False),
        sa.Column("attempted_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_quiz_attempts_id", "quiz_attempts", ["id"])
    op.create_index("ix_quiz_attempts_study_pack_id", "quiz_attempts", ["study_pack_id"])
    op.create_index("idx_quiz_attempts_user_pack", "quiz_attempts", ["user_id", "study_pack_id"])


def downgrade() -> None:
    op.drop_table("quiz_attempts")
    op.drop_table("flashcard_progress")
    op.drop_table("quizzes")
    op.drop_table("flashcards")
    op.drop_index("ix_study_packs_user_id", table_name="study_packs")
    op.drop_table("study_packs")
