from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, func

from app.db.base_class import Base


class QuizAttempt(Base):
    """One row per finished quiz run. Never updated."""

    __tablename__ = "quiz_attempts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), nullable=False)
    study_pack_id = Column(
        Integer,
        ForeignKey("study_packs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    score = Column(Integer, nullable=False)  # percentage 0-100
    total_questions = Column(Integer, nullable=False)
    correct_answers = Column(Integer, nullable=False)

    attempted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_quiz_attempts_user_pack", "user_id", "study_pack_id"),
    )
