from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base_class import Base


class Difficulty(str, enum.Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class SummaryLength(str, enum.Enum):
    SHORT = "Short"
    MEDIUM = "Medium"
    LONG = "Long"


class StudyPack(Base):
    __tablename__ = "study_packs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # display/meta
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    original_file_name: Mapped[str] = mapped_column(String(512), nullable=False)

    # generated
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    topics: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # generation parameters
    difficulty: Mapped[str] = mapped_column(String(16), nullable=False, default=Difficulty.MEDIUM.value)
    summary_length: Mapped[str] = mapped_column(String(16), nullable=False, default=SummaryLength.MEDIUM.value)
    flashcard_count: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    quiz_count: Mapped[int] = mapped_column(Integer, nullable=False, default=5)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    flashcards = relationship(
        "Flashcard",
        back_populates="study_pack",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Flashcard.id",
    )
    quizzes = relationship(
        "Quiz",
        back_populates="study_pack",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Quiz.id",
    )
