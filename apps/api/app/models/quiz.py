from __future__ import annotations

from sqlalchemy import JSON, Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)
    study_pack_id = Column(
        Integer,
        ForeignKey("study_packs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    question = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)  # list[str], usually 4
    correct_answer = Column(Text, nullable=False)  # one of options

    study_pack = relationship("StudyPack", back_populates="quizzes")
