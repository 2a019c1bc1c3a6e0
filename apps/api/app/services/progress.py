from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import InvalidParameter, NotFound, StorageError, Unauthorized
from app.models.flashcard import Flashcard
from app.models.flashcard_progress import FlashcardProgress
from app.models.quiz_attempt import QuizAttempt
from app.models.study_pack import StudyPack

logger = structlog.get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise StorageError(f"Upsert not supported for dialect: {dialect}")


def _check_pack_owner(db: Session, study_pack_id: int, user_id: str) -> None:
    owner = db.query(StudyPack.user_id).filter(StudyPack.id == study_pack_id).scalar()
    if owner is None:
        raise NotFound("Study pack not found")
    if owner != user_id:
        raise Unauthorized("Unauthorized")


# ----------------------------
# Flashcard mastery
# ----------------------------

def get_flashcard_progress(db: Session, user_id: str, flashcard_id: int) -> FlashcardProgress | None:
    return (
        db.query(FlashcardProgress)
        .filter(
            FlashcardProgress.user_id == user_id,
            FlashcardProgress.flashcard_id == flashcard_id,
        )
        .first()
    )


def set_mastery(db: Session, user_id: str, flashcard_id: int, mastered: bool) -> FlashcardProgress:
    """
    Upsert the (user, flashcard) row in one statement:
    INSERT ... ON CONFLICT (user_id, flashcard_id) DO UPDATE.
    """
    card = db.query(Flashcard).filter(Flashcard.id == flashcard_id).first()
    if not card:
        raise NotFound("Flashcard not found")
    _check_pack_owner(db, card.study_pack_id, user_id)

    now = _now()
    insert = _insert_for(db)
    stmt = insert(FlashcardProgress.__table__).values(
        user_id=user_id,
        flashcard_id=flashcard_id,
        mastered=bool(mastered),
        last_reviewed=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "flashcard_id"],
        set_={"mastered": stmt.excluded.mastered, "last_reviewed": stmt.excluded.last_reviewed},
    )

    try:
        db.execute(stmt)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError("Failed to save flashcard progress") from e

    row = get_flashcard_progress(db, user_id, flashcard_id)
    # the upsert bypasses the identity map; reload any cached instance
    db.refresh(row)
    logger.info("flashcard_mastery_set", user_id=user_id, flashcard_id=flashcard_id, mastered=bool(mastered))
    return row


# ----------------------------
# Quiz attempts
# ----------------------------

def record_attempt(
    db: Session,
    user_id: str,
    study_pack_id: int,
    score: int,
    total_questions: int,
    correct_answers: int,
) -> QuizAttempt:
    """Append-only: every call is a new row."""
    if not 0 <= score <= 100:
        raise InvalidParameter("score must be between 0 and 100")
    if total_questions < 1:
        raise InvalidParameter("totalQuestions must be at least 1")
    if not 0 <= correct_answers <= total_questions:
        raise InvalidParameter("correctAnswers must be between 0 and totalQuestions")

    _check_pack_owner(db, study_pack_id, user_id)

    attempt = QuizAttempt(
        user_id=user_id,
        study_pack_id=study_pack_id,
        score=score,
        total_questions=total_questions,
        correct_answers=correct_answers,
        attempted_at=_now(),
    )
    try:
        db.add(attempt)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError("Failed to save quiz attempt") from e

    db.refresh(attempt)
    logger.info("quiz_attempt_recorded", user_id=user_id, study_pack_id=study_pack_id, score=score)
    return attempt


def get_quiz_attempts(db: Session, user_id: str, study_pack_id: int) -> list[QuizAttempt]:
    """Newest first."""
    return (
        db.query(QuizAttempt)
        .filter(QuizAttempt.user_id == user_id, QuizAttempt.study_pack_id == study_pack_id)
        .order_by(QuizAttempt.attempted_at.desc(), QuizAttempt.id.desc())
        .all()
    )
