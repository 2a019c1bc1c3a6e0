from __future__ import annotations

from typing import Any, Iterable

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import NotFound, StorageError, Unauthorized
from app.models.flashcard import Flashcard
from app.models.flashcard_progress import FlashcardProgress
from app.models.quiz import Quiz
from app.models.quiz_attempt import QuizAttempt
from app.models.study_pack import StudyPack
from app.services.progress import get_quiz_attempts
from app.services.validation import FlashcardItem, GeneratedContent, QuizItem

logger = structlog.get_logger(__name__)


def _iso(dt) -> str | None:
    return dt.isoformat() if dt else None


# ----------------------------
# Serialization (camelCase wire format)
# ----------------------------

def pack_to_dict(sp: StudyPack) -> dict[str, Any]:
    return {
        "id": sp.id,
        "userId": sp.user_id,
        "title": sp.title,
        "originalFileName": sp.original_file_name,
        "summary": sp.summary,
        "difficulty": sp.difficulty,
        "summaryLength": sp.summary_length,
        "flashcardCount": sp.flashcard_count,
        "quizCount": sp.quiz_count,
        "topics": list(sp.topics or []),
        "createdAt": _iso(sp.created_at),
    }


def flashcard_to_dict(fc: Flashcard) -> dict[str, Any]:
    return {
        "id": fc.id,
        "studyPackId": fc.study_pack_id,
        "question": fc.question,
        "answer": fc.answer,
    }


def quiz_to_dict(q: Quiz) -> dict[str, Any]:
    return {
        "id": q.id,
        "studyPackId": q.study_pack_id,
        "question": q.question,
        "options": list(q.options or []),
        "correctAnswer": q.correct_answer,
    }


def attempt_to_dict(a: QuizAttempt) -> dict[str, Any]:
    return {
        "id": a.id,
        "userId": a.user_id,
        "studyPackId": a.study_pack_id,
        "score": a.score,
        "totalQuestions": a.total_questions,
        "correctAnswers": a.correct_answers,
        "attemptedAt": _iso(a.attempted_at),
    }


# ----------------------------
# Writes
# ----------------------------

def create_study_pack(db: Session, user_id: str, **fields: Any) -> StudyPack:
    """Adds the pack and flushes to get its id. Caller owns the commit."""
    sp = StudyPack(user_id=user_id, **fields)
    db.add(sp)
    db.flush()
    return sp


def attach_flashcards(db: Session, study_pack_id: int, items: Iterable[FlashcardItem]) -> int:
    rows = [Flashcard(study_pack_id=study_pack_id, question=it.question, answer=it.answer) for it in items]
    if not rows:
        return 0
    db.add_all(rows)
    db.flush()
    return len(rows)


def attach_quizzes(db: Session, study_pack_id: int, items: Iterable[QuizItem]) -> int:
    rows = [
        Quiz(
            study_pack_id=study_pack_id,
            question=it.question,
            options=list(it.options),
            correct_answer=it.correct_answer,
        )
        for it in items
    ]
    if not rows:
        return 0
    db.add_all(rows)
    db.flush()
    return len(rows)


def create_study_pack_with_content(
    db: Session,
    user_id: str,
    fields: dict[str, Any],
    content: GeneratedContent,
) -> StudyPack:
    """
    Pack row + flashcards + quizzes in one transaction.
    Any failure rolls the whole thing back: no orphan pack.
    """
    try:
        sp = create_study_pack(
            db,
            user_id,
            summary=content.summary,
            topics=list(content.topics),
            **fields,
        )
        n_cards = attach_flashcards(db, sp.id, content.flashcards)
        n_quiz = attach_quizzes(db, sp.id, content.quizzes)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("study_pack_store_failed", user_id=user_id, error=str(e))
        raise StorageError("Failed to save study pack") from e

    db.refresh(sp)
    logger.info(
        "study_pack_created",
        study_pack_id=sp.id,
        user_id=user_id,
        flashcards=n_cards,
        quizzes=n_quiz,
        topics=len(sp.topics or []),
    )
    return sp


def delete_study_pack(db: Session, study_pack_id: int) -> None:
    """Single top-level delete; children, progress and attempts go by FK cascade."""
    try:
        db.query(StudyPack).filter(StudyPack.id == study_pack_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError("Failed to delete study pack") from e
    logger.info("study_pack_deleted", study_pack_id=study_pack_id)


# ----------------------------
# Reads
# ----------------------------

def list_user_study_packs(db: Session, user_id: str) -> list[StudyPack]:
    return (
        db.query(StudyPack)
        .filter(StudyPack.user_id == user_id)
        .order_by(StudyPack.created_at.desc(), StudyPack.id.desc())
        .all()
    )


def get_owned_study_pack(db: Session, study_pack_id: int, user_id: str) -> StudyPack:
    sp = db.query(StudyPack).filter(StudyPack.id == study_pack_id).first()
    if not sp:
        raise NotFound("Study pack not found")
    if sp.user_id != user_id:
        raise Unauthorized("Unauthorized")
    return sp


def _round_half_up(x: float) -> int:
    return int(x + 0.5)


def get_study_pack(db: Session, study_pack_id: int, requesting_user_id: str | None = None) -> dict[str, Any]:
    """
    Pack with flashcards and quizzes. With a requesting user, the pack must be
    theirs; flashcards then carry `mastered` (when reviewed) and a `progress`
    block aggregates mastery and quiz attempts.
    """
    if requesting_user_id is None:
        sp = db.query(StudyPack).filter(StudyPack.id == study_pack_id).first()
        if not sp:
            raise NotFound("Study pack not found")
    else:
        sp = get_owned_study_pack(db, study_pack_id, requesting_user_id)

    flashcards = [flashcard_to_dict(fc) for fc in sp.flashcards]
    out = pack_to_dict(sp)
    out["flashcards"] = flashcards
    out["quizzes"] = [quiz_to_dict(q) for q in sp.quizzes]

    if requesting_user_id is None:
        return out

    card_ids = [fc["id"] for fc in flashcards]
    rows = (
        db.query(FlashcardProgress)
        .filter(
            FlashcardProgress.user_id == requesting_user_id,
            FlashcardProgress.flashcard_id.in_(card_ids),
        )
        .all()
        if card_ids
        else []
    )
    by_card = {r.flashcard_id: r for r in rows}

    mastered = 0
    for fc in flashcards:
        r = by_card.get(fc["id"])
        if r is None:
            continue
        fc["mastered"] = bool(r.mastered)
        if r.mastered:
            mastered += 1

    history = [attempt_to_dict(a) for a in get_quiz_attempts(db, requesting_user_id, sp.id)]
    avg = _round_half_up(sum(a["score"] for a in history) / len(history)) if history else 0

    out["progress"] = {
        "masteredCount": mastered,
        "totalFlashcards": len(flashcards),
        "averageQuizScore": avg,
        "lastAttempt": history[0] if history else None,
        "quizHistory": history,
    }
    return out
