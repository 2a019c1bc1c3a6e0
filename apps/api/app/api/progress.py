from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from app.api.deps import get_current_user_id
from app.core.errors import NotFound
from app.db.session import get_db
from app.models.flashcard import Flashcard
from app.services.progress import get_flashcard_progress, record_attempt, set_mastery
from app.services.study_packs import attempt_to_dict

router = APIRouter(prefix="/api", tags=["progress"])


class FlashcardProgressRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    flashcard_id: int = Field(alias="flashcardId")
    mastered: bool


class FlashcardProgressResponse(BaseModel):
    flashcardId: int
    mastered: bool
    lastReviewed: str | None


class QuizAttemptRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    study_pack_id: int = Field(alias="studyPackId")
    score: int
    total_questions: int = Field(alias="totalQuestions")
    correct_answers: int = Field(alias="correctAnswers")


@router.post("/flashcards/progress", response_model=FlashcardProgressResponse)
def flashcards_mark(
    req: FlashcardProgressRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> FlashcardProgressResponse:
    row = set_mastery(db, user_id, req.flashcard_id, req.mastered)
    return FlashcardProgressResponse(
        flashcardId=row.flashcard_id,
        mastered=bool(row.mastered),
        lastReviewed=row.last_reviewed.isoformat() if row.last_reviewed else None,
    )


@router.get("/flashcards/{flashcard_id}/progress", response_model=FlashcardProgressResponse)
def flashcard_progress(
    flashcard_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> FlashcardProgressResponse:
    if not db.query(Flashcard.id).filter(Flashcard.id == flashcard_id).first():
        raise NotFound("Flashcard not found")
    row = get_flashcard_progress(db, user_id, flashcard_id)
    if not row:
        return FlashcardProgressResponse(flashcardId=flashcard_id, mastered=False, lastReviewed=None)
    return FlashcardProgressResponse(
        flashcardId=row.flashcard_id,
        mastered=bool(row.mastered),
        lastReviewed=row.last_reviewed.isoformat() if row.last_reviewed else None,
    )


@router.post("/quiz/attempt", status_code=201)
def quiz_attempt(
    req: QuizAttemptRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    attempt = record_attempt(
        db,
        user_id,
        req.study_pack_id,
        score=req.score,
        total_questions=req.total_questions,
        correct_answers=req.correct_answers,
    )
    return attempt_to_dict(attempt)
