from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from sqlalchemy.orm import Session

from app.api.deps import get_current_user_id, get_generation_client
from app.core.config import settings
from app.core.errors import UploadTooLarge
from app.db.session import get_db
from app.services.generation import GenerationRequest, generate_study_pack
from app.services.llm.openai_client import GenerationClient
from app.services.progress import get_quiz_attempts
from app.services.study_packs import (
    attempt_to_dict,
    delete_study_pack,
    get_owned_study_pack,
    get_study_pack,
    list_user_study_packs,
    pack_to_dict,
)

router = APIRouter(prefix="/api/study-packs", tags=["study_packs"])


@router.get("")
def list_study_packs(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return [pack_to_dict(sp) for sp in list_user_study_packs(db, user_id)]


@router.post("/generate", status_code=201)
def generate(
    file: UploadFile | None = File(default=None),
    text_input: str | None = Form(default=None, alias="textInput"),
    difficulty: str = Form(default="Medium"),
    summary_length: str = Form(default="Medium", alias="summaryLength"),
    flashcard_count: int = Form(default=10, alias="flashcardCount"),
    quiz_count: int = Form(default=5, alias="quizCount"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    client: GenerationClient = Depends(get_generation_client),
):
    req = GenerationRequest(
        text_input=text_input,
        difficulty=difficulty,
        summary_length=summary_length,
        flashcard_count=flashcard_count,
        quiz_count=quiz_count,
    )

    if file is not None:
        data = file.file.read(settings.max_upload_bytes + 1)
        if len(data) > settings.max_upload_bytes:
            raise UploadTooLarge(f"File exceeds the {settings.max_upload_bytes // (1024 * 1024)}MB upload limit")
        req.file_bytes = data
        req.mime_type = file.content_type
        req.filename = file.filename

    sp = generate_study_pack(db, client, user_id, req)
    return get_study_pack(db, sp.id, user_id)


@router.get("/{study_pack_id}")
def get_one(
    study_pack_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return get_study_pack(db, study_pack_id, user_id)


@router.delete("/{study_pack_id}", status_code=204)
def delete_one(
    study_pack_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    get_owned_study_pack(db, study_pack_id, user_id)
    delete_study_pack(db, study_pack_id)
    return Response(status_code=204)


@router.get("/{study_pack_id}/quiz-attempts")
def quiz_attempts(
    study_pack_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    get_owned_study_pack(db, study_pack_id, user_id)
    return [attempt_to_dict(a) for a in get_quiz_attempts(db, user_id, study_pack_id)]
