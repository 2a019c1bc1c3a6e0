from __future__ import annotations

import os
from dataclasses import dataclass

import structlog
from sqlalchemy.orm import Session

from app.core.errors import ContentTooShort, InvalidParameter, NoContentProvided
from app.models.study_pack import Difficulty, StudyPack, SummaryLength
from app.services.extraction import extract_text
from app.services.llm.openai_client import GenerationClient
from app.services.llm.prompts import build_generation_prompt
from app.services.study_packs import create_study_pack_with_content
from app.services.validation import validate_generated_content

logger = structlog.get_logger(__name__)

MIN_CONTENT_CHARS = 50
MAX_ITEM_COUNT = 50
TEXT_INPUT_FILENAME = "Text Input"


@dataclass
class GenerationRequest:
    text_input: str | None = None
    file_bytes: bytes | None = None
    mime_type: str | None = None
    filename: str | None = None

    difficulty: str = Difficulty.MEDIUM.value
    summary_length: str = SummaryLength.MEDIUM.value
    flashcard_count: int = 10
    quiz_count: int = 5

    @property
    def has_file(self) -> bool:
        return self.file_bytes is not None


def _check_params(req: GenerationRequest) -> None:
    if req.difficulty not in {d.value for d in Difficulty}:
        raise InvalidParameter(f"Invalid difficulty: {req.difficulty}")
    if req.summary_length not in {s.value for s in SummaryLength}:
        raise InvalidParameter(f"Invalid summaryLength: {req.summary_length}")
    for name, value in (("flashcardCount", req.flashcard_count), ("quizCount", req.quiz_count)):
        if not 1 <= value <= MAX_ITEM_COUNT:
            raise InvalidParameter(f"{name} must be between 1 and {MAX_ITEM_COUNT}")


def title_from_filename(filename: str) -> str:
    stem, ext = os.path.splitext(filename)
    return (stem if ext else filename).strip() or filename


def resolve_source_text(req: GenerationRequest) -> tuple[str, str]:
    """Returns (text, original_file_name). A file wins over pasted text."""
    if req.has_file:
        filename = req.filename or "upload"
        return extract_text(req.file_bytes or b"", req.mime_type or "", filename), filename
    if req.text_input and req.text_input.strip():
        return req.text_input, TEXT_INPUT_FILENAME
    raise NoContentProvided("No content provided")


def generate_study_pack(
    db: Session,
    client: GenerationClient,
    user_id: str,
    req: GenerationRequest,
) -> StudyPack:
    """
    upload/text -> extract -> length check -> prompt -> LLM -> validate -> store.
    Nothing is written unless the reply passed validation.
    """
    _check_params(req)

    text, original_file_name = resolve_source_text(req)
    if len(text.strip()) < MIN_CONTENT_CHARS:
        raise ContentTooShort("Content is too short to generate study materials.")

    log = logger.bind(user_id=user_id, source=original_file_name)
    log.info("study_pack_generation_started", chars=len(text), difficulty=req.difficulty)

    prompt = build_generation_prompt(
        text,
        difficulty=req.difficulty,
        summary_length=req.summary_length,
        flashcard_count=req.flashcard_count,
        quiz_count=req.quiz_count,
    )
    raw = client.generate(prompt, json_mode=True)
    content = validate_generated_content(raw)

    sp = create_study_pack_with_content(
        db,
        user_id,
        fields={
            "title": title_from_filename(original_file_name),
            "original_file_name": original_file_name,
            "difficulty": req.difficulty,
            "summary_length": req.summary_length,
            "flashcard_count": req.flashcard_count,
            "quiz_count": req.quiz_count,
        },
        content=content,
    )
    log.info("study_pack_generation_done", study_pack_id=sp.id)
    return sp
