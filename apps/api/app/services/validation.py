from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from app.core.errors import InvalidAIResponse


def _non_empty(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must be a non-empty string")
    return v


NonEmptyStr = Annotated[str, AfterValidator(_non_empty)]


class FlashcardItem(BaseModel):
    question: NonEmptyStr
    answer: NonEmptyStr


class QuizItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: NonEmptyStr
    options: list[NonEmptyStr] = Field(min_length=2)
    correct_answer: NonEmptyStr = Field(alias="correctAnswer")

    @model_validator(mode="after")
    def _answer_is_an_option(self) -> QuizItem:
        if self.correct_answer not in self.options:
            raise ValueError("correctAnswer must be one of options")
        return self


class GeneratedContent(BaseModel):
    summary: NonEmptyStr
    topics: list[NonEmptyStr] = Field(default_factory=list)
    flashcards: list[FlashcardItem]
    quizzes: list[QuizItem]

    @field_validator("topics", mode="before")
    @classmethod
    def _topics_default(cls, v: Any) -> Any:
        return [] if v is None else v

    @model_validator(mode="after")
    def _has_content(self) -> GeneratedContent:
        if not self.flashcards and not self.quizzes:
            raise ValueError("response contains no flashcards and no quizzes")
        return self


def _describe(err: ValidationError) -> str:
    parts = []
    for e in err.errors()[:5]:
        loc = ".".join(str(x) for x in e.get("loc", ()))
        parts.append(f"{loc or 'response'}: {e.get('msg')}")
    return "; ".join(parts)


def validate_generated_content(raw_json_text: str) -> GeneratedContent:
    """
    Parse and check the provider's reply against the study pack contract.
    Anything off-contract raises InvalidAIResponse before a row is written.
    """
    try:
        payload = json.loads(raw_json_text or "")
    except json.JSONDecodeError as e:
        raise InvalidAIResponse(f"Invalid response from AI: not valid JSON ({e.msg})") from e

    if not isinstance(payload, dict):
        raise InvalidAIResponse("Invalid response from AI: expected a JSON object")

    missing = [k for k in ("summary", "flashcards", "quizzes") if k not in payload]
    if missing:
        raise InvalidAIResponse(f"Invalid response from AI: missing {', '.join(missing)}")

    try:
        return GeneratedContent.model_validate(payload)
    except ValidationError as e:
        raise InvalidAIResponse(f"Invalid response from AI: {_describe(e)}") from e
