"""Error taxonomy for the generation pipeline and the HTTP layer."""
from __future__ import annotations

from typing import Any


class StudyPackError(Exception):
    """Base error; carries the HTTP status the API layer responds with."""

    status_code = 500

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def error_code(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


# ---- extraction ----

class UnsupportedFormat(StudyPackError):
    status_code = 400

    def __init__(self, mime_type: str):
        super().__init__(f"Unsupported file type: {mime_type or 'unknown'}", details={"mime_type": mime_type})
        self.mime_type = mime_type


class ParseFailure(StudyPackError):
    status_code = 400


class EmptyContent(StudyPackError):
    status_code = 400


# ---- request / input ----

class NoContentProvided(StudyPackError):
    status_code = 400


class ContentTooShort(StudyPackError):
    status_code = 400


class InvalidParameter(StudyPackError):
    status_code = 400


class TooShort(StudyPackError):
    status_code = 400


class UploadTooLarge(StudyPackError):
    status_code = 413


# ---- generation ----

class ProviderError(StudyPackError):
    status_code = 500


class InvalidAIResponse(StudyPackError):
    status_code = 500


# ---- storage / ownership ----

class StorageError(StudyPackError):
    status_code = 500


class NotFound(StudyPackError):
    status_code = 404


class Unauthorized(StudyPackError):
    status_code = 401
