from __future__ import annotations

from functools import lru_cache

from fastapi import Header

from app.core.config import settings
from app.core.errors import Unauthorized
from app.services.llm.openai_client import GenerationClient, OpenAIGenerationClient


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Identity is resolved upstream (auth proxy); we only read the forwarded id."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise Unauthorized("Unauthorized")
    return user_id


@lru_cache(maxsize=1)
def _openai_client() -> OpenAIGenerationClient:
    return OpenAIGenerationClient(
        settings.openai_api_key,
        settings.openai_model,
        base_url=settings.openai_base_url,
        timeout_sec=settings.openai_timeout_sec,
    )


class DeferredGenerationClient:
    """Builds the OpenAI client on the first generate() call, after the service's input checks."""

    def generate(self, prompt: str, *, json_mode: bool = True) -> str:
        return _openai_client().generate(prompt, json_mode=json_mode)


def get_generation_client() -> GenerationClient:
    return DeferredGenerationClient()
