from __future__ import annotations

import time
from typing import Protocol

import openai
import structlog
from openai import OpenAI

from app.core.errors import ProviderError

logger = structlog.get_logger(__name__)


class GenerationClient(Protocol):
    """Prompt in, completion text out."""

    def generate(self, prompt: str, *, json_mode: bool = True) -> str: ...


class OpenAIGenerationClient:
    """
    Single-shot chat completion against OpenAI (or any OpenAI-compatible
    endpoint via base_url, e.g. Groq).

    - one user message, no system prompt
    - response_format=json_object when json_mode
    - SDK retries disabled: a failed call surfaces as ProviderError
    """

    def __init__(
        self,
        api_key: str | None,
        model: str,
        *,
        base_url: str | None = None,
        timeout_sec: float = 60.0,
    ) -> None:
        if not api_key:
            raise ProviderError("OPENAI_API_KEY is missing")
        self.model = model
        self.timeout_sec = timeout_sec
        self._client = OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_sec,
            max_retries=0,
        )

    def generate(self, prompt: str, *, json_mode: bool = True) -> str:
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        t0 = time.time()
        try:
            chat = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
        except openai.APITimeoutError as e:
            logger.error("llm_timeout", model=self.model, timeout_sec=self.timeout_sec)
            raise ProviderError(f"LLM provider timed out after {self.timeout_sec:.0f}s") from e
        except openai.APIError as e:
            logger.error("llm_request_failed", model=self.model, error=str(e))
            raise ProviderError(f"LLM provider request failed: {e}") from e

        elapsed_ms = int((time.time() - t0) * 1000)
        if not chat.choices:
            raise ProviderError("LLM provider returned no choices")

        content = (chat.choices[0].message.content or "").strip()
        logger.info(
            "llm_completion",
            model=self.model,
            json_mode=json_mode,
            prompt_chars=len(prompt),
            completion_chars=len(content),
            elapsed_ms=elapsed_ms,
        )
        return content
