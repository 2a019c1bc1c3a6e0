from __future__ import annotations

import structlog

from app.core.errors import ProviderError, TooShort
from app.services.llm.openai_client import GenerationClient
from app.services.llm.prompts import build_explain_prompt

logger = structlog.get_logger(__name__)

MIN_SELECTION_CHARS = 5


def explain_selection(client: GenerationClient, selected_text: str, context_summary: str | None = None) -> str:
    """
    Plain-language rewrite of a highlighted snippet, grounded on the pack summary.
    Selections under MIN_SELECTION_CHARS are rejected before the provider is called.
    """
    text = (selected_text or "").strip()
    if len(text) < MIN_SELECTION_CHARS:
        raise TooShort("Text too short to explain.")

    prompt = build_explain_prompt(text, context_summary)
    explanation = client.generate(prompt, json_mode=False)
    if not explanation.strip():
        raise ProviderError("LLM provider returned an empty explanation")

    logger.info("selection_explained", selection_chars=len(text), explanation_chars=len(explanation))
    return explanation
