from __future__ import annotations

# Hard cap on source text embedded in the prompt (model context window).
PROMPT_MAX_CHARS = 15000

SUMMARY_LENGTH_HINTS = {
    "Short": "one short paragraph (about 3-5 sentences)",
    "Medium": "two to three paragraphs",
    "Long": "four to six detailed paragraphs",
}

STUDY_PACK_PROMPT_TEMPLATE = """You are a study assistant.
From the material below:
1. Create a {summary_length} length summary: {summary_hint}.
2. Generate exactly {flashcard_count} flashcards (question and answer format).
3. Generate exactly {quiz_count} multiple choice practice questions at {difficulty} difficulty.
   Each question has exactly 4 options and one correct answer.
4. Extract 5-8 key topics or keywords.

Material:
{material}

Respond ONLY with a single valid JSON object, no markdown, no backticks, in this exact format:
{{
  "summary": "...",
  "topics": ["topic1", "topic2"],
  "flashcards": [
    {{ "question": "...", "answer": "..." }}
  ],
  "quizzes": [
    {{ "question": "...", "options": ["Option A", "Option B", "Option C", "Option D"], "correctAnswer": "Option A" }}
  ]
}}

Rules:
- "correctAnswer" MUST repeat one of that question's "options" verbatim.
- Every flashcard needs a non-empty "question" and "answer".
- Be faithful to the material; do not invent facts.
"""

EXPLAIN_PROMPT_TEMPLATE = """Explain the following text in simpler terms.
Context of the study material: {context}
Text to explain: "{text}"
Provide a clear, simple explanation in plain language.
"""


def truncate_material(text: str, max_chars: int = PROMPT_MAX_CHARS) -> str:
    return (text or "")[:max_chars]


def build_generation_prompt(
    text: str,
    difficulty: str,
    summary_length: str,
    flashcard_count: int,
    quiz_count: int,
) -> str:
    return STUDY_PACK_PROMPT_TEMPLATE.format(
        summary_length=summary_length,
        summary_hint=SUMMARY_LENGTH_HINTS.get(summary_length, SUMMARY_LENGTH_HINTS["Medium"]),
        flashcard_count=int(flashcard_count),
        quiz_count=int(quiz_count),
        difficulty=difficulty,
        material=truncate_material(text),
    )


def build_explain_prompt(selected_text: str, context_summary: str | None = None) -> str:
    context = (context_summary or "").strip() or "General"
    return EXPLAIN_PROMPT_TEMPLATE.format(context=context, text=selected_text.strip())
