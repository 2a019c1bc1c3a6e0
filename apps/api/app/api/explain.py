from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.api.deps import get_current_user_id, get_generation_client
from app.services.explain import explain_selection
from app.services.llm.openai_client import GenerationClient

router = APIRouter(prefix="/api", tags=["explain"])


class ExplainRequest(BaseModel):
    text: str
    context: str | None = None


class ExplainResponse(BaseModel):
    explanation: str


@router.post("/explain", response_model=ExplainResponse)
def explain(
    req: ExplainRequest,
    _user_id: str = Depends(get_current_user_id),
    client: GenerationClient = Depends(get_generation_client),
) -> ExplainResponse:
    return ExplainResponse(explanation=explain_selection(client, req.text, req.context))
