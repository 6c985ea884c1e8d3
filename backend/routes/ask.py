"""Chat proxy: forwards a rules question upstream with the server-held token."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from backend.deps import get_settings
from dolmenwood.chat import MAX_QUESTION_LENGTH, ChatClient, ChatError
from dolmenwood.config import Settings

from .models import AskBody

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/copilot/ask")
async def ask(body: AskBody, settings: Settings = Depends(get_settings)):
    """Answer a Dolmenwood question."""
    question = body.question
    if not question or not isinstance(question, str):
        raise HTTPException(400, "Question is required and must be a string")
    if len(question) > MAX_QUESTION_LENGTH:
        raise HTTPException(400, f"Question exceeds maximum length of {MAX_QUESTION_LENGTH} characters")
    if not settings.github_token:
        logger.error("GITHUB_TOKEN not configured")
        raise HTTPException(500, "GitHub authentication not configured on server")

    client = ChatClient(
        url=settings.copilot_url,
        token=settings.github_token,
        agent_name=settings.copilot_agent_name,
        model=settings.copilot_model,
    )
    try:
        answer = await client.ask(question)
    except ChatError as e:
        raise HTTPException(e.status_code, str(e))
    return {"answer": answer, "timestamp": datetime.now(timezone.utc).isoformat()}
