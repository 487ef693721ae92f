"""Documentation chat API.

POST   /api/chat/sessions                 — start a session (greeting turn)
GET    /api/chat/sessions/{sid}           — status + turn log
POST   /api/chat/sessions/{sid}/messages  — ask a question, wait for the answer
DELETE /api/chat/sessions/{sid}           — end a session
GET    /api/chat/search?q=                — search + summary without a session
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from api.deps import get_retriever, get_session_registry
from config import settings
from services.chat_session import ChatSession, ChatSessionRegistry, ChatTurn
from services.retriever import ArticleRetriever, RetrievalError
from services.summary import generate_summary

router = APIRouter(prefix="/api/chat", tags=["chat"])
logger = logging.getLogger("docbot.api.chat")


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class ArticleRef(BaseModel):
    id: uuid.UUID
    title: str
    category: str
    author: str
    keywords: list[str] = []
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class ChatTurnOut(BaseModel):
    id: str
    content: str
    is_bot: bool
    timestamp: datetime
    articles: list[ArticleRef] = []

    model_config = {"from_attributes": True}


class SessionOut(BaseModel):
    session_id: str
    status: str
    turns: list[ChatTurnOut] = []


class MessageRequest(BaseModel):
    message: str


class MessageResponse(SessionOut):
    accepted: bool


class SearchResponse(BaseModel):
    query: str
    summary: str
    articles: list[ArticleRef] = []


def turn_out(turn: ChatTurn) -> ChatTurnOut:
    return ChatTurnOut.model_validate(turn)


def session_out(session: ChatSession) -> SessionOut:
    return SessionOut(
        session_id=session.session_id,
        status=session.status.value,
        turns=[turn_out(t) for t in session.turns],
    )


def _require_session(registry: ChatSessionRegistry, session_id: str) -> ChatSession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(404, "Chat session not found")
    return session


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/sessions", response_model=SessionOut, status_code=201)
async def create_session(registry: ChatSessionRegistry = Depends(get_session_registry)):
    return session_out(registry.create())


@router.get("/sessions/{session_id}", response_model=SessionOut)
async def get_session_state(
    session_id: str,
    registry: ChatSessionRegistry = Depends(get_session_registry),
):
    return session_out(_require_session(registry, session_id))


@router.post("/sessions/{session_id}/messages", response_model=MessageResponse)
async def send_message(
    session_id: str,
    req: MessageRequest,
    registry: ChatSessionRegistry = Depends(get_session_registry),
):
    """Submit a question. Blank input or a question already in flight for
    this session is ignored (accepted=false), not an error."""
    session = _require_session(registry, session_id)
    accepted = session.submit(req.message)
    if accepted:
        await session.wait()
    else:
        logger.debug("Session %s: message ignored (status=%s)", session_id, session.status.value)

    out = session_out(session)
    return MessageResponse(accepted=accepted, **out.model_dump())


@router.delete("/sessions/{session_id}", status_code=204)
async def end_session(
    session_id: str,
    registry: ChatSessionRegistry = Depends(get_session_registry),
):
    if not await registry.close(session_id):
        raise HTTPException(404, "Chat session not found")


@router.get("/search", response_model=SearchResponse)
async def search(
    q: str = Query(..., min_length=1, description="Question or keywords"),
    retriever: ArticleRetriever = Depends(get_retriever),
):
    try:
        articles = await retriever.search(q)
    except RetrievalError as e:
        logger.error("Search failed for %r: %s", q, e.__cause__ or e)
        raise HTTPException(503, "Search is temporarily unavailable")

    summary = generate_summary(
        articles, q, top_n=settings.SUMMARY_TOP_N, snippet_chars=settings.SUMMARY_SNIPPET_CHARS,
    )
    return SearchResponse(
        query=q,
        summary=summary,
        articles=[ArticleRef.model_validate(a) for a in articles],
    )
