"""
Chat sessions — in-memory conversation log per user.

Each session owns its turn log and at most one outstanding
retrieve → summarize cycle (an asyncio Task). A submit while a cycle is
outstanding is rejected, not queued. Sessions are not persisted.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from models.article import Article
from services.retriever import ArticleRetriever, RetrievalError
from services.summary import generate_summary

logger = logging.getLogger("docbot.chat_session")

GREETING_MESSAGE = (
    "👋 Hello! I'm your internal documentation assistant. I can help you find "
    "information from our company's knowledge base. Just ask me anything about "
    "our processes, technologies, or procedures!"
)
ERROR_MESSAGE = (
    "I'm sorry, I encountered an error while searching for information. "
    "Please try again or contact an administrator."
)
MAX_REFERENCED_ARTICLES = 3


def _now() -> datetime:
    return datetime.now(timezone.utc)


def new_session_id() -> str:
    return uuid.uuid4().hex[:8]


class SessionStatus(str, Enum):
    IDLE = "idle"
    BUSY = "busy"      # cycle in flight, submits rejected
    ERROR = "error"    # last cycle failed, submits accepted


@dataclass(frozen=True)
class ChatTurn:
    content: str
    is_bot: bool
    articles: tuple[Article, ...] = ()
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=_now)


TurnListener = Callable[[ChatTurn], None]


class ChatSession:

    def __init__(
        self,
        retriever: ArticleRetriever,
        *,
        session_id: Optional[str] = None,
        timeout: Optional[float] = 15.0,
        top_n: int = 3,
        snippet_chars: int = 200,
    ):
        self.session_id = session_id or new_session_id()
        self.retriever = retriever
        self.timeout = timeout
        self.top_n = top_n
        self.snippet_chars = snippet_chars
        self.status = SessionStatus.IDLE
        self.created_at = _now()
        self.closed = False
        self._closed_event = asyncio.Event()
        self._turns: list[ChatTurn] = [ChatTurn(content=GREETING_MESSAGE, is_bot=True)]
        self._task: Optional[asyncio.Task] = None
        self._listeners: list[TurnListener] = []

    @property
    def turns(self) -> list[ChatTurn]:
        return list(self._turns)

    @property
    def in_flight(self) -> bool:
        return self.status is SessionStatus.BUSY

    def subscribe(self, listener: TurnListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: TurnListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    def submit(self, query: str) -> bool:
        """Start a cycle for the query. Must be called from the event loop.

        Returns:
            False (and changes nothing) for blank queries, closed sessions or
            while another cycle is in flight; True otherwise.
        """
        if self.closed or self.in_flight or not query or not query.strip():
            return False

        self.status = SessionStatus.BUSY
        self._append(ChatTurn(content=query, is_bot=False))
        self._task = asyncio.get_running_loop().create_task(self._run_cycle(query))
        return True

    async def wait(self) -> None:
        """Wait for the outstanding cycle, if any, without cancelling it."""
        task = self._task
        if task is not None and not task.done():
            await asyncio.wait({task})

    async def wait_closed(self) -> None:
        await self._closed_event.wait()

    async def close(self) -> None:
        self._listeners.clear()
        task = self.mark_closed()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    # ------------------------------------------------------------------
    async def _run_cycle(self, query: str) -> None:
        reply: Optional[ChatTurn] = None
        try:
            reply = await self._answer(query)
        except asyncio.CancelledError:
            self.status = SessionStatus.IDLE
            raise
        except asyncio.TimeoutError:
            logger.warning("Session %s: search timed out after %ss", self.session_id, self.timeout)
        except RetrievalError as e:
            logger.warning("Session %s: retrieval failed: %s", self.session_id, e.__cause__ or e)
        except Exception as e:
            logger.error("Session %s: chat cycle error: %s", self.session_id, e, exc_info=True)

        try:
            self._append(reply or ChatTurn(content=ERROR_MESSAGE, is_bot=True))
        finally:
            self.status = SessionStatus.IDLE if reply else SessionStatus.ERROR

    async def _answer(self, query: str) -> ChatTurn:
        articles = await asyncio.wait_for(self.retriever.search(query), timeout=self.timeout)
        content = generate_summary(
            articles, query, top_n=self.top_n, snippet_chars=self.snippet_chars,
        )
        logger.info(
            "Session %s: %d articles for %r", self.session_id, len(articles), query[:80],
        )
        return ChatTurn(
            content=content,
            is_bot=True,
            articles=tuple(articles[:MAX_REFERENCED_ARTICLES]),
        )

    def _append(self, turn: ChatTurn) -> None:
        self._turns.append(turn)
        for listener in list(self._listeners):
            try:
                listener(turn)
            except Exception as e:
                logger.warning("Session %s: turn listener failed: %s", self.session_id, e)

    def mark_closed(self) -> Optional[asyncio.Task]:
        """Reject further submits, cancel the outstanding cycle and wake
        `wait_closed` waiters. Returns the cancelled task, if any."""
        self.closed = True
        self._closed_event.set()
        return self._cancel()

    def _cancel(self) -> Optional[asyncio.Task]:
        task = self._task
        if task is None or task.done():
            return None
        task.cancel()
        # A task cancelled before its first step never runs its own cleanup
        self.status = SessionStatus.IDLE
        return task


class ChatSessionRegistry:
    """Live sessions by id. Oldest sessions are evicted past `max_sessions`."""

    def __init__(
        self,
        retriever: ArticleRetriever,
        *,
        max_sessions: int = 1000,
        timeout: Optional[float] = 15.0,
        top_n: int = 3,
        snippet_chars: int = 200,
    ):
        if max_sessions < 1:
            raise ValueError(f"max_sessions must be positive, got {max_sessions}")
        self.retriever = retriever
        self.max_sessions = max_sessions
        self.timeout = timeout
        self.top_n = top_n
        self.snippet_chars = snippet_chars
        self._sessions: dict[str, ChatSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> ChatSession:
        while len(self._sessions) >= self.max_sessions:
            self._evict_one()

        session_id = new_session_id()
        while session_id in self._sessions:
            session_id = new_session_id()

        session = ChatSession(
            self.retriever,
            session_id=session_id,
            timeout=self.timeout,
            top_n=self.top_n,
            snippet_chars=self.snippet_chars,
        )
        self._sessions[session_id] = session
        logger.info("Chat session %s created (%d live)", session_id, len(self._sessions))
        return session

    def get(self, session_id: str) -> Optional[ChatSession]:
        return self._sessions.get(session_id)

    async def close(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        await session.close()
        logger.info("Chat session %s closed (%d live)", session_id, len(self._sessions))
        return True

    async def close_all(self) -> None:
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            await session.close()
        logger.info("Closed %d chat sessions", len(sessions))

    def _evict_one(self) -> None:
        # dicts keep insertion order: first non-busy entry is the oldest idle one
        victim_id = next(
            (sid for sid, s in self._sessions.items() if not s.in_flight),
            next(iter(self._sessions)),
        )
        victim = self._sessions.pop(victim_id)
        victim.mark_closed()
        logger.info("Chat session %s evicted", victim_id)
