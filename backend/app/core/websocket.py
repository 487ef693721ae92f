"""
WebSocket chat endpoint — live turn push for the chat UI.

WS /ws/chat/{session_id}
  client → {"message": "..."}  submit a question (or "ping")
  server → {"type": "snapshot", "data": {...}}  session state on connect
  server → {"type": "ack", "accepted": bool}     result of each submit
  server → {"type": "turn", "data": {...}}       every appended turn
"""

from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from api.chat import session_out, turn_out
from services.chat_session import ChatSession, ChatSessionRegistry, ChatTurn

logger = logging.getLogger("docbot.websocket")

router = APIRouter()

# Policy-violation close code used for unknown sessions
WS_CLOSE_UNKNOWN_SESSION = 4404
# Session ended (DELETE or evicted) while the socket was open
WS_CLOSE_SESSION_ENDED = 4410


# ---------------------------------------------------------------------------
# Connection Manager
# ---------------------------------------------------------------------------

class ConnectionManager:
    """Tracks active WebSocket connections per chat session."""

    def __init__(self) -> None:
        self.connections: dict[str, list[WebSocket]] = {}

    async def connect(self, session_id: str, ws: WebSocket) -> None:
        await ws.accept()
        self.connections.setdefault(session_id, []).append(ws)
        logger.info("WS client connected to session %s (%d total)", session_id, self.count())

    def disconnect(self, session_id: str, ws: WebSocket) -> None:
        conns = self.connections.get(session_id, [])
        if ws in conns:
            conns.remove(ws)
        if not conns:
            self.connections.pop(session_id, None)
        logger.info("WS client disconnected from session %s (%d remaining)", session_id, self.count())

    def count(self) -> int:
        return sum(len(c) for c in self.connections.values())

    async def close_session(self, session_id: str, code: int = WS_CLOSE_SESSION_ENDED) -> None:
        """Close every socket attached to a session."""
        conns = self.connections.pop(session_id, [])
        for ws in conns:
            try:
                await ws.close(code=code)
            except RuntimeError as exc:
                logger.debug("WS already closed: %s", exc)
        if conns:
            logger.info("Closed %d WS client(s) of ended session %s", len(conns), session_id)


manager = ConnectionManager()


async def _push_turns(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        turn: ChatTurn = await queue.get()
        await websocket.send_json({"type": "turn", "data": turn_out(turn).model_dump(mode="json")})


async def _close_when_ended(session: ChatSession) -> None:
    await session.wait_closed()
    await manager.close_session(session.session_id)


# ---------------------------------------------------------------------------
# WebSocket Endpoint
# ---------------------------------------------------------------------------

@router.websocket("/ws/chat/{session_id}")
async def ws_chat(websocket: WebSocket, session_id: str) -> None:
    registry: ChatSessionRegistry = websocket.app.state.chat_sessions
    session = registry.get(session_id)
    if session is None:
        await websocket.close(code=WS_CLOSE_UNKNOWN_SESSION)
        return

    await manager.connect(session_id, websocket)
    queue: asyncio.Queue = asyncio.Queue()
    session.subscribe(queue.put_nowait)
    pusher = asyncio.create_task(_push_turns(websocket, queue))
    watcher = asyncio.create_task(_close_when_ended(session))
    try:
        await websocket.send_json(
            {"type": "snapshot", "data": session_out(session).model_dump(mode="json")}
        )
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
                continue
            try:
                message = json.loads(data).get("message", "")
            except (json.JSONDecodeError, AttributeError):
                message = ""
            accepted = session.submit(message) if isinstance(message, str) else False
            await websocket.send_json({"type": "ack", "accepted": accepted})
    except WebSocketDisconnect:
        pass
    except Exception as exc:
        logger.debug("WS error: %s", exc)
    finally:
        session.unsubscribe(queue.put_nowait)
        for task in (pusher, watcher):
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as exc:
                logger.debug("WS background task error: %s", exc)
        manager.disconnect(session_id, websocket)
