import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from models import async_session, engine
from api.articles import router as articles_router
from api.chat import router as chat_router
from core.websocket import router as ws_router
from services.article_store import SqlArticleStore
from services.chat_session import ChatSessionRegistry
from services.retriever import ArticleRetriever

VERSION = "0.1.0"

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger("docbot.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Docs chatbot backend starting... DEBUG=%s", settings.DEBUG)

    # Article store (demo or production)
    if settings.DEMO_MODE:
        from services.demo_store import InMemoryArticleStore
        store = InMemoryArticleStore.with_samples()
        logger.info("DEMO_MODE enabled — using in-memory article store")
    else:
        store = SqlArticleStore(async_session, ts_config=settings.SEARCH_TS_CONFIG)
        logger.info("Production mode — using PostgreSQL article store")
    app.state.article_store = store

    # Search pipeline
    retriever = ArticleRetriever(
        store,
        limit=settings.SEARCH_LIMIT,
        include_content=settings.SEARCH_INCLUDE_CONTENT,
    )
    app.state.retriever = retriever

    # Chat sessions
    sessions = ChatSessionRegistry(
        retriever,
        max_sessions=settings.CHAT_MAX_SESSIONS,
        timeout=settings.CHAT_PIPELINE_TIMEOUT,
        top_n=settings.SUMMARY_TOP_N,
        snippet_chars=settings.SUMMARY_SNIPPET_CHARS,
    )
    app.state.chat_sessions = sessions

    yield

    # Shutdown
    logger.info("Docs chatbot backend shutting down...")
    await sessions.close_all()
    await engine.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Docs Chatbot API",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(articles_router)
app.include_router(chat_router)
app.include_router(ws_router)


@app.get("/health")
async def health():
    return {"status": "ok", "version": VERSION, "demo_mode": settings.DEMO_MODE}
