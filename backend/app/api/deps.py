"""Request-scoped access to the objects built in main.lifespan."""
from fastapi import Request

from services.article_store import ArticleStore
from services.chat_session import ChatSessionRegistry
from services.retriever import ArticleRetriever


def get_article_store(request: Request) -> ArticleStore:
    return request.app.state.article_store


def get_retriever(request: Request) -> ArticleRetriever:
    return request.app.state.retriever


def get_session_registry(request: Request) -> ChatSessionRegistry:
    return request.app.state.chat_sessions
