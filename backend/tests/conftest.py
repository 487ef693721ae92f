import os

# Settings are read at import time; tests never touch PostgreSQL
os.environ.setdefault("DEMO_MODE", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from services.article_store import StoreError
from services.chat_session import ChatSessionRegistry
from services.demo_store import InMemoryArticleStore
from services.retriever import ArticleRetriever


class RecordingStore:
    """Wraps a store, records search calls and can fail or stall on demand."""

    def __init__(self, inner, *, fail_keyword=False, fail_text=False):
        self.inner = inner
        self.fail_keyword = fail_keyword
        self.fail_text = fail_text
        self.gate = None  # asyncio.Event: searches wait on it when set
        self.calls = []

    async def list_by_keyword_overlap(self, keywords, limit):
        self.calls.append(("keywords", list(keywords), limit))
        await self._wait_gate()
        if self.fail_keyword:
            raise StoreError("keyword query rejected")
        return await self.inner.list_by_keyword_overlap(keywords, limit)

    async def search_by_text(self, query, limit, include_content=False):
        self.calls.append(("text", query, limit))
        await self._wait_gate()
        if self.fail_text:
            raise StoreError("connection refused")
        return await self.inner.search_by_text(query, limit, include_content=include_content)

    def stage_calls(self, stage):
        return [c for c in self.calls if c[0] == stage]

    async def _wait_gate(self):
        if self.gate is not None:
            await self.gate.wait()

    def __getattr__(self, name):
        return getattr(self.inner, name)


@pytest.fixture
def sample_store():
    return InMemoryArticleStore.with_samples()


@pytest.fixture
def recording_store(sample_store):
    return RecordingStore(sample_store)


@pytest.fixture
def retriever(recording_store):
    return ArticleRetriever(recording_store)


@pytest.fixture
def client(sample_store):
    from main import app

    with TestClient(app) as c:
        retriever = ArticleRetriever(sample_store)
        app.state.article_store = sample_store
        app.state.retriever = retriever
        app.state.chat_sessions = ChatSessionRegistry(retriever, timeout=5)
        yield c
