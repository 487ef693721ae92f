import asyncio

import pytest

from conftest import RecordingStore
from services.chat_session import (
    ERROR_MESSAGE,
    GREETING_MESSAGE,
    ChatSession,
    ChatSessionRegistry,
    SessionStatus,
)
from services.retriever import ArticleRetriever
from services.summary import NO_RESULTS_MESSAGE


def test_session_starts_with_greeting(retriever):
    session = ChatSession(retriever)

    assert [t.content for t in session.turns] == [GREETING_MESSAGE]
    assert session.turns[0].is_bot
    assert session.status is SessionStatus.IDLE
    assert len(session.session_id) == 8


@pytest.mark.asyncio
async def test_submit_appends_user_then_answer(retriever):
    session = ChatSession(retriever)

    assert session.submit("How do I deploy with Docker")
    # user turn is visible immediately
    assert session.turns[-1].content == "How do I deploy with Docker"
    assert not session.turns[-1].is_bot
    assert session.in_flight

    await session.wait()

    answer = session.turns[-1]
    assert len(session.turns) == 3
    assert answer.is_bot
    assert "**Docker Deployment Guide** (DevOps)" in answer.content
    assert "found 1 relevant article:" in answer.content
    assert "step-by-step instructions from our DevOps documentation" in answer.content
    assert [a.title for a in answer.articles] == ["Docker Deployment Guide"]
    assert session.status is SessionStatus.IDLE


@pytest.mark.asyncio
async def test_answer_references_at_most_three_articles(retriever):
    session = ChatSession(retriever)

    session.submit("react jwt migration docker")
    await session.wait()

    answer = session.turns[-1]
    assert "found 4 relevant articles" in answer.content
    assert len(answer.articles) == 3


@pytest.mark.asyncio
async def test_no_results_answer(retriever):
    session = ChatSession(retriever)

    session.submit("quantum basket weaving")
    await session.wait()

    assert session.turns[-1].content == NO_RESULTS_MESSAGE
    assert session.turns[-1].articles == ()
    assert session.status is SessionStatus.IDLE


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["", "   ", "\n\t"])
async def test_blank_submit_is_noop(retriever, query):
    session = ChatSession(retriever)

    assert session.submit(query) is False
    assert len(session.turns) == 1
    assert session.status is SessionStatus.IDLE


@pytest.mark.asyncio
async def test_second_submit_while_in_flight_is_rejected(sample_store):
    store = RecordingStore(sample_store)
    store.gate = asyncio.Event()
    session = ChatSession(ArticleRetriever(store))

    assert session.submit("docker")
    await asyncio.sleep(0)
    assert session.submit("react") is False
    assert len(session.turns) == 2

    store.gate.set()
    await session.wait()

    assert len(session.turns) == 3
    assert len(store.calls) == 1
    # accepting again once the cycle is done
    assert session.submit("react")
    await session.wait()
    assert len(session.turns) == 5


@pytest.mark.asyncio
async def test_retrieval_failure_appends_error_turn(sample_store):
    store = RecordingStore(sample_store, fail_text=True)
    session = ChatSession(ArticleRetriever(store))

    assert session.submit("nothing matches this")
    await session.wait()

    assert session.turns[-1].content == ERROR_MESSAGE
    assert session.turns[-1].is_bot
    assert session.status is SessionStatus.ERROR

    # error state still accepts submissions
    store.fail_text = False
    assert session.submit("docker")
    await session.wait()
    assert session.status is SessionStatus.IDLE


@pytest.mark.asyncio
async def test_timeout_appends_error_turn(sample_store):
    store = RecordingStore(sample_store)
    store.gate = asyncio.Event()  # never set
    session = ChatSession(ArticleRetriever(store), timeout=0.05)

    session.submit("docker")
    await session.wait()

    assert session.turns[-1].content == ERROR_MESSAGE
    assert session.status is SessionStatus.ERROR
    assert not session.in_flight


@pytest.mark.asyncio
async def test_unexpected_exception_never_escapes(retriever, monkeypatch):
    async def boom(query):
        raise RuntimeError("bug")

    monkeypatch.setattr(retriever, "search", boom)
    session = ChatSession(retriever)

    session.submit("docker")
    await session.wait()

    assert session.turns[-1].content == ERROR_MESSAGE
    assert session.status is SessionStatus.ERROR


@pytest.mark.asyncio
async def test_close_cancels_in_flight_cycle(sample_store):
    store = RecordingStore(sample_store)
    store.gate = asyncio.Event()
    session = ChatSession(ArticleRetriever(store), timeout=None)

    session.submit("docker")
    await asyncio.sleep(0)
    await session.close()

    assert not session.in_flight
    assert len(session.turns) == 2
    assert session.submit("react") is False


@pytest.mark.asyncio
async def test_listeners_receive_appended_turns(retriever):
    session = ChatSession(retriever)
    seen = []
    session.subscribe(seen.append)

    session.submit("docker")
    await session.wait()
    session.unsubscribe(seen.append)
    session.submit("react")
    await session.wait()

    assert [t.is_bot for t in seen] == [False, True]


@pytest.mark.asyncio
async def test_registry_create_get_close(retriever):
    registry = ChatSessionRegistry(retriever)

    session = registry.create()
    assert registry.get(session.session_id) is session
    assert len(registry) == 1

    assert await registry.close(session.session_id)
    assert registry.get(session.session_id) is None
    assert await registry.close(session.session_id) is False


@pytest.mark.asyncio
async def test_registry_evicts_oldest_idle_session(sample_store):
    store = RecordingStore(sample_store)
    store.gate = asyncio.Event()
    registry = ChatSessionRegistry(ArticleRetriever(store), max_sessions=2, timeout=None)

    busy = registry.create()
    idle = registry.create()
    busy.submit("docker")

    newest = registry.create()

    assert len(registry) == 2
    assert registry.get(idle.session_id) is None
    assert registry.get(busy.session_id) is busy
    assert registry.get(newest.session_id) is newest

    await registry.close_all()
    assert len(registry) == 0
    assert not busy.in_flight


@pytest.mark.asyncio
async def test_evicted_session_is_closed(retriever):
    registry = ChatSessionRegistry(retriever, max_sessions=1)
    first = registry.create()

    registry.create()

    assert first.closed
    assert not first.submit("docker")
    await asyncio.wait_for(first.wait_closed(), timeout=1)


@pytest.mark.asyncio
async def test_close_wakes_wait_closed(retriever):
    session = ChatSession(retriever)
    waiter = asyncio.create_task(session.wait_closed())
    await asyncio.sleep(0)
    assert not waiter.done()

    await session.close()

    await asyncio.wait_for(waiter, timeout=1)


@pytest.mark.parametrize("max_sessions", [0, -3])
def test_registry_rejects_non_positive_cap(retriever, max_sessions):
    with pytest.raises(ValueError):
        ChatSessionRegistry(retriever, max_sessions=max_sessions)
