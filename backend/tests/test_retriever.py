import pytest

from conftest import RecordingStore
from services.demo_store import InMemoryArticleStore
from services.retriever import ArticleRetriever, RetrievalError


def _titles(articles):
    return [a.title for a in articles]


@pytest.mark.asyncio
async def test_keyword_hit_skips_full_text(retriever, recording_store):
    articles = await retriever.search("How do I deploy with Docker")

    assert _titles(articles) == ["Docker Deployment Guide"]
    assert recording_store.stage_calls("keywords") == [("keywords", ["deploy", "docker"], 5)]
    assert recording_store.stage_calls("text") == []


@pytest.mark.asyncio
async def test_falls_back_to_title_search(retriever, recording_store):
    # No article has "component"/"best"/"practices" as a keyword
    articles = await retriever.search("component best practices")

    assert _titles(articles) == ["React Component Best Practices"]
    assert len(recording_store.stage_calls("keywords")) == 1
    assert recording_store.stage_calls("text") == [("text", "component best practices", 5)]


@pytest.mark.asyncio
async def test_empty_keywords_go_straight_to_full_text(retriever, recording_store):
    articles = await retriever.search("how to do it")

    assert articles == []
    assert recording_store.stage_calls("keywords") == []
    assert len(recording_store.stage_calls("text")) == 1


@pytest.mark.asyncio
async def test_nothing_found_returns_empty(retriever):
    assert await retriever.search("quantum basket weaving") == []


@pytest.mark.asyncio
async def test_results_capped_and_newest_first():
    store = InMemoryArticleStore([
        {"title": f"Doc {i}", "content": "text", "keywords": ["shared"], "category": "General"}
        for i in range(8)
    ])
    retriever = ArticleRetriever(store)

    articles = await retriever.search("shared knowledge")

    assert len(articles) == 5
    assert _titles(articles) == ["Doc 7", "Doc 6", "Doc 5", "Doc 4", "Doc 3"]
    stamps = [a.created_at for a in articles]
    assert stamps == sorted(stamps, reverse=True)


@pytest.mark.asyncio
async def test_overlap_matches_any_keyword(retriever):
    articles = await retriever.search("postgresql docker")
    assert _titles(articles) == ["Docker Deployment Guide", "Database Migration Best Practices"]


@pytest.mark.asyncio
async def test_keyword_stage_failure_falls_through(sample_store):
    store = RecordingStore(sample_store, fail_keyword=True)
    retriever = ArticleRetriever(store)

    articles = await retriever.search("docker deployment guide")

    assert _titles(articles) == ["Docker Deployment Guide"]
    assert len(store.stage_calls("text")) == 1


@pytest.mark.asyncio
async def test_full_text_failure_raises_retrieval_error(sample_store):
    store = RecordingStore(sample_store, fail_text=True)
    retriever = ArticleRetriever(store)

    with pytest.raises(RetrievalError):
        await retriever.search("nothing matches this")


@pytest.mark.asyncio
async def test_include_content_widens_fallback(sample_store):
    narrow = ArticleRetriever(sample_store)
    wide = ArticleRetriever(sample_store, include_content=True)

    assert await narrow.search("multi-stage builds") == []
    assert _titles(await wide.search("multi-stage builds")) == ["Docker Deployment Guide"]
