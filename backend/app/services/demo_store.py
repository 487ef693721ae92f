"""
Demo store — in-memory article store seeded with the sample articles.

Implements the same interface as SqlArticleStore so the chat pipeline and the
admin API run without PostgreSQL (DEMO_MODE=true). Full-text search is
approximated: every non-stop-word of the query must occur in the document.
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Sequence

from models.article import DEFAULT_AUTHOR, DEFAULT_CATEGORY, Article
from services.article_store import ARTICLE_FIELDS
from services.keywords import STOP_WORDS
from services.sample_articles import SAMPLE_ARTICLES

logger = logging.getLogger("docbot.demo_store")

_TEXT_STOP_WORDS = STOP_WORDS | {
    "a", "an", "i", "do", "does", "my", "of", "it", "this", "that", "are", "be", "can", "we",
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _text_terms(text: str) -> list[str]:
    return [w for w in re.findall(r"[a-z0-9]+", text.lower()) if w not in _TEXT_STOP_WORDS]


class InMemoryArticleStore:
    """Process-local article list. Newest first everywhere, like the SQL store."""

    def __init__(self, articles: Optional[Sequence[dict[str, Any]]] = None):
        self._rows: list[Article] = []
        if articles:
            # Spread creation times so the seed order is the age order
            base = _now() - timedelta(days=len(articles))
            for i, fields in enumerate(articles):
                self._insert(fields, created_at=base + timedelta(days=i))

    @classmethod
    def with_samples(cls) -> "InMemoryArticleStore":
        store = cls(SAMPLE_ARTICLES)
        logger.info("Demo store seeded with %d sample articles", len(store._rows))
        return store

    # ------------------------------------------------------------------
    async def list_by_keyword_overlap(self, keywords: Sequence[str], limit: int) -> list[Article]:
        wanted = set(keywords)
        if not wanted:
            return []
        return self._newest([a for a in self._rows if wanted.intersection(a.keywords)], limit)

    async def search_by_text(
        self, query: str, limit: int, include_content: bool = False,
    ) -> list[Article]:
        terms = _text_terms(query)
        if not terms:
            return []
        hits = []
        for a in self._rows:
            document = (a.title + " " + a.content) if include_content else a.title
            document = document.lower()
            if all(t in document for t in terms):
                hits.append(a)
        return self._newest(hits, limit)

    async def list_all(self, category: Optional[str] = None) -> list[Article]:
        rows = [a for a in self._rows if not category or a.category == category]
        return self._newest(rows)

    async def get(self, article_id: uuid.UUID) -> Optional[Article]:
        for a in self._rows:
            if a.id == article_id:
                return a
        return None

    async def create(self, fields: dict[str, Any]) -> Article:
        return self._insert(fields, created_at=_now())

    async def update(self, article_id: uuid.UUID, fields: dict[str, Any]) -> Optional[Article]:
        for i, a in enumerate(self._rows):
            if a.id == article_id:
                changed = {k: v for k, v in fields.items() if k in ARTICLE_FIELDS}
                updated = Article(
                    id=a.id,
                    title=changed.get("title", a.title),
                    content=changed.get("content", a.content),
                    keywords=list(changed.get("keywords", a.keywords)),
                    category=changed.get("category", a.category),
                    author=changed.get("author", a.author),
                    created_at=a.created_at,
                    updated_at=_now(),
                )
                self._rows[i] = updated
                return updated
        return None

    async def delete(self, article_id: uuid.UUID) -> bool:
        before = len(self._rows)
        self._rows = [a for a in self._rows if a.id != article_id]
        return len(self._rows) < before

    # ------------------------------------------------------------------
    def _insert(self, fields: dict[str, Any], *, created_at: datetime) -> Article:
        article = Article(
            id=uuid.uuid4(),
            title=fields["title"],
            content=fields["content"],
            keywords=list(fields.get("keywords") or []),
            category=fields.get("category") or DEFAULT_CATEGORY,
            author=fields.get("author") or DEFAULT_AUTHOR,
            created_at=created_at,
            updated_at=created_at,
        )
        self._rows.append(article)
        return article

    @staticmethod
    def _newest(rows: list[Article], limit: Optional[int] = None) -> list[Article]:
        # sorted() is stable, so equal timestamps keep insertion order
        ordered = sorted(rows, key=lambda a: a.created_at, reverse=True)
        return ordered if limit is None else ordered[:limit]
