"""Article retrieval for chat queries.

Two-stage strategy:
1. Keyword overlap against `articles.keywords` (admin-curated)
2. Full-text search over the title with the raw query, only when stage 1
   found nothing (including when no keywords could be extracted)
"""
from __future__ import annotations

import logging

from models.article import Article
from services.article_store import ArticleStore, StoreError
from services.keywords import extract_keywords

logger = logging.getLogger("docbot.retriever")


class RetrievalError(Exception):
    """Article search failed; no results could be produced."""
    pass


class ArticleRetriever:

    def __init__(
        self,
        store: ArticleStore,
        *,
        limit: int = 5,
        include_content: bool = False,
    ):
        self.store = store
        self.limit = limit
        self.include_content = include_content

    async def search(self, query: str) -> list[Article]:
        """Return up to `limit` articles for the query, newest first.

        Raises:
            RetrievalError: the fallback full-text search failed.
        """
        keywords = extract_keywords(query)
        articles: list[Article] = []

        if keywords:
            try:
                articles = await self.store.list_by_keyword_overlap(keywords, self.limit)
            except StoreError as e:
                # Same as "nothing found": fall through to full-text search
                logger.warning("Keyword search failed for %s: %s", keywords, e)
                articles = []

        if articles:
            logger.debug("Keyword search %s → %d articles", keywords, len(articles))
            return articles[: self.limit]

        try:
            articles = await self.store.search_by_text(
                query, self.limit, include_content=self.include_content,
            )
        except StoreError as e:
            raise RetrievalError("article search failed") from e

        logger.debug("Full-text search %r → %d articles", query, len(articles))
        return articles[: self.limit]
