"""Article Store — data access for the `articles` table.

The chat pipeline only needs the two search shapes (keyword overlap and
full-text); the admin API uses the CRUD methods. Everything is ordered by
created_at DESC.
"""
from __future__ import annotations

import logging
import re
import uuid
from typing import Any, Optional, Protocol, Sequence

from sqlalchemy import delete, func, literal_column, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models.article import DEFAULT_AUTHOR, DEFAULT_CATEGORY, Article

logger = logging.getLogger("docbot.article_store")

ARTICLE_FIELDS = ("title", "content", "keywords", "category", "author")


class StoreError(Exception):
    """Store unreachable or query rejected."""
    pass


class ArticleStore(Protocol):
    async def list_by_keyword_overlap(self, keywords: Sequence[str], limit: int) -> list[Article]: ...

    async def search_by_text(
        self, query: str, limit: int, include_content: bool = False,
    ) -> list[Article]: ...

    async def list_all(self, category: Optional[str] = None) -> list[Article]: ...

    async def get(self, article_id: uuid.UUID) -> Optional[Article]: ...

    async def create(self, fields: dict[str, Any]) -> Article: ...

    async def update(self, article_id: uuid.UUID, fields: dict[str, Any]) -> Optional[Article]: ...

    async def delete(self, article_id: uuid.UUID) -> bool: ...


class SqlArticleStore:
    """PostgreSQL-backed store (async SQLAlchemy).

    Every SQLAlchemy failure is re-raised as StoreError so callers deal with
    a single error type.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        ts_config: str = "english",
    ):
        if not re.fullmatch(r"[a-z_]+", ts_config):
            raise ValueError(f"Invalid text search configuration: {ts_config!r}")
        self.session_factory = session_factory
        self.ts_config = ts_config

    # ------------------------------------------------------------------
    # Statements (kept separate so they can be compiled and inspected)
    # ------------------------------------------------------------------
    def keyword_overlap_stmt(self, keywords: Sequence[str], limit: int):
        return (
            select(Article)
            .where(Article.keywords.overlap(list(keywords)))
            .order_by(Article.created_at.desc())
            .limit(limit)
        )

    def text_search_stmt(self, query: str, limit: int, include_content: bool = False):
        # Expressions must match the GIN indexes created by the migration
        if include_content:
            document = Article.title + literal_column("' '") + Article.content
        else:
            document = Article.title
        config = literal_column(f"'{self.ts_config}'::regconfig")
        tsvector = func.to_tsvector(config, document)
        tsquery = func.plainto_tsquery(config, query)
        return (
            select(Article)
            .where(tsvector.op("@@")(tsquery))
            .order_by(Article.created_at.desc())
            .limit(limit)
        )

    # ------------------------------------------------------------------
    # Chat pipeline queries
    # ------------------------------------------------------------------
    async def list_by_keyword_overlap(self, keywords: Sequence[str], limit: int) -> list[Article]:
        if not keywords:
            return []
        return await self._fetch(self.keyword_overlap_stmt(keywords, limit))

    async def search_by_text(
        self, query: str, limit: int, include_content: bool = False,
    ) -> list[Article]:
        if not query.strip():
            return []
        return await self._fetch(self.text_search_stmt(query, limit, include_content))

    # ------------------------------------------------------------------
    # Admin CRUD
    # ------------------------------------------------------------------
    async def list_all(self, category: Optional[str] = None) -> list[Article]:
        stmt = select(Article).order_by(Article.created_at.desc())
        if category:
            stmt = stmt.where(Article.category == category)
        return await self._fetch(stmt)

    async def get(self, article_id: uuid.UUID) -> Optional[Article]:
        try:
            async with self.session_factory() as session:
                return await session.get(Article, article_id)
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"get {article_id} failed: {e}") from e

    async def create(self, fields: dict[str, Any]) -> Article:
        try:
            async with self.session_factory() as session:
                values = _pick(fields)
                values["category"] = values.get("category") or DEFAULT_CATEGORY
                values["author"] = values.get("author") or DEFAULT_AUTHOR
                article = Article(**values)
                session.add(article)
                await session.commit()
                await session.refresh(article)
                return article
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"create failed: {e}") from e

    async def update(self, article_id: uuid.UUID, fields: dict[str, Any]) -> Optional[Article]:
        try:
            async with self.session_factory() as session:
                article = await session.get(Article, article_id)
                if article is None:
                    return None
                for field, value in _pick(fields).items():
                    setattr(article, field, value)
                await session.commit()
                await session.refresh(article)
                return article
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"update {article_id} failed: {e}") from e

    async def delete(self, article_id: uuid.UUID) -> bool:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    delete(Article).where(Article.id == article_id)
                )
                await session.commit()
                return result.rowcount > 0
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"delete {article_id} failed: {e}") from e

    # ------------------------------------------------------------------
    async def _fetch(self, stmt) -> list[Article]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Article query failed: %s", e)
            raise StoreError(str(e)) from e


def _pick(fields: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in fields.items() if k in ARTICLE_FIELDS}
