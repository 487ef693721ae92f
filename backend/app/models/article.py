"""Knowledge base articles: the documents the chatbot searches.

One row = one markdown article. `keywords` is matched with array overlap (&&),
`title` (optionally title + content) with PostgreSQL full-text search.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text, func, text
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base

DEFAULT_CATEGORY = "General"
DEFAULT_AUTHOR = "Admin"

# Suggested values for the admin form; the set is open
ARTICLE_CATEGORIES = (
    "Frontend", "Backend", "DevOps", "Database", "API", "Security", "Testing", "General",
)


class Article(Base):
    __tablename__ = "articles"

    __table_args__ = (
        Index("ix_articles_keywords", "keywords", postgresql_using="gin"),
        Index("ix_articles_category", "category"),
        Index("ix_articles_created_at", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    title: Mapped[str] = mapped_column(Text)
    content: Mapped[str] = mapped_column(Text)                  # markdown
    keywords: Mapped[list[str]] = mapped_column(
        ARRAY(String), default=list, server_default=text("'{}'"),
    )
    category: Mapped[str] = mapped_column(Text, default=DEFAULT_CATEGORY, server_default=DEFAULT_CATEGORY)
    author: Mapped[str] = mapped_column(Text, default=DEFAULT_AUTHOR, server_default=DEFAULT_AUTHOR)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<Article {self.id} ({self.title!r})>"
