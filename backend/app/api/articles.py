"""Knowledge base admin API — list, create, edit, delete articles.

GET    /api/articles              — all articles, newest first (?category=)
GET    /api/articles/categories   — suggested categories for the editor
GET    /api/articles/{id}         — one article
POST   /api/articles              — create
PATCH  /api/articles/{id}         — partial update
DELETE /api/articles/{id}         — delete

Write access control is enforced by the database (row-level security).
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ValidationInfo, field_validator

from api.deps import get_article_store
from models.article import ARTICLE_CATEGORIES, DEFAULT_AUTHOR, DEFAULT_CATEGORY
from services.article_store import ArticleStore, StoreError

router = APIRouter(prefix="/api/articles", tags=["articles"])
logger = logging.getLogger("docbot.api.articles")

STORE_UNAVAILABLE = "Article store is unavailable, please retry later"


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

def _normalize_keywords(value):
    # The editor sends "react, Hooks, jsx"; API clients may send a list
    if value is None:
        return value
    if isinstance(value, str):
        value = value.split(",")
    return [str(k).strip().lower() for k in value if str(k).strip()]


def _require_text(value):
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


_BLANK_DEFAULTS = {"category": DEFAULT_CATEGORY, "author": DEFAULT_AUTHOR}


def _default_if_blank(value, field_name):
    # The editor submits empty inputs as ""
    if value is None:
        return value
    return value.strip() or _BLANK_DEFAULTS[field_name]


class ArticleCreate(BaseModel):
    title: str
    content: str
    keywords: list[str] = []
    category: str = DEFAULT_CATEGORY
    author: str = DEFAULT_AUTHOR

    @field_validator("keywords", mode="before")
    @classmethod
    def normalize_keywords(cls, v):
        return _normalize_keywords(v)

    @field_validator("title", "content")
    @classmethod
    def require_text(cls, v):
        return _require_text(v)

    @field_validator("category", "author")
    @classmethod
    def default_if_blank(cls, v, info: ValidationInfo):
        return _default_if_blank(v, info.field_name)


class ArticleUpdate(BaseModel):
    title: str | None = None
    content: str | None = None
    keywords: list[str] | None = None
    category: str | None = None
    author: str | None = None

    @field_validator("keywords", mode="before")
    @classmethod
    def normalize_keywords(cls, v):
        return _normalize_keywords(v)

    @field_validator("title", "content")
    @classmethod
    def require_text(cls, v):
        return _require_text(v)

    @field_validator("category", "author")
    @classmethod
    def default_if_blank(cls, v, info: ValidationInfo):
        return _default_if_blank(v, info.field_name)


class ArticleOut(BaseModel):
    id: uuid.UUID
    title: str
    content: str
    keywords: list[str]
    category: str
    author: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("", response_model=list[ArticleOut])
async def list_articles(
    category: Optional[str] = Query(None, description="Filter by category"),
    store: ArticleStore = Depends(get_article_store),
):
    try:
        return await store.list_all(category=category)
    except StoreError as e:
        logger.error("Error listing articles: %s", e, exc_info=True)
        raise HTTPException(503, STORE_UNAVAILABLE)


@router.get("/categories", response_model=list[str])
async def list_categories():
    return list(ARTICLE_CATEGORIES)


@router.get("/{article_id}", response_model=ArticleOut)
async def get_article(article_id: uuid.UUID, store: ArticleStore = Depends(get_article_store)):
    try:
        article = await store.get(article_id)
    except StoreError as e:
        logger.error("Error loading article %s: %s", article_id, e, exc_info=True)
        raise HTTPException(503, STORE_UNAVAILABLE)
    if not article:
        raise HTTPException(404, "Article not found")
    return article


@router.post("", response_model=ArticleOut, status_code=201)
async def create_article(data: ArticleCreate, store: ArticleStore = Depends(get_article_store)):
    try:
        article = await store.create(data.model_dump())
    except StoreError as e:
        logger.error("Error saving article: %s", e, exc_info=True)
        raise HTTPException(503, STORE_UNAVAILABLE)
    logger.info("Article created: %s (%s)", article.id, article.title)
    return article


@router.patch("/{article_id}", response_model=ArticleOut)
async def update_article(
    article_id: uuid.UUID,
    data: ArticleUpdate,
    store: ArticleStore = Depends(get_article_store),
):
    fields = data.model_dump(exclude_unset=True)
    # Explicit nulls mean "leave unchanged"; columns are NOT NULL
    fields = {k: v for k, v in fields.items() if v is not None}
    try:
        article = await store.update(article_id, fields)
    except StoreError as e:
        logger.error("Error updating article %s: %s", article_id, e, exc_info=True)
        raise HTTPException(503, STORE_UNAVAILABLE)
    if not article:
        raise HTTPException(404, "Article not found")
    logger.info("Article updated: %s (%s)", article_id, ", ".join(fields) or "no changes")
    return article


@router.delete("/{article_id}", status_code=204)
async def delete_article(article_id: uuid.UUID, store: ArticleStore = Depends(get_article_store)):
    try:
        deleted = await store.delete(article_id)
    except StoreError as e:
        logger.error("Error deleting article %s: %s", article_id, e, exc_info=True)
        raise HTTPException(503, STORE_UNAVAILABLE)
    if not deleted:
        raise HTTPException(404, "Article not found")
    logger.info("Article deleted: %s", article_id)
