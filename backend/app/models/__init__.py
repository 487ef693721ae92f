from models.base import Base, async_session, engine
from models.article import Article, ARTICLE_CATEGORIES, DEFAULT_AUTHOR, DEFAULT_CATEGORY

__all__ = [
    "Base",
    "async_session",
    "engine",
    "Article",
    "ARTICLE_CATEGORIES",
    "DEFAULT_AUTHOR",
    "DEFAULT_CATEGORY",
]
