"""Keyword extraction for chat queries.

The keywords feed an array-overlap lookup against the admin-curated
`articles.keywords` column.
"""
from __future__ import annotations

STOP_WORDS = frozenset({
    "the", "is", "at", "which", "on", "how", "to", "what", "where",
    "when", "why", "and", "or", "but", "in", "with", "for",
})

MAX_KEYWORDS = 5


def extract_keywords(query: str) -> list[str]:
    """Extract candidate search terms from a free-text query.

    Args:
        query: Raw user question.

    Returns:
        Up to 5 lowercase tokens longer than 2 chars, in query order.
        No stemming, no deduplication.
    """
    if not query:
        return []
    words = query.lower().split()
    return [w for w in words if len(w) > 2 and w not in STOP_WORDS][:MAX_KEYWORDS]
