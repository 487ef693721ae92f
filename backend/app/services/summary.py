"""Chat answer text built from matched articles.

No LLM involved: the answer quotes the top articles and closes with a remark
picked by the query's intent (procedural / definitional / troubleshooting /
generic).
"""
from __future__ import annotations

from enum import Enum
from typing import Sequence

from models.article import Article

NO_RESULTS_MESSAGE = (
    "I couldn't find any relevant articles for your query. Try using different "
    "keywords or check with an admin to ensure the documentation is available."
)


class QueryIntent(str, Enum):
    PROCEDURAL = "procedural"
    DEFINITIONAL = "definitional"
    TROUBLESHOOTING = "troubleshooting"
    GENERIC = "generic"


_REMARKS: dict[QueryIntent, str] = {
    QueryIntent.PROCEDURAL: (
        "Here are the step-by-step instructions from our {category} documentation. "
        "Follow the procedures outlined in these articles for best results."
    ),
    QueryIntent.DEFINITIONAL: (
        "These articles explain the concepts and definitions related to {category}. "
        "Review the documentation for comprehensive understanding."
    ),
    QueryIntent.TROUBLESHOOTING: (
        "These articles contain troubleshooting information and solutions for common "
        "issues in {category}. Check the error handling sections."
    ),
    QueryIntent.GENERIC: (
        "The documentation covers various aspects of {category}. "
        "These articles should provide the information you're looking for."
    ),
}


def classify_query(query: str) -> QueryIntent:
    """Classify by substring, first match wins: how > what > error/issue."""
    q = query.lower()
    if "how" in q:
        return QueryIntent.PROCEDURAL
    if "what" in q:
        return QueryIntent.DEFINITIONAL
    if "error" in q or "issue" in q:
        return QueryIntent.TROUBLESHOOTING
    return QueryIntent.GENERIC


def contextual_remark(intent: QueryIntent, category: str) -> str:
    return _REMARKS[intent].format(category=category)


def generate_summary(
    articles: Sequence[Article],
    query: str,
    *,
    top_n: int = 3,
    snippet_chars: int = 200,
) -> str:
    """Format the assistant answer for a query.

    Args:
        articles: Matched articles, already ordered by the retriever.
        query: Original query text, quoted verbatim.
        top_n: How many articles are quoted.
        snippet_chars: Content prefix length per quoted article.

    Returns:
        Markdown text. NO_RESULTS_MESSAGE when there are no articles.
    """
    if not articles:
        return NO_RESULTS_MESSAGE

    top = list(articles[:top_n])
    blocks = "\n\n".join(
        f"**{a.title}** ({a.category}): {a.content[:snippet_chars]}..."
        for a in top
    )
    count = len(articles)
    plural = "" if count == 1 else "s"
    remark = contextual_remark(classify_query(query), top[0].category)

    return (
        f'Based on your query about "{query}", I found {count} relevant article{plural}:'
        f"\n\n{blocks}\n\n**Summary**: {remark}"
    )
