"""
Corpus store for hybrid retrieval.

Runs the two retrieval strategies against the content_items table:
- vector_search: cosine similarity between the query embedding and each
  stored embedding, clamped to [0, 1]
- lexical_search: share of distinct query terms found in an item's title,
  body or summary, in [0, 1]
- direct_title_match: a project whose title equals a name the visitor
  used, scored just under 1.0

Both scores live on the same [0, 1] scale so the engine can compare them
directly. The corpus is small and bounded, so vector scoring happens in
process over the embedded rows. Each call opens its own database session,
which lets the engine run both strategies concurrently.

Dependencies: sqlalchemy, chat_engine.boundary.db
System role: Read-only corpus retrieval (vector + lexical)
"""

import logging
import math
import re
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chat_engine.boundary.db.CRUD.content_crud import content_item_crud
from chat_engine.boundary.db.models.content_model import ContentItemModel
from chat_engine.boundary.vdb.search_schemas import MatchType, SearchResult
from chat_engine.core.exceptions import VectorStoreError

logger = logging.getLogger(__name__)

# Score for a project found by exact title, just under a perfect vector hit
DIRECT_MATCH_SIMILARITY = 0.99

_TOKEN_RE = re.compile(r"[a-z0-9]+(?:[-'][a-z0-9]+)*")

STOP_WORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "can", "did", "do",
    "does", "for", "from", "has", "have", "how", "i", "in", "is", "it",
    "its", "me", "my", "of", "on", "or", "the", "their", "this", "to",
    "tell", "us", "was", "we", "were", "what", "when", "where", "which",
    "who", "why", "with", "you", "your",
})


def tokenize(text: str) -> list[str]:
    """
    Split text into distinct lower-cased search terms.

    Terms shorter than two characters and stop words are dropped. Order of
    first appearance is kept so the SQL filter is stable.

    Args:
        text: Free text

    Returns:
        list[str]: Distinct terms
    """
    seen: dict[str, None] = {}
    for token in _TOKEN_RE.findall(text.lower()):
        if len(token) < 2 or token in STOP_WORDS:
            continue
        seen.setdefault(token, None)
    return list(seen)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity clamped to [0, 1].

    Opposed or orthogonal vectors score 0. Mismatched lengths or zero
    vectors also score 0 rather than raising.
    """
    if len(a) != len(b) or not a:
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return min(1.0, max(0.0, dot / (norm_a * norm_b)))


def term_coverage(terms: Sequence[str], item: ContentItemModel) -> float:
    """
    Share of query terms that appear as whole tokens in the item's text.

    The item text goes through the same tokenizer as the query, so "ai"
    does not match "trail" and "go" does not match "google".
    """
    if not terms:
        return 0.0
    item_tokens = set(tokenize(" ".join(filter(None, [item.title, item.body, item.summary]))))
    matched = sum(1 for term in terms if term in item_tokens)
    return matched / len(terms)


def to_search_result(
    item: ContentItemModel,
    similarity: float,
    match_type: MatchType,
) -> SearchResult:
    """Project a corpus row onto a SearchResult."""
    metadata = dict(item.item_metadata or {})
    metadata.setdefault("title", item.title)
    return SearchResult(
        content_id=item.content_id,
        content_type=item.content_type,
        similarity=round(similarity, 6),
        content=dict(item.payload or {}),
        content_summary=item.summary,
        metadata=metadata,
        match_type=match_type,
        corpus_position=item.seq,
    )


class CorpusStore:
    """
    Read-only access to the content corpus for both search strategies.

    Results are unfiltered by threshold and unranked; the hybrid search
    engine owns merge, floor and ordering.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Initialize corpus store.

        Args:
            session_factory: Factory used to open one session per query
        """
        self._session_factory = session_factory

    async def vector_search(
        self,
        query_embedding: Sequence[float],
        content_types: Sequence[str] | None = None,
    ) -> list[SearchResult]:
        """
        Score every embedded item against the query embedding.

        Args:
            query_embedding: Query vector
            content_types: Optional allow-list of content types

        Returns:
            list[SearchResult]: One vector-scored result per embedded item

        Raises:
            VectorStoreError: Corpus query failed
        """
        try:
            async with self._session_factory() as session:
                items = await content_item_crud.get_embedded(session, content_types)
        except (SQLAlchemyError, OSError) as e:
            raise VectorStoreError(
                "Vector corpus query failed",
                operation="vector_search",
                details={"error_type": type(e).__name__},
            ) from e

        results = [
            to_search_result(item, cosine_similarity(query_embedding, item.embedding), "vector")
            for item in items
        ]
        logger.debug(f"{__name__}:vector_search - Scored {len(results)} embedded items")
        return results

    async def lexical_search(
        self,
        query_text: str,
        content_types: Sequence[str] | None = None,
    ) -> list[SearchResult]:
        """
        Score items by how many distinct query terms they contain.

        Args:
            query_text: Visitor query
            content_types: Optional allow-list of content types

        Returns:
            list[SearchResult]: Lexical results with similarity > 0

        Raises:
            VectorStoreError: Corpus query failed
        """
        terms = tokenize(query_text)
        if not terms:
            logger.info(f"{__name__}:lexical_search - No searchable terms in query")
            return []

        try:
            async with self._session_factory() as session:
                items = await content_item_crud.match_terms(session, terms, content_types)
        except (SQLAlchemyError, OSError) as e:
            raise VectorStoreError(
                "Lexical corpus query failed",
                operation="lexical_search",
                details={"error_type": type(e).__name__},
            ) from e

        results = []
        for item in items:
            score = term_coverage(terms, item)
            if score > 0.0:
                results.append(to_search_result(item, score, "lexical"))
        logger.debug(
            f"{__name__}:lexical_search - {len(results)} items matched terms={terms}"
        )
        return results

    async def direct_title_match(self, project_name: str) -> SearchResult | None:
        """
        Look up a project whose title equals the name the visitor used.

        Args:
            project_name: Project name detected in the query

        Returns:
            SearchResult | None: A ``direct_project_match`` scored at
            DIRECT_MATCH_SIMILARITY, or None when no title matches

        Raises:
            VectorStoreError: Corpus query failed
        """
        try:
            async with self._session_factory() as session:
                item = await content_item_crud.get_by_title(session, project_name)
        except (SQLAlchemyError, OSError) as e:
            raise VectorStoreError(
                "Project title lookup failed",
                operation="direct_title_match",
                details={"error_type": type(e).__name__},
            ) from e

        if item is None:
            logger.debug(f"{__name__}:direct_title_match - No project titled {project_name!r}")
            return None
        return to_search_result(item, DIRECT_MATCH_SIMILARITY, "direct_project_match")
