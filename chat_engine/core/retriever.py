"""
Hybrid retrieval logic.

Runs vector and lexical search concurrently, merges the two result sets,
applies the similarity floor, ranks and truncates.

Merge rules:
- results are keyed by (content_id, content_type)
- the higher similarity wins; an exact tie keeps the vector result
- similarity below the threshold is dropped
- ranking is similarity descending, then corpus insertion order
- at most max_results entries are returned

Named projects:
- a confidently named project is first looked up by exact title; a hit
  joins the merge as a direct_project_match
- without a hit, both strategies search for the project name instead of
  the full query

Failure rules:
- embedding or vector query failure: lexical results only, degraded=True
- lexical query failure: CriticalFailureError, no results are fabricated
- title lookup failure: logged, the search continues without it

Dependencies: chat_engine.boundary.vdb, chat_engine.core.exceptions
System role: RAG retrieval business logic
"""

import asyncio
import logging
from typing import Iterable, Sequence

from chat_engine.boundary.vdb.corpus_store import CorpusStore
from chat_engine.boundary.vdb.query_embedder import QueryEmbedder
from chat_engine.boundary.vdb.search_schemas import SearchOutcome, SearchResult
from chat_engine.core.exceptions import (
    CriticalFailureError,
    EmbeddingError,
    VectorStoreError,
)
from chat_engine.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


def _lexical_failure(exc: Exception) -> CriticalFailureError:
    logger.error(f"{__name__}:search - Lexical search failed: {type(exc).__name__}: {exc}")
    return CriticalFailureError(
        "Lexical search failed; no results can be produced",
        details={"error_type": type(exc).__name__},
    )


def _prefer(candidate: SearchResult, current: SearchResult) -> bool:
    """True when candidate should replace current for the same key."""
    if candidate.similarity != current.similarity:
        return candidate.similarity > current.similarity
    return candidate.match_type == "vector" and current.match_type != "vector"


def merge_results(*result_sets: Iterable[SearchResult]) -> list[SearchResult]:
    """
    Deduplicate results across strategies by (content_id, content_type).

    Args:
        *result_sets: Result lists from each strategy

    Returns:
        list[SearchResult]: One result per key, the highest similarity kept
    """
    merged: dict[tuple[str, str], SearchResult] = {}
    for results in result_sets:
        for result in results:
            current = merged.get(result.key)
            if current is None or _prefer(result, current):
                merged[result.key] = result
    return list(merged.values())


def filter_by_threshold(results: Iterable[SearchResult], threshold: float) -> list[SearchResult]:
    """Drop results whose similarity is below the floor."""
    return [r for r in results if r.similarity >= threshold]


def rank_results(results: Iterable[SearchResult]) -> list[SearchResult]:
    """
    Order results by similarity descending, ties by corpus insertion order.

    Args:
        results: Merged results

    Returns:
        list[SearchResult]: Ranked results
    """
    return sorted(results, key=lambda r: (-r.similarity, r.corpus_position, r.content_type))


def merge_and_rank(
    vector_results: Sequence[SearchResult],
    lexical_results: Sequence[SearchResult],
    threshold: float,
    max_results: int,
    direct_results: Sequence[SearchResult] = (),
) -> list[SearchResult]:
    """Merge, floor, rank and truncate in one step."""
    merged = merge_results(direct_results, vector_results, lexical_results)
    ranked = rank_results(filter_by_threshold(merged, threshold))
    return ranked[:max(max_results, 0)]


class HybridSearchEngine:
    """
    Combined vector and lexical search over the portfolio corpus.

    Pure read path: nothing here writes to the datastore.
    """

    def __init__(
        self,
        corpus_store: CorpusStore,
        embedder: QueryEmbedder | None = None,
        default_content_types: Sequence[str] | None = None,
    ) -> None:
        """
        Initialize search engine.

        Args:
            corpus_store: Corpus access for both strategies
            embedder: Query embedder, None disables the vector strategy
            default_content_types: Content types searched when a call gives none
        """
        self.corpus_store = corpus_store
        self.embedder = embedder
        self.default_content_types = list(default_content_types or [])

    async def search(
        self,
        query_text: str,
        threshold: float,
        max_results: int,
        query_embedding: Sequence[float] | None = None,
        use_hybrid: bool = True,
        content_types: Sequence[str] | None = None,
        project_name: str | None = None,
    ) -> SearchOutcome:
        """
        Search the corpus with both strategies and merge the results.

        Args:
            query_text: Visitor query
            threshold: Similarity floor (0.0-1.0)
            max_results: Result-count cap
            query_embedding: Precomputed query embedding, embedded here if None
            use_hybrid: False runs lexical search only (not degraded)
            content_types: Allow-list of content types, settings default if None
            project_name: Project the visitor named, looked up by title first

        Returns:
            SearchOutcome: Ranked results and degraded flag

        Raises:
            CriticalFailureError: Lexical search failed
        """
        types = list(content_types) if content_types is not None else self.default_content_types
        logger.info(
            f"{__name__}:search - START hybrid={use_hybrid} threshold={threshold} "
            f"max_results={max_results} content_types={types}"
        )

        direct_results = await self._direct(project_name, types)
        direct_strategy = ["direct_project_match"] if direct_results else []
        search_text = query_text
        if project_name and not direct_results:
            search_text = project_name
            logger.info(f"{__name__}:search - No title match, searching for project name {project_name!r}")

        if not use_hybrid:
            try:
                lexical_results = await self._lexical(search_text, types)
            except Exception as e:
                raise _lexical_failure(e) from e
            return SearchOutcome(
                results=merge_and_rank([], lexical_results, threshold, max_results, direct_results),
                strategies=direct_strategy + ["lexical"],
            )

        vector_task = self._vector(search_text, query_embedding, types)
        lexical_task = self._lexical(search_text, types)
        vector_outcome, lexical_outcome = await asyncio.gather(
            vector_task,
            lexical_task,
            return_exceptions=True,
        )

        if isinstance(lexical_outcome, BaseException):
            if not isinstance(lexical_outcome, Exception):
                raise lexical_outcome
            raise _lexical_failure(lexical_outcome) from lexical_outcome

        if isinstance(vector_outcome, BaseException):
            if not isinstance(vector_outcome, Exception):
                raise vector_outcome
            if not isinstance(vector_outcome, (EmbeddingError, VectorStoreError)):
                log_exception_with_context(
                    logger,
                    f"{__name__}:search - Unexpected vector search failure",
                    vector_outcome,
                )
            logger.warning(
                f"{__name__}:search - Vector search unavailable, serving lexical only: "
                f"{type(vector_outcome).__name__}: {vector_outcome}"
            )
            return SearchOutcome(
                results=merge_and_rank([], lexical_outcome, threshold, max_results, direct_results),
                degraded=True,
                vector_error=str(vector_outcome),
                strategies=direct_strategy + ["lexical"],
            )

        results = merge_and_rank(vector_outcome, lexical_outcome, threshold, max_results, direct_results)
        logger.info(
            f"{__name__}:search - DONE vector={len(vector_outcome)} "
            f"lexical={len(lexical_outcome)} kept={len(results)}"
        )
        return SearchOutcome(results=results, strategies=direct_strategy + ["vector", "lexical"])

    async def _vector(
        self,
        query_text: str,
        query_embedding: Sequence[float] | None,
        content_types: Sequence[str],
    ) -> list[SearchResult]:
        """Embed the query if needed, then run the vector strategy."""
        if query_embedding is None:
            if self.embedder is None:
                raise EmbeddingError("No embedding provider configured")
            query_embedding = await self.embedder.embed(query_text)
        return await self.corpus_store.vector_search(query_embedding, content_types)

    async def _lexical(self, query_text: str, content_types: Sequence[str]) -> list[SearchResult]:
        return await self.corpus_store.lexical_search(query_text, content_types)

    async def _direct(self, project_name: str | None, content_types: Sequence[str]) -> list[SearchResult]:
        """Exact title lookup for a named project; empty when skipped or missed."""
        if not project_name or (content_types and "project" not in content_types):
            return []
        try:
            hit = await self.corpus_store.direct_title_match(project_name)
        except VectorStoreError as e:
            logger.warning(f"{__name__}:search - Project title lookup failed, skipping: {e}")
            return []
        return [hit] if hit is not None else []
