"""
Corpus retrieval boundary layer.

Provides the corpus store used by hybrid search and the query embedding
adapters.
- CorpusStore: vector and lexical scoring over content_items
- QueryEmbedder: async query embedding with failure mapping

Dependencies: sqlalchemy, langchain_core
System role: Retrieval adapter for the conversation engine
"""

from chat_engine.boundary.vdb.corpus_store import CorpusStore, cosine_similarity, tokenize
from chat_engine.boundary.vdb.query_embedder import QueryEmbedder
from chat_engine.boundary.vdb.search_schemas import SearchOutcome, SearchResult

__all__ = [
    "CorpusStore",
    "QueryEmbedder",
    "SearchOutcome",
    "SearchResult",
    "cosine_similarity",
    "tokenize",
]
