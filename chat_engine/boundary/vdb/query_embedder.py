"""
Query embedding adapter.

Turns a visitor query into a vector through any LangChain Embeddings
client. Every provider failure (timeout, network, auth, wrong vector size)
surfaces as EmbeddingError so the search engine can fall back to lexical
search.

Dependencies: langchain_core, chat_engine.core.exceptions
System role: Embedding provider boundary
"""

import asyncio
import logging

from langchain_core.embeddings import Embeddings

from chat_engine.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)


class QueryEmbedder:
    """Async query embedding with timeout and dimensionality check."""

    def __init__(
        self,
        embeddings: Embeddings,
        dimensions: int | None = None,
        timeout: float = 10.0,
    ) -> None:
        """
        Initialize the embedder.

        Args:
            embeddings: LangChain embeddings client
            dimensions: Expected vector length (None skips the check)
            timeout: Seconds before the provider call is abandoned
        """
        self.embeddings = embeddings
        self.dimensions = dimensions
        self.timeout = timeout

    async def embed(self, text: str) -> list[float]:
        """
        Embed query text.

        Args:
            text: Query text

        Returns:
            list[float]: Query embedding

        Raises:
            EmbeddingError: Provider failed, timed out or returned a bad vector
        """
        try:
            vector = await asyncio.wait_for(
                self.embeddings.aembed_query(text),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise EmbeddingError(
                "Embedding provider timed out",
                details={"timeout_s": self.timeout},
            ) from e
        except Exception as e:
            raise EmbeddingError(
                "Embedding provider failed",
                details={"error_type": type(e).__name__, "error_msg": str(e)},
            ) from e

        if not vector:
            raise EmbeddingError("Embedding provider returned an empty vector")
        if self.dimensions is not None and len(vector) != self.dimensions:
            raise EmbeddingError(
                "Embedding dimensionality mismatch",
                details={"expected": self.dimensions, "actual": len(vector)},
            )

        logger.debug(f"{__name__}:embed - Embedded query into {len(vector)} dims")
        return [float(v) for v in vector]
